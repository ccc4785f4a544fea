"""Logging setup, called once from the application lifespan.

``text`` is meant for local runs, ``json`` for anything shipped to a log
collector. Extra fields passed through ``logger.x(..., extra={...})`` are
surfaced in the JSON output when present.
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = ("user_id", "family_id", "item_id", "channel_id", "error_kind", "path")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s"))
    root = logging.getLogger()
    # the lifespan can run several times in one process (test clients)
    for existing in list(root.handlers):
        if getattr(existing, "_family_list", False):
            root.removeHandler(existing)
    handler._family_list = True
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
