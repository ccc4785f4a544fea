"""Create the database schema without starting the API.

Reads FAMILYLIST_DATABASE_URL (and the logging settings) the same way the
server does, so it can prepare a database before the first deploy.
"""

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from family_list.core.config import settings
from family_list.core.logging import setup_logging
from family_list.db.base import Base
from family_list.db.session import engine

logger = logging.getLogger("family_list.init_db")


def init(bind: Engine = engine) -> list[str]:
    Base.metadata.create_all(bind=bind)
    return sorted(Base.metadata.tables)


def main() -> int:
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    try:
        tables = init()
    except SQLAlchemyError:
        logger.critical(f"Cannot create schema at {engine.url!r}", exc_info=True)
        return 1
    logger.info(f"Schema ready at {engine.url!r}: {', '.join(tables)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
