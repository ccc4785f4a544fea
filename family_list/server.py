"""uvicorn server that ends live event streams when shutdown begins.

uvicorn only runs the lifespan shutdown once every open connection has
finished, and an event stream never finishes by itself. Closing the
broadcaster first lets the streams end so the connections can drain.
"""

import logging

import uvicorn
from fastapi import FastAPI

logger = logging.getLogger(__name__)


class Server(uvicorn.Server):
    def __init__(self, app: FastAPI, **options):
        super().__init__(uvicorn.Config(app, **options))
        self.app = app

    async def shutdown(self, sockets=None) -> None:
        broadcaster = getattr(self.app.state, "broadcaster", None)
        if broadcaster is not None:
            logger.info(f"Closing {broadcaster.channel_count()} live event stream(s)")
            await broadcaster.close()
        await super().shutdown(sockets=sockets)

    @property
    def port(self) -> int:
        """Bound port; differs from the configured one when that was 0."""
        return self.servers[0].sockets[0].getsockname()[1]
