import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from .api.error_handlers import register_error_handlers
from .api.routes import router as api_router
from .api.routes import health
from .core.config import settings
from .core.logging import setup_logging
from .db.base import Base
from .db.session import engine
from .services.broadcaster import Broadcaster

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.critical(f"Cannot open database at {engine.url!r}", exc_info=True)
        raise

    broadcaster = Broadcaster(
        heartbeat_seconds=settings.HEARTBEAT_SECONDS,
        queue_size=settings.CHANNEL_QUEUE_SIZE,
    )
    await broadcaster.start()
    app.state.broadcaster = broadcaster
    logger.info("Family List API started")
    yield
    await broadcaster.close()
    logger.info("Family List API shutting down")


app = FastAPI(title="Family List API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

app.include_router(health.router, tags=["Health"])
app.include_router(api_router)

# the web client, if one is shipped next to the API; mounted last so it never shadows /api
if Path(settings.STATIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
