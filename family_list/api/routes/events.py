"""Live event stream (Server-Sent Events) for the caller's family.

One GET opens one channel. The channel is registered for as long as the
response streams and is removed exactly once when the stream ends: the client
disconnects, a send to it fails, or the server shuts down.
"""

import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import sessionmaker

from ...models.user import User
from ...core.errors import NotInFamily
from ...services.broadcaster import CLOSE, HEARTBEAT, Broadcaster
from ...services.user_service import resolve_user
from ..deps import get_broadcaster, get_claimed_user_id, get_session_factory

logger = logging.getLogger(__name__)
router = APIRouter()

# keep proxies and browsers from buffering the stream
_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}
RETRY_MS = 3000


def _sse_line(event: dict) -> str:
    return f"event: {event['kind']}\ndata: {json.dumps(event)}\n\n"


async def event_stream(broadcaster: Broadcaster, user: User) -> AsyncIterator[str]:
    channel = broadcaster.subscribe(user)
    try:
        yield f"retry: {RETRY_MS}\n\n"
        yield ": connected\n\n"
        while True:
            message = await channel.receive()
            if message is CLOSE:
                break
            if message is HEARTBEAT:
                yield ": keep-alive\n\n"
                continue
            yield _sse_line(message)
    finally:
        broadcaster.unsubscribe(channel)


def _load_subscriber(factory: sessionmaker, claimed_id: str | None) -> User:
    # short-lived session: the stream itself must not hold a DB connection
    with factory() as db:
        return resolve_user(db, claimed_id)


@router.get("")
async def stream_events(
    claimed_id: str | None = Depends(get_claimed_user_id),
    factory: sessionmaker = Depends(get_session_factory),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    user = await run_in_threadpool(_load_subscriber, factory, claimed_id)
    # fail before the stream starts; the channel itself is opened by the stream
    if not user.family_id:
        raise NotInFamily()
    logger.debug(f"Streaming events to user {user.id}")
    return StreamingResponse(
        event_stream(broadcaster, user),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )
