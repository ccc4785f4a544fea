"""Live update fan-out for family lists.

A ``Broadcaster`` keeps, per family, the set of open channels (one per
connected viewer) and pushes a small ``{kind, action}`` event to all of them
whenever the family's items change. Viewers re-fetch the list on any event,
so events carry no item data, no ordering and no sequence numbers.

Everything here runs on the event loop. Sends never await, so a slow or dead
viewer cannot hold up anybody else: a failed send drops that one channel.
"""

import asyncio
import contextlib
import logging
from enum import StrEnum
from uuid import uuid4

from ..core.errors import NotInFamily
from ..models.user import User

logger = logging.getLogger(__name__)

HEARTBEAT = object()
CLOSE = object()


class EventKind(StrEnum):
    ITEM_ADDED = "item_added"
    ITEM_UPDATED = "item_updated"
    ITEMS_CLEARED = "items_cleared"
    ITEM_DELETED = "item_deleted"


EVENT_ACTIONS = {
    EventKind.ITEM_ADDED: "added",
    EventKind.ITEM_UPDATED: "updated",
    EventKind.ITEMS_CLEARED: "cleared",
    EventKind.ITEM_DELETED: "deleted",
}


class ChannelClosed(Exception):
    pass


class Channel:
    """Outgoing side of one open event stream."""

    def __init__(self, *, family_id: str, user_id: str, maxsize: int = 100):
        self.id = uuid4().hex
        self.family_id = family_id
        self.user_id = user_id
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)

    def send(self, message) -> None:
        """Queue a message without waiting.

        Raises ``ChannelClosed`` once closed and ``asyncio.QueueFull`` when the
        reader has stopped draining.
        """
        if self.closed:
            raise ChannelClosed(self.id)
        self._queue.put_nowait(message)

    async def receive(self):
        return await self._queue.get()

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._queue.full():
            # reader is stuck anyway; make room so it still sees the close marker
            self._queue.get_nowait()
        self._queue.put_nowait(CLOSE)


class Broadcaster:
    def __init__(self, *, heartbeat_seconds: float = 25.0, queue_size: int = 100):
        self.heartbeat_seconds = heartbeat_seconds
        self.queue_size = queue_size
        self._channels: dict[str, set[Channel]] = {}
        self._heartbeat_task: asyncio.Task | None = None
        self._closed = False

    def subscribe(self, user: User) -> Channel:
        if not user.family_id:
            raise NotInFamily()
        channel = Channel(family_id=user.family_id, user_id=user.id, maxsize=self.queue_size)
        if self._closed:
            # shutting down: the stream ends right after it opens
            channel.close()
            logger.debug(f"Refused channel for user {user.id}, broadcaster closed")
            return channel
        self._channels.setdefault(channel.family_id, set()).add(channel)
        logger.info(
            f"Channel {channel.id} opened for user {user.id} in family {channel.family_id}",
            extra={"channel_id": channel.id, "family_id": channel.family_id},
        )
        return channel

    def unsubscribe(self, channel: Channel) -> bool:
        """Remove a channel; returns False if it was already gone."""
        members = self._channels.get(channel.family_id)
        if not members or channel not in members:
            return False
        members.discard(channel)
        if not members:
            del self._channels[channel.family_id]
        channel.close()
        logger.info(f"Channel {channel.id} closed", extra={"channel_id": channel.id, "family_id": channel.family_id})
        return True

    def channel_count(self, family_id: str | None = None) -> int:
        if family_id is not None:
            return len(self._channels.get(family_id, ()))
        return sum(len(members) for members in self._channels.values())

    async def publish(self, family_id: str, kind: EventKind) -> int:
        """Send an event to every open channel of the family, sender included."""
        event = {"kind": kind.value, "action": EVENT_ACTIONS[kind]}
        delivered = 0
        # snapshot: failed sends remove channels while we iterate
        for channel in list(self._channels.get(family_id, ())):
            if self._deliver(channel, event):
                delivered += 1
        logger.debug(f"Published {kind.value} to {delivered} channel(s) of family {family_id}")
        return delivered

    async def heartbeat(self) -> int:
        delivered = 0
        for members in list(self._channels.values()):
            for channel in list(members):
                if self._deliver(channel, HEARTBEAT):
                    delivered += 1
        return delivered

    def _deliver(self, channel: Channel, message) -> bool:
        try:
            channel.send(message)
        except (ChannelClosed, asyncio.QueueFull) as exc:
            logger.warning(
                f"Dropping channel {channel.id}: {type(exc).__name__}",
                extra={"channel_id": channel.id, "family_id": channel.family_id},
            )
            self.unsubscribe(channel)
            return False
        return True

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_seconds)
            await self.heartbeat()

    async def start(self) -> None:
        if self._heartbeat_task is None:
            self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())

    async def close(self) -> None:
        """Stop heartbeats and end every open stream."""
        self._closed = True
        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._heartbeat_task
            self._heartbeat_task = None
        for members in list(self._channels.values()):
            for channel in list(members):
                self.unsubscribe(channel)
