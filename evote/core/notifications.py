"""Change-notification feed.

Writers publish a :class:`ChangeEvent` after committing a change to stages or
the candidate catalog; readers such as the timeline monitor subscribe to a
topic and re-evaluate.  The feed only says *something changed* — the store
remains the source of truth, so a dropped event costs at most one refresh
interval of staleness.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

STAGES = "stages"
CANDIDATES = "candidates"


@dataclass(frozen=True)
class ChangeEvent:
    topic: str
    action: str  # "created" | "updated" | "deleted" | "recomputed"
    entity_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Subscription:
    """Queue-backed handle returned by :meth:`ChangeFeed.subscribe`."""

    def __init__(self, feed: "ChangeFeed", topic: str, maxsize: int = 100):
        self.topic = topic
        self._feed = feed
        self._queue: asyncio.Queue[ChangeEvent | None] = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def offer(self, event: ChangeEvent | None) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            # Slow subscriber: drop, the periodic refresh catches up
            logger.warning("Dropped %s change event for a slow subscriber", self.topic)

    async def next(self, timeout: float | None = None) -> ChangeEvent | None:
        """Wait for the next event; ``None`` on timeout or when the feed closes."""
        if self.closed:
            return None
        try:
            event = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None
        if event is None:
            self.closed = True
        return event

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._feed.unsubscribe(self)


class ChangeFeed(abc.ABC):
    """Vendor-neutral subscribe / publish interface."""

    @abc.abstractmethod
    async def publish(self, event: ChangeEvent) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def subscribe(self, topic: str) -> Subscription:
        raise NotImplementedError

    @abc.abstractmethod
    def unsubscribe(self, subscription: Subscription) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


class InMemoryChangeFeed(ChangeFeed):
    """Single-process feed; good for one worker and for tests."""

    def __init__(self) -> None:
        self._subscribers: dict[str, set[Subscription]] = {}

    async def publish(self, event: ChangeEvent) -> None:
        for sub in list(self._subscribers.get(event.topic, ())):
            sub.offer(event)

    def subscribe(self, topic: str) -> Subscription:
        sub = Subscription(self, topic)
        self._subscribers.setdefault(topic, set()).add(sub)
        return sub

    def unsubscribe(self, subscription: Subscription) -> None:
        subs = self._subscribers.get(subscription.topic)
        if subs:
            subs.discard(subscription)

    async def close(self) -> None:
        for subs in self._subscribers.values():
            for sub in subs:
                sub.offer(None)  # Signal shutdown
        self._subscribers.clear()


change_feed: ChangeFeed = InMemoryChangeFeed()


def get_change_feed() -> ChangeFeed:
    """FastAPI dependency returning the process-wide feed."""
    return change_feed
