"""Timeline monitor: the one place that watches the election clock.

Re-evaluates :func:`get_status` whenever a ``stages`` change event arrives
and otherwise every ``refresh_seconds``.  When the evaluated phase changes
(a stage opens or closes, voting ends, results publish) it logs the
transition and calls any registered listeners.

The snapshot it keeps is for reporting only.  Request handlers never gate
on it; they evaluate a fresh status at the moment they write.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from evote.core.notifications import STAGES, ChangeFeed
from evote.services.timeline import Clock, TimelineService, TimelineStatus, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Phase:
    current_stage_id: str | None
    is_voting_active: bool
    is_voting_ended: bool
    is_results_published: bool

    @classmethod
    def of(cls, status: TimelineStatus) -> "Phase":
        return cls(
            current_stage_id=status.current_stage.id if status.current_stage else None,
            is_voting_active=status.is_voting_active,
            is_voting_ended=status.is_voting_ended,
            is_results_published=status.is_results_published,
        )


Listener = Callable[[TimelineStatus, TimelineStatus | None], Awaitable[None]]


class TimelineMonitor:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        feed: ChangeFeed,
        *,
        refresh_seconds: float = 60,
        clock: Clock = utc_now,
    ):
        self._session_factory = session_factory
        self._feed = feed
        self._refresh_seconds = refresh_seconds
        self._clock = clock
        self._listeners: list[Listener] = []
        self._task: asyncio.Task | None = None
        self.last_status: TimelineStatus | None = None

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    async def evaluate(self) -> TimelineStatus:
        """Evaluate now; notify listeners if the phase moved."""
        async with self._session_factory() as session:
            status = await TimelineService(session, self._clock).status()

        previous = self.last_status
        self.last_status = status
        if previous is None or Phase.of(previous) != Phase.of(status):
            logger.info(
                "Timeline phase: stage=%s voting_active=%s voting_ended=%s results_published=%s",
                status.current_stage.stage_name if status.current_stage else None,
                status.is_voting_active, status.is_voting_ended, status.is_results_published,
            )
            for listener in self._listeners:
                try:
                    await listener(status, previous)
                except Exception:
                    logger.exception("Timeline listener failed")
        return status

    async def run(self) -> None:
        subscription = self._feed.subscribe(STAGES)
        try:
            await self._safe_evaluate()
            while not subscription.closed:
                event = await subscription.next(timeout=self._refresh_seconds)
                if event is None and subscription.closed:
                    break
                if event is not None:
                    logger.debug("Stage change (%s %s); re-evaluating", event.action, event.entity_id)
                await self._safe_evaluate()
        finally:
            subscription.close()

    async def _safe_evaluate(self) -> None:
        try:
            await self.evaluate()
        except Exception:
            logger.exception("Timeline evaluation failed; retrying next cycle")

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="timeline-monitor")
        return self._task

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
