"""Election timeline derivation.

:func:`get_status` answers "what phase is the election in right now?" from
stage windows and an instant.  It is pure: identical ``(stages, now)`` always
yields an identical :class:`TimelineStatus`, so callers can evaluate it as
often as they like.  Loading and refreshing stages is the caller's job (see
:class:`TimelineService` and :mod:`evote.services.monitor`).

Rule: no SQLAlchemy in the pure part of this module.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from evote.domain.stage import StageCategory
from evote.repositories.stage import StageRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class StageWindow:
    """Immutable snapshot of one stage row."""

    id: str
    stage_name: str
    category: StageCategory
    start_time: datetime
    end_time: datetime
    is_active: bool

    @classmethod
    def from_row(cls, row: Any) -> "StageWindow":
        try:
            category = StageCategory(row.category)
        except ValueError:
            category = StageCategory.OTHER
        return cls(
            id=str(row.id),
            stage_name=row.stage_name,
            category=category,
            start_time=as_utc(row.start_time),
            end_time=as_utc(row.end_time),
            is_active=bool(row.is_active),
        )

    def contains(self, now: datetime) -> bool:
        return self.start_time <= now <= self.end_time

    def has_started(self, now: datetime) -> bool:
        return now >= self.start_time

    def has_ended(self, now: datetime) -> bool:
        return now > self.end_time

    def is_open(self, now: datetime) -> bool:
        return self.is_active and self.contains(now)


@dataclass(frozen=True)
class TimelineStatus:
    evaluated_at: datetime
    current_stage: StageWindow | None
    registration_stage: StageWindow | None
    application_stage: StageWindow | None
    voting_stage: StageWindow | None
    results_stage: StageWindow | None
    is_voting_active: bool
    is_voting_ended: bool
    is_results_published: bool
    voting_end_time: datetime | None
    results_publish_time: datetime | None

    def stage_for(self, category: StageCategory) -> StageWindow | None:
        return {
            StageCategory.REGISTRATION: self.registration_stage,
            StageCategory.APPLICATION: self.application_stage,
            StageCategory.VOTING: self.voting_stage,
            StageCategory.RESULTS: self.results_stage,
        }.get(category)


def _precedence(stage: StageWindow) -> tuple[datetime, str]:
    return stage.start_time, stage.id


def _first_of(stages: list[StageWindow], category: StageCategory) -> StageWindow | None:
    matches = [s for s in stages if s.category is category]
    return min(matches, key=_precedence) if matches else None


def get_status(stages: Iterable[StageWindow], now: datetime) -> TimelineStatus:
    """Derive the election-wide status at ``now``.

    * ``current_stage``: the active stage containing ``now``; overlapping
      windows resolve to the earliest start, then the lowest id.
    * Voting and results stages are found by category.  Should two stages
      share a category the same precedence applies.
    * ``is_voting_ended`` ignores ``is_active``: once the window closes it
      stays closed.
    """
    now = as_utc(now)
    stages = list(stages)

    open_now = [s for s in stages if s.is_open(now)]
    current = min(open_now, key=_precedence) if open_now else None

    voting = _first_of(stages, StageCategory.VOTING)
    results = _first_of(stages, StageCategory.RESULTS)

    return TimelineStatus(
        evaluated_at=now,
        current_stage=current,
        registration_stage=_first_of(stages, StageCategory.REGISTRATION),
        application_stage=_first_of(stages, StageCategory.APPLICATION),
        voting_stage=voting,
        results_stage=results,
        is_voting_active=voting.is_open(now) if voting else False,
        is_voting_ended=voting.has_ended(now) if voting else False,
        is_results_published=(results.is_active and results.has_started(now)) if results else False,
        voting_end_time=voting.end_time if voting else None,
        results_publish_time=results.start_time if results else None,
    )


class StageCatalog:
    """Reads stage rows and hands out immutable snapshots."""

    def __init__(self, session: AsyncSession):
        self._repo = StageRepository(session)

    async def load(self) -> list[StageWindow]:
        return [StageWindow.from_row(row) for row in await self._repo.timeline()]


class TimelineService:
    """On-demand status evaluation against a fresh stage read."""

    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self._catalog = StageCatalog(session)
        self._clock = clock

    async def status(self) -> TimelineStatus:
        return get_status(await self._catalog.load(), self._clock())


def get_clock() -> Clock:
    """FastAPI dependency; tests override it to pin the election clock."""
    return utc_now
