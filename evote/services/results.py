"""Result aggregation — per-position tallies, winner/draw resolution, turnout.

:func:`compute_results` re-checks ``is_results_published`` itself, whatever
gating its caller already did, so a tally can never leak early through a
new code path.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from evote.repositories.catalog import CandidateRepository, PositionRepository
from evote.repositories.voter import VoterRepository
from evote.services.eligibility import Action, require
from evote.services.timeline import Clock, TimelineService, TimelineStatus, utc_now


@dataclass(frozen=True)
class CandidateTally:
    id: str
    full_name: str
    vote_count: int
    percentage: float


@dataclass(frozen=True)
class PositionResult:
    position: str
    total_votes: int
    candidates: list[CandidateTally] = field(default_factory=list)
    winner: CandidateTally | None = None
    is_draw: bool = False
    withheld: bool = False


@dataclass(frozen=True)
class Turnout:
    voted: int
    verified: int
    percentage: float


def _percentage(part: int, whole: int) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def compute_turnout(voted: int, verified: int) -> Turnout:
    return Turnout(voted=voted, verified=verified, percentage=_percentage(voted, verified))


def _group(candidates: Sequence[Any], position_order: Sequence[str]) -> dict[str, list[Any]]:
    grouped: dict[str, list[Any]] = {name: [] for name in position_order}
    for c in candidates:
        grouped.setdefault(c.position, []).append(c)
    # Catalog positions first, in ballot order; strays after, by name
    ordered = {name: grouped[name] for name in position_order if grouped[name]}
    for name in sorted(set(grouped) - set(position_order)):
        ordered[name] = grouped[name]
    return ordered


def compute_results(
    candidates: Sequence[Any],
    status: TimelineStatus,
    position_order: Sequence[str] = (),
) -> list[PositionResult]:
    """Group candidates by position and resolve each race.

    A winner is declared only once voting has ended and results are
    published, with a strictly highest count above zero.  Equal top counts
    above zero make a draw.
    """
    results: list[PositionResult] = []
    for position, group in _group(candidates, position_order).items():
        if not status.is_results_published:
            results.append(PositionResult(position=position, total_votes=0, withheld=True))
            continue

        total = sum(c.vote_count for c in group)
        ranked = sorted(group, key=lambda c: (-c.vote_count, c.full_name))
        tallies = [
            CandidateTally(
                id=c.id,
                full_name=c.full_name,
                vote_count=c.vote_count,
                percentage=_percentage(c.vote_count, total),
            )
            for c in ranked
        ]

        top = tallies[0]
        second = tallies[1] if len(tallies) > 1 else None
        is_draw = second is not None and top.vote_count > 0 and top.vote_count == second.vote_count
        decided = (
            status.is_voting_ended
            and status.is_results_published
            and top.vote_count > 0
            and not is_draw
        )
        results.append(
            PositionResult(
                position=position,
                total_votes=total,
                candidates=tallies,
                winner=top if decided else None,
                is_draw=is_draw,
            )
        )
    return results


class ResultsService:
    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self._timeline = TimelineService(session, clock)
        self._candidates = CandidateRepository(session)
        self._positions = PositionRepository(session)
        self._voters = VoterRepository(session)

    async def results(self) -> tuple[TimelineStatus, list[PositionResult], Turnout]:
        status = await self._timeline.status()
        require(Action.VIEW_RESULTS, status)
        order = [p.name for p in await self._positions.ballot_order()]
        candidates = await self._candidates.roster()
        return status, compute_results(candidates, status, order), await self.turnout()

    async def turnout(self) -> Turnout:
        voted, verified = await self._voters.turnout_counts()
        return compute_turnout(voted, verified)
