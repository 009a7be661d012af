"""Tally reconciliation — recompute ``candidates.vote_count`` from vote rows.

``vote_count`` is a cache; the ``votes`` table is the truth.  Any drift
between them (a dropped increment, a crash between steps) is repaired here,
on demand or on a timer, and is never surfaced to voters.  Each correction is
recounted inside its UPDATE, so a vote landing between the drift read and
the write is still counted.  The timer also runs the orphaned-claim sweep.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.config import settings
from evote.repositories.ballot import BallotRepository
from evote.repositories.catalog import CandidateRepository
from evote.services import audit
from evote.services.audit import AuditService
from evote.services.reconciliation import ReconciliationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TallyCorrection:
    candidate_id: str
    cached: int
    actual: int


class TallyReconciler:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._candidates = CandidateRepository(session)
        self._ballots = BallotRepository(session)

    async def drift(self) -> list[TallyCorrection]:
        """Candidates whose cached count differs from their vote rows."""
        actual = await self._ballots.counts_by_candidate()
        return [
            TallyCorrection(candidate_id=c.id, cached=c.vote_count, actual=actual.get(c.id, 0))
            for c in await self._candidates.roster()
            if c.vote_count != actual.get(c.id, 0)
        ]

    async def reconcile(self) -> list[TallyCorrection]:
        corrections = await self.drift()
        for fix in corrections:
            logger.warning(
                "Tally drift on candidate %s: cached=%d actual=%d",
                fix.candidate_id, fix.cached, fix.actual,
            )
            await self._candidates.recount(fix.candidate_id)
        if corrections:
            await AuditService(self._session).record(
                audit.TALLY_RECONCILED,
                f"Recomputed vote_count for {len(corrections)} candidate(s)",
                metadata={"candidates": [fix.candidate_id for fix in corrections]},
            )
        return corrections


async def reconcile_once(session_factory, grace_seconds: float | None = None):
    """One pass: repair cached tallies, then sweep orphaned vote claims."""
    grace = settings.claim_sweep_grace_seconds if grace_seconds is None else grace_seconds
    async with session_factory() as session:
        fixes = await TallyReconciler(session).reconcile()
        await session.commit()
    async with session_factory() as session:
        report = await ReconciliationService(session).sweep(grace)
        await session.commit()
    return fixes, report


async def run_periodic_reconciliation(session_factory, interval: float) -> None:
    """Background loop used by the app lifespan when an interval is configured."""
    while True:
        await asyncio.sleep(interval)
        try:
            fixes, report = await reconcile_once(session_factory)
            if fixes:
                logger.info("Periodic reconciliation corrected %d candidate(s)", len(fixes))
            if report.queued or report.resolved:
                logger.info(
                    "Claim sweep queued %d voter(s), resolved %d item(s)",
                    len(report.queued), len(report.resolved),
                )
        except Exception:
            logger.exception("Periodic tally reconciliation failed")
