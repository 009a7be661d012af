"""Reconciliation queue: operator listing and the orphaned-claim sweep.

A voter whose claim committed but whose ballot never landed normally gets a
queue item from the vote path.  When that path dies too (process crash, or
the escalation write failing) nothing is queued, so :meth:`sweep` finds
claimed voters with no issuance row and queues them.  It also resolves
items whose ballot turned up after all.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.pagination import PaginationParams
from evote.domain.reconciliation import BALLOT_NOT_PERSISTED, ReconciliationStatus
from evote.repositories.reconciliation import ReconciliationRepository
from evote.repositories.voter import VoterRepository
from evote.services import audit
from evote.services.audit import AuditService
from evote.services.timeline import utc_now

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    queued: list[str] = field(default_factory=list)  # voter ids
    resolved: list[str] = field(default_factory=list)  # item ids


class ReconciliationService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._repo = ReconciliationRepository(session)
        self._voters = VoterRepository(session)
        self._audit = AuditService(session)

    async def list_items(self, pagination: PaginationParams, status: str | None = None):
        return await self._repo.page(pagination, {"status": status})

    async def sweep(self, grace_seconds: float, now: datetime | None = None) -> SweepReport:
        """Queue orphaned claims and resolve items whose ballot is on record.

        Claims younger than ``grace_seconds`` are left alone; their request
        may still be persisting.  The caller commits.
        """
        report = SweepReport()
        cutoff = (now or utc_now()) - timedelta(seconds=grace_seconds)

        for voter in await self._voters.claimed_without_ballot(cutoff):
            if await self._repo.pending_for_voter(voter.id) is not None:
                continue
            item = await self._repo.create(
                voter_id=voter.id, reason=BALLOT_NOT_PERSISTED, detail="claim without ballot found by sweep"
            )
            await self._audit.record(
                audit.VOTE_PERSISTENCE_FAILED,
                "Voter claimed but ballot was not stored",
                actor_id=voter.id,
                metadata={"reconciliation_id": item.id, "source": "sweep"},
            )
            logger.warning("Sweep queued claimed voter %s without a ballot (item %s)", voter.id, item.id)
            report.queued.append(voter.id)

        for item in await self._repo.settled():
            if await self._repo.transition(
                item.id, ReconciliationStatus(item.status), ReconciliationStatus.RESOLVED
            ):
                logger.info("Sweep resolved item %s; ballot for voter %s is on record", item.id, item.voter_id)
                report.resolved.append(item.id)

        return report
