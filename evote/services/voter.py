"""Voter intake and status service.

Registration is gated by the timeline.  Verification itself happens in an
external identity collaborator; :meth:`VoterService.mark_verified` is the
hook it calls when a voter passes.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.exceptions import NotFoundError
from evote.domain.voter import Voter
from evote.repositories.ballot import BallotRepository
from evote.repositories.voter import VoterRepository
from evote.schemas.voter import VoterRegister
from evote.services import audit
from evote.services.audit import AuditService
from evote.services.eligibility import Action, require
from evote.services.timeline import Clock, TimelineService, utc_now

logger = logging.getLogger(__name__)


class VoterService:
    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self._repo = VoterRepository(session)
        self._ballots = BallotRepository(session)
        self._audit = AuditService(session)
        self._timeline = TimelineService(session, clock)

    async def register(self, data: VoterRegister) -> tuple[Voter, bool]:
        """Create a voter; returns ``(voter, created)``. Idempotent by matric."""
        require(Action.REGISTER, await self._timeline.status())

        existing = await self._repo.get_by_matric(data.matric)
        if existing:
            return existing, False

        voter = await self._repo.create(
            matric=data.matric, name=data.name, email=data.email, verified=False, voted=False,
        )
        await self._audit.record(audit.VOTER_REGISTERED, "Voter registered", actor_id=voter.id)
        logger.info("Registered voter %s", voter.id)
        return voter, True

    async def get_voter(self, voter_id: str) -> Voter:
        voter = await self._repo.get_by_id(voter_id)
        if not voter:
            raise NotFoundError("Voter", voter_id)
        return voter

    async def mark_verified(self, voter_id: str) -> Voter:
        voter = await self.get_voter(voter_id)
        if not voter.verified:
            voter = await self._repo.update(voter_id, verified=True)
            await self._audit.record(audit.VOTER_VERIFIED, "Voter verified", actor_id=voter_id)
        return voter  # type: ignore[return-value]

    async def needs_ballot_recovery(self, voter: Voter) -> bool:
        """Claimed but no ballot stored, whether or not a queue item exists yet."""
        return voter.voted and not await self._ballots.has_issuance(voter.id)
