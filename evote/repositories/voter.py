"""Voter repository.

:meth:`VoterRepository.claim` is the only cross-request serialization point
in the system: a single conditional UPDATE that succeeds for exactly one
caller per voter.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import case, exists, func, select, update

from evote.domain.ballot import IssuanceLog
from evote.domain.voter import Voter
from evote.repositories.base import BaseRepository


class VoterRepository(BaseRepository[Voter]):
    model = Voter

    async def get_by_matric(self, matric: str) -> Voter | None:
        result = await self._session.execute(
            self._base_query().where(Voter.matric == matric)
        )
        return result.scalars().first()

    async def claim(self, voter_id: str) -> bool:
        """Compare-and-swap ``voted`` from false to true. True if this call won."""
        result = await self._session.execute(
            update(Voter)
            .where(Voter.id == voter_id)
            .where(Voter.voted.is_(False))
            .where(Voter.verified.is_(True))
            .values(voted=True, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def claimed_without_ballot(self, claimed_before: datetime) -> list[Voter]:
        """Voters whose claim is older than ``claimed_before`` and who have no issuance row."""
        result = await self._session.execute(
            self._base_query()
            .where(Voter.voted.is_(True))
            .where(~exists().where(IssuanceLog.voter_id == Voter.id))
            .where(Voter.updated_at <= claimed_before)
            .order_by(Voter.updated_at.asc())
        )
        return list(result.scalars().all())

    async def set_issuance_token(self, voter_id: str, token: str) -> None:
        await self._session.execute(
            update(Voter)
            .where(Voter.id == voter_id)
            .values(issuance_token=token, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

    async def turnout_counts(self) -> tuple[int, int]:
        """Return (voted, verified) counts over verified voters."""
        q = (
            select(
                func.count(Voter.id),
                func.sum(case((Voter.voted.is_(True), 1), else_=0)),
            )
            .where(Voter.verified.is_(True))
            .where(Voter.deleted_at.is_(None))
        )
        verified, voted = (await self._session.execute(q)).one()
        return int(voted or 0), int(verified or 0)
