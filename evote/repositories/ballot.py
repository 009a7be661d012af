"""Ballot repository — issuance log and anonymous vote rows.

No method here returns a vote row together with a voter id.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from evote.domain.ballot import IssuanceLog, Vote


class BallotRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def record_issuance(self, token: str, voter_id: str) -> None:
        self._session.add(IssuanceLog(token=token, voter_id=voter_id))
        await self._session.flush()

    async def record_votes(self, token: str, picks: Iterable[tuple[str, str]]) -> int:
        """Insert one row per ``(position, candidate_id)`` pick; return the row count."""
        rows = [
            Vote(issuance_token=token, candidate_id=candidate_id, position=position)
            for position, candidate_id in picks
        ]
        self._session.add_all(rows)
        await self._session.flush()
        return len(rows)

    async def has_issuance(self, voter_id: str) -> bool:
        result = await self._session.execute(
            select(IssuanceLog.token).where(IssuanceLog.voter_id == voter_id).limit(1)
        )
        return result.first() is not None

    async def counts_by_candidate(self) -> dict[str, int]:
        result = await self._session.execute(
            select(Vote.candidate_id, func.count(Vote.id)).group_by(Vote.candidate_id)
        )
        return {candidate_id: int(count) for candidate_id, count in result.all()}
