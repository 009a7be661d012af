"""Position and candidate repositories."""


from sqlalchemy import func, select, update

from evote.domain.ballot import Vote
from evote.domain.catalog import Candidate, Position
from evote.repositories.base import BaseRepository


class PositionRepository(BaseRepository[Position]):
    model = Position

    async def get_by_name(self, name: str) -> Position | None:
        result = await self._session.execute(
            self._base_query().where(Position.name == name)
        )
        return result.scalars().first()

    async def ballot_order(self) -> list[Position]:
        return await self.all(Position.display_order.asc(), Position.name.asc())


class CandidateRepository(BaseRepository[Candidate]):
    model = Candidate

    async def roster(self) -> list[Candidate]:
        return await self.all(Candidate.position.asc(), Candidate.full_name.asc())

    async def increment_vote_count(self, candidate_id: str) -> bool:
        result = await self._session.execute(
            update(Candidate)
            .where(Candidate.id == candidate_id)
            .values(vote_count=Candidate.vote_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def recount(self, candidate_id: str) -> None:
        """Set vote_count from the vote rows as they stand when the UPDATE runs."""
        actual = (
            select(func.count(Vote.id))
            .where(Vote.candidate_id == Candidate.id)
            .correlate(Candidate)
            .scalar_subquery()
        )
        await self._session.execute(
            update(Candidate)
            .where(Candidate.id == candidate_id)
            .values(vote_count=actual)
            .execution_options(synchronize_session=False)
        )
