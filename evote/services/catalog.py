"""Position and candidate catalog service.

The vote path reads this catalog; it never writes to it except through
the cached ``vote_count`` column.
"""


from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.exceptions import ConflictError, NotFoundError, ValidationError
from evote.core.notifications import CANDIDATES, ChangeEvent, ChangeFeed
from evote.domain.catalog import Candidate, Position, VoteType
from evote.repositories.catalog import CandidateRepository, PositionRepository
from evote.schemas.catalog import CandidateCreate, PositionCreate

class CatalogService:
    def __init__(self, session: AsyncSession, feed: ChangeFeed):
        self._session = session
        self._positions = PositionRepository(session)
        self._candidates = CandidateRepository(session)
        self._feed = feed

    async def list_positions(self) -> list[Position]:
        return await self._positions.ballot_order()

    async def create_position(self, data: PositionCreate) -> Position:
        if await self._positions.get_by_name(data.name):
            raise ConflictError(f"Position '{data.name}' already exists")
        fields = data.model_dump()
        if fields["vote_type"] == VoteType.SINGLE.value:
            fields["max_selections"] = 1
        return await self._positions.create(**fields)

    async def list_candidates(self, position: str | None = None) -> list[Candidate]:
        roster = await self._candidates.roster()
        if position:
            roster = [c for c in roster if c.position == position]
        return roster

    async def create_candidate(self, data: CandidateCreate) -> Candidate:
        if not await self._positions.get_by_name(data.position):
            raise ValidationError(f"Unknown position '{data.position}'")
        candidate = await self._candidates.create(**data.model_dump(), vote_count=0)
        await self._session.commit()
        await self._feed.publish(ChangeEvent(topic=CANDIDATES, action="created", entity_id=candidate.id))
        return candidate

    async def get_candidate(self, candidate_id: str) -> Candidate:
        candidate = await self._candidates.get_by_id(candidate_id)
        if not candidate:
            raise NotFoundError("Candidate", candidate_id)
        return candidate
