"""Stage repository — timeline reads and category lookups."""


from evote.domain.stage import Stage
from evote.repositories.base import BaseRepository


class StageRepository(BaseRepository[Stage]):
    model = Stage

    async def timeline(self) -> list[Stage]:
        """All live stages in timeline order (start_time, then id)."""
        return await self.all(Stage.start_time.asc(), Stage.id.asc())

    async def find_by_category(self, category: str, exclude_id: str | None = None) -> Stage | None:
        q = self._base_query().where(Stage.category == category)
        if exclude_id:
            q = q.where(Stage.id != exclude_id)
        result = await self._session.execute(q.limit(1))
        return result.scalars().first()
