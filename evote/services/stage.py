"""Stage administration service.

Writes validate the window (start <= end) and category uniqueness, commit,
then publish a ``stages`` change event so the timeline monitor re-evaluates.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.exceptions import ConflictError, NotFoundError, ValidationError
from evote.core.notifications import STAGES, ChangeEvent, ChangeFeed
from evote.domain.stage import Stage, StageCategory
from evote.repositories.stage import StageRepository
from evote.schemas.stage import StageCreate, StageUpdate
from evote.services import audit
from evote.services.audit import AuditService
from evote.services.timeline import as_utc


class StageService:
    def __init__(self, session: AsyncSession, feed: ChangeFeed):
        self._session = session
        self._repo = StageRepository(session)
        self._audit = AuditService(session)
        self._feed = feed

    async def list_stages(self) -> list[Stage]:
        return await self._repo.timeline()

    async def get_stage(self, stage_id: str) -> Stage:
        stage = await self._repo.get_by_id(stage_id)
        if not stage:
            raise NotFoundError("Stage", stage_id)
        return stage

    async def create_stage(self, data: StageCreate) -> Stage:
        self._check_window(data.start_time, data.end_time)
        await self._check_category(data.category)
        stage = await self._repo.create(**data.model_dump())
        await self._audit.record(
            audit.STAGE_CREATED, f"Stage '{stage.stage_name}' created",
            metadata={"stage_id": stage.id, "category": stage.category},
        )
        await self._commit_and_publish("created", stage.id)
        return stage

    async def update_stage(self, stage_id: str, data: StageUpdate) -> Stage:
        current = await self.get_stage(stage_id)  # raises 404 if missing
        changes = data.model_dump(exclude_none=True, exclude_unset=True)
        self._check_window(
            changes.get("start_time", current.start_time),
            changes.get("end_time", current.end_time),
        )
        if "category" in changes:
            await self._check_category(changes["category"], exclude_id=stage_id)
        updated = await self._repo.update(stage_id, **changes)
        if updated is None:
            raise NotFoundError("Stage", stage_id)
        await self._audit.record(
            audit.STAGE_UPDATED, f"Stage '{updated.stage_name}' updated",
            metadata={"stage_id": stage_id, "fields": sorted(changes)},
        )
        await self._commit_and_publish("updated", stage_id)
        return updated

    async def delete_stage(self, stage_id: str) -> None:
        deleted = await self._repo.soft_delete(stage_id)
        if not deleted:
            raise NotFoundError("Stage", stage_id)
        await self._audit.record(audit.STAGE_DELETED, "Stage deleted", metadata={"stage_id": stage_id})
        await self._commit_and_publish("deleted", stage_id)

    # ------------------------------------------------------------------

    @staticmethod
    def _check_window(start: datetime, end: datetime) -> None:
        if as_utc(start) > as_utc(end):
            raise ValidationError("Stage start_time must not be after end_time", code="INVALID_WINDOW")

    async def _check_category(self, category: str, exclude_id: str | None = None) -> None:
        if category == StageCategory.OTHER.value:
            return
        clash = await self._repo.find_by_category(category, exclude_id=exclude_id)
        if clash:
            raise ConflictError(
                f"Stage '{clash.stage_name}' already holds the '{category}' category",
                code="DUPLICATE_STAGE_CATEGORY",
            )

    async def _commit_and_publish(self, action: str, stage_id: str) -> None:
        # Subscribers re-read the store, so the change must be visible first
        await self._session.commit()
        await self._feed.publish(ChangeEvent(topic=STAGES, action=action, entity_id=stage_id))
