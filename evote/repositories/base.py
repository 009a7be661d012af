"""Generic async repository: live-row reads, paging, stamped writes, soft delete."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.pagination import PaginationParams
from evote.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """CRUD over one model.

    Models with a ``deleted_at`` column are soft-deleted: those rows drop out
    of every read here and can no longer be updated.  Nothing is ever
    hard-deleted.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self._session = session

    @property
    def _soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _base_query(self):
        q = select(self.model)
        if self._soft_deletes:
            q = q.where(self.model.deleted_at.is_(None))
        return q

    def _live(self, stmt):
        if self._soft_deletes:
            stmt = stmt.where(self.model.deleted_at.is_(None))
        return stmt

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_by_id(self, entity_id: str) -> ModelT | None:
        result = await self._session.execute(
            self._base_query().where(self.model.id == entity_id)
        )
        return result.scalars().first()

    async def page(
        self,
        pagination: PaginationParams,
        filters: Mapping[str, Any] | None = None,
    ) -> tuple[list[ModelT], int]:
        """Return ``(items, total)`` for one page; ``None`` filter values are ignored."""
        q = self._base_query()
        for col_name, value in (filters or {}).items():
            if value is not None and hasattr(self.model, col_name):
                q = q.where(getattr(self.model, col_name) == value)

        total = (
            await self._session.execute(select(func.count()).select_from(q.subquery()))
        ).scalar_one()

        col = getattr(self.model, pagination.sort, None)
        if col is not None:
            q = q.order_by(col.desc() if pagination.order == "desc" else col.asc())
        q = q.offset(pagination.offset).limit(pagination.limit)

        return list((await self._session.execute(q)).scalars().all()), total

    async def all(self, *order_by: Any) -> list[ModelT]:
        """Every live row, unpaginated. Meant for small catalogs."""
        q = self._base_query()
        if order_by:
            q = q.order_by(*order_by)
        return list((await self._session.execute(q)).scalars().all())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def create(self, **kwargs: Any) -> ModelT:
        instance = self.model(**kwargs)
        self._session.add(instance)
        await self._session.flush()  # populate id and server defaults
        await self._session.refresh(instance)
        return instance

    async def update(self, entity_id: str, **kwargs: Any) -> ModelT | None:
        """Apply ``kwargs`` to a live row; None if there is no such row."""
        kwargs.pop("id", None)
        if hasattr(self.model, "updated_at"):
            kwargs.setdefault("updated_at", datetime.now(timezone.utc))

        result = await self._session.execute(
            self._live(update(self.model).where(self.model.id == entity_id))
            .values(**kwargs)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            return None
        await self._session.flush()
        return await self.get_by_id(entity_id)

    async def soft_delete(self, entity_id: str) -> bool:
        result = await self._session.execute(
            self._live(update(self.model).where(self.model.id == entity_id))
            .values(deleted_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()
        return result.rowcount > 0
