"""Aspirant repository."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import update

from evote.domain.aspirant import Aspirant, AspirantStatus
from evote.repositories.base import BaseRepository


class AspirantRepository(BaseRepository[Aspirant]):
    model = Aspirant

    async def get_by_matric(self, matric: str) -> Aspirant | None:
        result = await self._session.execute(
            self._base_query().where(Aspirant.matric == matric)
        )
        return result.scalars().first()

    async def review(self, aspirant_id: str, to_status: AspirantStatus, **values: Any) -> bool:
        """Move a submitted application to ``to_status``. True only for the reviewer that moved it."""
        now = datetime.now(timezone.utc)
        result = await self._session.execute(
            self._live(update(Aspirant).where(Aspirant.id == aspirant_id))
            .where(Aspirant.status == AspirantStatus.SUBMITTED.value)
            .values(status=to_status.value, reviewed_at=now, updated_at=now, **values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount == 1
