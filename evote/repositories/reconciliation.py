"""Reconciliation queue repository."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import exists, update

from evote.domain.ballot import IssuanceLog
from evote.domain.reconciliation import ReconciliationItem, ReconciliationStatus
from evote.repositories.base import BaseRepository


class ReconciliationRepository(BaseRepository[ReconciliationItem]):
    model = ReconciliationItem

    async def pending_for_voter(self, voter_id: str) -> ReconciliationItem | None:
        """The oldest item for the voter that is not yet resolved."""
        result = await self._session.execute(
            self._base_query()
            .where(ReconciliationItem.voter_id == voter_id)
            .where(ReconciliationItem.status != ReconciliationStatus.RESOLVED.value)
            .order_by(ReconciliationItem.created_at.asc(), ReconciliationItem.id.asc())
            .limit(1)
        )
        return result.scalars().first()

    async def settled(self) -> list[ReconciliationItem]:
        """Unresolved items whose voter has a ballot on record after all."""
        result = await self._session.execute(
            self._base_query()
            .where(ReconciliationItem.status != ReconciliationStatus.RESOLVED.value)
            .where(exists().where(IssuanceLog.voter_id == ReconciliationItem.voter_id))
        )
        return list(result.scalars().all())

    async def transition(
        self,
        item_id: str,
        from_status: ReconciliationStatus,
        to_status: ReconciliationStatus,
    ) -> bool:
        """Conditional status change; True only for the caller that moved it."""
        now = datetime.now(timezone.utc)
        values: dict = {"status": to_status.value, "updated_at": now}
        if to_status is ReconciliationStatus.RESOLVED:
            values["resolved_at"] = now
        result = await self._session.execute(
            update(ReconciliationItem)
            .where(ReconciliationItem.id == item_id)
            .where(ReconciliationItem.status == from_status.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
