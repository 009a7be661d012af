"""Audit log service — append events and list them for the admin view."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.pagination import PaginationParams
from evote.domain.audit import AuditEvent
from evote.repositories.audit import AuditEventRepository

VOTE_CAST = "VOTE_CAST"
VOTE_PERSISTENCE_FAILED = "VOTE_PERSISTENCE_FAILED"
BALLOT_RECOVERED = "BALLOT_RECOVERED"
VOTER_REGISTERED = "VOTER_REGISTERED"
VOTER_VERIFIED = "VOTER_VERIFIED"
STAGE_CREATED = "STAGE_CREATED"
STAGE_UPDATED = "STAGE_UPDATED"
STAGE_DELETED = "STAGE_DELETED"
TALLY_RECONCILED = "TALLY_RECONCILED"
ASPIRANT_APPLIED = "ASPIRANT_APPLIED"
ASPIRANT_APPROVED = "ASPIRANT_APPROVED"
ASPIRANT_REJECTED = "ASPIRANT_REJECTED"
API_REQUEST = "API_REQUEST"


class AuditService:
    def __init__(self, session: AsyncSession):
        self._repo = AuditEventRepository(session)

    async def record(
        self,
        event_type: str,
        description: str,
        *,
        actor_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditEvent:
        return await self._repo.create(
            event_type=event_type,
            description=description,
            actor_id=actor_id,
            event_metadata=metadata,
        )

    async def list_events(self, pagination: PaginationParams, event_type: str | None = None):
        return await self._repo.page(pagination, {"event_type": event_type})
