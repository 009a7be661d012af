"""Audit log router (read-only)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.pagination import PaginationParams
from evote.core.response import ListResponse, paginated
from evote.db.base import get_db
from evote.schemas.audit import AuditEventOut
from evote.services.audit import AuditService

router = APIRouter(prefix="/audit-events", tags=["Audit"])


@router.get("", response_model=ListResponse[AuditEventOut])
async def list_audit_events(
    event_type: Optional[str] = Query(default=None, alias="eventType", description="Filter by event type"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """Newest first by default."""
    items, total = await AuditService(session).list_events(pagination, event_type=event_type)
    return paginated(
        [AuditEventOut.model_validate(e) for e in items],
        total, pagination.page, pagination.limit,
    )
