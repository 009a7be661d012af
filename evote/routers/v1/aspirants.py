"""Aspirant router — candidacy applications and their admin review."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.notifications import ChangeFeed, get_change_feed
from evote.core.pagination import PaginationParams
from evote.core.response import DataResponse, ListResponse, paginated
from evote.db.base import get_db
from evote.schemas.aspirant import AspirantApply, AspirantOut, AspirantReview
from evote.services.aspirant import AspirantService
from evote.services.timeline import Clock, get_clock

router = APIRouter(prefix="/aspirants", tags=["Aspirants"])


@router.post("", response_model=DataResponse[AspirantOut], status_code=status.HTTP_201_CREATED)
async def apply(
    body: AspirantApply,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    clock: Clock = Depends(get_clock),
):
    """Submit a candidacy application while the application stage is open."""
    aspirant = await AspirantService(session, feed, clock).apply(body)
    return {"data": AspirantOut.model_validate(aspirant)}


@router.get("", response_model=ListResponse[AspirantOut])
async def list_aspirants(
    filter_status: Optional[str] = Query(default=None, alias="status", description="submitted|approved|rejected"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    items, total = await AspirantService(session, feed).list_aspirants(pagination, status=filter_status)
    return paginated(
        [AspirantOut.model_validate(a) for a in items],
        total, pagination.page, pagination.limit,
    )


@router.get("/{aspirant_id}", response_model=DataResponse[AspirantOut])
async def get_aspirant(
    aspirant_id: str,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    aspirant = await AspirantService(session, feed).get_aspirant(aspirant_id)
    return {"data": AspirantOut.model_validate(aspirant)}


@router.post("/{aspirant_id}/approve", response_model=DataResponse[AspirantOut])
async def approve_aspirant(
    aspirant_id: str,
    body: AspirantReview | None = None,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
    clock: Clock = Depends(get_clock),
):
    """Approve the application and add the aspirant to the ballot as a candidate."""
    notes = body.notes if body else None
    aspirant = await AspirantService(session, feed, clock).approve(aspirant_id, notes)
    return {"data": AspirantOut.model_validate(aspirant)}


@router.post("/{aspirant_id}/reject", response_model=DataResponse[AspirantOut])
async def reject_aspirant(
    aspirant_id: str,
    body: AspirantReview | None = None,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    notes = body.notes if body else None
    aspirant = await AspirantService(session, feed).reject(aspirant_id, notes)
    return {"data": AspirantOut.model_validate(aspirant)}
