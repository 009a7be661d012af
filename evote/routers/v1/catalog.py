"""Ballot catalog router — positions and candidates."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.notifications import ChangeFeed, get_change_feed
from evote.core.response import DataResponse
from evote.db.base import get_db
from evote.schemas.catalog import CandidateCreate, CandidateOut, PositionCreate, PositionOut
from evote.services.catalog import CatalogService

router = APIRouter(tags=["Catalog"])


def _svc(session: AsyncSession, feed: ChangeFeed) -> CatalogService:
    return CatalogService(session, feed)


@router.get("/positions", response_model=DataResponse[list[PositionOut]])
async def list_positions(
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Positions in ballot order."""
    positions = await _svc(session, feed).list_positions()
    return {"data": [PositionOut.model_validate(p) for p in positions]}


@router.post("/positions", response_model=DataResponse[PositionOut], status_code=status.HTTP_201_CREATED)
async def create_position(
    body: PositionCreate,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    position = await _svc(session, feed).create_position(body)
    return {"data": PositionOut.model_validate(position)}


@router.get("/candidates", response_model=DataResponse[list[CandidateOut]])
async def list_candidates(
    position: Optional[str] = Query(default=None, description="Filter by position name"),
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    candidates = await _svc(session, feed).list_candidates(position)
    return {"data": [CandidateOut.model_validate(c) for c in candidates]}


@router.post("/candidates", response_model=DataResponse[CandidateOut], status_code=status.HTTP_201_CREATED)
async def create_candidate(
    body: CandidateCreate,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    candidate = await _svc(session, feed).create_candidate(body)
    return {"data": CandidateOut.model_validate(candidate)}
