"""Election timeline router — stage administration, live status, eligibility.

Stage writes publish a change event so the timeline monitor re-evaluates;
status and eligibility are always computed fresh from the store.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.notifications import ChangeFeed, get_change_feed
from evote.core.response import DataResponse
from evote.db.base import get_db
from evote.schemas.stage import (
    EligibilityOut,
    StageCreate,
    StageOut,
    StageUpdate,
    TimelineStatusOut,
)
from evote.services.eligibility import Action, authorize
from evote.services.stage import StageService
from evote.services.timeline import Clock, TimelineService, get_clock

router = APIRouter(prefix="/timeline", tags=["Timeline"])


def _svc(session: AsyncSession, feed: ChangeFeed) -> StageService:
    return StageService(session, feed)


# ------------------------------------------------------------------
# Stages
# ------------------------------------------------------------------

@router.get("/stages", response_model=DataResponse[list[StageOut]])
async def list_stages(
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """All stages in timeline order."""
    stages = await _svc(session, feed).list_stages()
    return {"data": [StageOut.model_validate(s) for s in stages]}


@router.post("/stages", response_model=DataResponse[StageOut], status_code=status.HTTP_201_CREATED)
async def create_stage(
    body: StageCreate,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    stage = await _svc(session, feed).create_stage(body)
    return {"data": StageOut.model_validate(stage)}


@router.put("/stages/{stage_id}", response_model=DataResponse[StageOut])
async def update_stage(
    stage_id: str,
    body: StageUpdate,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    stage = await _svc(session, feed).update_stage(stage_id, body)
    return {"data": StageOut.model_validate(stage)}


@router.delete("/stages/{stage_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_stage(
    stage_id: str,
    session: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    await _svc(session, feed).delete_stage(stage_id)


# ------------------------------------------------------------------
# Status
# ------------------------------------------------------------------

@router.get("/status", response_model=DataResponse[TimelineStatusOut])
async def timeline_status(
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Election-wide status evaluated at request time."""
    current = await TimelineService(session, clock).status()
    return {"data": TimelineStatusOut.model_validate(current)}


@router.get("/eligibility/{action}", response_model=DataResponse[EligibilityOut])
async def eligibility(
    action: Action,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Whether ``action`` is permitted right now, and why not if it isn't."""
    decision = authorize(action, await TimelineService(session, clock).status())
    return {
        "data": EligibilityOut(
            action=action.value,
            allowed=decision.allowed,
            reason=decision.reason.value if decision.reason else None,
        )
    }
