"""Results router — published results and turnout."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.response import DataResponse
from evote.db.base import get_db
from evote.schemas.results import PositionResultOut, ResultsOut, TurnoutOut
from evote.services.results import ResultsService
from evote.services.timeline import Clock, get_clock

router = APIRouter(prefix="/results", tags=["Results"])


@router.get("", response_model=DataResponse[ResultsOut])
async def get_results(
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Per-position results. 403 RESULTS_NOT_PUBLISHED until the results stage opens."""
    status, positions, turnout = await ResultsService(session, clock).results()
    return {
        "data": ResultsOut(
            evaluated_at=status.evaluated_at,
            is_voting_ended=status.is_voting_ended,
            is_results_published=status.is_results_published,
            positions=[PositionResultOut.model_validate(asdict(p)) for p in positions],
            turnout=TurnoutOut.model_validate(turnout),
        )
    }


@router.get("/turnout", response_model=DataResponse[TurnoutOut])
async def get_turnout(session: AsyncSession = Depends(get_db)):
    turnout = await ResultsService(session).turnout()
    return {"data": TurnoutOut.model_validate(turnout)}
