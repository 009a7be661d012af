"""Operator endpoints — tally reconciliation, the reconciliation queue and its sweep."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.config import settings
from evote.core.pagination import PaginationParams
from evote.core.response import DataResponse, ListResponse, paginated
from evote.db.base import get_db
from evote.schemas.audit import ReconciliationItemOut, SweepReportOut, TallyCorrectionOut
from evote.services.reconciliation import ReconciliationService
from evote.services.tally import TallyReconciler

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/tallies/reconcile", response_model=DataResponse[list[TallyCorrectionOut]])
async def reconcile_tallies(session: AsyncSession = Depends(get_db)):
    """Recompute every candidate's vote_count from vote rows; return the corrections."""
    fixes = await TallyReconciler(session).reconcile()
    return {"data": [TallyCorrectionOut.model_validate(f) for f in fixes]}


@router.get("/reconciliation", response_model=ListResponse[ReconciliationItemOut])
async def list_reconciliation_items(
    filter_status: Optional[str] = Query(default=None, alias="status", description="open|recovering|resolved"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await ReconciliationService(session).list_items(pagination, status=filter_status)
    return paginated(
        [ReconciliationItemOut.model_validate(i) for i in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/reconciliation/sweep", response_model=DataResponse[SweepReportOut])
async def sweep_reconciliation(
    grace_seconds: Optional[float] = Query(default=None, ge=0, alias="graceSeconds"),
    session: AsyncSession = Depends(get_db),
):
    """Queue claimed voters with no stored ballot; resolve items whose ballot is on record."""
    grace = settings.claim_sweep_grace_seconds if grace_seconds is None else grace_seconds
    report = await ReconciliationService(session).sweep(grace)
    return {"data": SweepReportOut.model_validate(report)}
