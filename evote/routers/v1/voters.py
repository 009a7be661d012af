"""Voter router — registration intake, status lookup, verification hook."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from evote.core.response import DataResponse
from evote.db.base import get_db
from evote.schemas.voter import VoterOut, VoterRegister, VoterRegistered
from evote.services.timeline import Clock, get_clock
from evote.services.voter import VoterService

router = APIRouter(prefix="/voters", tags=["Voters"])


@router.post("", response_model=DataResponse[VoterRegistered])
async def register_voter(
    body: VoterRegister,
    session: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Register a voter during the registration stage. Idempotent by matric."""
    voter, created = await VoterService(session, clock).register(body)
    return {"data": VoterRegistered(voter_id=voter.id, status="created" if created else "exists")}


@router.get("/{voter_id}", response_model=DataResponse[VoterOut])
async def get_voter(
    voter_id: str,
    session: AsyncSession = Depends(get_db),
):
    svc = VoterService(session)
    voter = await svc.get_voter(voter_id)
    out = VoterOut.model_validate(voter)
    out.needs_ballot_recovery = await svc.needs_ballot_recovery(voter)
    return {"data": out}


@router.post("/{voter_id}/verify", response_model=DataResponse[VoterOut])
async def verify_voter(
    voter_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Called by the identity-verification collaborator once a voter passes."""
    voter = await VoterService(session).mark_verified(voter_id)
    return {"data": VoterOut.model_validate(voter)}
