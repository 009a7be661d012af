"""Vote submission router — thin HTTP layer over the transaction coordinator.

Each coordinator step opens its own session, so this router takes the
session factory rather than a request-scoped session.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from evote.db.base import get_session_factory
from evote.schemas.common import ErrorResponse
from evote.schemas.vote import VoteSubmission, VoteSubmitResponse
from evote.services.timeline import Clock, get_clock
from evote.services.voting import VoteTransactionCoordinator

router = APIRouter(prefix="/votes", tags=["Votes"])


def _coordinator(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
) -> VoteTransactionCoordinator:
    return VoteTransactionCoordinator(session_factory, clock)


@router.post(
    "",
    response_model=VoteSubmitResponse,
    responses={
        403: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def submit_vote(
    body: VoteSubmission,
    coordinator: VoteTransactionCoordinator = Depends(_coordinator),
):
    """Cast a complete ballot. 409 if the voter has already voted."""
    receipt = await coordinator.submit_vote(body.voter_id, body.selections)
    return VoteSubmitResponse(positions=receipt.positions)


@router.post("/recover", response_model=VoteSubmitResponse, responses={409: {"model": ErrorResponse}})
async def recover_ballot(
    body: VoteSubmission,
    coordinator: VoteTransactionCoordinator = Depends(_coordinator),
):
    """Complete a ballot for a voter whose claim stands but whose ballot was not stored."""
    receipt = await coordinator.recover_ballot(body.voter_id, body.selections)
    return VoteSubmitResponse(message="Vote recovered successfully", positions=receipt.positions)
