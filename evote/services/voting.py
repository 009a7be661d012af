"""Vote transaction coordinator — the system's only real write path.

A submission runs in this order, and nothing is written until every check
has passed:

  1. voter exists, is verified, has not voted
  2. the timeline allows voting
  3. the ballot is complete and every pick is valid

Then, each step in its own unit of work:

  claim      conditional ``voted: false -> true``; losing callers get AlreadyVoted
  persist    issuance log row + one anonymous vote row per pick (atomic together)
  tally      ``vote_count += 1`` per pick; best effort, repaired by the reconciler
  finalize   token onto the voter, VOTE_CAST audit event; best effort

The claim commits before the ballot so that a voter can never have two
ballots.  If persistence fails after the claim, the voter is queued for
operator reconciliation and may finish through :meth:`recover_ballot`;
the claim is never retried.  A claimed voter with no issuance row is
recoverable whether or not a queue item was written; the periodic sweep in
:mod:`evote.services.reconciliation` queues any the request path missed.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from evote.core.config import settings
from evote.core.exceptions import (
    AlreadyVotedError,
    BallotPersistenceError,
    ConflictError,
    IncompleteBallotError,
    InvalidSelectionError,
    NotFoundError,
    NotVerifiedError,
    SubmissionTimeoutError,
)
from evote.domain.catalog import Candidate, Position, VoteType
from evote.domain.reconciliation import BALLOT_NOT_PERSISTED, ReconciliationStatus
from evote.repositories.ballot import BallotRepository
from evote.repositories.catalog import CandidateRepository, PositionRepository
from evote.repositories.reconciliation import ReconciliationRepository
from evote.repositories.voter import VoterRepository
from evote.services import audit
from evote.services.audit import AuditService
from evote.services.eligibility import Action, require
from evote.services.timeline import Clock, TimelineService, utc_now

logger = logging.getLogger(__name__)

Selections = Mapping[str, Sequence[str]]
Pick = tuple[str, str]  # (position name, candidate id)


def new_issuance_token() -> str:
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class VoteReceipt:
    positions: list[str]
    ballot_rows: int
    recovered: bool = False
    tally_failures: int = field(default=0, compare=False)


# ---------------------------------------------------------------------------
# Ballot validation (pure)
# ---------------------------------------------------------------------------

def validate_ballot(
    selections: Selections,
    positions: Sequence[Position],
    candidates: Sequence[Candidate],
) -> list[Pick]:
    """Check a ballot against the catalog and return its picks in ballot order.

    Every configured position must be answered, so a position with no
    candidates blocks voting until one is added or the position is removed.
    """
    by_name = {p.name: p for p in positions}
    unknown = sorted(set(selections) - set(by_name))
    if unknown:
        raise InvalidSelectionError(f"Unknown position '{unknown[0]}'")

    running: dict[str, set[str]] = {}
    for c in candidates:
        running.setdefault(c.position, set()).add(c.id)

    picks: list[Pick] = []
    for position in positions:
        chosen = list(selections.get(position.name) or [])
        eligible = running.get(position.name, set())

        if not chosen:
            raise IncompleteBallotError(position.name)
        if len(set(chosen)) != len(chosen):
            raise InvalidSelectionError(f"Duplicate candidate for '{position.name}'")

        if position.vote_type == VoteType.SINGLE.value:
            if len(chosen) != 1:
                raise InvalidSelectionError(f"Select exactly one candidate for '{position.name}'")
        elif len(chosen) > position.max_selections:
            raise InvalidSelectionError(
                f"Select at most {position.max_selections} candidate(s) for '{position.name}'"
            )

        for candidate_id in chosen:
            if candidate_id not in eligible:
                raise InvalidSelectionError(
                    f"Candidate '{candidate_id}' is not standing for '{position.name}'"
                )
            picks.append((position.name, candidate_id))
    return picks


def _positions_of(picks: Sequence[Pick]) -> list[str]:
    return list(dict.fromkeys(position for position, _ in picks))


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

class VoteTransactionCoordinator:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock = utc_now,
        *,
        submission_timeout: float | None = None,
        persist_timeout: float | None = None,
        token_factory: Callable[[], str] = new_issuance_token,
    ):
        self._session_factory = session_factory
        self._clock = clock
        self._submission_timeout = (
            settings.vote_submission_timeout_seconds if submission_timeout is None else submission_timeout
        )
        self._persist_timeout = (
            settings.vote_persist_timeout_seconds if persist_timeout is None else persist_timeout
        )
        self._token_factory = token_factory

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def submit_vote(self, voter_id: str, selections: Selections) -> VoteReceipt:
        picks = await self._checked(voter_id, selections, claimed=False)

        async with self._session_factory() as session:
            won = await VoterRepository(session).claim(voter_id)
            await session.commit()
        if not won:
            logger.info("Claim lost for voter %s", voter_id)
            raise AlreadyVotedError()
        logger.info("Voter %s claimed", voter_id)

        return await self._cast(voter_id, picks)

    async def recover_ballot(self, voter_id: str, selections: Selections) -> VoteReceipt:
        """Finish a ballot for a voter that was claimed but has no ballot stored."""
        picks = await self._checked(voter_id, selections, claimed=True)

        async with self._session_factory() as session:
            if await BallotRepository(session).has_issuance(voter_id):
                raise AlreadyVotedError()
            queue = ReconciliationRepository(session)
            item = await queue.pending_for_voter(voter_id)
            if item is None:
                # claim committed but nothing was queued (crash or failed escalation)
                item = await queue.create(
                    voter_id=voter_id, reason=BALLOT_NOT_PERSISTED, detail="queued on recovery"
                )
                logger.warning("Voter %s had no reconciliation item; queued %s", voter_id, item.id)
            won = await queue.transition(item.id, ReconciliationStatus.OPEN, ReconciliationStatus.RECOVERING)
            await session.commit()
        if not won:
            raise ConflictError("Ballot recovery is already in progress", code="RECOVERY_IN_PROGRESS")
        logger.info("Recovering ballot for voter %s (item %s)", voter_id, item.id)

        return await self._cast(voter_id, picks, reconciliation_id=item.id)

    # ------------------------------------------------------------------
    # Pre-claim checks
    # ------------------------------------------------------------------

    async def _checked(self, voter_id: str, selections: Selections, *, claimed: bool) -> list[Pick]:
        try:
            return await asyncio.wait_for(
                self._preconditions(voter_id, selections, claimed=claimed),
                timeout=self._submission_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise SubmissionTimeoutError() from exc

    async def _preconditions(self, voter_id: str, selections: Selections, *, claimed: bool) -> list[Pick]:
        async with self._session_factory() as session:
            voter = await VoterRepository(session).get_by_id(voter_id)
            if voter is None:
                raise NotFoundError("Voter", voter_id)
            if not voter.verified:
                raise NotVerifiedError()
            if voter.voted and not claimed:
                raise AlreadyVotedError()
            if claimed and not voter.voted:
                raise ConflictError("Voter has no pending claim; submit the ballot normally", code="NOT_CLAIMED")

            status = await TimelineService(session, self._clock).status()
            require(Action.VOTE, status)

            positions = await PositionRepository(session).ballot_order()
            candidates = await CandidateRepository(session).roster()
        return validate_ballot(selections, positions, candidates)

    # ------------------------------------------------------------------
    # Post-claim steps
    # ------------------------------------------------------------------

    async def _cast(self, voter_id: str, picks: list[Pick], reconciliation_id: str | None = None) -> VoteReceipt:
        token = self._token_factory()
        try:
            rows = await asyncio.wait_for(self._persist(token, voter_id, picks), timeout=self._persist_timeout)
        except asyncio.CancelledError:
            await asyncio.shield(self._escalate(voter_id, "cancelled", reconciliation_id))
            raise
        except Exception as exc:
            if await self._already_stored(voter_id, reconciliation_id):
                raise AlreadyVotedError() from exc
            logger.exception("Ballot not persisted for claimed voter %s", voter_id)
            item_id = await self._escalate(voter_id, repr(exc), reconciliation_id)
            raise BallotPersistenceError(voter_id, item_id) from exc

        failures = await self._bump_tallies(picks)
        await self._finalize(voter_id, token, picks, reconciliation_id)
        return VoteReceipt(
            positions=_positions_of(picks),
            ballot_rows=rows,
            recovered=reconciliation_id is not None,
            tally_failures=failures,
        )

    async def _persist(self, token: str, voter_id: str, picks: list[Pick]) -> int:
        async with self._session_factory() as session:
            ballots = BallotRepository(session)
            await ballots.record_issuance(token, voter_id)
            rows = await ballots.record_votes(token, picks)
            await session.commit()
        return rows

    async def _bump_tallies(self, picks: list[Pick]) -> int:
        """Increment cached counts; return how many increments were dropped."""
        failures = 0
        try:
            async with self._session_factory() as session:
                repo = CandidateRepository(session)
                for _, candidate_id in picks:
                    try:
                        await repo.increment_vote_count(candidate_id)
                        await session.commit()
                    except Exception:
                        await session.rollback()
                        failures += 1
                        logger.warning("vote_count increment dropped for candidate %s", candidate_id, exc_info=True)
        except Exception:
            failures = len(picks)
            logger.warning("vote_count increments skipped; reconciler will repair", exc_info=True)
        return failures

    async def _finalize(
        self, voter_id: str, token: str, picks: list[Pick], reconciliation_id: str | None
    ) -> None:
        positions = _positions_of(picks)
        try:
            async with self._session_factory() as session:
                await VoterRepository(session).set_issuance_token(voter_id, token)
                if reconciliation_id:
                    await ReconciliationRepository(session).transition(
                        reconciliation_id, ReconciliationStatus.RECOVERING, ReconciliationStatus.RESOLVED
                    )
                await AuditService(session).record(
                    audit.BALLOT_RECOVERED if reconciliation_id else audit.VOTE_CAST,
                    "Vote successfully cast",
                    actor_id=voter_id,
                    metadata={"positions": positions, "timestamp": self._clock().isoformat()},
                )
                await session.commit()
        except Exception:
            logger.error("Post-vote bookkeeping failed for voter %s", voter_id, exc_info=True)

    async def _escalate(self, voter_id: str, detail: str, reconciliation_id: str | None) -> str | None:
        """Queue the claimed voter for operator reconciliation. Never raises.

        If this fails too, the voter is left claimed with no ballot and no
        queue item.  The reconciliation sweep picks such voters up, and
        :meth:`recover_ballot` queues them itself when asked.
        """
        try:
            async with self._session_factory() as session:
                queue = ReconciliationRepository(session)
                if reconciliation_id:
                    await queue.transition(
                        reconciliation_id, ReconciliationStatus.RECOVERING, ReconciliationStatus.OPEN
                    )
                    item_id = reconciliation_id
                else:
                    item = await queue.create(voter_id=voter_id, reason=BALLOT_NOT_PERSISTED, detail=detail)
                    item_id = item.id
                await AuditService(session).record(
                    audit.VOTE_PERSISTENCE_FAILED,
                    "Voter claimed but ballot was not stored",
                    actor_id=voter_id,
                    metadata={"reconciliation_id": item_id},
                )
                await session.commit()
            logger.error("Voter %s queued for reconciliation (item %s)", voter_id, item_id)
            return item_id
        except Exception:
            logger.critical("Could not queue voter %s for reconciliation", voter_id, exc_info=True)
            return None

    async def _already_stored(self, voter_id: str, reconciliation_id: str | None) -> bool:
        """True if another writer stored this voter's ballot first; settles the item if so."""
        try:
            async with self._session_factory() as session:
                if not await BallotRepository(session).has_issuance(voter_id):
                    return False
                if reconciliation_id:
                    await ReconciliationRepository(session).transition(
                        reconciliation_id, ReconciliationStatus.RECOVERING, ReconciliationStatus.RESOLVED
                    )
                    await session.commit()
        except Exception:
            logger.warning("Could not check stored ballot for voter %s", voter_id, exc_info=True)
            return False
        logger.info("Ballot for voter %s was already stored by another writer", voter_id)
        return True
