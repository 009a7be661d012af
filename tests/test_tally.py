"""Tally reconciliation against vote rows."""

from evote.domain import AuditEvent, Candidate, IssuanceLog, Vote, Voter
from evote.repositories.ballot import BallotRepository
from evote.services import audit
from evote.services.tally import TallyReconciler

from conftest import add_all, count, reload


async def test_reconcile_recomputes_from_vote_rows(session_factory, ballot):
    await add_all(
        session_factory,
        Voter(id="v1", matric="21/55abc201", name="A", email="a@example.edu", verified=True, voted=True),
        IssuanceLog(token="tok-1", voter_id="v1"),
        Vote(issuance_token="tok-1", candidate_id="ada", position="President"),
        Vote(issuance_token="tok-1", candidate_id="chi", position="Senate"),
    )
    async with session_factory() as session:
        await session.execute(Candidate.__table__.update().where(Candidate.id == "bayo").values(vote_count=4))
        await session.commit()

    async with session_factory() as session:
        reconciler = TallyReconciler(session)
        drift = await reconciler.drift()
        fixes = await reconciler.reconcile()
        await session.commit()

    expected = {("ada", 0, 1), ("bayo", 4, 0), ("chi", 0, 1)}
    assert {(d.candidate_id, d.cached, d.actual) for d in drift} == expected
    assert {(f.candidate_id, f.cached, f.actual) for f in fixes} == expected

    assert (await reload(session_factory, Candidate, "ada")).vote_count == 1
    assert (await reload(session_factory, Candidate, "bayo")).vote_count == 0
    assert await count(session_factory, AuditEvent, AuditEvent.event_type == audit.TALLY_RECONCILED) == 1


async def test_reconcile_without_drift_is_a_no_op(session_factory, ballot):
    async with session_factory() as session:
        assert await TallyReconciler(session).reconcile() == []
        await session.commit()
    assert await count(session_factory, AuditEvent) == 0


async def test_reconcile_counts_rows_at_write_time(session_factory, ballot, monkeypatch):
    await add_all(
        session_factory,
        Voter(id="v1", matric="21/55abc201", name="A", email="a@example.edu", verified=True, voted=True),
        Voter(id="v2", matric="21/55abc202", name="B", email="b@example.edu", verified=True, voted=True),
        IssuanceLog(token="tok-1", voter_id="v1"),
        IssuanceLog(token="tok-2", voter_id="v2"),
        Vote(issuance_token="tok-1", candidate_id="ada", position="President"),
        Vote(issuance_token="tok-2", candidate_id="ada", position="President"),
    )

    # The drift read predates the second ballot
    async def stale(self):
        return {"ada": 1}

    monkeypatch.setattr(BallotRepository, "counts_by_candidate", stale)

    async with session_factory() as session:
        fixes = await TallyReconciler(session).reconcile()
        await session.commit()

    assert [(f.candidate_id, f.cached, f.actual) for f in fixes] == [("ada", 0, 1)]
    assert (await reload(session_factory, Candidate, "ada")).vote_count == 2
