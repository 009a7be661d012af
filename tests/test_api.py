"""HTTP surface: envelopes, status codes, and the error body."""

import httpx
import pytest

from evote.core.notifications import InMemoryChangeFeed, get_change_feed
from evote.db.base import get_db, get_session_factory
from evote.domain import Candidate, Stage, Voter
from evote.main import create_app
from evote.services.timeline import get_clock

from conftest import AFTER_VOTING, REGISTRATION, RESULTS_OUT, add_all, count, reload, utc


@pytest.fixture
def feed():
    return InMemoryChangeFeed()


@pytest.fixture
async def client(session_factory, clock, feed):
    app = create_app()

    async def override_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_change_feed] = lambda: feed

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


async def test_timeline_status_is_camel_cased(client, timeline):
    body = (await client.get("/api/v1/timeline/status")).json()["data"]
    assert body["isVotingActive"] is True
    assert body["currentStage"]["stageName"] == "Voting Period"
    assert body["votingStage"]["category"] == "voting"


async def test_eligibility_endpoint(client, timeline):
    allowed = (await client.get("/api/v1/timeline/eligibility/vote")).json()["data"]
    denied = (await client.get("/api/v1/timeline/eligibility/view_results")).json()["data"]
    assert allowed == {"action": "vote", "allowed": True, "reason": None}
    assert denied["allowed"] is False
    assert denied["reason"] == "RESULTS_NOT_PUBLISHED"


async def test_stage_crud_publishes_changes(client, feed):
    sub = feed.subscribe("stages")
    payload = {
        "stageName": "Voting",
        "category": "voting",
        "startTime": "2025-01-01T00:00:00Z",
        "endTime": "2025-01-03T00:00:00Z",
    }
    created = await client.post("/api/v1/timeline/stages", json=payload)
    assert created.status_code == 201
    stage_id = created.json()["data"]["id"]
    assert (await sub.next(timeout=1)).entity_id == stage_id

    clash = await client.post("/api/v1/timeline/stages", json={**payload, "stageName": "Second vote"})
    assert clash.status_code == 409
    assert clash.json()["error"]["code"] == "DUPLICATE_STAGE_CATEGORY"

    updated = await client.put(f"/api/v1/timeline/stages/{stage_id}", json={"isActive": False})
    assert updated.status_code == 200
    assert updated.json()["data"]["isActive"] is False

    assert (await client.delete(f"/api/v1/timeline/stages/{stage_id}")).status_code == 204
    assert (await client.get("/api/v1/timeline/stages")).json()["data"] == []


async def test_inverted_stage_window_is_rejected(client):
    resp = await client.post("/api/v1/timeline/stages", json={
        "stageName": "Backwards",
        "startTime": "2025-01-03T00:00:00Z",
        "endTime": "2025-01-01T00:00:00Z",
    })
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_WINDOW"


async def test_register_is_gated_and_idempotent(client, timeline, clock):
    body = {"matric": "21/55ECA042", "name": "Kemi O", "email": "kemi@example.edu"}

    closed = await client.post("/api/v1/voters", json=body)
    assert closed.status_code == 403
    assert closed.json()["error"]["code"] == "STAGE_CLOSED"

    clock.now = REGISTRATION[0]
    first = (await client.post("/api/v1/voters", json=body)).json()["data"]
    again = (await client.post("/api/v1/voters", json=body)).json()["data"]
    assert first["status"] == "created"
    assert again == {"voterId": first["voterId"], "status": "exists"}

    verified = await client.post(f"/api/v1/voters/{first['voterId']}/verify")
    assert verified.json()["data"]["verified"] is True
    assert verified.json()["data"]["matric"] == "21/55eca042"


async def test_malformed_matric_is_rejected(client, timeline, clock):
    clock.now = REGISTRATION[0]
    resp = await client.post("/api/v1/voters", json={"matric": "bogus", "name": "X", "email": "x@example.edu"})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_vote_flow_end_to_end(client, session_factory, timeline, ballot, voter, valid_selections, clock):
    vote = await client.post("/api/v1/votes", json={"voterId": "voter-1", "selections": valid_selections})
    assert vote.status_code == 200
    assert vote.json() == {
        "success": True,
        "message": "Vote submitted successfully",
        "positions": ["President", "Senate"],
    }

    again = await client.post("/api/v1/votes", json={"voterId": "voter-1", "selections": valid_selections})
    assert again.status_code == 409
    assert set(again.json()) == {"error"}
    assert again.json()["error"]["code"] == "ALREADY_VOTED"

    early = await client.get("/api/v1/results")
    assert early.status_code == 403
    assert early.json()["error"]["code"] == "RESULTS_NOT_PUBLISHED"

    clock.now = RESULTS_OUT
    results = (await client.get("/api/v1/results")).json()["data"]
    president = results["positions"][0]
    assert president["position"] == "President"
    assert president["winner"]["id"] == "ada"
    assert president["winner"]["percentage"] == 100.0
    assert results["turnout"] == {"voted": 1, "verified": 1, "percentage": 100.0}

    events = (await client.get("/api/v1/audit-events", params={"eventType": "VOTE_CAST"})).json()
    assert events["meta"]["total"] == 1
    assert events["data"][0]["metadata"]["positions"] == ["President", "Senate"]


async def test_vote_after_window_is_forbidden(client, timeline, ballot, voter, valid_selections, clock):
    clock.now = AFTER_VOTING
    resp = await client.post("/api/v1/votes", json={"voterId": "voter-1", "selections": valid_selections})
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "NOT_ELIGIBLE_WINDOW_CLOSED"


async def test_incomplete_ballot_is_422(client, timeline, ballot, voter):
    resp = await client.post("/api/v1/votes", json={"voterId": "voter-1", "selections": {"President": ["ada"]}})
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INCOMPLETE_BALLOT"


async def test_candidates_listing_hides_tallies(client, ballot):
    data = (await client.get("/api/v1/candidates", params={"position": "Senate"})).json()["data"]
    assert [c["fullName"] for c in data] == ["Chi Eze", "Dayo Ade", "Efe Uche"]
    assert all("voteCount" not in c for c in data)


async def test_admin_reconcile_and_queue(client, session_factory, ballot):
    corrections = (await client.post("/api/v1/admin/tallies/reconcile")).json()["data"]
    assert corrections == []
    queue = (await client.get("/api/v1/admin/reconciliation", params={"status": "open"})).json()
    assert queue["data"] == []
    assert queue["meta"]["total"] == 0


async def test_voter_lookup_flags_pending_recovery(client, session_factory, voter):
    from evote.domain import ReconciliationItem

    await add_all(session_factory, ReconciliationItem(voter_id="voter-1", reason="BALLOT_NOT_PERSISTED"))
    async with session_factory() as session:
        stored = await session.get(Voter, "voter-1")
        stored.voted = True
        await session.commit()

    body = (await client.get("/api/v1/voters/voter-1")).json()["data"]
    assert body["voted"] is True
    assert body["needsBallotRecovery"] is True
    assert (await reload(session_factory, Voter, "voter-1")).issuance_token is None


async def test_claimed_voter_without_queue_item_still_needs_recovery(client, session_factory, voter):
    async with session_factory() as session:
        stored = await session.get(Voter, "voter-1")
        stored.voted = True
        await session.commit()

    body = (await client.get("/api/v1/voters/voter-1")).json()["data"]
    assert body["needsBallotRecovery"] is True

    swept = (await client.post("/api/v1/admin/reconciliation/sweep", params={"graceSeconds": 0})).json()["data"]
    assert swept == {"queued": ["voter-1"], "resolved": []}
    queue = (await client.get("/api/v1/admin/reconciliation", params={"status": "open"})).json()
    assert queue["meta"]["total"] == 1
    assert queue["data"][0]["voterId"] == "voter-1"


async def test_unknown_voter_is_404(client):
    resp = await client.get("/api/v1/voters/missing")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


async def test_request_audit_records_writes_without_bodies(session_factory):
    import asyncio

    from fastapi import FastAPI
    from sqlalchemy import select

    from evote.domain import AuditEvent
    from evote.middleware.audit import AuditMiddleware

    app = FastAPI()
    app.add_middleware(AuditMiddleware, session_factory=session_factory)

    @app.post("/echo")
    async def echo():
        return {"ok": True}

    @app.get("/echo")
    async def read():
        return {"ok": True}

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        await c.get("/echo")
        await c.post("/echo", json={"selections": {"President": ["ada"]}})

    for _ in range(50):
        async with session_factory() as session:
            events = (await session.execute(select(AuditEvent))).scalars().all()
        if events:
            break
        await asyncio.sleep(0.02)

    (event,) = events
    assert event.event_type == "API_REQUEST"
    assert event.event_metadata == {"method": "POST", "path": "/echo", "status": 200}
    assert "ada" not in (event.description or "")


async def test_catalog_writes(client):
    created = await client.post(
        "/api/v1/positions", json={"name": "Treasurer", "voteType": "single", "maxSelections": 3}
    )
    assert created.status_code == 201
    assert created.json()["data"]["maxSelections"] == 1

    dup = await client.post("/api/v1/positions", json={"name": "Treasurer"})
    assert dup.status_code == 409

    stray = await client.post("/api/v1/candidates", json={"fullName": "Nobody", "position": "Mayor"})
    assert stray.status_code == 422

    cand = await client.post("/api/v1/candidates", json={"fullName": "Funmi K", "position": "Treasurer"})
    assert cand.status_code == 201
    assert cand.json()["data"]["position"] == "Treasurer"


APPLICATION = (utc(2024, 11, 1), utc(2024, 11, 20))


def _application(position="President"):
    return {
        "matric": "21/55ECA077",
        "fullName": "Ngozi B",
        "email": "ngozi@example.edu",
        "position": position,
        "cgpa": 4.2,
        "whyRunning": "Better hostels",
    }


async def test_applications_are_gated_by_the_application_stage(client, timeline, ballot, clock):
    resp = await client.post("/api/v1/aspirants", json=_application())
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "STAGE_NOT_OPEN"


async def test_approved_aspirant_becomes_a_candidate(client, session_factory, timeline, ballot, clock, feed):
    await add_all(
        session_factory,
        Stage(id="stage-apply", stage_name="Aspirant Applications", category="application",
              start_time=APPLICATION[0], end_time=APPLICATION[1], is_active=True),
    )
    clock.now = utc(2024, 11, 10)
    sub = feed.subscribe("candidates")

    applied = await client.post("/api/v1/aspirants", json=_application())
    assert applied.status_code == 201
    aspirant = applied.json()["data"]
    assert aspirant["status"] == "submitted"
    assert aspirant["matric"] == "21/55eca077"
    assert aspirant["candidateId"] is None

    dup = await client.post("/api/v1/aspirants", json=_application())
    assert dup.status_code == 409
    assert dup.json()["error"]["code"] == "ALREADY_APPLIED"

    stray = await client.post("/api/v1/aspirants", json={**_application("Mayor"), "matric": "21/55ECA078"})
    assert stray.status_code == 422

    pending = (await client.get("/api/v1/aspirants", params={"status": "submitted"})).json()
    assert pending["meta"]["total"] == 1

    approved = await client.post(f"/api/v1/aspirants/{aspirant['id']}/approve", json={"notes": "eligible"})
    assert approved.status_code == 200
    promoted = approved.json()["data"]
    assert promoted["status"] == "approved"
    assert promoted["reviewNotes"] == "eligible"
    assert promoted["candidateId"]

    candidate = await reload(session_factory, Candidate, promoted["candidateId"])
    assert (candidate.full_name, candidate.position, candidate.vote_count) == ("Ngozi B", "President", 0)
    event = await sub.next(timeout=1)
    assert (event.topic, event.action, event.entity_id) == ("candidates", "created", candidate.id)

    twice = await client.post(f"/api/v1/aspirants/{aspirant['id']}/approve")
    assert twice.status_code == 409
    assert twice.json()["error"]["code"] == "ASPIRANT_ALREADY_REVIEWED"
    assert await count(session_factory, Candidate, Candidate.full_name == "Ngozi B") == 1

    rejected = await client.post(f"/api/v1/aspirants/{aspirant['id']}/reject")
    assert rejected.status_code == 409
