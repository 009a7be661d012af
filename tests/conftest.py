"""Shared fixtures: a fresh SQLite database per test, a movable clock, seed data."""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ["REQUEST_AUDIT_ENABLED"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./evote_test.db")

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import evote.domain  # noqa: F401
from evote.db.base import SQLITE_BUSY_TIMEOUT, Base
from evote.domain import Candidate, Position, Stage, Voter


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


REGISTRATION = (utc(2024, 12, 1), utc(2024, 12, 31))
VOTING = (utc(2025, 1, 1), utc(2025, 1, 3))
RESULTS = (utc(2025, 1, 4), utc(2025, 1, 10))
DURING_VOTING = utc(2025, 1, 2)
AFTER_VOTING = utc(2025, 1, 3, 12)
RESULTS_OUT = utc(2025, 1, 5)


class FrozenClock:
    """Callable clock the tests move by assigning ``now``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(DURING_VOTING)


@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'evote.db'}",
        connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


async def add_all(session_factory, *rows):
    async with session_factory() as session:
        session.add_all(rows)
        await session.commit()
    return rows


async def count(session_factory, model, *where) -> int:
    async with session_factory() as session:
        q = select(func.count()).select_from(model)
        for clause in where:
            q = q.where(clause)
        return (await session.execute(q)).scalar_one()


async def reload(session_factory, model, entity_id):
    async with session_factory() as session:
        return await session.get(model, entity_id)


@pytest.fixture
async def timeline(session_factory):
    """Registration, voting and results stages around DURING_VOTING."""
    return await add_all(
        session_factory,
        Stage(id="stage-reg", stage_name="Registration Period", category="registration",
              start_time=REGISTRATION[0], end_time=REGISTRATION[1], is_active=True),
        Stage(id="stage-vote", stage_name="Voting Period", category="voting",
              start_time=VOTING[0], end_time=VOTING[1], is_active=True),
        Stage(id="stage-results", stage_name="Results Published", category="results",
              start_time=RESULTS[0], end_time=RESULTS[1], is_active=True),
    )


@pytest.fixture
async def ballot(session_factory):
    """President (single) with two candidates; Senate (multiple, up to 2) with three."""
    await add_all(
        session_factory,
        Position(id="pos-pres", name="President", vote_type="single", max_selections=1, display_order=1),
        Position(id="pos-sen", name="Senate", vote_type="multiple", max_selections=2, display_order=2),
        Candidate(id="ada", full_name="Ada Obi", position="President", vote_count=0),
        Candidate(id="bayo", full_name="Bayo Musa", position="President", vote_count=0),
        Candidate(id="chi", full_name="Chi Eze", position="Senate", vote_count=0),
        Candidate(id="dayo", full_name="Dayo Ade", position="Senate", vote_count=0),
        Candidate(id="efe", full_name="Efe Uche", position="Senate", vote_count=0),
    )
    return {"President": ["ada", "bayo"], "Senate": ["chi", "dayo", "efe"]}


@pytest.fixture
async def voter(session_factory) -> Voter:
    (row,) = await add_all(
        session_factory,
        Voter(id="voter-1", matric="21/55eca001", name="Tolu A", email="tolu@example.edu",
              verified=True, voted=False),
    )
    return row


@pytest.fixture
def valid_selections() -> dict[str, list[str]]:
    return {"President": ["ada"], "Senate": ["chi", "dayo"]}
