"""Async SQLAlchemy engine, session factory, declarative Base, and FastAPI dependencies.

Request handlers take one session per request (:func:`get_db`).  The vote
coordinator takes the factory itself (:func:`get_session_factory`) because
its claim must commit independently of the ballot write that follows.
"""


from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from evote.core.config import settings

# Seconds a SQLite writer waits on a locked database; concurrent vote claims queue here
SQLITE_BUSY_TIMEOUT = 30

_engine_kwargs: dict = {
    "pool_pre_ping": True,
    "echo": settings.app_env == "development",
}
if settings.is_sqlite:
    _engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT}

engine = create_async_engine(settings.database_url, **_engine_kwargs)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """All ORM models inherit from this base."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; commit on success, roll back on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for services that need several independent units of work."""
    return async_session_factory


async def dispose_engine() -> None:
    await engine.dispose()
