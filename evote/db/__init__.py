"""Database package — async SQLAlchemy engine, session factory, Base."""
from evote.db.base import Base, async_session_factory, dispose_engine, engine, get_db, get_session_factory

__all__ = ["Base", "async_session_factory", "dispose_engine", "engine", "get_db", "get_session_factory"]
