"""SQLAlchemy ORM models for the ballot catalog: positions and candidates."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from evote.db.base import Base
from evote.domain.mixins import TimestampMixin


class VoteType(str, enum.Enum):
    SINGLE = "single"
    MULTIPLE = "multiple"


class Position(Base, TimestampMixin):
    __tablename__ = "positions"
    __table_args__ = (CheckConstraint("max_selections >= 1", name="ck_positions_max_selections"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    vote_type: Mapped[str] = mapped_column(String(20), default=VoteType.SINGLE.value, nullable=False)
    max_selections: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class Candidate(Base, TimestampMixin):
    __tablename__ = "candidates"
    __table_args__ = (CheckConstraint("vote_count >= 0", name="ck_candidates_vote_count"),)

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Position name, stored as a plain reference the same way ballots key selections
    position: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    # Cache over the votes table; TallyReconciler recomputes it
    vote_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
