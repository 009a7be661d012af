"""SQLAlchemy ORM model for election timeline stages."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from evote.db.base import Base
from evote.domain.mixins import TimestampMixin


class StageCategory(str, enum.Enum):
    REGISTRATION = "registration"
    APPLICATION = "application"
    VOTING = "voting"
    RESULTS = "results"
    OTHER = "other"


class Stage(Base, TimestampMixin):
    """One time-boxed phase of the election.

    The category, not the display name, decides what a stage means to the
    timeline. Only one live stage may exist per category except ``other``.
    """

    __tablename__ = "election_stages"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    stage_name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(
        String(20), default=StageCategory.OTHER.value, nullable=False, index=True
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
