"""SQLAlchemy ORM model for the operator reconciliation queue."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from evote.db.base import Base
from evote.domain.mixins import TimestampMixin


# Reason recorded for a voter whose claim committed without a ballot
BALLOT_NOT_PERSISTED = "BALLOT_NOT_PERSISTED"


class ReconciliationStatus(str, enum.Enum):
    OPEN = "open"
    RECOVERING = "recovering"
    RESOLVED = "resolved"


class ReconciliationItem(Base, TimestampMixin):
    """A voter whose claim committed but whose ballot did not."""

    __tablename__ = "reconciliation_queue"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    voter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("voters.id"), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(String(100), nullable=False)
    detail: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=ReconciliationStatus.OPEN.value, nullable=False, index=True
    )
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
