"""SQLAlchemy ORM model for the system audit log."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import DateTime, JSON, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from evote.db.base import Base


class AuditEvent(Base):
    __tablename__ = "audit_log"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # What
    event_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "metadata" is reserved on declarative classes, so the attribute is renamed
    event_metadata: Mapped[Optional[Any]] = mapped_column("metadata", JSON, nullable=True)

    # Who
    actor_id: Mapped[Optional[str]] = mapped_column(String(36), index=True, nullable=True)

    # When (no updated_at / deleted_at — audit rows are immutable)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
