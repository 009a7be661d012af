"""SQLAlchemy ORM models for anonymous ballots.

``votes`` carries no voter identifier and no timestamp.  The only link back
to a voter is ``issuance_log``, which is append-only and read for audits and
ballot recovery, never while tallying.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from evote.db.base import Base


class IssuanceLog(Base):
    __tablename__ = "issuance_log"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    voter_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("voters.id"), nullable=False, index=True, unique=True
    )  # one ballot per voter, enforced by the store as well as the claim
    # No updated_at / deleted_at — rows are immutable
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )


class Vote(Base):
    __tablename__ = "votes"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    issuance_token: Mapped[str] = mapped_column(
        String(64), ForeignKey("issuance_log.token"), nullable=False, index=True
    )
    candidate_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("candidates.id"), nullable=False, index=True
    )
    position: Mapped[str] = mapped_column(String(100), nullable=False)
