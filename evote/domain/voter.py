"""SQLAlchemy ORM model for registered voters."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from evote.db.base import Base
from evote.domain.mixins import TimestampMixin


class Voter(Base, TimestampMixin):
    __tablename__ = "voters"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    matric: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Set by the identity-verification collaborator
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Monotonic: flipped once by the vote claim, never reset
    voted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    # Audit linkage only; never joined while tallying
    issuance_token: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
