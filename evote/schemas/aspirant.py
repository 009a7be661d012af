"""Aspirant (candidacy application) Pydantic schemas."""


from datetime import datetime

from pydantic import Field, field_validator

from evote.schemas.common import CamelModel

class AspirantApply(CamelModel):
    matric: str = Field(pattern=r"^\s*\d{2}/\d{2}[A-Za-z]{3}\d{3}\s*$")
    full_name: str = Field(min_length=1)
    email: str = Field(pattern=r".+@.+\..+")
    position: str = Field(min_length=1)
    cgpa: float | None = Field(default=None, ge=0, le=5)
    why_running: str | None = None

    @field_validator("matric", "email")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("full_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("fullName must not be blank")
        return value.strip()

class AspirantReview(CamelModel):
    notes: str | None = None

class AspirantOut(CamelModel):
    id: str
    matric: str
    full_name: str
    position: str
    cgpa: float | None = None
    why_running: str | None = None
    status: str
    review_notes: str | None = None
    reviewed_at: datetime | None = None
    candidate_id: str | None = None
    created_at: datetime
