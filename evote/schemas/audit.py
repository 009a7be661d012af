"""Audit log and reconciliation response schemas."""


from datetime import datetime
from typing import Any

from pydantic import Field

from evote.schemas.common import CamelModel

class AuditEventOut(CamelModel):
    id: str
    event_type: str
    actor_id: str | None = None
    description: str | None = None
    metadata: Any = Field(default=None, validation_alias="event_metadata", serialization_alias="metadata")
    created_at: datetime

class ReconciliationItemOut(CamelModel):
    id: str
    voter_id: str
    reason: str
    detail: str | None = None
    status: str
    created_at: datetime
    resolved_at: datetime | None = None

class TallyCorrectionOut(CamelModel):
    candidate_id: str
    cached: int
    actual: int

class SweepReportOut(CamelModel):
    queued: list[str]
    resolved: list[str]
