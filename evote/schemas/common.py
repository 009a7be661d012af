"""Shared Pydantic bases: camelCase aliases, the error envelope, health."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """All API schemas inherit from this to auto-generate camelCase aliases.

    ``from_attributes`` lets ORM rows and service dataclasses validate directly.
    """

    model_config = {
        "populate_by_name": True,
        "alias_generator": to_camel,
        "from_attributes": True,
    }


class ErrorBody(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Shape of every non-2xx body: ``{"error": {"code", "message"}}``."""
    error: ErrorBody


class HealthResponse(CamelModel):
    """Health-check response returned by /health."""
    status: str = "ok"
    app: str
    env: str
    # From the timeline monitor's last evaluation; None before the first one
    voting_active: bool | None = None
    results_published: bool | None = None
