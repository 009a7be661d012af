"""Pagination helpers for list endpoints (audit log, reconciliation queue)."""


from fastapi import Query
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

# Columns a client may sort by; anything else falls back to created_at
_SORTABLE = {"created_at", "event_type", "status", "updated_at"}


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=50&sort=created_at&order=desc`."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=50, ge=1, le=500, description="Items per page"),
        sort: str = Query(default="created_at", description="Sort field"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort if sort in _SORTABLE else "created_at"
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool = False

    model_config = {"populate_by_name": True, "alias_generator": to_camel}
