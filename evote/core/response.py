"""Standardized JSON response envelope helpers."""


import math
from typing import Generic, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from evote.core.pagination import PageMeta

T = TypeVar("T")

_ENVELOPE_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class DataResponse(BaseModel, Generic[T]):
    """Single-item (or fixed list) envelope: `{ data: ... }`"""

    data: T

    model_config = _ENVELOPE_CONFIG


class ListResponse(BaseModel, Generic[T]):
    """Paginated list envelope: `{ data: [...], meta: {...} }`"""

    data: list[T]
    meta: PageMeta

    model_config = _ENVELOPE_CONFIG


def paginated(items: list, total: int, page: int, limit: int) -> dict:
    """Build a paginated response dict for use with ListResponse."""
    pages = math.ceil(total / limit) if limit else 1
    return {
        "data": items,
        "meta": PageMeta(total=total, page=page, limit=limit, pages=pages, has_next=page < pages),
    }
