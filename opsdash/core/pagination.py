"""Adapters for the variably shaped list payloads the backend returns.

Known shapes of a paginated list:

- ``nested``: ``{"data": [...], "meta": {"pagination": {...}}}``
- ``flat``:   ``{"data": [...], "page": 2, "totalPages": 5, "totalCount": 47}``
- ``bare``:   ``[...]`` or ``{"data": [...]}`` with no pagination at all

Anything else degrades to an empty first page rather than raising.
"""

from __future__ import annotations

import math
from typing import Any, Literal

from opsdash.core.models import PageInfo

Shape = Literal["nested", "flat", "bare"]

# Properties tried, in order, when unwrapping a list out of an envelope.
_LIST_KEYS = ("data", "items", "result", "sites")


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def detect_shape(payload: Any) -> Shape:
    if isinstance(payload, dict):
        meta = payload.get("meta")
        if isinstance(meta, dict) and isinstance(meta.get("pagination"), dict):
            return "nested"
        if "totalPages" in payload or "totalCount" in payload:
            return "flat"
    return "bare"


def unwrap_list(payload: Any) -> list:
    """Return the list of items carried by ``payload``, or ``[]``."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        return []
    for key in _LIST_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    for value in payload.values():
        if isinstance(value, list):
            return value
    return []


def parse_page(payload: Any, requested_page: int = 1, page_size: int = 10) -> tuple[list, PageInfo]:
    """Split a list payload into its rows and a normalized PageInfo."""
    rows = unwrap_list(payload)
    shape = detect_shape(payload)

    if shape == "nested":
        raw = payload["meta"]["pagination"]
    elif shape == "flat":
        raw = payload
    else:
        return rows, PageInfo(
            current_page=1,
            page_size=max(page_size, len(rows)),
            total_count=len(rows),
            total_pages=1,
        )

    size = _as_int(raw.get("pageSize"), page_size) or page_size
    total_count = _as_int(raw.get("totalCount"), len(rows))
    default_pages = max(1, math.ceil(total_count / size)) if size else 1
    total_pages = _as_int(raw.get("totalPages"), default_pages)
    current = _as_int(raw.get("page"), requested_page)

    return rows, PageInfo(
        current_page=current,
        page_size=size,
        total_count=total_count,
        total_pages=total_pages,
        has_next=bool(raw.get("hasNext", current < total_pages)),
        has_previous=bool(raw.get("hasPrevious", current > 1)),
    )
