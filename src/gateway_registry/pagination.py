"""Page/limit arithmetic shared by the list endpoints."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Generic, Sequence, TypeVar

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

T = TypeVar("T")


@dataclass(frozen=True)
class PaginationParams:
    """Page and limit as requested by the caller."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT


@dataclass(frozen=True)
class StoreQuery:
    """Offset/limit window passed to a repository."""

    offset: int
    limit: int


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the metadata needed to walk the rest."""

    items: list[T]
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool


def _clamp(page: int, limit: int) -> tuple[int, int]:
    return max(1, page), min(max(1, limit), MAX_LIMIT)


def to_store_query(page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> StoreQuery:
    """Convert a requested page into the offset/limit window to fetch."""

    page, limit = _clamp(page, limit)
    return StoreQuery(offset=(page - 1) * limit, limit=limit)


def to_response(items: Sequence[T], total: int, page: int, limit: int) -> Page[T]:
    """Wrap one fetched page with its page-count metadata."""

    page, limit = _clamp(page, limit)
    total_pages = math.ceil(total / limit) if total > 0 else 0
    return Page(
        items=list(items),
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1 and total_pages > 0,
    )
