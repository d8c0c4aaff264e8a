"""Pagination and search over branch listings."""

from typing import List, Optional, Sequence, TypeVar

from git_branch_manager.models.branch import Page

T = TypeVar("T")


def paginate(items: Sequence[T], page: int, limit: int) -> Page[T]:
    """Slice items into a zero-indexed page.

    ``has_more`` is ``(page + 1) * limit < total``.
    """
    if page < 0 or limit < 0:
        raise ValueError(f"page and limit must not be negative, got page={page}, limit={limit}")

    total = len(items)
    start = page * limit
    return Page(
        items=list(items[start:start + limit]),
        page=page,
        limit=limit,
        total=total,
        has_more=(page + 1) * limit < total,
    )


def search(items: Sequence[T], query: Optional[str]) -> List[T]:
    """Case-insensitive substring match on ``name``. An empty query matches everything."""
    if not query or not query.strip():
        return list(items)
    needle = query.strip().lower()
    return [item for item in items if needle in item.name.lower()]
