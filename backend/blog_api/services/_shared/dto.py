"""Pagination DTOs shared by listing use-cases."""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PaginationIn:
    """
    Requested page of a listing.

    :param page: 1-based page number.
    :param limit: Page size.
    :param sort: Sort tokens like ``["-created_at", "title"]``.
    """

    page: int = 1
    limit: int = 20
    sort: Iterable[str] | None = None

    def clamped(self, max_limit: int) -> tuple[int, int]:
        """Return ``(page, limit)`` forced into ``page >= 1`` and ``1 <= limit <= max_limit``."""
        return max(1, int(self.page)), min(max_limit, max(1, int(self.limit)))


@dataclass(frozen=True, slots=True)
class PageMeta:
    """Page metadata returned next to listed items."""

    page: int
    limit: int
    total: int
    has_prev: bool
    has_next: bool

    @classmethod
    def of(cls, *, page: int, limit: int, total: int) -> "PageMeta":
        return cls(
            page=page,
            limit=limit,
            total=total,
            has_prev=page > 1,
            has_next=page * limit < total,
        )
