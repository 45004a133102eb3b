"""Pagination — clamps page/limit and derives offsets for history queries.

Invariants:
    - page >= 1
    - 1 <= limit <= MAX_PAGE_SIZE
    - offset == (page - 1) * limit
    - total_pages == 0 only when total == 0
"""

import math
from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def clamp_page_window(page: int, limit: int) -> PageWindow:
    """Clamp raw query values into a valid window."""
    return PageWindow(
        page=max(1, page),
        limit=min(MAX_PAGE_SIZE, max(1, limit)),
    )


def count_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0
