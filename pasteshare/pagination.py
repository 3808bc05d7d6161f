"""
PasteShare — Pagination Arithmetic
==================================

What:  Page counting and the page-number window used for navigation links.
Who:   PastePage.page_count(), BrowseQuery.nearby() and the Paginator.
"""

from typing import List

from pasteshare.exceptions import InvariantViolationError


def page_count(total: int, page_size: int) -> int:
    """
    Number of pages needed to show `total` items, i.e. ceil(total / page_size).

    Raises:
        InvariantViolationError: page_size is zero or negative
    """
    if page_size <= 0:
        raise InvariantViolationError(
            message=f"page size must be positive, got {page_size}",
            context={"page_size": page_size, "total": total},
        )
    return -(-total // page_size)


def page_window(page: int, window: int, max_page: int) -> List[int]:
    """
    Contiguous run of page numbers around `page`, clamped to [1, max_page].

    The run is 2 * window + 1 pages wide. Near either boundary it is shifted
    rather than truncated, so it only gets shorter when max_page itself is
    smaller than the width.

    Examples:
        page_window(1, 2, 10)  → [1, 2, 3, 4, 5]
        page_window(5, 2, 10)  → [3, 4, 5, 6, 7]
        page_window(10, 2, 10) → [6, 7, 8, 9, 10]
        page_window(2, 2, 3)   → [1, 2, 3]
    """
    width = 2 * window + 1
    if width >= max_page:
        return list(range(1, max_page + 1))

    low = page - window
    low_extra = 0
    if low < 1:
        low_extra = 1 - low
        low = 1

    high = page + window + low_extra
    if high > max_page:
        low -= high - max_page
        high = max_page

    return list(range(low, high + 1))
