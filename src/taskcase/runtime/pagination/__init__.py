"""Safety-capped pagination aggregation.

Example:
    >>> from taskcase.runtime.pagination import PageResponse, PaginatedAggregator
    >>>
    >>> async def fetch(page: int) -> PageResponse[str]:
    ...     return PageResponse(catalog[(page - 1) * 3:page * 3], page * 3 < len(catalog))
    >>>
    >>> result = await PaginatedAggregator().collect_all(fetch, max_pages=100)
    >>> result.pages_fetched, result.truncated
    (3, False)
"""

from .aggregator import (
    DEFAULT_MAX_PAGES,
    PageResponse,
    PaginatedAggregator,
    PaginationResult,
    collect_pages,
    collect_pages_sync,
)

__all__ = [
    "PaginatedAggregator",
    "PageResponse",
    "PaginationResult",
    "DEFAULT_MAX_PAGES",
    "collect_pages",
    "collect_pages_sync",
]
