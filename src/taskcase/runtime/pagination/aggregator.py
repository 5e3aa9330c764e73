"""Sequential pagination with a hard safety cap.

Pages are fetched one at a time starting from page 1, because whether page
N+1 exists is only known from page N's `has_more` flag. Aggregation stops
when a page reports no more data, or when `max_pages` pages have been fetched
while the source still claims more (the result is then marked truncated).

A failing fetch propagates unchanged and the items gathered so far are
dropped. Wrap `fetch_page` with `retryable()` for retry-on-failure.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

from taskcase.foundation.config import get_settings
from taskcase.foundation.errors import OperationCancelled, require_positive
from taskcase.runtime.concurrency import CancelToken, checkpoint, run_sync
from taskcase.runtime.observability import get_logger

T = TypeVar("T")

DEFAULT_MAX_PAGES = 100

logger = get_logger("pagination")


@dataclass(frozen=True, slots=True)
class PageResponse(Generic[T]):
    """One page from the source."""
    items: Sequence[T]
    has_more: bool

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> PageResponse[T]:
        """Accept `{"items": [...], "hasMore": bool}` (or `has_more`)."""
        try:
            items = data["items"]
            has_more = data["hasMore"] if "hasMore" in data else data["has_more"]
        except KeyError as e:
            raise TypeError(f"Page mapping is missing key {e}") from None
        if not isinstance(items, Sequence) or isinstance(items, (str, bytes)):
            raise TypeError(f"Page 'items' must be a sequence, got {type(items).__name__}")
        if not isinstance(has_more, bool):
            raise TypeError(f"Page 'hasMore' must be a bool, got {type(has_more).__name__}")
        return cls(items, has_more)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class PaginationResult(Generic[T]):
    """All items in page-arrival order.

    Attributes:
        items: Accumulated items
        pages_fetched: Number of fetch_page calls that completed
        truncated: True iff the cap was hit while the source still had more
    """
    items: list[T] = field(default_factory=list)
    pages_fetched: int = 0
    truncated: bool = False

    def __len__(self) -> int: return len(self.items)


FetchPage = Callable[[int], Awaitable[PageResponse[T] | Mapping[str, object]]]


def _as_page(raw: object, page_number: int) -> PageResponse[T]:
    if isinstance(raw, PageResponse):
        return raw
    if isinstance(raw, Mapping):
        return PageResponse.from_mapping(raw)
    raise TypeError(f"fetch_page({page_number}) returned {type(raw).__name__}, expected PageResponse or mapping")


class PaginatedAggregator:
    """Collects every item from a paged source, strictly sequentially.

    Example:
        >>> async def fetch(page: int) -> PageResponse[str]:
        ...     resp = await client.get("/products", params={"page": page})
        ...     return PageResponse(resp["items"], resp["hasMore"])
        >>>
        >>> result = await PaginatedAggregator().collect_all(fetch, max_pages=100)
        >>> if result.truncated:
        ...     log.warning("source never stopped")
    """

    __slots__ = ()

    async def iter_pages(
        self,
        fetch_page: FetchPage[T],
        max_pages: int,
        *,
        cancel: CancelToken | None = None,
    ) -> AsyncIterator[PageResponse[T]]:
        """Yield pages in order under the cap, without accumulating them.

        Stops after a page with has_more=False or after `max_pages` pages. The
        last page yielded still reports has_more=True when the cap cut it short.

        Raises:
            ConfigurationError: max_pages < 1, before fetch_page is called
            OperationCancelled: `cancel` was set before the next page
            Exception: anything fetch_page raises, unmodified
        """
        require_positive("max_pages", max_pages)
        page_number = 1
        while True:
            await checkpoint(cancel, "pagination")
            page = _as_page(await fetch_page(page_number), page_number)
            logger.debug(
                "page %d: %d items (has_more=%s)", page_number, len(page.items), page.has_more,
                extra={"page": page_number, "count": len(page.items), "has_more": page.has_more},
            )
            yield page
            if not page.has_more:
                return
            if page_number >= max_pages:
                logger.warning(
                    "pagination cap reached after %d pages with more data available", page_number,
                    extra={"max_pages": max_pages},
                )
                return
            page_number += 1

    async def collect_all(
        self,
        fetch_page: FetchPage[T],
        max_pages: int,
        *,
        cancel: CancelToken | None = None,
    ) -> PaginationResult[T]:
        """Fetch pages 1, 2, ... until exhaustion or `max_pages`.

        Raises:
            ConfigurationError: max_pages < 1, before fetch_page is called
            OperationCancelled: `cancel` was set; `completed` holds items so far
            Exception: anything fetch_page raises, unmodified
        """
        items: list[T] = []
        pages_fetched, truncated = 0, False
        try:
            async for page in self.iter_pages(fetch_page, max_pages, cancel=cancel):
                pages_fetched += 1
                items.extend(page.items)
                truncated = page.has_more
        except OperationCancelled as e:
            raise OperationCancelled(e.stage, list(items), e.reason) from None
        return PaginationResult(items, pages_fetched, truncated)


_DEFAULT_AGGREGATOR = PaginatedAggregator()


async def collect_pages(
    fetch_page: FetchPage[T],
    max_pages: int | None = None,
    *,
    cancel: CancelToken | None = None,
) -> PaginationResult[T]:
    """Collect all pages; omitted `max_pages` comes from PaginationSettings (default 100)."""
    cap = get_settings().pagination.max_pages if max_pages is None else max_pages
    return await _DEFAULT_AGGREGATOR.collect_all(fetch_page, cap, cancel=cancel)


def collect_pages_sync(fetch_page: FetchPage[T], max_pages: int | None = None) -> PaginationResult[T]:
    """Synchronous wrapper around collect_pages."""
    return run_sync(collect_pages(fetch_page, max_pages))
