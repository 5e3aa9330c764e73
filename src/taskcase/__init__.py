"""Taskcase - async task orchestration primitives.

Three independent executors for caller-supplied async units of work:

- RetryExecutor: bounded retry with fixed or linear backoff
- BatchRunner: fixed-size slices, concurrent within a slice, sequential across
  slices, fail-fast or collect-all
- PaginatedAggregator: sequential page collection with a hard page cap

Quick Start:
    >>> from taskcase import RetryConfig, RetryExecutor
    >>>
    >>> outcome = await RetryExecutor().execute(
    ...     submit_order, RetryConfig(max_attempts=3, base_delay=0.5, backoff="linear"),
    ... )
    >>> outcome.is_ok, outcome.attempts
    (True, 2)

Composition:
    >>> from taskcase import BatchRunner, collect_pages, with_retry
    >>>
    >>> catalog = await collect_pages(fetch_products, max_pages=100)
    >>> checks = [with_retry(partial(verify, p), max_attempts=3) for p in catalog.items]
    >>> run = await BatchRunner().run(checks, 5, "collect-all")
    >>> [r.index for r in run.failures]

Configuration (environment):
    TASKCASE_RETRY_MAX_ATTEMPTS, TASKCASE_RETRY_BASE_DELAY, TASKCASE_RETRY_BACKOFF
    TASKCASE_BATCH_BATCH_SIZE, TASKCASE_BATCH_FAILURE_POLICY
    TASKCASE_PAGINATION_MAX_PAGES
    TASKCASE_LOG_LEVEL, TASKCASE_LOG_FORMAT
"""

from taskcase.foundation.config import TaskcaseSettings, clear_settings_cache, get_settings
from taskcase.foundation.errors import (
    ConfigurationError,
    ErrorCode,
    OperationCancelled,
    RetryExhaustedError,
    TaskcaseError,
)
from taskcase.runtime.batch import (
    BatchRun,
    BatchRunner,
    BatchRunResult,
    FailurePolicy,
    run_batches,
    run_batches_sync,
)
from taskcase.runtime.concurrency import CancelToken, SettledStatus, run_sync
from taskcase.runtime.observability import configure_logging
from taskcase.runtime.pagination import (
    DEFAULT_MAX_PAGES,
    PageResponse,
    PaginatedAggregator,
    PaginationResult,
    collect_pages,
    collect_pages_sync,
)
from taskcase.runtime.retry import (
    BackoffKind,
    RetryConfig,
    RetryExecutor,
    RetryFailure,
    RetryOutcome,
    RetrySuccess,
    execute_with_retry,
    execute_with_retry_sync,
    retryable,
    with_retry,
)

__version__ = "0.1.0"

__all__ = [
    # Retry
    "RetryExecutor",
    "RetryConfig",
    "RetryOutcome",
    "RetrySuccess",
    "RetryFailure",
    "BackoffKind",
    "execute_with_retry",
    "execute_with_retry_sync",
    "with_retry",
    "retryable",
    # Batch
    "BatchRunner",
    "BatchRun",
    "BatchRunResult",
    "FailurePolicy",
    "SettledStatus",
    "run_batches",
    "run_batches_sync",
    # Pagination
    "PaginatedAggregator",
    "PageResponse",
    "PaginationResult",
    "DEFAULT_MAX_PAGES",
    "collect_pages",
    "collect_pages_sync",
    # Cancellation & interop
    "CancelToken",
    "run_sync",
    # Errors
    "ErrorCode",
    "TaskcaseError",
    "ConfigurationError",
    "RetryExhaustedError",
    "OperationCancelled",
    # Configuration & logging
    "TaskcaseSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
]
