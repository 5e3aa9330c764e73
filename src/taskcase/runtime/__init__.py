"""Runtime executors: retry, batch, pagination, plus the concurrency and
observability pieces they share.

The three executors never call each other; compose them at the call site.
"""

from .batch import BatchRun, BatchRunner, BatchRunResult, FailurePolicy, run_batches, run_batches_sync
from .concurrency import CancelToken, Settled, SettledStatus, gather_settled, run_sync
from .pagination import PageResponse, PaginatedAggregator, PaginationResult, collect_pages, collect_pages_sync
from .retry import (
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

__all__ = [
    # Retry
    "RetryExecutor", "RetryConfig", "RetryOutcome", "RetrySuccess", "RetryFailure", "BackoffKind",
    "execute_with_retry", "execute_with_retry_sync", "with_retry", "retryable",
    # Batch
    "BatchRunner", "BatchRun", "BatchRunResult", "FailurePolicy", "run_batches", "run_batches_sync",
    # Pagination
    "PaginatedAggregator", "PageResponse", "PaginationResult", "collect_pages", "collect_pages_sync",
    # Concurrency
    "CancelToken", "Settled", "SettledStatus", "gather_settled", "run_sync",
]
