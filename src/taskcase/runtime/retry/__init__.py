"""Bounded retry for async units of work.

Example:
    >>> from taskcase.runtime.retry import RetryConfig, RetryExecutor
    >>>
    >>> config = RetryConfig(max_attempts=3, base_delay=0.5, backoff="linear", label="checkout")
    >>> outcome = await RetryExecutor().execute(submit_order, config)
    >>> outcome.attempts
    2
    >>>
    >>> # Exception-based control flow
    >>> value = await RetryExecutor().execute_or_raise(submit_order, config)
"""

from .backoff import Backoff, BackoffKind, ConstantBackoff, LinearBackoff, backoff_for
from .executor import (
    RetryExecutor,
    execute_with_retry,
    execute_with_retry_sync,
    retryable,
    with_retry,
)
from .policy import RetryConfig, RetryFailure, RetryOutcome, RetrySuccess, resolve_config

__all__ = [
    # Backoff strategies
    "Backoff",
    "BackoffKind",
    "ConstantBackoff",
    "LinearBackoff",
    "backoff_for",
    # Configuration & outcomes
    "RetryConfig",
    "RetryOutcome",
    "RetrySuccess",
    "RetryFailure",
    "resolve_config",
    # Execution
    "RetryExecutor",
    "execute_with_retry",
    "execute_with_retry_sync",
    "with_retry",
    "retryable",
]
