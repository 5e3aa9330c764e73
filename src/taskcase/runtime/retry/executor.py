"""Bounded retry of a single async unit of work.

Two variants share one attempt loop:
- execute: failures are captured into RetryFailure, never raised
- execute_or_raise: raises RetryExhaustedError wrapping the last error

Both report the same attempt count and the same last error.

Example:
    >>> executor = RetryExecutor()
    >>> outcome = await executor.execute(fetch_profile, RetryConfig(max_attempts=3, backoff="linear"))
    >>> if outcome.is_ok:
    ...     print(outcome.value, "after", outcome.attempts, "attempts")
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable
from typing import Callable, ParamSpec, TypeVar

from taskcase.foundation.errors import require_positive
from taskcase.runtime.concurrency import CancelToken, run_sync
from taskcase.runtime.observability import get_logger

from .policy import RetryConfig, RetryFailure, RetryOutcome, RetrySuccess, resolve_config

R = TypeVar("R")
P = ParamSpec("P")

Sleep = Callable[[float], Awaitable[object]]

logger = get_logger("retry")


class RetryExecutor:
    """Runs one unit of work, retrying on failure up to `max_attempts`.

    Only Exception subclasses count as failures; asyncio.CancelledError and
    other BaseExceptions propagate immediately. No timeout is applied to
    `work`: wrap it in asyncio.wait_for before passing it in if needed.

    Args:
        sleep: Awaitable delay function, asyncio.sleep by default. Injectable
            so callers can observe or skip backoff waits.
    """

    __slots__ = ("_sleep",)

    def __init__(self, sleep: Sleep = asyncio.sleep) -> None:
        self._sleep = sleep

    async def execute(
        self,
        work: Callable[[], Awaitable[R]],
        config: RetryConfig,
        *,
        cancel: CancelToken | None = None,
    ) -> RetryOutcome[R]:
        """Run `work` until it succeeds or attempts are exhausted."""
        require_positive("max_attempts", config.max_attempts)
        attempt = 1
        last: RetryFailure | None = None

        while True:
            if cancel is not None:
                cancel.raise_if_cancelled("retry", last)
            try:
                value = await work()
            except Exception as exc:
                last = RetryFailure(exc, attempt, config.label)
                if attempt >= config.max_attempts:
                    logger.warning(
                        "[%s] gave up after %d/%d attempts: %s", config.label, attempt, config.max_attempts, exc,
                        extra={"label": config.label, "attempt": attempt, "max_attempts": config.max_attempts},
                    )
                    return last

                delay = config.get_delay(attempt)
                logger.info(
                    "[%s] attempt %d/%d failed, retrying in %.2fs: %s",
                    config.label, attempt, config.max_attempts, delay, exc,
                    extra={"label": config.label, "attempt": attempt, "max_attempts": config.max_attempts, "delay": delay},
                )
                if config.on_retry:
                    config.on_retry(attempt, exc, delay)
                await self._sleep(delay)
                attempt += 1
            else:
                if attempt > 1:
                    logger.debug(
                        "[%s] succeeded on attempt %d/%d", config.label, attempt, config.max_attempts,
                        extra={"label": config.label, "attempt": attempt, "max_attempts": config.max_attempts},
                    )
                return RetrySuccess(value, attempt)

    async def execute_or_raise(
        self,
        work: Callable[[], Awaitable[R]],
        config: RetryConfig,
        *,
        cancel: CancelToken | None = None,
    ) -> R:
        """Run `work` with retries, raising RetryExhaustedError if every attempt fails."""
        outcome = await self.execute(work, config, cancel=cancel)
        if isinstance(outcome, RetryFailure):
            raise outcome.to_exception() from outcome.last_error
        return outcome.value


_DEFAULT_EXECUTOR = RetryExecutor()


async def execute_with_retry(
    work: Callable[[], Awaitable[R]],
    config: RetryConfig | None = None,
    *,
    cancel: CancelToken | None = None,
    **overrides: object,
) -> RetryOutcome[R]:
    """Execute `work` with retries.

    `config=None` builds the config from RetrySettings; keyword overrides such
    as `max_attempts=5` are applied on top. Invalid values raise
    ConfigurationError before `work` is invoked.
    """
    return await _DEFAULT_EXECUTOR.execute(work, resolve_config(config, **overrides), cancel=cancel)


def execute_with_retry_sync(
    work: Callable[[], Awaitable[R]],
    config: RetryConfig | None = None,
    **overrides: object,
) -> RetryOutcome[R]:
    """Synchronous wrapper around execute_with_retry."""
    resolved = resolve_config(config, **overrides)
    return run_sync(_DEFAULT_EXECUTOR.execute(work, resolved))


def with_retry(
    work: Callable[[], Awaitable[R]],
    config: RetryConfig | None = None,
    *,
    executor: RetryExecutor | None = None,
    **overrides: object,
) -> Callable[[], Awaitable[R]]:
    """Wrap a unit of work so that calling it runs the throwing retry variant.

    The config is resolved immediately, so a bad config fails here rather
    than inside a batch. Typical use is handing wrapped items to BatchRunner:

        >>> items = [with_retry(partial(fetch, i), max_attempts=3) for i in ids]
        >>> results = await BatchRunner().run(items, 5, "collect-all")
    """
    resolved, ex = resolve_config(config, **overrides), executor or _DEFAULT_EXECUTOR

    async def retried() -> R:
        return await ex.execute_or_raise(work, resolved)

    return retried


def retryable(
    config: RetryConfig | None = None,
    **overrides: object,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator applying execute_or_raise to every call of an async function.

    Example:
        >>> @retryable(max_attempts=3, base_delay=0.5, backoff="linear")
        ... async def fetch_page(n: int) -> PageResponse[str]:
        ...     ...
    """
    resolved = resolve_config(config, **overrides)

    def decorator(fn: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        cfg = resolved if "label" in overrides or config is not None else resolve_config(resolved, label=fn.__name__)

        @functools.wraps(fn)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            return await _DEFAULT_EXECUTOR.execute_or_raise(lambda: fn(*args, **kwargs), cfg)

        return wrapper

    return decorator
