"""Settle-all join for concurrent operations.

Provides the barrier the batch runner waits on: every awaitable runs to
completion and each outcome is reported individually, in input order.

Example:
    >>> results = await gather_settled(
    ...     risky_operation_1(),
    ...     risky_operation_2(),
    ... )
    >>> for r in results:
    ...     if r.is_fulfilled:
    ...         print(f"Success: {r.value}")
    ...     else:
    ...         print(f"Failed: {r.error}")
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class SettledStatus(StrEnum):
    """Status of a settled operation."""
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass(slots=True, frozen=True)
class Settled(Generic[T]):
    """Result of a settled operation (success or failure).

    Similar to JavaScript's Promise.allSettled() results.

    Attributes:
        status: 'fulfilled' or 'rejected'
        value: Result value if fulfilled
        error: Exception if rejected
        elapsed: Seconds the operation took to settle
    """

    status: SettledStatus
    value: T | None = None
    error: Exception | None = None
    elapsed: float = 0.0

    @property
    def is_fulfilled(self) -> bool:
        return self.status == SettledStatus.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self.status == SettledStatus.REJECTED

    def unwrap(self) -> T:
        """Get value or raise stored error."""
        if self.is_rejected:
            raise self.error or RuntimeError("Rejected with no error")
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        """Get value or return default."""
        return self.value if self.is_fulfilled else default  # type: ignore[return-value]


def fulfilled(value: T, elapsed: float = 0.0) -> Settled[T]:
    """Create a fulfilled Settled."""
    return Settled(SettledStatus.FULFILLED, value=value, elapsed=elapsed)


def rejected(error: Exception, elapsed: float = 0.0) -> Settled[T]:
    """Create a rejected Settled."""
    return Settled(SettledStatus.REJECTED, error=error, elapsed=elapsed)


async def settle(aw: Awaitable[T]) -> Settled[T]:
    """Await one operation and capture its outcome and duration.

    Only Exception subclasses are captured; CancelledError propagates.
    """
    t0 = time.perf_counter()
    try:
        value = await aw
    except Exception as e:
        return rejected(e, time.perf_counter() - t0)
    return fulfilled(value, time.perf_counter() - t0)


async def gather_settled(*aws: Awaitable[T]) -> list[Settled[T]]:
    """Wait for every awaitable, reporting each outcome in input order.

    Like Promise.allSettled(): one failure never cuts the others short. A child
    that raises CancelledError or another BaseException does not interrupt its
    siblings either: all of them finish, then the first such error is re-raised.
    If the gathering task itself is cancelled, pending children are cancelled too.
    """
    tasks = [asyncio.ensure_future(settle(a)) for a in aws]
    try:
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)
    except asyncio.CancelledError:
        for t in tasks:
            t.cancel()
        raise
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    return list(outcomes)
