"""Sliced batch execution for async units of work.

Items are partitioned into consecutive fixed-size slices:
- Within a slice every unit of work runs concurrently and the slice waits
  for all of them to settle
- Slices run strictly one after another
- "collect-all" always runs every slice; "fail-fast" stops after the first
  slice that contains a rejection

Results keep input order no matter which item finishes first.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Generic, TypeVar, overload

from taskcase.foundation.config import get_settings
from taskcase.foundation.errors import ConfigurationError, require_positive
from taskcase.runtime.concurrency import CancelToken, Settled, SettledStatus, checkpoint, gather_settled, run_sync
from taskcase.runtime.observability import get_logger

R = TypeVar("R")
T = TypeVar("T")

logger = get_logger("batch")


class FailurePolicy(StrEnum):
    """What to do after a slice completes with failures."""
    FAIL_FAST = "fail-fast"
    COLLECT_ALL = "collect-all"


def _policy(value: FailurePolicy | str) -> FailurePolicy:
    try:
        return FailurePolicy(value)
    except ValueError:
        raise ConfigurationError("failure_policy", value, "must be 'fail-fast' or 'collect-all'") from None


def chunked(items: Sequence[T], size: int) -> Iterator[tuple[int, Sequence[T]]]:
    """Yield (start_index, slice) pairs of at most `size` consecutive items."""
    for start in range(0, len(items), size):
        yield start, items[start:start + size]


@dataclass(frozen=True, slots=True)
class BatchRunResult(Generic[R]):
    """Outcome of one unit of work; `index` is its position in the input."""
    index: int
    outcome: SettledStatus
    value: R | None = None
    error: Exception | None = None
    elapsed_ms: float = 0.0

    @property
    def is_ok(self) -> bool: return self.outcome == SettledStatus.FULFILLED

    @property
    def is_err(self) -> bool: return self.outcome == SettledStatus.REJECTED

    @classmethod
    def from_settled(cls, index: int, settled: Settled[R]) -> BatchRunResult[R]:
        return cls(index, settled.status, settled.value, settled.error, settled.elapsed * 1000)


@dataclass(slots=True)
class BatchRun(Generic[R]):
    """Ordered results of a batch run plus run metadata.

    Under fail-fast the result list may be shorter than the input; compare
    `len(run)` against `total` (or read `truncated`) to detect an early stop.
    """
    results: list[BatchRunResult[R]]
    total: int
    batch_size: int
    policy: FailurePolicy
    slices_started: int = 0
    total_ms: float = 0.0

    @property
    def truncated(self) -> bool: return len(self.results) < self.total

    @property
    def successes(self) -> list[BatchRunResult[R]]: return [r for r in self.results if r.is_ok]

    @property
    def failures(self) -> list[BatchRunResult[R]]: return [r for r in self.results if r.is_err]

    @property
    def all_ok(self) -> bool: return not self.truncated and all(r.is_ok for r in self.results)

    @property
    def success_rate(self) -> float: return len(self.successes) / len(self.results) if self.results else 0.0

    def values(self) -> list[R]: return [r.value for r in self.results if r.is_ok]  # type: ignore[misc]

    def errors(self) -> list[Exception]: return [e for r in self.results if r.is_err and (e := r.error)]

    def __len__(self) -> int: return len(self.results)

    def __iter__(self) -> Iterator[BatchRunResult[R]]: return iter(self.results)

    @overload
    def __getitem__(self, i: int) -> BatchRunResult[R]: ...
    @overload
    def __getitem__(self, i: slice) -> list[BatchRunResult[R]]: ...
    def __getitem__(self, i: int | slice) -> BatchRunResult[R] | list[BatchRunResult[R]]:
        return self.results[i]


OnSliceComplete = Callable[[int, list[BatchRunResult[object]]], None]


@dataclass(slots=True)
class BatchRunner:
    """Runs units of work in ordered, concurrently-executed slices.

    Attributes:
        on_slice_complete: Optional callback (slice_index, slice_results)

    Example:
        >>> runner = BatchRunner()
        >>> run = await runner.run([partial(verify, pid) for pid in ids], 3, "collect-all")
        >>> [r.index for r in run.failures]
        [4]
    """

    on_slice_complete: OnSliceComplete | None = field(default=None, repr=False)

    async def run(
        self,
        items: Sequence[Callable[[], Awaitable[R]]],
        batch_size: int,
        failure_policy: FailurePolicy | str = FailurePolicy.COLLECT_ALL,
        *,
        cancel: CancelToken | None = None,
    ) -> BatchRun[R]:
        """Run `items` in slices of `batch_size`.

        Raises:
            ConfigurationError: batch_size < 1 or unknown policy, before any item runs
            OperationCancelled: `cancel` was set; `completed` holds finished results
            CancelledError: a unit of work raised it; the rest of its slice finishes first
        """
        size, policy = require_positive("batch_size", batch_size), _policy(failure_policy)
        items = list(items)
        run: BatchRun[R] = BatchRun([], len(items), size, policy)
        if not items:
            return run

        start = time.perf_counter()
        for slice_no, (offset, group) in enumerate(chunked(items, size)):
            await checkpoint(cancel, "batch", list(run.results))

            logger.debug(
                "slice %d: items %d-%d", slice_no, offset, offset + len(group) - 1,
                extra={"slice": slice_no, "offset": offset, "size": len(group)},
            )
            run.slices_started += 1
            settled = await gather_settled(*(_invoke(work) for work in group))
            chunk = [BatchRunResult.from_settled(offset + i, s) for i, s in enumerate(settled)]
            run.results.extend(chunk)

            failed = sum(1 for r in chunk if r.is_err)
            logger.debug(
                "slice %d complete: %d ok, %d failed", slice_no, len(chunk) - failed, failed,
                extra={"slice": slice_no, "ok": len(chunk) - failed, "failed": failed},
            )
            if self.on_slice_complete:
                self.on_slice_complete(slice_no, chunk)  # type: ignore[arg-type]

            if failed and policy is FailurePolicy.FAIL_FAST and offset + size < len(items):
                logger.warning(
                    "fail-fast: stopping after slice %d, %d of %d items not started",
                    slice_no, len(items) - len(run.results), len(items),
                    extra={"slice": slice_no, "skipped": len(items) - len(run.results)},
                )
                break

        run.total_ms = (time.perf_counter() - start) * 1000
        return run


async def _invoke(work: Callable[[], Awaitable[R]]) -> R:
    # Calling inside the coroutine captures errors raised before the first await
    return await work()


_DEFAULT_RUNNER = BatchRunner()


async def run_batches(
    items: Sequence[Callable[[], Awaitable[R]]],
    batch_size: int | None = None,
    failure_policy: FailurePolicy | str | None = None,
    *,
    cancel: CancelToken | None = None,
) -> BatchRun[R]:
    """Run `items` with BatchRunner; omitted size/policy come from BatchSettings.

    Example:
        >>> run = await run_batches([partial(check_page, url) for url in urls], batch_size=3)
        >>> print(f"Success rate: {run.success_rate:.0%}")
    """
    settings = get_settings().batch
    return await _DEFAULT_RUNNER.run(
        items,
        settings.batch_size if batch_size is None else batch_size,
        settings.failure_policy if failure_policy is None else failure_policy,
        cancel=cancel,
    )


def run_batches_sync(
    items: Sequence[Callable[[], Awaitable[R]]],
    batch_size: int | None = None,
    failure_policy: FailurePolicy | str | None = None,
) -> BatchRun[R]:
    """Synchronous batch execution. Wraps async run_batches for sync contexts."""
    return run_sync(run_batches(items, batch_size, failure_policy))
