"""Ordered, sliced batch execution.

Usage:
    from taskcase.runtime.batch import BatchRunner, FailurePolicy

    run = await BatchRunner().run(items, batch_size=3, failure_policy=FailurePolicy.FAIL_FAST)

    if run.truncated:
        print(f"stopped early: {len(run)}/{run.total} results")
    for r in run:
        if r.is_ok:
            print(f"[{r.index}] Success: {r.value}")
        else:
            print(f"[{r.index}] Failed: {r.error}")

Retrying individual items is the caller's choice:
    from taskcase.runtime.retry import with_retry

    items = [with_retry(partial(fetch, i), max_attempts=3) for i in ids]
"""

from .batch import (
    BatchRun,
    BatchRunner,
    BatchRunResult,
    FailurePolicy,
    chunked,
    run_batches,
    run_batches_sync,
)

__all__ = [
    "BatchRunner",
    "BatchRun",
    "BatchRunResult",
    "FailurePolicy",
    "chunked",
    "run_batches",
    "run_batches_sync",
]
