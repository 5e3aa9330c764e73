"""Concurrency primitives used by the executors.

Key Components:
    - CancelToken / checkpoint: Cooperative cancellation at boundaries
    - gather_settled: Join that waits for all and reports each outcome
    - run_sync: Call async code from synchronous code

Pure asyncio; no threads except the run_sync fallback.
"""

from __future__ import annotations

from .cancel import CancelToken, checkpoint
from .interop import run_sync
from .wait import Settled, SettledStatus, fulfilled, gather_settled, rejected, settle

__all__ = [
    "CancelToken",
    "checkpoint",
    "gather_settled",
    "settle",
    "Settled",
    "SettledStatus",
    "fulfilled",
    "rejected",
    "run_sync",
]
