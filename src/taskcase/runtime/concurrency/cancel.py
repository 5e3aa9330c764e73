"""Cooperative cancellation.

A CancelToken is a plain flag checked by the executors between attempts,
slices and pages. Setting it never interrupts a unit of work that is already
running; the executor stops at its next boundary and raises
OperationCancelled carrying whatever had completed.

Example:
    >>> token = CancelToken()
    >>> task = asyncio.create_task(runner.run(items, 3, "collect-all", cancel=token))
    >>> token.cancel("shutting down")
    >>> try:
    ...     await task
    ... except OperationCancelled as e:
    ...     partial = e.completed
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from taskcase.foundation.errors import OperationCancelled


@dataclass(slots=True)
class CancelToken:
    """Cancellation flag shared between a caller and one or more executor calls."""

    _cancelled: bool = field(default=False, repr=False)
    _reason: str | None = field(default=None, repr=False)

    @property
    def cancelled(self) -> bool:
        """Whether cancellation was requested."""
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation at the next boundary. First reason wins."""
        if not self._cancelled:
            self._cancelled, self._reason = True, reason

    def raise_if_cancelled(self, stage: str, completed: object = None) -> None:
        if self._cancelled:
            raise OperationCancelled(stage, completed, self._reason)


async def checkpoint(token: CancelToken | None = None, stage: str = "", completed: object = None) -> None:
    """Yield to the event loop, then honour a pending cancellation request."""
    await asyncio.sleep(0)
    if token is not None:
        token.raise_if_cancelled(stage, completed)
