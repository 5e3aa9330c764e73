"""Sync/async interoperability.

Provides run_sync for calling the async executors from synchronous code:
    - No running loop: asyncio.run()
    - Inside a running loop (Jupyter, FastAPI, nested calls): a helper thread
      with its own event loop

Example:
    >>> outcome = run_sync(executor.execute(work, config))
"""

from __future__ import annotations

import asyncio
import threading
from typing import Coroutine, TypeVar

T = TypeVar("T")


def run_sync(
    coro: Coroutine[object, object, T],
    *,
    loop: asyncio.AbstractEventLoop | None = None,
) -> T:
    """Run async coroutine from synchronous context.

    Args:
        coro: Coroutine to execute
        loop: Optional (not running) event loop to use

    Returns:
        Coroutine result
    """
    if loop is not None:
        return loop.run_until_complete(coro)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    # Inside a running loop - blocking here would deadlock it
    return _run_in_thread_loop(coro)


def _run_in_thread_loop(coro: Coroutine[object, object, T]) -> T:
    """Run coroutine in a new thread with its own event loop."""
    result: T | None = None
    error: BaseException | None = None
    done = threading.Event()

    def runner() -> None:
        nonlocal result, error
        try:
            result = asyncio.run(coro)
        except BaseException as e:
            error = e
        finally:
            done.set()

    thread = threading.Thread(target=runner, name="taskcase-run-sync", daemon=True)
    thread.start()
    done.wait()

    if error is not None:
        raise error
    return result  # type: ignore[return-value]
