"""Backoff strategies for retry attempts.

- ConstantBackoff: fixed delay between attempts ("none")
- LinearBackoff: base * attempt, giving the dependency more recovery time ("linear")

Attempt numbers are 1-based: the attempt that just failed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable


class BackoffKind(StrEnum):
    """Delay policy between attempts."""
    NONE = "none"
    LINEAR = "linear"


@runtime_checkable
class Backoff(Protocol):
    """Protocol for backoff delay calculation."""

    def delay(self, attempt: int) -> float:
        """Delay in seconds after `attempt` (1-based) failed."""
        ...


@dataclass(frozen=True, slots=True)
class ConstantBackoff:
    """Fixed delay between retries.

    Attributes:
        base: Delay in seconds
    """

    base: float = 1.0

    def delay(self, attempt: int) -> float:
        return self.base


@dataclass(frozen=True, slots=True)
class LinearBackoff:
    """Linear backoff without cap.

    Delay = base * attempt (attempt 1 fails -> base, attempt 2 fails -> 2 * base).
    Non-decreasing in attempt.

    Attributes:
        base: Delay unit in seconds
    """

    base: float = 1.0

    def delay(self, attempt: int) -> float:
        return self.base * attempt


def backoff_for(kind: BackoffKind | str, base: float) -> Backoff:
    """Build the backoff strategy named by `kind`."""
    match BackoffKind(kind):
        case BackoffKind.LINEAR: return LinearBackoff(base)
        case _: return ConstantBackoff(base)
