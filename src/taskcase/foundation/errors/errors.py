"""Error taxonomy for task orchestration.

Configuration errors are raised before any work runs. Unit-of-work failures are
captured into outcomes and only raised through the explicit throwing variants.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from pydantic import ValidationError


class ErrorCode(StrEnum):
    """Machine-readable error classification."""
    INVALID_CONFIG = "INVALID_CONFIG"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


class TaskcaseError(Exception):
    """Base class for all errors raised by taskcase itself."""

    code: ErrorCode = ErrorCode.UNKNOWN


class ConfigurationError(TaskcaseError, ValueError):
    """Invalid size, count or policy passed to an executor.

    Always raised before any unit of work or fetch function is invoked.

    Attributes:
        field: Name of the offending parameter
        value: The rejected value
    """

    code = ErrorCode.INVALID_CONFIG

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}={value!r}: {reason}")

    @classmethod
    def from_validation(cls, exc: ValidationError) -> Self:
        """Convert a pydantic ValidationError, naming the first failing field."""
        first = exc.errors()[0]
        loc = ".".join(str(p) for p in first.get("loc", ())) or "config"
        return cls(loc, first.get("input"), first.get("msg", "validation failed"))


def require_positive(field: str, value: object) -> int:
    """Validate a positive integer count (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(field, value, "must be an integer")
    if value < 1:
        raise ConfigurationError(field, value, "must be >= 1")
    return value


class RetryExhaustedError(TaskcaseError):
    """All retry attempts failed.

    Raised only by the throwing retry variant. The last error is kept both as
    `last_error` and as `__cause__`.
    """

    code = ErrorCode.RETRY_EXHAUSTED

    def __init__(self, label: str, attempts: int, last_error: BaseException) -> None:
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        self.timestamp = datetime.now(UTC)
        plural = "attempt" if attempts == 1 else "attempts"
        super().__init__(f"'{label}' failed after {attempts} {plural}: {last_error}")


class OperationCancelled(TaskcaseError):
    """Cooperative cancellation observed at an attempt, slice or page boundary.

    Attributes:
        stage: "retry", "batch" or "pagination"
        completed: Work finished before the checkpoint (batch results or page items)
        reason: Optional reason passed to CancelToken.cancel()
    """

    code = ErrorCode.CANCELLED

    def __init__(self, stage: str, completed: object = None, reason: str | None = None) -> None:
        self.stage = stage
        self.completed = completed
        self.reason = reason
        super().__init__(f"{stage} cancelled" + (f": {reason}" if reason else ""))
