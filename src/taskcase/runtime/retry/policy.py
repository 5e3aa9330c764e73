"""Retry configuration and outcomes.

RetryConfig is immutable and validated on construction; RetryOutcome reports
either the value and the attempt it succeeded on, or the last error and the
total number of attempts made.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Callable, Generic, TypeAlias, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from taskcase.foundation.config import get_settings
from taskcase.foundation.errors import ConfigurationError, RetryExhaustedError

from .backoff import Backoff, BackoffKind, backoff_for

R = TypeVar("R")

OnRetry: TypeAlias = Callable[[int, Exception, float], None]


class RetryConfig(BaseModel):
    """Bounded retry configuration.

    Attributes:
        max_attempts: Total attempts including the first (1 = no retries)
        base_delay: Delay unit in seconds
        backoff: "none" waits base_delay; "linear" waits base_delay * attempt
        label: Name used in logs and RetryExhaustedError messages
        on_retry: Optional callback (attempt, error, delay) before each wait

    Example:
        >>> config = RetryConfig(max_attempts=3, base_delay=0.1, backoff="linear", label="search")
        >>> [config.get_delay(a) for a in (1, 2)]
        [0.1, 0.2]
    """

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Retry Configuration",
            "examples": [{"max_attempts": 3, "base_delay": 1.0, "backoff": "linear", "label": "search"}],
        },
    )

    max_attempts: Annotated[StrictInt, Field(ge=1)] = 3
    base_delay: Annotated[float, Field(ge=0.0)] = 1.0
    backoff: BackoffKind = BackoffKind.NONE
    label: Annotated[str, Field(min_length=1)] = "operation"
    on_retry: OnRetry | None = Field(default=None, exclude=True, repr=False)

    @property
    def max_retries(self) -> int:
        """Retries after the first attempt."""
        return self.max_attempts - 1

    @property
    def strategy(self) -> Backoff:
        return backoff_for(self.backoff, self.base_delay)

    def get_delay(self, attempt: int) -> float:
        """Delay in seconds after 1-based `attempt` failed."""
        return self.strategy.delay(attempt)

    @classmethod
    def from_settings(cls, **overrides: object) -> RetryConfig:
        """Build from RetrySettings (TASKCASE_RETRY_*), explicit overrides winning."""
        s = get_settings().retry
        return cls(**{"max_attempts": s.max_attempts, "base_delay": s.base_delay, "backoff": s.backoff, **overrides})

    def __hash__(self) -> int:
        return hash((self.max_attempts, self.base_delay, self.backoff, self.label))


def resolve_config(config: RetryConfig | None = None, **overrides: object) -> RetryConfig:
    """Merge keyword overrides into `config` (or settings), as a ConfigurationError on invalid input."""
    try:
        if config is None:
            return RetryConfig.from_settings(**overrides)
        if not overrides:
            return config
        return RetryConfig(**{**config.model_dump(), "on_retry": config.on_retry, **overrides})
    except ValidationError as e:
        raise ConfigurationError.from_validation(e) from e


@dataclass(frozen=True, slots=True)
class RetrySuccess(Generic[R]):
    """Work succeeded on attempt number `attempts`."""
    value: R
    attempts: int

    @property
    def is_ok(self) -> bool: return True

    @property
    def is_err(self) -> bool: return False

    def unwrap(self) -> R: return self.value

    def unwrap_or(self, default: R) -> R: return self.value


@dataclass(frozen=True, slots=True)
class RetryFailure:
    """Every attempt failed; `last_error` is from the final one."""
    last_error: Exception
    attempts: int
    label: str = "operation"

    @property
    def is_ok(self) -> bool: return False

    @property
    def is_err(self) -> bool: return True

    def unwrap(self) -> object:
        """Raise RetryExhaustedError chained to the last error."""
        raise self.to_exception() from self.last_error

    def unwrap_or(self, default: R) -> R: return default

    def to_exception(self) -> RetryExhaustedError:
        return RetryExhaustedError(self.label, self.attempts, self.last_error)


RetryOutcome = Union[RetrySuccess[R], RetryFailure]
