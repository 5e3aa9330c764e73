"""Tests for RetryExecutor.

Validates:
- Attempt bound and at-most-one success
- Fixed and linear backoff delays
- Parity between the capturing and throwing variants
- Configuration validation before any work runs
- Cooperative cancellation between attempts
"""

from __future__ import annotations

import asyncio

import pytest
from pydantic import ValidationError

from taskcase import (
    CancelToken,
    ConfigurationError,
    OperationCancelled,
    RetryConfig,
    RetryExecutor,
    RetryExhaustedError,
    RetryFailure,
    RetrySuccess,
    execute_with_retry,
    execute_with_retry_sync,
    retryable,
    with_retry,
)
from taskcase.runtime.retry import ConstantBackoff, LinearBackoff, backoff_for


class Flaky:
    """Unit of work failing the first `failures` calls, then returning `value`."""

    def __init__(self, failures: int, value: str = "ok") -> None:
        self.failures, self.value, self.calls = failures, value, 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"boom #{self.calls}")
        return self.value


# ═════════════════════════════════════════════════════════════════════════════
# Backoff
# ═════════════════════════════════════════════════════════════════════════════


def test_constant_backoff_is_fixed() -> None:
    assert [ConstantBackoff(0.5).delay(a) for a in (1, 2, 3)] == [0.5, 0.5, 0.5]


def test_linear_backoff_grows_with_attempt() -> None:
    delays = [LinearBackoff(0.1).delay(a) for a in range(1, 6)]
    assert delays == pytest.approx([0.1, 0.2, 0.3, 0.4, 0.5])
    assert all(a <= b for a, b in zip(delays, delays[1:]))


def test_backoff_for_maps_kind() -> None:
    assert isinstance(backoff_for("none", 1.0), ConstantBackoff)
    assert isinstance(backoff_for("linear", 1.0), LinearBackoff)


# ═════════════════════════════════════════════════════════════════════════════
# Attempt bound & success
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
@pytest.mark.parametrize("max_attempts", [1, 2, 5])
async def test_always_failing_work_is_invoked_exactly_max_attempts(sleep, max_attempts: int) -> None:
    work = Flaky(failures=100)
    outcome = await RetryExecutor(sleep).execute(work, RetryConfig(max_attempts=max_attempts, base_delay=0))

    assert isinstance(outcome, RetryFailure)
    assert outcome.attempts == max_attempts
    assert work.calls == max_attempts
    assert str(outcome.last_error) == f"boom #{max_attempts}"
    assert len(sleep.delays) == max_attempts - 1


@pytest.mark.asyncio
async def test_success_on_attempt_k_stops_retrying(sleep) -> None:
    work = Flaky(failures=2, value="submitted")
    outcome = await RetryExecutor(sleep).execute(work, RetryConfig(max_attempts=5))

    assert isinstance(outcome, RetrySuccess)
    assert outcome.value == "submitted"
    assert outcome.attempts == 3
    assert work.calls == 3


@pytest.mark.asyncio
async def test_first_attempt_success_never_sleeps(sleep) -> None:
    outcome = await RetryExecutor(sleep).execute(Flaky(0), RetryConfig(max_attempts=3))
    assert outcome.is_ok and outcome.attempts == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_single_attempt_means_no_retry(sleep) -> None:
    work = Flaky(failures=1)
    outcome = await RetryExecutor(sleep).execute(work, RetryConfig(max_attempts=1))
    assert outcome.is_err and outcome.attempts == 1
    assert work.calls == 1
    assert sleep.delays == []


# ═════════════════════════════════════════════════════════════════════════════
# Delays
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_fixed_backoff_waits_base_delay(sleep) -> None:
    await RetryExecutor(sleep).execute(Flaky(10), RetryConfig(max_attempts=4, base_delay=0.25, backoff="none"))
    assert sleep.delays == [0.25, 0.25, 0.25]


@pytest.mark.asyncio
async def test_linear_backoff_delays_are_non_decreasing(sleep) -> None:
    await RetryExecutor(sleep).execute(Flaky(10), RetryConfig(max_attempts=5, base_delay=0.1, backoff="linear"))
    assert sleep.delays == pytest.approx([0.1, 0.2, 0.3, 0.4])
    assert all(a <= b for a, b in zip(sleep.delays, sleep.delays[1:]))


@pytest.mark.asyncio
async def test_on_retry_callback_sees_each_retry(sleep) -> None:
    seen: list[tuple[int, str, float]] = []
    config = RetryConfig(
        max_attempts=3, base_delay=1.0, backoff="linear",
        on_retry=lambda attempt, err, delay: seen.append((attempt, str(err), delay)),
    )
    await RetryExecutor(sleep).execute(Flaky(10), config)
    assert seen == [(1, "boom #1", 1.0), (2, "boom #2", 2.0)]


@pytest.mark.asyncio
async def test_real_sleep_is_used_by_default() -> None:
    loop = asyncio.get_running_loop()
    t0 = loop.time()
    outcome = await RetryExecutor().execute(Flaky(1), RetryConfig(max_attempts=2, base_delay=0.02))
    assert outcome.is_ok
    assert loop.time() - t0 >= 0.015


# ═════════════════════════════════════════════════════════════════════════════
# Throwing variant
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_execute_or_raise_matches_execute(sleep) -> None:
    config = RetryConfig(max_attempts=3, base_delay=0, label="search")
    outcome = await RetryExecutor(sleep).execute(Flaky(10), config)

    with pytest.raises(RetryExhaustedError) as info:
        await RetryExecutor(sleep).execute_or_raise(Flaky(10), config)

    err = info.value
    assert err.attempts == outcome.attempts == 3
    assert str(err.last_error) == str(outcome.last_error)
    assert type(err.last_error) is type(outcome.last_error)
    assert err.__cause__ is err.last_error
    assert err.label == "search"
    assert "'search' failed after 3 attempts" in str(err)


@pytest.mark.asyncio
async def test_execute_or_raise_returns_value(sleep) -> None:
    assert await RetryExecutor(sleep).execute_or_raise(Flaky(1, "done"), RetryConfig(max_attempts=2)) == "done"


@pytest.mark.asyncio
async def test_failure_unwrap_raises_and_unwrap_or_defaults(sleep) -> None:
    outcome = await RetryExecutor(sleep).execute(Flaky(10), RetryConfig(max_attempts=2))
    assert outcome.unwrap_or("fallback") == "fallback"
    with pytest.raises(RetryExhaustedError):
        outcome.unwrap()


@pytest.mark.asyncio
async def test_cancelled_error_from_work_is_not_captured(sleep) -> None:
    async def work() -> None:
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await RetryExecutor(sleep).execute(work, RetryConfig(max_attempts=3))
    assert sleep.delays == []


# ═════════════════════════════════════════════════════════════════════════════
# Configuration
# ═════════════════════════════════════════════════════════════════════════════


def test_config_rejects_zero_attempts() -> None:
    with pytest.raises(ValidationError):
        RetryConfig(max_attempts=0)


@pytest.mark.parametrize("max_attempts", [True, 2.0, "3"])
def test_config_rejects_non_integer_attempts(max_attempts: object) -> None:
    with pytest.raises(ValidationError):
        RetryConfig(max_attempts=max_attempts)


@pytest.mark.asyncio
async def test_bool_attempts_override_raises_before_work_runs() -> None:
    work = Flaky(0)
    with pytest.raises(ConfigurationError) as info:
        await execute_with_retry(work, max_attempts=True)
    assert info.value.field == "max_attempts"
    assert work.calls == 0


def test_config_rejects_negative_delay_and_unknown_backoff() -> None:
    with pytest.raises(ValidationError):
        RetryConfig(base_delay=-1)
    with pytest.raises(ValidationError):
        RetryConfig(backoff="exponential")


def test_config_is_frozen() -> None:
    config = RetryConfig()
    with pytest.raises(ValidationError):
        config.max_attempts = 9  # type: ignore[misc]


@pytest.mark.asyncio
async def test_invalid_override_raises_before_work_runs() -> None:
    work = Flaky(0)
    with pytest.raises(ConfigurationError) as info:
        await execute_with_retry(work, max_attempts=0)
    assert info.value.field == "max_attempts"
    assert work.calls == 0


@pytest.mark.asyncio
async def test_unvalidated_config_is_still_rejected(sleep) -> None:
    work = Flaky(0)
    bogus = RetryConfig.model_construct(max_attempts=0, base_delay=0.0, backoff="none", label="x", on_retry=None)
    with pytest.raises(ConfigurationError):
        await RetryExecutor(sleep).execute(work, bogus)
    assert work.calls == 0


@pytest.mark.asyncio
async def test_execute_with_retry_uses_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASKCASE_RETRY_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("TASKCASE_RETRY_BASE_DELAY", "0")
    work = Flaky(100)
    outcome = await execute_with_retry(work)
    assert outcome.attempts == 4
    assert work.calls == 4


def test_execute_with_retry_sync() -> None:
    outcome = execute_with_retry_sync(Flaky(1, "synced"), max_attempts=2, base_delay=0)
    assert outcome.unwrap() == "synced"


# ═════════════════════════════════════════════════════════════════════════════
# Composition helpers & cancellation
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_with_retry_wraps_unit_of_work() -> None:
    work = Flaky(2, "wrapped")
    wrapped = with_retry(work, max_attempts=3, base_delay=0)
    assert await wrapped() == "wrapped"
    assert work.calls == 3


def test_with_retry_rejects_bad_config_eagerly() -> None:
    with pytest.raises(ConfigurationError):
        with_retry(Flaky(0), max_attempts=0)


@pytest.mark.asyncio
async def test_retryable_decorator_passes_arguments_and_labels() -> None:
    calls: list[int] = []

    @retryable(max_attempts=2, base_delay=0)
    async def lookup(key: int) -> int:
        calls.append(key)
        raise KeyError(key)

    with pytest.raises(RetryExhaustedError) as info:
        await lookup(7)
    assert calls == [7, 7]
    assert info.value.label == "lookup"
    assert lookup.__name__ == "lookup"


@pytest.mark.asyncio
async def test_cancel_between_attempts_keeps_last_failure() -> None:
    token = CancelToken()
    work = Flaky(100)

    async def cancelling_sleep(delay: float) -> None:
        token.cancel("shutdown")

    with pytest.raises(OperationCancelled) as info:
        await RetryExecutor(cancelling_sleep).execute(work, RetryConfig(max_attempts=5), cancel=token)

    assert work.calls == 1
    assert info.value.stage == "retry"
    assert info.value.reason == "shutdown"
    assert isinstance(info.value.completed, RetryFailure)
    assert info.value.completed.attempts == 1
