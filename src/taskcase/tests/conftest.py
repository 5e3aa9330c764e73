"""Shared fixtures: settings isolation and an observable sleep."""

from __future__ import annotations

import pytest

from taskcase.foundation.config import clear_settings_cache


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> object:
    """Reset cached settings and strip TASKCASE_* variables around each test."""
    import os

    for key in [k for k in os.environ if k.startswith("TASKCASE_")]:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
