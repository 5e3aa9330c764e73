"""Configuration via environment variables (pydantic-settings)."""

from .settings import (
    BatchSettings,
    LoggingSettings,
    PaginationSettings,
    RetrySettings,
    TaskcaseSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "TaskcaseSettings",
    "RetrySettings",
    "BatchSettings",
    "PaginationSettings",
    "LoggingSettings",
    "get_settings",
    "clear_settings_cache",
]
