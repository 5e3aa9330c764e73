"""Foundation: errors and configuration shared by every executor."""

from .config import TaskcaseSettings, clear_settings_cache, get_settings
from .errors import (
    ConfigurationError,
    ErrorCode,
    OperationCancelled,
    RetryExhaustedError,
    TaskcaseError,
)

__all__ = [
    "ErrorCode",
    "TaskcaseError",
    "ConfigurationError",
    "RetryExhaustedError",
    "OperationCancelled",
    "TaskcaseSettings",
    "get_settings",
    "clear_settings_cache",
]
