"""Environment-based configuration using pydantic-settings.

Supplies defaults for arguments a caller leaves out. Explicit arguments to
an executor always win over settings.

Example:
    >>> from taskcase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.pagination.max_pages
    100

    # Or with environment variables:
    # TASKCASE_RETRY_MAX_ATTEMPTS=5
    # TASKCASE_BATCH_BATCH_SIZE=10
    # TASKCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeFloat, PositiveInt, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TASKCASE_RETRY_",
        extra="ignore",
    )

    max_attempts: Annotated[int, Field(ge=1, le=100)] = 3
    base_delay: NonNegativeFloat = Field(default=1.0, description="Base delay in seconds")
    backoff: Literal["none", "linear"] = "none"


class BatchSettings(BaseSettings):
    """Default batch runner configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TASKCASE_BATCH_",
        extra="ignore",
    )

    batch_size: PositiveInt = Field(default=5, description="Units of work per slice")
    failure_policy: Literal["fail-fast", "collect-all"] = "collect-all"


class PaginationSettings(BaseSettings):
    """Pagination safety cap."""

    model_config = SettingsConfigDict(
        env_prefix="TASKCASE_PAGINATION_",
        extra="ignore",
    )

    max_pages: PositiveInt = Field(default=100, description="Hard cap on pages fetched")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TASKCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class TaskcaseSettings(BaseSettings):
    """Root settings.

    Loads configuration from environment variables with TASKCASE_ prefix.

    Example environment variables:
        TASKCASE_RETRY_BACKOFF=linear
        TASKCASE_BATCH_FAILURE_POLICY=fail-fast
        TASKCASE_PAGINATION_MAX_PAGES=50
        TASKCASE_LOG_FORMAT=json
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    batch: BatchSettings = Field(default_factory=BatchSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @computed_field
    @property
    def is_debug(self) -> bool:
        """Whether logging is at DEBUG level."""
        return self.logging.level == "DEBUG"


@lru_cache(maxsize=1)
def get_settings() -> TaskcaseSettings:
    """Get the global settings instance (cached)."""
    return TaskcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
