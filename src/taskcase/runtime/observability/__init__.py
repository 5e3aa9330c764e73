"""Observability: structured logging for executor events."""

from .logging import ConsoleFormatter, JsonFormatter, configure_logging, get_logger, record_fields

__all__ = ["configure_logging", "get_logger", "ConsoleFormatter", "JsonFormatter", "record_fields"]
