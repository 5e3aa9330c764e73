"""Structured logging for executor events.

Executors log through the stdlib `logging` hierarchy (`taskcase.retry`,
`taskcase.batch`, `taskcase.pagination`) and pass structured fields with
`extra=`. This module renders those records:
- Human-readable console output: timestamp [level] event key=value ...
- JSON Lines (orjson) for log aggregation

Quick Start:
    >>> from taskcase.runtime.observability import configure_logging
    >>> configure_logging(format="json", level="DEBUG")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

import orjson

ROOT_LOGGER = "taskcase"

# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def record_fields(record: logging.LogRecord) -> dict[str, object]:
    """Structured fields attached to a record via `extra=`."""
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


def _ts(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, tz=UTC)


class ConsoleFormatter(logging.Formatter):
    """Format: HH:MM:SS.mmm [level] event key=value ..."""

    def format(self, record: logging.LogRecord) -> str:
        parts = [_ts(record).strftime("%H:%M:%S.%f")[:-3], f"[{record.levelname.lower()}]", record.getMessage()]
        parts += [f"{k}={v!r}" if isinstance(v, str) else f"{k}={v}" for k, v in sorted(record_fields(record).items())]
        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class JsonFormatter(logging.Formatter):
    """JSON Lines output for log aggregation (Elasticsearch, Loki, Datadog, etc.)."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": _ts(record).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
            **record_fields(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str, option=orjson.OPT_NON_STR_KEYS).decode()


def configure_logging(
    format: str | None = None,  # noqa: A002 - shadows builtin but matches stdlib
    level: str | None = None,
    *,
    output: TextIO | None = None,
) -> logging.Handler:
    """Install a single handler on the `taskcase` logger.

    Omitted arguments come from LoggingSettings (TASKCASE_LOG_*). Calling again
    replaces the previously installed handler.
    """
    if format is None or level is None:
        from taskcase.foundation.config import get_settings
        settings = get_settings().logging
        format, level = format or settings.format, level or settings.level

    match format:
        case "text" | "console": formatter: logging.Formatter = ConsoleFormatter()
        case "json": formatter = JsonFormatter()
        case _: raise ValueError(f"Unknown format: {format}. Use 'text' or 'json'")
    if (levelno := logging.getLevelNamesMapping().get(level.upper())) is None:
        raise ValueError(f"Unknown level: {level}. Use DEBUG, INFO, WARNING, ERROR or CRITICAL")

    logger = logging.getLogger(ROOT_LOGGER)
    for h in [h for h in logger.handlers if getattr(h, "_taskcase", False)]:
        logger.removeHandler(h)

    handler = logging.StreamHandler(output or sys.stderr)
    handler.setFormatter(formatter)
    handler._taskcase = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(levelno)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Logger under the taskcase hierarchy, e.g. get_logger("retry") -> taskcase.retry."""
    return logging.getLogger(name if name.startswith(ROOT_LOGGER) else f"{ROOT_LOGGER}.{name}")
