"""Structured logging helpers for the expense service.

Levels and the JSON switch come from :class:`my_expenses.config.Settings`;
nothing here reads the environment.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

CONSOLE_FORMAT: Final[str] = "[%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER: Final[str] = "my_expenses"
LOG_DIR: Final[Path] = Path("artifacts") / "logs"
LOG_PATH: Final[Path] = LOG_DIR / "my_expenses.log"
CONSOLE_MARKER: Final[str] = "_my_expenses_console"
JSON_MARKER: Final[str] = "_my_expenses_json"


class JsonAuditFormatter(logging.Formatter):
    """Format log records as single-line JSON payloads.

    ``operation`` and ``duration_ms`` are read from the record's ``extra``
    fields and default to ``null``.
    """

    def format(self, record: logging.LogRecord) -> str:
        duration = getattr(record, "duration_ms", None)
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "source": record.name,
            "message": record.getMessage(),
            "operation": getattr(record, "operation", None),
            "duration_ms": float(duration) if isinstance(duration, (int, float)) else None,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def level_number(level: str | int) -> int:
    """Translate a level name such as ``"debug"`` into its number; unknown names give INFO."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _json_handler() -> logging.Handler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_PATH, encoding="utf-8")
    handler.setFormatter(JsonAuditFormatter())
    return handler


def _attach(
    logger: logging.Logger,
    marker: str,
    factory: Callable[[], logging.Handler],
    level: int,
) -> None:
    handler = next((h for h in logger.handlers if getattr(h, marker, False)), None)
    if handler is None:
        handler = factory()
        setattr(handler, marker, True)
        logger.addHandler(handler)
    handler.setLevel(level)


def setup_logger(
    name: str,
    level: str | int = "INFO",
    json_format: bool = False,
) -> logging.Logger:
    """Configure and return ``name`` with a console handler and optional JSON file.

    Handlers are attached once per logger, so calling this repeatedly only
    refreshes levels. Records still propagate so ``caplog`` can capture them.
    """

    resolved = level_number(level)
    logger = logging.getLogger(name)
    logger.setLevel(resolved)
    logger.propagate = True
    _attach(logger, CONSOLE_MARKER, _console_handler, resolved)
    if json_format:
        _attach(logger, JSON_MARKER, _json_handler, resolved)
    return logger


def configure_logging(level: str | int = "INFO", json_logs: bool = False) -> logging.Logger:
    """Configure the ``my_expenses`` package logger for a process run."""

    # Module loggers are plain ``getLogger(__name__)`` children and inherit
    # the handlers attached to the package logger.
    return setup_logger(ROOT_LOGGER, level=level, json_format=json_logs)


__all__ = ["JsonAuditFormatter", "configure_logging", "level_number", "setup_logger"]
