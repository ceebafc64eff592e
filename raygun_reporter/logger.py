# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Structured logger used by the reporter for its own diagnostics.

StdoutLogger writes one JSON object per line and mirrors every entry into
the stdlib ``logging`` tree, so pytest's caplog and host handlers see it.
Entries carry the ``raygun_reporter`` logger name by default, which the
log handler uses to skip the reporter's own output.
"""

import json
import logging
import os
import sys
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

DEFAULT_LOGGER_NAME = "raygun_reporter"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class Logger(ABC):
    """Abstract base class for loggers."""

    name: str

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        pass

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error message from inside an exception handler."""
        kwargs.setdefault("exc_info", True)
        self.error(message, **kwargs)


def _check_level(level: str) -> str:
    level = level.upper()
    if level not in _LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of {list(_LEVELS)}")
    return level


class StdoutLogger(Logger):
    """Logger that outputs structured JSON logs to stdout."""

    def __init__(self, level: str = "INFO", name: str | None = None):
        self.level = _check_level(level)
        self.name = name or DEFAULT_LOGGER_NAME
        self._stdlib_logger = logging.getLogger(self.name)
        # NOTSET inherits the root level; stdout filtering uses self.level
        self._stdlib_logger.setLevel(logging.NOTSET)

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        if _LEVELS[level] < _LEVELS[self.level]:
            return

        exc_info = kwargs.pop("exc_info", None)

        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "logger": self.name,
            "message": message,
        }
        if kwargs:
            entry["extra"] = kwargs

        try:
            print(json.dumps(entry, default=str), file=sys.stdout, flush=True)
        except (TypeError, ValueError) as e:
            print(f"{level}: {message} (JSON serialization failed: {e})", file=sys.stderr, flush=True)

        extra = {"extra": kwargs} if kwargs else None
        self._stdlib_logger.log(_LEVELS[level], message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)


class SilentLogger(Logger):
    """Logger that keeps entries in memory; all levels are kept."""

    def __init__(self, level: str = "INFO", name: str | None = None):
        self.level = _check_level(level)
        self.name = name or DEFAULT_LOGGER_NAME
        self.logs: list[dict[str, Any]] = []

    def _log(self, level: str, message: str, **kwargs: Any) -> None:
        entry: dict[str, Any] = {"level": level, "message": message}
        if kwargs:
            entry["extra"] = kwargs
        self.logs.append(entry)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def get_logs(self, level: str | None = None) -> list[dict[str, Any]]:
        if level is None:
            return self.logs
        return [log for log in self.logs if log["level"] == level]

    def has_log(self, message: str, level: str | None = None) -> bool:
        """Check for a logged message by substring, optionally at one level."""
        return any(message in log["message"] for log in self.get_logs(level))

    def clear_logs(self) -> None:
        self.logs.clear()


def create_logger(
    logger_type: str | None = None,
    level: str | None = None,
    name: str | None = None,
) -> Logger:
    """Create a logger.

    Args:
        logger_type: "stdout" or "silent". Defaults to LOG_TYPE env or "stdout".
        level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL env or "INFO".
        name: Logger name. Defaults to LOG_NAME env or "raygun_reporter".

    Returns:
        Logger instance

    Raises:
        ValueError: If logger_type is not recognized
    """
    logger_type = (logger_type or os.getenv("LOG_TYPE") or "stdout").lower()
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    name = name or os.getenv("LOG_NAME") or DEFAULT_LOGGER_NAME

    if logger_type == "stdout":
        return StdoutLogger(level=level, name=name)
    if logger_type == "silent":
        return SilentLogger(level=level, name=name)
    raise ValueError(f"Unknown logger_type: {logger_type}. Must be one of: stdout, silent")
