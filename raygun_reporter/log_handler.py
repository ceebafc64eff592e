# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Forwarding of error-level log events to an ErrorReporter.

LogEventAdapter works on plain LogEvent values; RaygunLogHandler plugs it
into the stdlib ``logging`` tree:

    logging.getLogger().addHandler(RaygunLogHandler(RaygunErrorReporter.from_env()))
"""

import logging
import os
import socket
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from .client import DeliveryResult
from .error_reporter import ErrorReporter
from .logger import DEFAULT_LOGGER_NAME
from .models import format_timestamp


def local_node() -> str:
    """Identity of this process: ``<pid>@<hostname>``."""
    return f"{os.getpid()}@{socket.gethostname()}"


def severity_level(severity: int | str) -> int:
    """Numeric logging level for an int or a level name such as "error"."""
    if isinstance(severity, int):
        return severity
    level = logging.getLevelName(str(severity).upper())
    return level if isinstance(level, int) else logging.NOTSET


@dataclass(frozen=True)
class LogEvent:
    """One event from the host's structured log stream."""

    severity: int | str
    origin_node: str
    payload: Any
    timestamp: datetime | float | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)


class LogEventAdapter:
    """Routes local error-level log events to an ErrorReporter.

    Exceptions go to capture_exception, anything else to capture_message.
    Lower severities and events from other nodes are acknowledged and
    dropped.
    """

    def __init__(self, reporter: ErrorReporter, node: str | None = None):
        self.reporter = reporter
        self.node = node or local_node()

    def accepts(self, event: LogEvent) -> bool:
        return severity_level(event.severity) >= logging.ERROR and event.origin_node == self.node

    def handle_event(self, event: LogEvent) -> DeliveryResult | None:
        """Handle one event.

        Returns:
            The reporter's result for forwarded events, None otherwise
        """
        if not self.accepts(event):
            return None

        extra = dict(event.metadata)
        if event.timestamp is not None:
            moment = event.timestamp
            if not isinstance(moment, datetime):
                moment = datetime.fromtimestamp(moment, timezone.utc)
            extra["timestamp"] = format_timestamp(moment)

        if isinstance(event.payload, BaseException):
            return self.reporter.capture_exception(event.payload, extra=extra)
        return self.reporter.capture_message(str(event.payload), extra=extra)


class RaygunLogHandler(logging.Handler):
    """logging.Handler feeding LogRecords through a LogEventAdapter.

    Records from the reporter's own loggers are skipped so delivery
    problems cannot feed back into new reports.
    """

    def __init__(
        self,
        reporter: ErrorReporter,
        node: str | None = None,
        level: int = logging.ERROR,
    ):
        super().__init__(level=level)
        self.adapter = LogEventAdapter(reporter, node=node)

    def record_node(self, record: logging.LogRecord) -> str:
        node = getattr(record, "node", None)
        if node:
            return str(node)
        if record.process is None or record.process == os.getpid():
            return self.adapter.node
        return f"{record.process}@{socket.gethostname()}"

    def to_event(self, record: logging.LogRecord) -> LogEvent:
        if record.exc_info and record.exc_info[1] is not None:
            payload: Any = record.exc_info[1]
        elif isinstance(record.msg, BaseException):
            payload = record.msg
        else:
            payload = record.getMessage()

        metadata: dict[str, Any] = {"logger": record.name, "level": record.levelname}
        structured = getattr(record, "extra", None)
        if isinstance(structured, Mapping):
            metadata.update(structured)

        return LogEvent(
            severity=record.levelno,
            origin_node=self.record_node(record),
            payload=payload,
            timestamp=record.created,
            metadata=metadata,
        )

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == DEFAULT_LOGGER_NAME or record.name.startswith(DEFAULT_LOGGER_NAME + "."):
            return
        try:
            self.adapter.handle_event(self.to_event(record))
        except Exception:
            self.handleError(record)
