# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Raygun error reporting client.

Captures exceptions and error messages, builds structured reports with
environment, request, user and custom data, and delivers them to the
Raygun entries API.

Example:
    >>> from raygun_reporter import create_error_reporter
    >>> reporter = create_error_reporter()
    >>> result = reporter.capture_message("disk nearly full", extra={"region": "us-east"})
    >>> result.success
"""

import os

__version__ = "0.1.0"

from .assembler import ReportAssembler
from .client import DeliveryResult, RaygunClient
from .config import (
    ConfigProvider,
    EnvConfigProvider,
    ReporterConfig,
    StaticConfigProvider,
    load_config,
)
from .error_reporter import ErrorReporter
from .errors import ConfigurationError, DeliveryError, NormalizationError, RaygunReporterError
from .log_handler import LogEvent, LogEventAdapter, RaygunLogHandler
from .models import (
    CustomContext,
    EnvironmentSnapshot,
    ErrorDetail,
    Report,
    RequestContext,
    ResponseContext,
    StackFrame,
    UserContext,
)
from .raygun_error_reporter import RaygunErrorReporter
from .silent_error_reporter import SilentErrorReporter


def create_error_reporter(
    reporter_type: str | None = None,
    config: ReporterConfig | None = None,
) -> ErrorReporter:
    """Create an error reporter.

    Args:
        reporter_type: "raygun" or "silent". Defaults to RAYGUN_REPORTER_TYPE
            env or "raygun".
        config: Configuration for the raygun reporter. Loaded from the
            environment when omitted.

    Returns:
        ErrorReporter instance

    Raises:
        ValueError: If reporter_type is not recognized
    """
    reporter_type = (reporter_type or os.getenv("RAYGUN_REPORTER_TYPE") or "raygun").lower()

    if reporter_type == "raygun":
        return RaygunErrorReporter(config or load_config())
    if reporter_type == "silent":
        return SilentErrorReporter()
    raise ValueError(f"Unknown reporter type: {reporter_type}. Must be one of: raygun, silent")


__all__ = [
    # Version
    "__version__",
    # Reporters
    "ErrorReporter",
    "RaygunErrorReporter",
    "SilentErrorReporter",
    "create_error_reporter",
    # Pipeline
    "ReportAssembler",
    "RaygunClient",
    "DeliveryResult",
    # Configuration
    "ConfigProvider",
    "EnvConfigProvider",
    "StaticConfigProvider",
    "ReporterConfig",
    "load_config",
    # Log stream
    "LogEvent",
    "LogEventAdapter",
    "RaygunLogHandler",
    # Models
    "CustomContext",
    "EnvironmentSnapshot",
    "ErrorDetail",
    "Report",
    "RequestContext",
    "ResponseContext",
    "StackFrame",
    "UserContext",
    # Errors
    "RaygunReporterError",
    "NormalizationError",
    "DeliveryError",
    "ConfigurationError",
]
