# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Report assembly from error, environment, request, user and custom data.

Sections are combined in a fixed precedence order (see Report.to_dict):
details stub, error, environment, request, response, user, custom.
"""

import socket
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping

from . import __version__
from .config import ReporterConfig
from .environment import capture_environment
from .frames import extract_trace, normalize_trace
from .models import (
    ClientDetails,
    CustomContext,
    EnvironmentSnapshot,
    ErrorDetail,
    Report,
    RequestContext,
    ResponseContext,
    UserContext,
)

CLIENT_NAME = "raygun-reporter"
MAX_INNER_ERROR_DEPTH = 5


def _exception_message(exception: BaseException) -> str:
    return str(exception) or type(exception).__name__


def _chained_exception(exception: BaseException) -> BaseException | None:
    if exception.__cause__ is not None:
        return exception.__cause__
    if exception.__context__ is not None and not exception.__suppress_context__:
        return exception.__context__
    return None


def build_error_detail(
    exception: BaseException,
    trace: Iterable[Any] | None = None,
    depth: int = 0,
) -> ErrorDetail:
    """Build the error block for an exception.

    Args:
        exception: The captured exception
        trace: Raw trace entries; read from the exception when None
        depth: Current inner-error nesting level

    Returns:
        ErrorDetail with inner errors following the exception chain
    """
    if trace is None:
        trace = extract_trace(exception)

    inner = None
    chained = _chained_exception(exception)
    if chained is not None and depth < MAX_INNER_ERROR_DEPTH:
        inner = build_error_detail(chained, depth=depth + 1)

    return ErrorDetail(
        message=_exception_message(exception),
        frames=normalize_trace(trace),
        inner_error=inner,
    )


class ReportAssembler:
    """Builds Report values for the three capture shapes."""

    def __init__(
        self,
        config: ReporterConfig,
        environment_probe: Callable[[], EnvironmentSnapshot] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize the assembler.

        Args:
            config: Reporter configuration (tags, system user, versions)
            environment_probe: Returns a fresh EnvironmentSnapshot per call.
                Defaults to sampling the local machine.
            clock: Returns the current time. Defaults to UTC now.
        """
        self.config = config
        self.environment_probe = environment_probe or (
            lambda: capture_environment(config.disk_paths)
        )
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _client_details(self) -> ClientDetails:
        return ClientDetails(
            machine_name=socket.gethostname(),
            version=self.config.app_version,
            client_name=CLIENT_NAME,
            client_version=__version__,
            client_url=self.config.client_url,
        )

    def _custom(self, extra: Mapping[str, Any] | None) -> CustomContext:
        return CustomContext(tags=self.config.tags, user_custom_data=dict(extra or {}))

    def _system_user(self) -> UserContext:
        return self.config.system_user or UserContext.anonymous()

    def _assemble(
        self,
        error: ErrorDetail,
        user: UserContext,
        extra: Mapping[str, Any] | None,
        request: RequestContext | None = None,
        response: ResponseContext | None = None,
    ) -> Report:
        return Report(
            occurred_on=self.clock(),
            client=self._client_details(),
            error=error,
            environment=self.environment_probe(),
            request=request,
            response=response,
            user=user,
            custom=self._custom(extra),
        )

    def build_from_exception(
        self,
        trace: Iterable[Any] | None,
        exception: BaseException,
        extra: Mapping[str, Any] | None = None,
    ) -> Report:
        """Report for an exception captured outside a request."""
        return self._assemble(build_error_detail(exception, trace), self._system_user(), extra)

    def build_from_message(
        self,
        message: str,
        extra: Mapping[str, Any] | None = None,
    ) -> Report:
        """Report for a plain message; the error block has no frames."""
        return self._assemble(ErrorDetail(message=message), self._system_user(), extra)

    def build_from_request(
        self,
        request_ctx: RequestContext,
        trace: Iterable[Any] | None,
        exception: BaseException,
        extra: Mapping[str, Any] | None = None,
        response_ctx: ResponseContext | None = None,
    ) -> Report:
        """Report for an exception raised while handling an HTTP request.

        The user is always anonymous: request-bound identity is not resolved.
        """
        return self._assemble(
            build_error_detail(exception, trace),
            UserContext.anonymous(),
            extra,
            request=request_ctx,
            response=response_ctx or ResponseContext(self.config.fallback_status_code),
        )
