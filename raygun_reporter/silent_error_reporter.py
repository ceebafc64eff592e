# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Silent error reporter implementation for testing."""

from typing import Any, Iterable, Mapping

from .client import DeliveryResult
from .error_reporter import ErrorReporter
from .models import RequestContext, ResponseContext


class SilentErrorReporter(ErrorReporter):
    """Error reporter that records captures in memory instead of sending them.

    Useful in unit tests of code wired to an ErrorReporter: assertions can
    inspect what would have been reported without any network access.
    """

    def __init__(self):
        self.captures: list[dict[str, Any]] = []

    def _record(self, kind: str, **fields: Any) -> DeliveryResult:
        self.captures.append({"kind": kind, **fields})
        return DeliveryResult.ok()

    def capture_exception(
        self,
        exception: BaseException,
        trace: Iterable[Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        return self._record(
            "exception",
            exception=exception,
            trace=list(trace) if trace is not None else None,
            extra=dict(extra or {}),
        )

    def capture_message(
        self,
        message: str,
        extra: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        return self._record("message", message=message, extra=dict(extra or {}))

    def capture_request_exception(
        self,
        request_ctx: RequestContext,
        exception: BaseException,
        trace: Iterable[Any] | None = None,
        extra: Mapping[str, Any] | None = None,
        response_ctx: ResponseContext | None = None,
    ) -> DeliveryResult:
        return self._record(
            "request",
            request=request_ctx,
            exception=exception,
            trace=list(trace) if trace is not None else None,
            extra=dict(extra or {}),
            response=response_ctx,
        )

    def get_captures(self, kind: str | None = None) -> list[dict[str, Any]]:
        """Get recorded captures, optionally only one kind (exception, message, request)."""
        if kind:
            return [c for c in self.captures if c["kind"] == kind]
        return self.captures

    def has_captures(self, kind: str | None = None) -> bool:
        return len(self.get_captures(kind)) > 0

    def clear(self) -> None:
        self.captures.clear()
