# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract error reporter interface for the capture entry points."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping

from .client import DeliveryResult
from .models import RequestContext, ResponseContext


class ErrorReporter(ABC):
    """Abstract base class for error reporting.

    Implementations turn an exception or message into a report and attempt
    delivery. Every capture returns a DeliveryResult; none of them raise
    because delivery failed.
    """

    @abstractmethod
    def capture_exception(
        self,
        exception: BaseException,
        trace: Iterable[Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        """Report an exception.

        Args:
            exception: The exception to report
            trace: Raw trace entries; taken from the exception when None
            extra: Free-form data reported as userCustomData
        """
        pass

    @abstractmethod
    def capture_message(
        self,
        message: str,
        extra: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        """Report a message that has no exception attached.

        Args:
            message: The message to report
            extra: Free-form data reported as userCustomData
        """
        pass

    @abstractmethod
    def capture_request_exception(
        self,
        request_ctx: RequestContext,
        exception: BaseException,
        trace: Iterable[Any] | None = None,
        extra: Mapping[str, Any] | None = None,
        response_ctx: ResponseContext | None = None,
    ) -> DeliveryResult:
        """Report an exception raised while handling an HTTP request.

        Args:
            request_ctx: Request being handled when the exception escaped
            exception: The exception to report
            trace: Raw trace entries; taken from the exception when None
            extra: Free-form data reported as userCustomData
            response_ctx: Response status to report; defaults to the fallback status
        """
        pass

    def report(self, error: BaseException, context: Mapping[str, Any] | None = None) -> DeliveryResult:
        """Report an exception with optional context (alias of capture_exception)."""
        return self.capture_exception(error, extra=context)
