# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Error reporter that delivers reports to Raygun."""

from typing import Any, Callable, Iterable, Mapping

from .assembler import ReportAssembler
from .client import DeliveryResult, RaygunClient
from .config import ReporterConfig, load_config
from .error_reporter import ErrorReporter
from .errors import DeliveryError
from .logger import Logger, create_logger
from .models import Report, RequestContext, ResponseContext


class RaygunErrorReporter(ErrorReporter):
    """Captures exceptions and messages and sends them to Raygun.

    Each capture assembles a report and sends it synchronously on the
    calling thread. A failed delivery is logged and returned; it is never
    raised into the host application.

    Example:
        reporter = RaygunErrorReporter(load_config())
        try:
            handle()
        except Exception as e:
            reporter.capture_exception(e, extra={"job": "nightly"})
            raise
    """

    def __init__(
        self,
        config: ReporterConfig,
        assembler: ReportAssembler | None = None,
        client: RaygunClient | None = None,
        logger: Logger | None = None,
    ):
        self.config = config
        self.logger = logger or create_logger(name="raygun_reporter.reporter")
        self.assembler = assembler or ReportAssembler(config)
        self.client = client or RaygunClient(config, logger=self.logger)

    @classmethod
    def from_env(cls) -> "RaygunErrorReporter":
        """Create a reporter configured from RAYGUN_* environment variables."""
        return cls(load_config())

    def _deliver(self, kind: str, build: Callable[[], Report]) -> DeliveryResult:
        try:
            report = build()
        except Exception as e:
            self.logger.exception("Failed to assemble error report", kind=kind)
            return DeliveryResult.failed(DeliveryError(f"Report assembly failed: {e}", cause=e))

        result = self.client.send(report)
        if not result.success:
            self.logger.warning(
                "Error report was not delivered",
                kind=kind,
                status_code=result.status_code,
                error=str(result.error),
            )
        return result

    def capture_exception(
        self,
        exception: BaseException,
        trace: Iterable[Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        return self._deliver(
            "exception",
            lambda: self.assembler.build_from_exception(trace, exception, extra),
        )

    def capture_message(
        self,
        message: str,
        extra: Mapping[str, Any] | None = None,
    ) -> DeliveryResult:
        return self._deliver(
            "message",
            lambda: self.assembler.build_from_message(message, extra),
        )

    def capture_request_exception(
        self,
        request_ctx: RequestContext,
        exception: BaseException,
        trace: Iterable[Any] | None = None,
        extra: Mapping[str, Any] | None = None,
        response_ctx: ResponseContext | None = None,
    ) -> DeliveryResult:
        return self._deliver(
            "request",
            lambda: self.assembler.build_from_request(
                request_ctx, trace, exception, extra, response_ctx
            ),
        )
