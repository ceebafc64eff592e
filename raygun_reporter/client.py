# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""HTTP delivery of reports to the Raygun entries endpoint."""

from dataclasses import dataclass

import requests

from . import __version__
from .config import ReporterConfig
from .errors import ConfigurationError, DeliveryError
from .logger import Logger, create_logger
from .models import Report

ACCEPTED_STATUS = 202
USER_AGENT = f"raygun-reporter-python/{__version__}"


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of one delivery attempt.

    Attributes:
        success: True only when the service answered 202
        status_code: HTTP status, None when no response was received
        error: DeliveryError describing the failure, None on success
    """

    success: bool
    status_code: int | None = None
    error: DeliveryError | None = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, status_code: int = ACCEPTED_STATUS) -> "DeliveryResult":
        return cls(success=True, status_code=status_code)

    @classmethod
    def failed(cls, error: DeliveryError) -> "DeliveryResult":
        return cls(success=False, status_code=error.status_code, error=error)


class RaygunClient:
    """Sends one report per call with a single synchronous POST.

    There is no retry, queue or batching: one send, one outcome.
    """

    def __init__(
        self,
        config: ReporterConfig,
        session: requests.Session | None = None,
        logger: Logger | None = None,
    ):
        """Initialize the client.

        Args:
            config: Reporter configuration providing endpoint, API key and timeout
            session: Optional requests session to send through
            logger: Optional logger (defaults to a stdout logger)
        """
        self.config = config
        self.session = session
        self.logger = logger or create_logger(name="raygun_reporter.client")

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json; charset=utf-8",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "X-ApiKey": self.config.api_key,
        }

    def send(self, report: Report) -> DeliveryResult:
        """Serialize and POST a report.

        Never raises for delivery problems; they come back as a failed result.

        Args:
            report: The report to deliver

        Returns:
            DeliveryResult, successful only for HTTP 202
        """
        if not self.config.api_key:
            return DeliveryResult.failed(ConfigurationError("Raygun API key is not configured"))
        if not self.config.endpoint:
            return DeliveryResult.failed(ConfigurationError("Raygun endpoint is not configured"))

        url = self.config.entries_url
        try:
            body = report.to_json()
        except (TypeError, ValueError) as e:
            return DeliveryResult.failed(DeliveryError(f"Report serialization failed: {e}", cause=e))
        post = self.session.post if self.session is not None else requests.post

        try:
            response = post(url, data=body, headers=self.headers(), timeout=self.config.timeout)
        except (
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema,
            requests.exceptions.InvalidURL,
        ) as e:
            return DeliveryResult.failed(ConfigurationError(f"Invalid Raygun endpoint {url}: {e}", cause=e))
        except requests.RequestException as e:
            self.logger.debug("Report delivery transport failure", url=url, error=str(e))
            return DeliveryResult.failed(DeliveryError(f"Failed to reach {url}: {e}", cause=e))

        if response.status_code != ACCEPTED_STATUS:
            return DeliveryResult.failed(
                DeliveryError(
                    f"Raygun rejected report with HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            )

        self.logger.debug("Report delivered", url=url, bytes=len(body))
        return DeliveryResult.ok(response.status_code)
