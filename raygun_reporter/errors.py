# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Error types raised or returned by the reporting pipeline."""


class RaygunReporterError(Exception):
    """Base class for all raygun_reporter errors."""


class NormalizationError(RaygunReporterError):
    """A raw stack trace entry could not be turned into a frame."""


class DeliveryError(RaygunReporterError):
    """A report could not be delivered to the remote service.

    Delivery errors are carried inside a DeliveryResult rather than raised,
    so reporting can never mask the application error being reported.

    Attributes:
        status_code: HTTP status returned by the service, if any
        cause: Underlying transport exception, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.cause = cause


class ConfigurationError(DeliveryError):
    """API key or endpoint missing or unusable at send time."""
