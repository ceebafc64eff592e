# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Reporter configuration and the providers it is loaded from.

Configuration is read once into an immutable ReporterConfig which is then
handed to the assembler and the delivery client. Nothing in the pipeline
reads process-wide settings at capture time.
"""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from .models import UserContext

DEFAULT_ENDPOINT = "https://api.raygun.io"
DEFAULT_CLIENT_URL = "https://github.com/Alan-Jowett/CoPilot-For-Consensus"
DEFAULT_FALLBACK_STATUS = 500

_USER_FIELDS = {
    "RAYGUN_USER_IDENTIFIER": "identifier",
    "RAYGUN_USER_EMAIL": "email",
    "RAYGUN_USER_FULL_NAME": "full_name",
    "RAYGUN_USER_FIRST_NAME": "first_name",
    "RAYGUN_USER_UUID": "uuid",
}


class ConfigProvider(ABC):
    """Abstract base class for configuration providers."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        raise NotImplementedError

    @abstractmethod
    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer configuration value."""
        raise NotImplementedError

    def get_float(self, key: str, default: float | None = None) -> float | None:
        """Get a float configuration value, falling back on parse errors."""
        value = self.get(key)
        if value is None or value == "":
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    def get_list(self, key: str, separator: str = ",") -> list[str]:
        """Get a separator-delimited list, dropping blank items."""
        value = self.get(key)
        if value is None:
            return []
        if isinstance(value, str):
            items = value.split(separator)
        else:
            items = list(value)
        return [str(item).strip() for item in items if str(item).strip()]


class EnvConfigProvider(ConfigProvider):
    """Configuration provider that reads from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None):
        self._environ = environ if environ is not None else os.environ

    def get(self, key: str, default: Any = None) -> Any:
        return self._environ.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._environ.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default


class StaticConfigProvider(ConfigProvider):
    """Configuration provider with static values (useful for tests)."""

    def __init__(self, config: dict[str, Any] | None = None):
        self._config = config if config is not None else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._config.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except (ValueError, TypeError):
            return default


@dataclass(frozen=True)
class ReporterConfig:
    """Immutable settings shared by the assembler and the delivery client.

    Attributes:
        api_key: Raygun application API key (sent as X-ApiKey)
        endpoint: Base URL of the ingestion API; reports go to <endpoint>/entries
        tags: Tags attached to every report
        system_user: Identity reported for captures outside a request
        app_version: Application version reported in details.version
        client_url: URL reported in details.client.clientUrl
        timeout: HTTP timeout in seconds, None for the transport default
        fallback_status_code: Response status reported for failed requests
        disk_paths: Volumes sampled for free disk space
    """

    api_key: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    tags: frozenset[str] = frozenset()
    system_user: UserContext | None = None
    app_version: str = ""
    client_url: str = DEFAULT_CLIENT_URL
    timeout: float | None = None
    fallback_status_code: int = DEFAULT_FALLBACK_STATUS
    disk_paths: tuple[str, ...] = field(default_factory=lambda: (os.path.abspath(os.sep),))

    @property
    def entries_url(self) -> str:
        return self.endpoint.rstrip("/") + "/entries"


def load_config(provider: ConfigProvider | None = None) -> ReporterConfig:
    """Load reporter configuration.

    Values are taken as given; a missing API key is reported by the delivery
    client when a report is sent, not here.

    Args:
        provider: Source of raw settings. Defaults to the process environment.

    Returns:
        ReporterConfig instance
    """
    provider = provider or EnvConfigProvider()

    user_values = {
        attr: provider.get(key)
        for key, attr in _USER_FIELDS.items()
        if provider.get(key)
    }
    system_user = None
    if user_values:
        system_user = UserContext.from_mapping({**user_values, "is_anonymous": False})

    disk_paths = tuple(provider.get_list("RAYGUN_DISK_PATHS", separator=os.pathsep))

    return ReporterConfig(
        api_key=provider.get("RAYGUN_API_KEY", "") or "",
        endpoint=provider.get("RAYGUN_ENDPOINT") or DEFAULT_ENDPOINT,
        tags=frozenset(provider.get_list("RAYGUN_TAGS")),
        system_user=system_user,
        app_version=provider.get("RAYGUN_APP_VERSION", "") or "",
        client_url=provider.get("RAYGUN_CLIENT_URL") or DEFAULT_CLIENT_URL,
        timeout=provider.get_float("RAYGUN_TIMEOUT"),
        fallback_status_code=provider.get_int("RAYGUN_FALLBACK_STATUS", DEFAULT_FALLBACK_STATUS),
        disk_paths=disk_paths or (os.path.abspath(os.sep),),
    )
