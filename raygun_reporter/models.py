# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Typed report model and its rendering to the Raygun entries JSON shape.

Field names produced by the ``to_dict`` methods are the remote service's
contract and must not be changed.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as second-precision ISO-8601 UTC ending in Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class StackFrame:
    """One normalized stack trace entry."""

    file: str
    line: int
    function: str
    owning_type: str

    @classmethod
    def empty(cls) -> "StackFrame":
        return cls(file="", line=0, function="", owning_type="")

    def to_dict(self) -> dict[str, Any]:
        return {
            "lineNumber": self.line,
            "className": self.owning_type,
            "fileName": self.file,
            "methodName": self.function,
        }


@dataclass(frozen=True)
class ErrorDetail:
    """The error block of a report.

    Attributes:
        message: Exception message or captured log message
        frames: Normalized frames in runtime order
        class_name: Reported error class; defaults to the primary frame's owning type
        inner_error: Error this one was raised from, if any
    """

    message: str
    frames: tuple[StackFrame, ...] = ()
    class_name: str | None = None
    inner_error: "ErrorDetail | None" = None

    @property
    def primary_frame(self) -> StackFrame:
        if not self.frames:
            return StackFrame.empty()
        return self.frames[0]

    def to_dict(self) -> dict[str, Any]:
        primary = self.primary_frame
        return {
            "innerError": self.inner_error.to_dict() if self.inner_error else None,
            "data": {
                "fileName": primary.file,
                "lineNumber": primary.line,
                "function": primary.function,
            },
            "className": self.class_name if self.class_name is not None else primary.owning_type,
            "message": self.message,
            "stackTrace": [frame.to_dict() for frame in self.frames],
        }


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Machine state sampled when a report is assembled."""

    os_version: str
    architecture: str
    runtime_version: str
    processor_count: int
    total_memory_bytes: int
    host_name: str
    free_disk_space: tuple[float, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "osVersion": self.os_version,
            "architecture": self.architecture,
            "packageVersion": self.runtime_version,
            "processorCount": self.processor_count,
            "totalPhysicalMemory": self.total_memory_bytes,
            "deviceName": self.host_name,
            "diskSpaceFree": list(self.free_disk_space),
        }


@dataclass(frozen=True)
class RequestContext:
    """HTTP request data attached to request-scoped captures."""

    host_name: str
    url: str
    method: str
    remote_ip: str = ""
    query_params: Mapping[str, Any] = field(default_factory=dict)
    form_params: Mapping[str, Any] = field(default_factory=dict)
    headers: tuple[tuple[str, str], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "hostName": self.host_name,
            "url": self.url,
            "httpMethod": self.method,
            "iPAddress": self.remote_ip,
            "queryString": dict(self.query_params),
            "form": dict(self.form_params),
            "headers": [[name, value] for name, value in self.headers],
            "rawData": {},
        }


@dataclass(frozen=True)
class ResponseContext:
    status_code: int

    def to_dict(self) -> dict[str, Any]:
        return {"statusCode": self.status_code}


@dataclass(frozen=True)
class UserContext:
    """Identity of the affected user; anonymous unless stated otherwise."""

    identifier: str = ""
    is_anonymous: bool = True
    email: str = ""
    full_name: str = ""
    first_name: str = ""
    uuid: str = ""

    @classmethod
    def anonymous(cls) -> "UserContext":
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserContext":
        """Build a UserContext from snake_case or Raygun camelCase keys."""
        def pick(*keys: str, default: Any = "") -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        return cls(
            identifier=str(pick("identifier")),
            is_anonymous=bool(pick("is_anonymous", "isAnonymous", default=True)),
            email=str(pick("email")),
            full_name=str(pick("full_name", "fullName")),
            first_name=str(pick("first_name", "firstName")),
            uuid=str(pick("uuid")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "isAnonymous": self.is_anonymous,
            "email": self.email,
            "fullName": self.full_name,
            "firstName": self.first_name,
            "uuid": self.uuid,
        }


@dataclass(frozen=True)
class CustomContext:
    """Configured tags plus caller-supplied free-form data."""

    tags: frozenset[str] = frozenset()
    user_custom_data: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tags": sorted(self.tags),
            "userCustomData": dict(self.user_custom_data),
        }


@dataclass(frozen=True)
class ClientDetails:
    """Base details stub identifying the reporting machine and client."""

    machine_name: str
    version: str
    client_name: str
    client_version: str
    client_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "machineName": self.machine_name,
            "version": self.version,
            "client": {
                "name": self.client_name,
                "version": self.client_version,
                "clientUrl": self.client_url,
            },
        }


@dataclass(frozen=True)
class Report:
    """A complete report for one error or message occurrence."""

    occurred_on: datetime
    client: ClientDetails
    error: ErrorDetail
    environment: EnvironmentSnapshot
    user: UserContext
    custom: CustomContext
    request: RequestContext | None = None
    response: ResponseContext | None = None

    def to_dict(self) -> dict[str, Any]:
        # Sections are written in precedence order: stub, error, environment,
        # request, response, user, custom.
        details = self.client.to_dict()
        details["error"] = self.error.to_dict()
        details["environment"] = self.environment.to_dict()
        if self.request is not None:
            details["request"] = self.request.to_dict()
        if self.response is not None:
            details["response"] = self.response.to_dict()
        details["user"] = self.user.to_dict()
        details.update(self.custom.to_dict())
        return {
            "occurredOn": format_timestamp(self.occurred_on),
            "details": details,
        }

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict(), default=str, ensure_ascii=False).encode("utf-8")
