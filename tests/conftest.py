# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Shared fixtures for raygun_reporter tests."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from raygun_reporter import (
    EnvironmentSnapshot,
    ReportAssembler,
    ReporterConfig,
    SilentErrorReporter,
    UserContext,
)
from raygun_reporter.logger import SilentLogger


FIXED_TIME = datetime(2025, 3, 14, 15, 9, 26, 535000, tzinfo=timezone.utc)


@pytest.fixture
def config():
    """Reporter configuration with a test API key."""
    return ReporterConfig(
        api_key="test-api-key",
        endpoint="https://raygun.example.com",
        tags=frozenset({"web", "backend"}),
        app_version="1.2.3",
        disk_paths=("/",),
    )


@pytest.fixture
def environment():
    """A fixed environment snapshot."""
    return EnvironmentSnapshot(
        os_version="Linux - 6.1.0",
        architecture="x86_64",
        runtime_version="CPython 3.12.1",
        processor_count=8,
        total_memory_bytes=16 * 1024 ** 3,
        host_name="test-host",
        free_disk_space=(1024.0, 2048.0),
    )


@pytest.fixture
def assembler(config, environment):
    """Assembler with a fixed clock and environment."""
    return ReportAssembler(
        config,
        environment_probe=lambda: environment,
        clock=lambda: FIXED_TIME,
    )


@pytest.fixture
def system_user():
    return UserContext(
        identifier="svc-batch",
        is_anonymous=False,
        email="batch@example.com",
        full_name="Batch Service",
        first_name="Batch",
        uuid="0b7c7e1e",
    )


@pytest.fixture
def silent_reporter():
    return SilentErrorReporter()


@pytest.fixture
def silent_logger():
    return SilentLogger(name="raygun_reporter.test")


@pytest.fixture
def accepted_response():
    """A mock HTTP response with status 202."""
    response = Mock()
    response.status_code = 202
    return response
