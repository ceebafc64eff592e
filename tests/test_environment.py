# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for the environment snapshot."""

import os
import socket
from collections import namedtuple
from unittest.mock import patch

from raygun_reporter.environment import capture_environment, free_disk_space, total_memory_bytes

DiskUsage = namedtuple("DiskUsage", "total used free")


def test_capture_environment_fields():
    snapshot = capture_environment([os.sep])

    assert " - " in snapshot.os_version
    assert snapshot.host_name == socket.gethostname()
    assert snapshot.processor_count >= 1
    assert snapshot.total_memory_bytes >= 0
    assert len(snapshot.free_disk_space) == 1
    assert snapshot.runtime_version


def test_free_disk_space_per_volume():
    usage = {"/": DiskUsage(100, 40, 60), "/data": DiskUsage(500, 100, 400)}

    with patch("raygun_reporter.environment.shutil.disk_usage", side_effect=lambda p: usage[p]):
        assert free_disk_space(["/", "/data"]) == (60.0, 400.0)


def test_unreadable_volume_is_skipped():
    def disk_usage(path):
        if path == "/gone":
            raise FileNotFoundError(path)
        return DiskUsage(10, 5, 5)

    with patch("raygun_reporter.environment.shutil.disk_usage", side_effect=disk_usage):
        assert free_disk_space(["/gone", "/"]) == (5.0,)


def test_total_memory_unavailable():
    with patch("raygun_reporter.environment.os.sysconf", side_effect=ValueError("unsupported")):
        assert total_memory_bytes() == 0


def test_snapshot_not_cached():
    with patch("raygun_reporter.environment.socket.gethostname", side_effect=["first", "second"]):
        assert capture_environment([]).host_name == "first"
        assert capture_environment([]).host_name == "second"
