# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Live machine state for the environment block of a report."""

import logging
import os
import platform
import shutil
import socket
import sys
from typing import Iterable

from .models import EnvironmentSnapshot

logger = logging.getLogger(__name__)


def total_memory_bytes() -> int:
    """Physical memory size, or 0 where the platform does not expose it."""
    try:
        return os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        return 0


def free_disk_space(paths: Iterable[str]) -> tuple[float, ...]:
    """Free bytes on each volume; unreadable volumes are skipped."""
    free = []
    for path in paths:
        try:
            free.append(float(shutil.disk_usage(path).free))
        except OSError as e:
            logger.debug("Skipping disk %s: %s", path, e)
    return tuple(free)


def capture_environment(disk_paths: Iterable[str] = (os.sep,)) -> EnvironmentSnapshot:
    """Sample the machine state. Not cached; every call hits the OS."""
    return EnvironmentSnapshot(
        os_version=f"{platform.system()} - {platform.release()}",
        architecture=platform.machine(),
        runtime_version=f"{platform.python_implementation()} {sys.version.split()[0]}",
        processor_count=os.cpu_count() or 0,
        total_memory_bytes=total_memory_bytes(),
        host_name=socket.gethostname(),
        free_disk_space=free_disk_space(disk_paths),
    )
