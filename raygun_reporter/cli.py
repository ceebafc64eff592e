# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Command-line check that the configured Raygun endpoint accepts reports."""

import argparse
import sys

from .config import load_config
from .raygun_error_reporter import RaygunErrorReporter


def main(argv: list[str] | None = None) -> int:
    """Send one test message using RAYGUN_* environment configuration.

    Returns:
        0 when the service accepted the report, 1 otherwise
    """
    parser = argparse.ArgumentParser(
        prog="python -m raygun_reporter",
        description="Send a test message report to Raygun",
    )
    parser.add_argument(
        "message",
        nargs="?",
        default="raygun-reporter test message",
        help="Message to report",
    )
    parser.add_argument(
        "--data",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Custom data attached to the report (repeatable)",
    )
    args = parser.parse_args(argv)

    extra = {}
    for item in args.data:
        key, sep, value = item.partition("=")
        if not sep or not key:
            parser.error(f"--data expects KEY=VALUE, got {item!r}")
        extra[key] = value

    reporter = RaygunErrorReporter(load_config())
    result = reporter.capture_message(args.message, extra=extra)

    if result.success:
        print(f"Report accepted (HTTP {result.status_code})")
        return 0
    print(f"Report not delivered: {result.error}", file=sys.stderr)
    return 1
