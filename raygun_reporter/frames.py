# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Normalization of raw stack trace entries into StackFrame records.

A raw entry is one of:

* ``(owning_module, function, arity_or_args, location)``
* ``(function, arity_or_args, location)``, owned by the reporting module
* ``traceback.FrameSummary``

``location`` carries the file and line either as a mapping with ``file`` and
``line`` keys, a ``(file, line)`` pair, or a sequence of ``(key, value)``
pairs. Entries whose location cannot be read keep their function identity
and get an empty file name and line 0.
"""

import inspect
import logging
import traceback
from collections.abc import Mapping, Sequence
from types import TracebackType
from typing import Any, Iterable

from .errors import NormalizationError
from .models import StackFrame

logger = logging.getLogger(__name__)

SELF_MODULE = "self"


def format_function(function: Any, arity_or_args: Any) -> str:
    """Render function identity as ``name/arity``."""
    if isinstance(arity_or_args, int) and not isinstance(arity_or_args, bool):
        arity = arity_or_args
    elif isinstance(arity_or_args, Sequence) and not isinstance(arity_or_args, (str, bytes)):
        arity = len(arity_or_args)
    else:
        raise NormalizationError(f"arity must be an int or argument list, got {arity_or_args!r}")
    name = getattr(function, "__name__", function)
    return f"{name}/{arity}"


def owning_type(module: Any) -> str:
    """String form of the module (or class) that owns a frame."""
    if isinstance(module, str):
        return module
    return getattr(module, "__name__", None) or str(module)


def _location_pairs(location: Any) -> dict[str, Any]:
    if isinstance(location, Mapping):
        return dict(location)
    if isinstance(location, Sequence) and not isinstance(location, (str, bytes)):
        if len(location) == 2 and not any(isinstance(item, (tuple, list)) for item in location):
            return {"file": location[0], "line": location[1]}
        try:
            return dict(location)
        except (TypeError, ValueError) as e:
            raise NormalizationError(f"unreadable location: {location!r}") from e
    raise NormalizationError(f"unreadable location: {location!r}")


def parse_location(location: Any) -> tuple[str, int]:
    """Return ``(file, line)`` from a location.

    Raises:
        NormalizationError: If the file or line is missing or malformed
    """
    pairs = _location_pairs(location)
    file = pairs.get("file")
    line = pairs.get("line")
    if file is None or line is None:
        raise NormalizationError(f"location is missing file or line: {location!r}")
    if isinstance(file, bytes):
        file = file.decode("utf-8", errors="replace")
    if isinstance(line, bool) or not isinstance(line, int) or line < 0:
        raise NormalizationError(f"line must be a non-negative int, got {line!r}")
    return str(file), line


def normalize_frame(entry: Any) -> StackFrame:
    """Convert one raw trace entry into a StackFrame.

    Raises:
        NormalizationError: If the entry shape itself is not recognized
    """
    if isinstance(entry, traceback.FrameSummary):
        # FrameSummary keeps no module object or argument count
        module = inspect.getmodulename(entry.filename or "") or SELF_MODULE
        entry = (module, entry.name, 0, {"file": entry.filename, "line": entry.lineno})

    if not isinstance(entry, tuple):
        raise NormalizationError(f"unsupported trace entry: {entry!r}")
    if len(entry) == 3:
        entry = (SELF_MODULE, *entry)
    if len(entry) != 4:
        raise NormalizationError(f"trace entry must have 3 or 4 items, got {len(entry)}")

    module, function, arity_or_args, location = entry
    try:
        file, line = parse_location(location)
    except NormalizationError as e:
        logger.debug("Using sentinel location for %s: %s", function, e)
        file, line = "", 0

    try:
        function_name = format_function(function, arity_or_args)
    except NormalizationError as e:
        logger.debug("Using arity 0 for %s: %s", function, e)
        function_name = format_function(function, 0)

    return StackFrame(
        file=file,
        line=line,
        function=function_name,
        owning_type=owning_type(module),
    )


def normalize_trace(trace: Iterable[Any]) -> tuple[StackFrame, ...]:
    """Normalize every entry of a trace, keeping its order.

    Unrecognized entries become sentinel frames so one bad entry never
    drops the rest of the trace.
    """
    frames = []
    for entry in trace:
        try:
            frames.append(normalize_frame(entry))
        except NormalizationError as e:
            logger.debug("Using sentinel frame: %s", e)
            frames.append(StackFrame.empty())
    return tuple(frames)


def extract_trace(
    exception: BaseException,
    tb: TracebackType | None = None,
) -> list[tuple[str, str, int, dict[str, Any]]]:
    """Turn an exception's traceback into raw 4-tuple entries.

    Entries are in the order the interpreter records them, outermost first.

    Args:
        exception: Exception whose ``__traceback__`` is read
        tb: Explicit traceback to use instead, e.g. from ``sys.exc_info()``

    Returns:
        List of ``(module, function, argument_count, location)`` tuples
    """
    tb = tb if tb is not None else exception.__traceback__
    entries = []
    for frame, lineno in traceback.walk_tb(tb):
        code = frame.f_code
        entries.append((
            frame.f_globals.get("__name__", SELF_MODULE),
            code.co_name,
            code.co_argcount,
            {"file": code.co_filename, "line": lineno or 0},
        ))
    return entries


def skip_frames(tb: TracebackType | None, modules: Iterable[str]) -> TracebackType | None:
    """Advance past leading traceback entries whose code lives in ``modules``.

    A module matches by exact name or as a dotted prefix. Returns None when
    every entry matches, so callers fall back to the full traceback.
    """
    prefixes = tuple(modules)
    while tb is not None:
        name = tb.tb_frame.f_globals.get("__name__", "")
        if not any(name == prefix or name.startswith(prefix + ".") for prefix in prefixes):
            return tb
        tb = tb.tb_next
    return None
