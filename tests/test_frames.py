# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for stack trace normalization."""

import re
import traceback

import pytest

from raygun_reporter.errors import NormalizationError
from raygun_reporter.frames import (
    SELF_MODULE,
    extract_trace,
    format_function,
    normalize_frame,
    normalize_trace,
    owning_type,
    parse_location,
    skip_frames,
)
from raygun_reporter.models import StackFrame

FUNCTION_PATTERN = re.compile(r"^[^/]+/\d+$")


def _inner_failure(a, b):
    raise ValueError("boom")


def _outer_call():
    _inner_failure(1, 2)


class TestNormalizeFrame:
    """Tests for normalize_frame."""

    def test_four_tuple(self):
        """Test a (module, function, arity, location) entry."""
        frame = normalize_frame(("orders.views", "show", 2, {"file": "orders/views.py", "line": 42}))

        assert frame == StackFrame(
            file="orders/views.py",
            line=42,
            function="show/2",
            owning_type="orders.views",
        )

    def test_three_tuple_belongs_to_self(self):
        """Test that a 3-tuple entry is owned by the reporting module."""
        frame = normalize_frame(("handle", 1, {"file": "app.py", "line": 7}))

        assert frame.owning_type == SELF_MODULE
        assert frame.function == "handle/1"
        assert frame.file == "app.py"
        assert frame.line == 7

    def test_argument_list_counts_as_arity(self):
        """Test that an argument list is rendered as its length."""
        frame = normalize_frame(("m", "update", ["a", {"b": 1}, None], {"file": "m.py", "line": 1}))

        assert frame.function == "update/3"

    def test_empty_argument_list(self):
        frame = normalize_frame(("m", "ping", [], {"file": "m.py", "line": 1}))

        assert frame.function == "ping/0"

    @pytest.mark.parametrize(
        "entry",
        [
            ("mod", "f", 0, {"file": "a.py", "line": 1}),
            ("g", 3, ("b.py", 10)),
            ("mod", "h", (1, 2), [("file", "c.py"), ("line", 5)]),
            ("i", 1, {}),
        ],
    )
    def test_function_matches_name_arity_pattern(self, entry):
        """Test that every accepted entry renders name/arity."""
        assert FUNCTION_PATTERN.match(normalize_frame(entry).function)

    def test_pair_location(self):
        frame = normalize_frame(("f", 0, ("lib/x.py", 12)))

        assert (frame.file, frame.line) == ("lib/x.py", 12)

    def test_keyword_list_location(self):
        frame = normalize_frame(("f", 0, [("file", b"lib/y.py"), ("line", 3)]))

        assert (frame.file, frame.line) == ("lib/y.py", 3)

    def test_missing_location_uses_sentinel(self):
        """Test that missing file/line degrade to empty file and line 0."""
        frame = normalize_frame(("mod", "f", 1, {}))

        assert frame.file == ""
        assert frame.line == 0
        assert frame.function == "f/1"
        assert frame.owning_type == "mod"

    def test_negative_line_uses_sentinel(self):
        frame = normalize_frame(("f", 1, {"file": "a.py", "line": -4}))

        assert (frame.file, frame.line) == ("", 0)

    def test_bad_arity_uses_zero(self):
        frame = normalize_frame(("f", None, {"file": "a.py", "line": 4}))

        assert frame.function == "f/0"

    def test_module_object_owning_type(self):
        frame = normalize_frame((re, "compile", 2, {"file": "re.py", "line": 1}))

        assert frame.owning_type == "re"

    def test_frame_summary(self):
        summary = traceback.FrameSummary("/srv/app/orders.py", 42, "show")

        frame = normalize_frame(summary)

        assert frame.file == "/srv/app/orders.py"
        assert frame.line == 42
        assert frame.function == "show/0"
        assert frame.owning_type == "orders"

    @pytest.mark.parametrize("entry", [("only", "two"), ("a", "b", "c", "d", "e"), "text"])
    def test_unrecognized_shape_raises(self, entry):
        with pytest.raises(NormalizationError):
            normalize_frame(entry)


class TestHelpers:
    """Tests for location and naming helpers."""

    def test_parse_location_missing_line(self):
        with pytest.raises(NormalizationError, match="missing file or line"):
            parse_location({"file": "a.py"})

    def test_parse_location_rejects_scalar(self):
        with pytest.raises(NormalizationError):
            parse_location(17)

    def test_format_function_with_callable(self):
        assert format_function(_outer_call, 0) == "_outer_call/0"

    def test_format_function_rejects_bool(self):
        with pytest.raises(NormalizationError):
            format_function("f", True)

    def test_owning_type_of_class(self):
        assert owning_type(StackFrame) == "StackFrame"


class TestNormalizeTrace:
    """Tests for whole-trace normalization."""

    def test_order_is_preserved(self):
        trace = [
            ("outer", 0, {"file": "a.py", "line": 1}),
            ("middle", 1, {"file": "b.py", "line": 2}),
            ("inner", 2, {"file": "c.py", "line": 3}),
        ]

        frames = normalize_trace(trace)

        assert [f.function for f in frames] == ["outer/0", "middle/1", "inner/2"]

    def test_bad_entry_does_not_drop_trace(self):
        """Test that an unrecognized entry becomes a sentinel frame."""
        frames = normalize_trace([("f", 0, ("a.py", 1)), "garbage", ("g", 0, ("b.py", 2))])

        assert len(frames) == 3
        assert frames[1] == StackFrame.empty()
        assert frames[2].function == "g/0"

    def test_empty_trace(self):
        assert normalize_trace([]) == ()


class TestExtractTrace:
    """Tests for reading raw entries from a live exception."""

    def test_extracts_runtime_order(self):
        try:
            _outer_call()
        except ValueError as e:
            entries = extract_trace(e)

        names = [entry[1] for entry in entries]
        assert names == ["test_extracts_runtime_order", "_outer_call", "_inner_failure"]

        module, function, arity, location = entries[-1]
        assert module == __name__
        assert arity == 2
        assert location["file"].endswith("test_frames.py")
        assert location["line"] > 0

    def test_exception_without_traceback(self):
        assert extract_trace(ValueError("never raised")) == []

    def test_extracted_entries_normalize(self):
        try:
            _outer_call()
        except ValueError as e:
            frames = normalize_trace(extract_trace(e))

        assert frames[-1].function == "_inner_failure/2"
        assert frames[-1].owning_type == __name__


class TestSkipFrames:
    """Tests for trimming leading traceback entries by module."""

    def test_skips_matching_modules(self):
        try:
            _outer_call()
        except ValueError as e:
            tb = e.__traceback__

        assert skip_frames(tb, ["raygun_reporter"]) is tb
        assert skip_frames(tb, [__name__]) is None

    def test_trimmed_trace_keeps_order(self):
        try:
            _outer_call()
        except ValueError as e:
            entries = extract_trace(e, skip_frames(e.__traceback__.tb_next, ["raygun_reporter"]))

        assert [entry[1] for entry in entries] == ["_outer_call", "_inner_failure"]

    def test_prefix_matches_whole_components(self):
        try:
            _outer_call()
        except ValueError as e:
            tb = e.__traceback__

        assert skip_frames(tb, [__name__[:-1]]) is tb
