"""Unit tests for source parsing helpers."""

import pytest

from psm_monitor.fetch.errors import HttpFailedError
from psm_monitor.sources.errors import (
    ErrorRecord,
    ParseError,
    SchemaError,
    SourceErrorClass,
)
from psm_monitor.sources.helpers import find_path, parse_json, read_scalar, to_float


class TestParseJson:
    """Tests for body decoding."""

    def test_valid(self) -> None:
        """Test a JSON body is decoded."""
        assert parse_json(b'{"a": 1}', "test") == {"a": 1}

    def test_invalid(self) -> None:
        """Test a non-JSON body raises ParseError."""
        with pytest.raises(ParseError) as exc_info:
            parse_json(b"<html>", "test")

        assert exc_info.value.source_id == "test"
        assert exc_info.value.error_class == SourceErrorClass.PARSE

    def test_oversized_integer_literal(self) -> None:
        """Test an integer beyond the decoder digit limit raises ParseError."""
        with pytest.raises(ParseError):
            parse_json(b"[1" + b"0" * 5000 + b"]", "test")

    def test_excessive_nesting(self) -> None:
        """Test a document nested past the recursion limit raises ParseError."""
        with pytest.raises(ParseError):
            parse_json(b"[" * 100_000 + b"]" * 100_000, "test")


class TestFindPath:
    """Tests for dotted path lookup."""

    def test_nested(self) -> None:
        """Test a nested value is found."""
        assert find_path({"a": {"b": {"c": 3}}}, "a.b.c", "test") == 3

    def test_missing_segment(self) -> None:
        """Test a missing segment raises SchemaError naming the path."""
        with pytest.raises(SchemaError) as exc_info:
            find_path({"a": {}}, "a.b", "test")

        assert exc_info.value.field == "a.b"

    def test_non_object_segment(self) -> None:
        """Test descending into a scalar raises SchemaError."""
        with pytest.raises(SchemaError):
            find_path({"a": 5}, "a.b", "test")


class TestToFloat:
    """Tests for numeric conversion."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(3, 3.0), (2.5, 2.5), ("0.125", 0.125), ("42", 42.0)],
    )
    def test_numeric(self, value: object, expected: float) -> None:
        """Test numbers and numeric strings convert."""
        assert to_float(value, "p", "test") == expected

    @pytest.mark.parametrize(
        "value",
        [True, None, "abc", [1], {"a": 1}, "nan", "inf", float("inf"), 10**400],
    )
    def test_non_numeric(self, value: object) -> None:
        """Test other values raise SchemaError."""
        with pytest.raises(SchemaError):
            to_float(value, "p", "test")


class TestReadScalar:
    """Tests for folding read failures into readings."""

    def test_success(self) -> None:
        """Test a successful read is returned as an ok reading."""
        reading = read_scalar("test", lambda: 1.5)

        assert reading.ok
        assert reading.value == 1.5

    def test_source_error(self) -> None:
        """Test a source error is attached to the reading."""

        def read() -> float:
            raise SchemaError("Missing field 'x'", source_id="test", field="x")

        reading = read_scalar("test", read)

        assert reading.value == 0.0
        assert reading.error == ErrorRecord(
            error_class=SourceErrorClass.SCHEMA,
            message="Missing field 'x'",
            source_id="test",
            details={"field": "x"},
        )

    def test_http_failure(self) -> None:
        """Test an exhausted request becomes a fetch error."""

        def read() -> float:
            raise HttpFailedError(url="https://x", req_id=1, attempts=3)

        reading = read_scalar("test", read)

        assert reading.error is not None
        assert reading.error.error_class == SourceErrorClass.FETCH
        assert "3 attempts" in reading.error.message

    def test_unexpected_errors_propagate(self) -> None:
        """Test programming errors are not swallowed."""

        def read() -> float:
            raise KeyError("bug")

        with pytest.raises(KeyError):
            read_scalar("test", read)
