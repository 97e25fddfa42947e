"""Unit tests for MCP argument validation."""

from datetime import timezone

import pytest

from mcp_server.utils.validation import (
    MAX_LIMIT,
    validate_iso_datetime,
    validate_limit,
    validate_non_empty_string,
    validate_offset,
    validate_optional_string,
    validate_positive_int,
)


class TestValidatePositiveInt:

    def test_valid_int(self):
        assert validate_positive_int(5, "limit") == (5, None)

    def test_whole_float_is_accepted(self):
        assert validate_positive_int(5.0, "limit") == (5, None)

    def test_numeric_string_is_accepted(self):
        assert validate_positive_int("7", "limit") == (7, None)

    def test_fractional_float_is_rejected(self):
        value, error = validate_positive_int(5.5, "limit")
        assert value is None
        assert "whole number" in error

    def test_bool_is_rejected(self):
        value, error = validate_positive_int(True, "limit")
        assert value is None
        assert "bool" in error

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_float_is_rejected(self, value):
        result, error = validate_positive_int(value, "limit")
        assert result is None
        assert error == "Invalid limit: must be an integer, got float"

    def test_non_numeric_is_rejected(self):
        _, error = validate_positive_int("ten", "limit")
        assert "must be an integer" in error

    def test_bounds(self):
        assert "at least 1" in validate_positive_int(0, "limit")[1]
        assert f"at most {MAX_LIMIT}" in validate_positive_int(MAX_LIMIT + 1, "limit")[1]

    def test_none_passes_through(self):
        assert validate_positive_int(None, "limit") == (None, None)


class TestLimitAndOffset:

    def test_limit_default(self):
        assert validate_limit(None, default=50) == (50, None)

    def test_limit_custom_max(self):
        _, error = validate_limit(101, default=20, max_val=100)
        assert "at most 100" in error

    def test_offset_default(self):
        assert validate_offset(None) == (0, None)

    def test_offset_zero_is_valid(self):
        assert validate_offset(0) == (0, None)

    def test_negative_offset_is_rejected(self):
        _, error = validate_offset(-1)
        assert "at least 0" in error


class TestStrings:

    def test_non_empty_string_strips(self):
        assert validate_non_empty_string("  abc ", "chatGuid") == ("abc", None)

    def test_non_empty_string_missing(self):
        _, error = validate_non_empty_string(None, "chatGuid")
        assert error == "Missing required parameter: chatGuid"

    def test_non_empty_string_blank(self):
        _, error = validate_non_empty_string("   ", "chatGuid")
        assert "cannot be empty" in error

    def test_non_empty_string_wrong_type(self):
        _, error = validate_non_empty_string(42, "chatGuid")
        assert "must be a string" in error

    def test_optional_string_blank_is_absent(self):
        assert validate_optional_string("  ", "query") == (None, None)

    def test_optional_string_wrong_type(self):
        _, error = validate_optional_string(["x"], "query")
        assert "must be a string" in error


class TestValidateIsoDatetime:

    def test_absent(self):
        assert validate_iso_datetime(None, "startDate") == (None, None)
        assert validate_iso_datetime("", "startDate") == (None, None)

    def test_zulu_time(self):
        value, error = validate_iso_datetime("2025-08-04T07:37:39.000Z", "startDate")
        assert error is None
        assert value.utcoffset().total_seconds() == 0
        assert (value.year, value.month, value.day, value.hour) == (2025, 8, 4, 7)

    def test_naive_is_utc(self):
        value, error = validate_iso_datetime("2024-01-01T12:00:00", "endDate")
        assert error is None
        assert value.tzinfo == timezone.utc

    def test_date_only(self):
        value, error = validate_iso_datetime("2024-01-01", "startDate")
        assert error is None
        assert value.hour == 0

    @pytest.mark.parametrize("bad", ["yesterday", "2024-13-45", "01/02/2024"])
    def test_unparseable(self, bad):
        value, error = validate_iso_datetime(bad, "startDate")
        assert value is None
        assert "ISO 8601" in error
