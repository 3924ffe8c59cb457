"""Tests for timestamp recognition and conversion."""

from __future__ import annotations

from datetime import datetime

import pytest

from mdoutline.timestamps import (
    comparable_timestamp,
    compatible_formats,
    convert_timestamp,
    get_date_format,
    match_leading_timestamp,
    parse_timestamp,
)

DATETIME = get_date_format("1. Standard datetime")
DATE = get_date_format("2. Standard date")
WEEKDAY_DATETIME = get_date_format("3. Weekday & datetime")
WEEKDAY_DATE = get_date_format("4. Weekday & date")
ZONED = get_date_format("5. Standard datetime & timezone")


class TestMatchLeadingTimestamp:
    """Tests for match_leading_timestamp."""

    @pytest.mark.parametrize(
        ("text", "timestamp", "fmt"),
        [
            ("2024-03-01T10:00:00 Meeting", "2024-03-01T10:00:00", DATETIME),
            ("2024-03-01 Meeting", "2024-03-01", DATE),
            ("5 2024-03-01 10:00:00 Meeting", "5 2024-03-01 10:00:00", WEEKDAY_DATETIME),
            ("5 2024-03-01 Meeting", "5 2024-03-01", WEEKDAY_DATE),
            ("2024-03-01T10:00:00+01:00 Meeting", "2024-03-01T10:00:00+01:00", ZONED),
            ("2024-03-01T10:00:00Z", "2024-03-01T10:00:00Z", ZONED),
        ],
    )
    def test_formats(self, text: str, timestamp: str, fmt) -> None:
        """Each supported layout is recognised at the start of the text."""
        assert match_leading_timestamp(text) == (timestamp, fmt)

    @pytest.mark.parametrize("text", ["Meeting 2024-03-01", "Plain title", "24-03-01 short year"])
    def test_no_leading_timestamp(self, text: str) -> None:
        """Timestamps later in the text, or malformed ones, are ignored."""
        assert match_leading_timestamp(text) is None


class TestConversion:
    """Tests for parsing and converting timestamps."""

    def test_parse_weekday_format(self) -> None:
        """The weekday prefix is not part of the parsed moment."""
        assert parse_timestamp("5 2024-03-01", WEEKDAY_DATE) == datetime(2024, 3, 1)

    def test_parse_invalid(self) -> None:
        """Impossible dates raise ValueError."""
        with pytest.raises(ValueError):
            parse_timestamp("2024-02-31", DATE)

    @pytest.mark.parametrize(
        ("value", "source", "target", "expected"),
        [
            ("2024-03-01", DATE, WEEKDAY_DATE, "5 2024-03-01"),
            ("5 2024-03-01", WEEKDAY_DATE, DATE, "2024-03-01"),
            ("2024-03-01T10:00:00", DATETIME, WEEKDAY_DATETIME, "5 2024-03-01 10:00:00"),
            ("2024-03-01T10:00:00+01:00", ZONED, DATETIME, "2024-03-01T10:00:00"),
            ("2024-03-01T10:00:00Z", ZONED, ZONED, "2024-03-01T10:00:00+00:00"),
        ],
    )
    def test_convert(self, value: str, source, target, expected: str) -> None:
        """Conversion keeps the wall-clock time."""
        assert convert_timestamp(value, source, target) == expected

    def test_naive_to_zoned_gets_an_offset(self) -> None:
        """Converting to the timezone format always writes an offset."""
        converted = convert_timestamp("2024-03-01T10:00:00", DATETIME, ZONED)
        assert converted.startswith("2024-03-01T10:00:00")
        assert match_leading_timestamp(converted) == (converted, ZONED)

    def test_comparable_timestamp_normalises_offsets(self) -> None:
        """Aware times compare by their UTC moment."""
        assert comparable_timestamp("2024-03-01T10:00:00+02:00", ZONED) == datetime(2024, 3, 1, 8)
        assert comparable_timestamp("2024-03-01", DATE) == datetime(2024, 3, 1)


class TestCompatibleFormats:
    """Tests for compatible_formats."""

    def test_dates_convert_to_dates(self) -> None:
        """Date formats only offer the other date format."""
        assert compatible_formats(DATE) == [WEEKDAY_DATE]
        assert compatible_formats(WEEKDAY_DATE) == [DATE]

    def test_datetimes_convert_to_datetimes(self) -> None:
        """Datetime formats offer every other datetime format."""
        assert compatible_formats(DATETIME) == [WEEKDAY_DATETIME, ZONED]
        assert compatible_formats(ZONED) == [DATETIME, WEEKDAY_DATETIME]

    def test_exclude_utc_offset(self) -> None:
        """The timezone format can be left out."""
        assert compatible_formats(DATETIME, exclude_utc_offset=True) == [WEEKDAY_DATETIME]
