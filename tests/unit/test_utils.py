"""
Unit tests for flash_arbitrage.utils module.

Tests timestamp parsing, unit conversions and the logger factory.
"""

import logging

import pytest

from flash_arbitrage.utils import (
    format_duration,
    from_base_units,
    get_logger,
    iso_to_timestamp,
    parse_date_bound,
    percent_to_basis_points,
    timestamp_to_iso,
    to_base_units,
)


class TestTimestampUtils:
    """Test timestamp utilities."""

    def test_timestamp_iso_conversion(self):
        """Test timestamp to ISO conversion and back."""
        iso_string = timestamp_to_iso(1700000000.0)

        assert iso_string == "2023-11-14T22:13:20+00:00"
        assert iso_to_timestamp(iso_string) == 1700000000.0

    def test_zulu_suffix_accepted(self):
        assert iso_to_timestamp("2023-11-14T22:13:20Z") == 1700000000.0

    def test_naive_string_is_utc(self):
        assert iso_to_timestamp("2023-11-14T22:13:20") == 1700000000.0

    def test_format_duration(self):
        """Test duration formatting."""
        assert format_duration(30) == "30.00s"
        assert format_duration(120) == "2.0m"
        assert format_duration(3600) == "1.0h"


class TestDateBounds:
    """Test date range parsing used by the CSV export."""

    def test_bare_date_start_of_day(self):
        assert parse_date_bound("2023-11-14") == iso_to_timestamp("2023-11-14T00:00:00")

    def test_bare_date_end_of_day(self):
        end = parse_date_bound("2023-11-14", end_of_day=True)
        next_day = parse_date_bound("2023-11-15")
        assert 0 < next_day - end < 0.001

    def test_full_datetime_passes_through(self):
        assert parse_date_bound("2023-11-14T22:13:20Z", end_of_day=True) == 1700000000.0

    @pytest.mark.parametrize("value", ["not-a-date", "2023-13-01", "2023-02-30"])
    def test_invalid_dates_raise(self, value):
        with pytest.raises(ValueError):
            parse_date_bound(value)


class TestUnitConversions:
    """Test token unit and percent conversions."""

    def test_to_base_units(self):
        assert to_base_units(100, 6) == 100_000_000
        assert to_base_units(0.1, 9) == 100_000_000

    def test_from_base_units_accepts_strings(self):
        assert from_base_units("2010000000", 9) == pytest.approx(2.01)
        assert from_base_units(100_000_000, 6) == 100.0

    def test_percent_to_basis_points(self):
        assert percent_to_basis_points(0.1) == 10
        assert percent_to_basis_points(0.5) == 50
        assert percent_to_basis_points(0.125) == 12
        assert percent_to_basis_points(1) == 100


class TestLoggingUtils:
    """Test logging utilities."""

    def test_get_logger(self):
        """Test logger factory."""
        logger = get_logger("test_flash_logger")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "test_flash_logger"
        assert len(logger.handlers) == 1

    def test_get_logger_is_idempotent(self):
        first = get_logger("test_flash_logger_twice")
        second = get_logger("test_flash_logger_twice")
        assert first is second
        assert len(second.handlers) == 1

    def test_get_logger_with_extra(self):
        adapter = get_logger("test_flash_logger_extra", extra={"venue": "jupiter"})
        assert isinstance(adapter, logging.LoggerAdapter)
