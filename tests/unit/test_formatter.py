"""Unit tests for value formatting."""

import datetime
from decimal import Decimal

import pytest

from app.strategies.template_engine.formatter import (
    format_checkbox,
    format_date,
    format_number,
    format_phone,
    format_value,
    parse_formatted_number,
    parse_number,
)
from app.strategies.template_engine.models import PlaceholderConfig, PlaceholderType


# =============================================================================
# Date Tests
# =============================================================================


class TestFormatDate:
    """Test suite for format_date."""

    @pytest.mark.parametrize(
        "value",
        ["2024-01-05", "2024-01-05T23:30:00", "2024-01-05T23:30:00+03:00", "05.01.2024", "05/01/2024"],
    )
    def test_formats_as_day_month_year(self, value):
        assert format_date(value) == "05.01.2024"

    def test_date_object(self):
        assert format_date(datetime.date(1999, 12, 31)) == "31.12.1999"

    def test_unparseable_passes_through(self):
        assert format_date("next tuesday") == "next tuesday"


# =============================================================================
# Number Tests
# =============================================================================


class TestFormatNumber:
    """Test suite for format_number and parse_formatted_number."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (1500, "1.500"),
            (0, "0"),
            (999, "999"),
            (1234.5, "1.234,5"),
            (1234567.891, "1.234.567,891"),
            ("2500000", "2.500.000"),
            (-1500.25, "-1.500,25"),
            (0.1235, "0,124"),
            (-0.0004, "0"),
        ],
    )
    def test_turkish_grouping(self, value, expected):
        assert format_number(value) == expected

    @pytest.mark.parametrize("value", [1500, 1234.5, -98765.432, 0.001, 1000000])
    def test_parse_reverses_format(self, value):
        """Test that parsing the formatted text returns the original number."""
        assert parse_formatted_number(format_number(value)) == Decimal(str(value))

    def test_non_number_passes_through(self):
        assert format_number("abc") == "abc"

    def test_long_integer_grouping(self):
        assert format_number("9999999999999999") == "9.999.999.999.999.999"

    @pytest.mark.parametrize("value", ["1e16", "1e5000", "1e999999999", "-1e5000"])
    def test_huge_magnitudes_are_not_numbers(self, value):
        """Test that out-of-range exponents are rejected instead of expanded."""
        assert parse_number(value) is None
        assert format_number(value) == value

    def test_zero_with_huge_exponent(self):
        assert parse_number("0e999999999") == 0
        assert format_number("0e999999999") == "0"


# =============================================================================
# Phone and Checkbox Tests
# =============================================================================


class TestFormatPhone:
    """Test suite for format_phone."""

    @pytest.mark.parametrize(
        "value",
        ["5321234567", "05321234567", "+90 532 123 45 67", "90 (532) 123-45-67", "0532 123 45 67"],
    )
    def test_turkish_numbers(self, value):
        assert format_phone(value) == "(532) 123 45 67"

    @pytest.mark.parametrize("value", ["12345", "+1 415 555 0100 99", "532123456"])
    def test_other_numbers_unchanged(self, value):
        assert format_phone(value) == value


class TestFormatCheckbox:
    """Test suite for format_checkbox."""

    def test_true(self):
        assert format_checkbox(True) == "Evet"

    def test_false(self):
        assert format_checkbox(False) == "Hayır"


# =============================================================================
# Dispatch Tests
# =============================================================================


class TestFormatValue:
    """Test suite for format_value."""

    @pytest.mark.parametrize(
        ("kind", "value", "expected"),
        [
            (PlaceholderType.DATE, "2024-01-15", "15.01.2024"),
            (PlaceholderType.NUMBER, 1500, "1.500"),
            (PlaceholderType.CHECKBOX, True, "Evet"),
            (PlaceholderType.PHONE, "05321234567", "(532) 123 45 67"),
            (PlaceholderType.STRING, "Ayşe", "Ayşe"),
            (PlaceholderType.EMAIL, "a@b.co", "a@b.co"),
            (PlaceholderType.SELECT, "Ankara", "Ankara"),
        ],
    )
    def test_dispatch_by_kind(self, kind, value, expected):
        options = ["Ankara"] if kind is PlaceholderType.SELECT else None
        config = PlaceholderConfig(type=kind, label="Alan", order=0, options=options)

        assert format_value(value, config) == expected

    def test_none_renders_empty(self):
        config = PlaceholderConfig(type=PlaceholderType.NUMBER, label="Tutar", order=0)

        assert format_value(None, config) == ""
