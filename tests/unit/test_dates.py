"""Tests for extractbench.dates module."""

import pytest

from extractbench.config import EvaluationConfig
from extractbench.dates import ParsedDate, compare_dates, is_date_like, parse_date


class TestIsDateLike:
    """Tests for is_date_like function."""

    @pytest.mark.parametrize(
        "value",
        [
            "2025-01-15",
            "2025/01/15",
            "01/15/2025",
            "1-15-2025",
            "01/15/25",
            "JAN-15-2025",
            "January 15, 2025",
            "Jan. 15 2025",
            "15 January 2025",
            "January 2025",
            "2025-01",
            "2025",
        ],
    )
    def test_supported_shapes(self, value):
        """Test every supported format is recognized."""
        assert is_date_like(value)

    def test_day_first_shape_is_date_like(self):
        """Test numeric day-first dates still have a date shape."""
        assert is_date_like("15/01/2025")

    @pytest.mark.parametrize("value", ["Acme Corp", "Acme 2025", "123 Main St", "", None, "12345"])
    def test_not_dates(self, value):
        """Test non-date values are rejected."""
        assert not is_date_like(value)


class TestParseDate:
    """Tests for parse_date function."""

    def test_iso(self):
        """Test ISO dates."""
        assert parse_date("2025-01-15") == ParsedDate(2025, 1, 15)

    def test_us_numeric(self):
        """Test month-first numeric dates."""
        assert parse_date("01/15/2025") == ParsedDate(2025, 1, 15)
        assert parse_date("1-15-2025") == ParsedDate(2025, 1, 15)

    def test_two_digit_year(self):
        """Test two-digit years around the default pivot."""
        assert parse_date("01/15/25") == ParsedDate(2025, 1, 15)
        assert parse_date("01/15/75") == ParsedDate(1975, 1, 15)

    def test_two_digit_year_custom_pivot(self):
        """Test the pivot is configurable."""
        config = EvaluationConfig(two_digit_year_pivot=80)
        assert parse_date("01/15/75", config) == ParsedDate(2075, 1, 15)

    def test_month_names(self):
        """Test long and abbreviated month names."""
        assert parse_date("JAN-15-2025") == ParsedDate(2025, 1, 15)
        assert parse_date("January 15, 2025") == ParsedDate(2025, 1, 15)
        assert parse_date("Sept. 3 2024") == ParsedDate(2024, 9, 3)
        assert parse_date("15 January 2025") == ParsedDate(2025, 1, 15)

    def test_month_and_year(self):
        """Test month granularity."""
        parsed = parse_date("January 2025")
        assert parsed == ParsedDate(2025, 1)
        assert parsed.granularity == "month"
        assert parse_date("2025-01") == ParsedDate(2025, 1)

    def test_year_only(self):
        """Test year granularity."""
        parsed = parse_date("2025")
        assert parsed == ParsedDate(2025)
        assert parsed.granularity == "year"
        assert parsed.isoformat() == "2025"

    def test_day_first_not_interpreted(self):
        """Test 15/01/2025 is never read as 15 January."""
        assert parse_date("15/01/2025") is None

    def test_invalid_calendar_date(self):
        """Test impossible dates fail to parse."""
        assert parse_date("2025-02-30") is None
        assert parse_date("13/01/2025") is None

    def test_isoformat(self):
        """Test ISO rendering of a day date."""
        assert parse_date("Jan 5, 2025").isoformat() == "2025-01-05"


class TestCompareDates:
    """Tests for compare_dates function."""

    def test_same_date_different_format(self):
        """Test equivalent dates across formats."""
        assert compare_dates("2025-01-15", "01/15/2025")
        assert compare_dates("January 15, 2025", "2025-01-15")
        assert compare_dates("Jan 2025", "2025-01")

    def test_different_dates(self):
        """Test different days do not match."""
        assert not compare_dates("2025-01-15", "2025-01-16")

    def test_granularity_must_agree(self):
        """Test a year never equals a full date in that year."""
        assert not compare_dates("2025", "2025-01-15")
        assert not compare_dates("January 2025", "2025-01-15")

    def test_unparseable(self):
        """Test unparseable values never match."""
        assert not compare_dates("15/01/2025", "2025-01-15")
        assert not compare_dates("soon", "soon")
