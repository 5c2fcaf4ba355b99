"""Shared helper tests — lenient date parsing, tenure, month arithmetic, money."""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from liveops.common.dates import (
    calculate_tenure,
    daterange,
    iso_monday,
    overflow_date,
    parse_clock_time,
    parse_flexible_date,
    shift_month,
    year_month_key,
)
from liveops.common.money import coerce_amount, round_half_up


class TestParseFlexibleDate:

    @pytest.mark.parametrize(
        "raw",
        [
            "2026-03-15",
            "2026-03-15T10:30:00",
            "2026-03-15T10:30:00.123Z",
            "2026/03/15",
            "15-03-2026",
            "15/03/2026",
            "15 March 2026",
            "15 Mar 2026",
            date(2026, 3, 15),
            datetime(2026, 3, 15, 23, 59),
        ],
    )
    def test_accepted_formats(self, raw):
        assert parse_flexible_date(raw) == date(2026, 3, 15)

    @pytest.mark.parametrize("raw", [None, "", "tomorrow", "2026-13-45"])
    def test_unparseable_is_none(self, raw):
        assert parse_flexible_date(raw) is None


class TestParseClockTime:

    def test_hh_mm(self):
        assert parse_clock_time("08:05") == time(8, 5)

    def test_seconds_are_ignored(self):
        assert parse_clock_time("08:05:59") == time(8, 5)

    @pytest.mark.parametrize("raw", [None, "", "8am", "25:00"])
    def test_malformed_is_none(self, raw):
        assert parse_clock_time(raw) is None


class TestCalendarHelpers:

    def test_daterange_inclusive(self):
        days = list(daterange(date(2026, 2, 27), date(2026, 3, 2)))
        assert days == [date(2026, 2, 27), date(2026, 2, 28), date(2026, 3, 1), date(2026, 3, 2)]

    def test_daterange_empty_when_reversed(self):
        assert list(daterange(date(2026, 3, 2), date(2026, 3, 1))) == []

    @pytest.mark.parametrize(
        "year,month,delta,expected",
        [(2026, 1, -1, (2025, 12)), (2026, 12, 1, (2027, 1)), (2026, 5, 0, (2026, 5))],
    )
    def test_shift_month(self, year, month, delta, expected):
        assert shift_month(year, month, delta) == expected

    def test_overflow_date_rolls_forward_and_back(self):
        assert overflow_date(2026, 2, 29) == date(2026, 3, 1)
        assert overflow_date(2026, 2, 31) == date(2026, 3, 3)
        assert overflow_date(2026, 3, 0) == date(2026, 2, 28)

    def test_iso_monday(self):
        assert iso_monday(date(2026, 3, 8)) == date(2026, 3, 2)
        assert iso_monday(date(2026, 3, 2)) == date(2026, 3, 2)

    def test_year_month_key(self):
        assert year_month_key(2026, 3) == "2026-03"


class TestTenure:

    def test_completed_years_and_months(self):
        assert calculate_tenure(date(2024, 1, 15), date(2026, 3, 19)) == (2, 2)

    def test_day_before_anniversary(self):
        assert calculate_tenure(date(2024, 3, 20), date(2026, 3, 19)) == (1, 11)

    def test_future_join_date(self):
        assert calculate_tenure(date(2026, 5, 1), date(2026, 3, 19)) == (0, 0)

    def test_missing_join_date(self):
        assert calculate_tenure(None, date(2026, 3, 19)) is None


class TestMoney:

    @pytest.mark.parametrize(
        "value,expected",
        [(0.5, 1), (1.5, 2), (2.4999, 2), (-0.5, -1), ("461538.46", 461538)],
    )
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, 0),
            ("", 0),
            (True, 0),
            ("garbage", 0),
            (1_000, 1_000),
            ("6.000.000", 6_000_000),
            ("6,000,000", 6_000_000),
            (" 750000 ", 750_000),
            ("6000000.00", 6_000_000),
            ("1500000.5", 1_500_001),
            ("2.500.000,50", 2_500_001),
            (12.5, 13),
        ],
    )
    def test_coerce_amount(self, value, expected):
        assert coerce_amount(value) == expected
