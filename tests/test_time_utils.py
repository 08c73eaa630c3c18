"""Tests for time and statistics helpers."""

from datetime import date

import pytest

from flowday.core.errors import InvalidTimeError
from flowday.utils.time import (
    day_name,
    hour_of,
    mean,
    minutes_to_time,
    parse_date,
    parse_time,
    round_half_up,
    standard_deviation,
    time_to_minutes,
    weekday_of,
)


class TestParseTime:
    """Tests for strict and lenient HH:MM parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [("00:00", 0), ("09:05", 545), ("9:05", 545), ("23:59", 1439)],
    )
    def test_valid_times(self, text: str, expected: int) -> None:
        assert parse_time(text) == expected

    @pytest.mark.parametrize("text", ["24:00", "12:60", "noon", "", "12-30", "1230"])
    def test_invalid_times_raise(self, text: str) -> None:
        with pytest.raises(InvalidTimeError):
            parse_time(text)

    def test_invalid_time_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_time("25:00")

    def test_lenient_variant_returns_none(self) -> None:
        assert time_to_minutes(None) is None
        assert time_to_minutes("") is None
        assert time_to_minutes("bogus") is None
        assert time_to_minutes("07:30") == 450

    def test_hour_of(self) -> None:
        assert hour_of("18:45") == 18
        assert hour_of(None) is None


class TestFormatting:
    """Tests for minute offsets rendered as HH:MM."""

    def test_zero_padded(self) -> None:
        assert minutes_to_time(545) == "09:05"

    def test_rounds_total_before_splitting(self) -> None:
        # 539.6 minutes would render as 08:60 if minutes were rounded alone
        assert minutes_to_time(539.6) == "09:00"

    def test_half_rounds_up(self) -> None:
        assert minutes_to_time(540.5) == "09:01"

    def test_wraps_past_midnight(self) -> None:
        assert minutes_to_time(1440 + 30) == "00:30"


class TestDates:
    """Tests for date parsing and Sunday-first weekdays."""

    def test_weekday_sunday_is_zero(self) -> None:
        assert weekday_of("2026-10-04") == 0
        assert weekday_of("2026-10-10") == 6
        assert weekday_of(date(2026, 10, 6)) == 2

    def test_weekday_of_bad_input(self) -> None:
        assert weekday_of(None) is None
        assert weekday_of("2026-13-01") is None

    def test_parse_date(self) -> None:
        assert parse_date("2026-10-04") == date(2026, 10, 4)
        assert parse_date("04/10/2026") is None

    def test_day_name(self) -> None:
        assert day_name(0) == "Sunday"
        assert day_name(6) == "Saturday"


class TestStatistics:
    """Tests for mean, population standard deviation and rounding."""

    def test_mean(self) -> None:
        assert mean([1, 2, 3, 4]) == 2.5
        assert mean([]) == 0.0

    def test_population_standard_deviation(self) -> None:
        assert standard_deviation([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)

    def test_standard_deviation_of_short_input(self) -> None:
        assert standard_deviation([]) == 0.0
        assert standard_deviation([42]) == 0.0

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(2.5, 3), (3.5, 4), (2.4, 2), (-2.5, -2), (-2.6, -3)],
    )
    def test_round_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected
