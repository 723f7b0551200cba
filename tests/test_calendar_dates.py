"""Tests for calendar date helpers."""
import pytest
from datetime import date, datetime

from kinisi.services.calendar_dates import (
    add_days,
    add_weeks,
    format_start_at,
    is_valid_time_of_day,
    parse_start_at,
    parse_time_of_day,
    round_minutes,
    weekday_index_of,
)


class TestAddDays:
    def test_rolls_over_month_and_year(self):
        assert add_days(date(2024, 12, 30), 3) == date(2025, 1, 2)

    def test_leap_day(self):
        assert add_days(date(2024, 2, 28), 1) == date(2024, 2, 29)
        assert add_days(date(2023, 2, 28), 1) == date(2023, 3, 1)

    def test_negative_offset(self):
        assert add_days(date(2025, 3, 1), -1) == date(2025, 2, 28)

    def test_does_not_touch_input(self):
        day = date(2025, 1, 6)
        add_days(day, 10)
        assert day == date(2025, 1, 6)


class TestAddWeeks:
    def test_adds_seven_days_per_week(self):
        assert add_weeks(date(2025, 1, 27), 1) == date(2025, 2, 3)
        assert add_weeks(date(2025, 12, 22), 2) == date(2026, 1, 5)

    def test_zero_weeks(self):
        assert add_weeks(date(2025, 1, 6), 0) == date(2025, 1, 6)


class TestWeekdayIndex:
    """Sunday is 0, Saturday is 6."""

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2025, 1, 5), 0),
            (date(2025, 1, 6), 1),
            (date(2025, 1, 8), 3),
            (date(2025, 1, 11), 6),
            (date(2024, 2, 29), 4),
        ],
    )
    def test_weekday_index(self, day, expected):
        assert weekday_index_of(day) == expected


class TestTimeOfDay:
    def test_valid_times(self):
        assert parse_time_of_day("00:00").hour == 0
        assert parse_time_of_day("23:59").minute == 59
        assert is_valid_time_of_day("07:15")

    @pytest.mark.parametrize("value", ["24:00", "9:00", "09:60", "morning", "", None])
    def test_invalid_times(self, value):
        assert not is_valid_time_of_day(value)
        with pytest.raises(ValueError):
            parse_time_of_day(value)


@pytest.mark.parametrize("value,expected", [(44.5, 45), (0.5, 1), (45.4, 45), (-4.5, -4), (60, 60)])
def test_round_minutes_half_up(value, expected):
    assert round_minutes(value) == expected


class TestStartAt:
    def test_format(self):
        assert format_start_at(date(2025, 1, 6), "09:30") == "2025-01-06T09:30"

    def test_parse_minute_precision(self):
        assert parse_start_at("2025-01-06T09:30") == datetime(2025, 1, 6, 9, 30)

    def test_parse_drops_offset(self):
        assert parse_start_at("2025-01-06T09:30:00Z") == datetime(2025, 1, 6, 9, 30)
        assert parse_start_at(" 2025-01-06T09:30:00+02:00 ") == datetime(2025, 1, 6, 9, 30)

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_start_at("next tuesday")
