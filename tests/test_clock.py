"""Tests for calendar and sleep-window helpers."""
from datetime import datetime

import pytest

from care_critter.clock import (
    age_in_days,
    calendar_day_key,
    can_sleep_now,
    elapsed_minutes,
    is_valid_clock,
    is_within_sleep_window,
    minutes_of_day,
    parse_clock,
)
from care_critter.types import SleepWindow


def _ts(*args: int) -> float:
    return datetime(*args).timestamp() * 1000


class TestCalendarDayKey:
    def test_formats_local_date(self):
        assert calendar_day_key(_ts(2026, 2, 10, 10, 0)) == "2026-02-10"

    def test_stable_within_a_day(self):
        assert calendar_day_key(_ts(2026, 2, 10, 0, 0)) == calendar_day_key(_ts(2026, 2, 10, 23, 59))

    def test_changes_at_midnight(self):
        assert calendar_day_key(_ts(2026, 2, 10, 23, 59)) != calendar_day_key(_ts(2026, 2, 11, 0, 0))


class TestClockParsing:
    def test_minutes_of_day(self):
        assert minutes_of_day(_ts(2026, 2, 10, 7, 30)) == 450

    def test_parse_clock(self):
        assert parse_clock("07:30") == 450
        assert parse_clock("00:00") == 0
        assert parse_clock("23:59") == 1439

    def test_parse_clock_rejects_garbage(self):
        assert parse_clock("25:00") == 0
        assert parse_clock("12:60") == 0
        assert parse_clock("noon") == 0
        assert parse_clock("7") == 0

    def test_is_valid_clock(self):
        assert is_valid_clock("19:00")
        assert not is_valid_clock("24:00")
        assert not is_valid_clock("ab:cd")
        assert not is_valid_clock(1900)


class TestSleepWindow:
    def test_window_crossing_midnight(self):
        window = SleepWindow("19:00", "07:00")
        assert is_within_sleep_window(_ts(2026, 2, 10, 22, 0), window)
        assert is_within_sleep_window(_ts(2026, 2, 10, 19, 0), window)
        assert is_within_sleep_window(_ts(2026, 2, 10, 6, 59), window)
        assert not is_within_sleep_window(_ts(2026, 2, 10, 7, 0), window)
        assert not is_within_sleep_window(_ts(2026, 2, 10, 12, 0), window)

    def test_same_day_window_end_is_exclusive(self):
        window = SleepWindow("09:00", "17:00")
        assert is_within_sleep_window(_ts(2026, 2, 10, 9, 0), window)
        assert is_within_sleep_window(_ts(2026, 2, 10, 16, 59), window)
        assert not is_within_sleep_window(_ts(2026, 2, 10, 17, 0), window)
        assert not is_within_sleep_window(_ts(2026, 2, 10, 8, 59), window)

    def test_equal_bounds_means_always_open(self):
        window = SleepWindow("08:00", "08:00")
        assert is_within_sleep_window(_ts(2026, 2, 10, 12, 0), window)
        assert is_within_sleep_window(_ts(2026, 2, 10, 3, 0), window)

    @pytest.mark.parametrize("start, end", [("25:99", "07:00"), ("19:00", "7pm"), ("19:00", "")])
    def test_malformed_bounds_are_rejected(self, start, end):
        with pytest.raises(ValueError, match="Sleep window bounds must be HH:MM"):
            SleepWindow(start, end)

    def test_override_allows_sleep_anytime(self):
        window = SleepWindow("19:00", "07:00")
        noon = _ts(2026, 2, 10, 12, 0)
        assert can_sleep_now(noon, window, parent_override_sleep=True)
        assert not can_sleep_now(noon, window, parent_override_sleep=False)


class TestAgeInDays:
    def test_counts_calendar_days_not_hours(self):
        assert age_in_days(_ts(2026, 2, 10, 23, 59), _ts(2026, 2, 11, 0, 1)) == 1

    def test_same_day_is_zero(self):
        assert age_in_days(_ts(2026, 2, 10, 0, 1), _ts(2026, 2, 10, 23, 59)) == 0

    def test_several_days(self):
        assert age_in_days(_ts(2026, 2, 10, 12, 0), _ts(2026, 2, 20, 8, 0)) == 10

    def test_never_negative(self):
        assert age_in_days(_ts(2026, 2, 11, 12, 0), _ts(2026, 2, 10, 12, 0)) == 0


def test_elapsed_minutes():
    assert elapsed_minutes(0, 90_000) == 1.5
    assert elapsed_minutes(90_000, 0) == 0.0
