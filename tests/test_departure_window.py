import pytest
from datetime import datetime, timedelta, timezone

from departure_window import (
    generate_departure_times,
    hawaii_weekday,
    parse_clock_time,
    resolve_departure_window,
)

from conftest import MONDAY_0630, WEEK


def test_today_window_is_ordered_and_evenly_spaced(monday_early):
    times = generate_departure_times("06:30", "07:30", 10, target_day=1, now=monday_early)
    assert times[0] == MONDAY_0630
    assert len(times) == 7
    assert all(b - a == 600 for a, b in zip(times, times[1:]))


def test_window_is_capped_at_eight_slots(monday_early):
    times = generate_departure_times("06:00", "09:00", 10, target_day=1, now=monday_early)
    assert len(times) == 8
    assert times[-1] - times[0] == 7 * 600


def test_end_before_or_equal_start_is_empty(monday_early):
    assert generate_departure_times("07:30", "06:30", 10, target_day=1, now=monday_early) == []
    assert generate_departure_times("07:30", "07:30", 10, target_day=1, now=monday_early) == []


def test_elapsed_window_rolls_over_to_next_week(monday_late_morning):
    times = generate_departure_times("06:30", "07:30", 10, target_day=1, now=monday_late_morning)
    assert times[0] == MONDAY_0630 + WEEK
    assert len(times) == 7


def test_window_starting_exactly_now_does_not_roll_over():
    now = datetime.fromtimestamp(MONDAY_0630, timezone.utc)
    window = resolve_departure_window("06:30", "07:30", 10, target_day=1, now=now)
    assert not window.rolled_over
    assert window.departure_times()[0] == MONDAY_0630


def test_other_day_is_next_occurrence(monday_early):
    sunday = generate_departure_times("06:30", "07:30", 10, target_day=0, now=monday_early)
    assert sunday[0] == MONDAY_0630 + 6 * 24 * 3600

    tuesday = generate_departure_times("06:30", "07:30", 10, target_day=2, now=monday_early)
    assert tuesday[0] == MONDAY_0630 + 24 * 3600


def test_afternoon_in_hawaii_keeps_hawaii_calendar_date():
    # Monday 17:00 HST is already Tuesday in UTC.
    now = datetime(2026, 10, 20, 3, 0, tzinfo=timezone.utc)
    assert hawaii_weekday(now) == 1
    times = generate_departure_times("06:30", "07:30", 10, target_day=2, now=now)
    assert times[0] == MONDAY_0630 + 24 * 3600


def test_goal_arrival_follows_the_window_rollover(monday_late_morning):
    window = resolve_departure_window("06:30", "07:30", 10, target_day=1, now=monday_late_morning)
    assert window.rolled_over
    assert window.shift == timedelta(days=7)
    assert window.timestamp_for("08:00") == MONDAY_0630 + 90 * 60 + WEEK
    assert window.departure_date.isoformat() == "2026-10-26"


def test_goal_arrival_without_rollover(monday_early):
    window = resolve_departure_window("06:30", "07:30", 10, target_day=1, now=monday_early)
    assert not window.rolled_over
    assert window.days_ahead == 0
    assert window.timestamp_for("08:00") == MONDAY_0630 + 90 * 60
    assert window.departure_date.isoformat() == "2026-10-19"


def test_resolution_is_deterministic_for_a_pinned_clock(monday_early):
    first = generate_departure_times("06:30", "07:30", 15, target_day=3, now=monday_early)
    second = generate_departure_times("06:30", "07:30", 15, target_day=3, now=monday_early)
    assert first == second


@pytest.mark.parametrize("value", ["7", "07-30", "ab:cd", "25:00", "24:30", "07:60", None])
def test_parse_clock_time_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        parse_clock_time(value)


def test_parse_clock_time():
    assert parse_clock_time("06:53") == timedelta(hours=6, minutes=53)
    assert parse_clock_time("24:00") == timedelta(days=1)
