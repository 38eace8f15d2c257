# Turns a commuter's "day of week + time window" intent into absolute departure timestamps.

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from config import DEFAULT_INTERVAL_MINUTES, HAWAII_UTC_OFFSET, MAX_DEPARTURE_SLOTS

logger = logging.getLogger(__name__)

# 0=Sunday ... 6=Saturday, the numbering used by the web form.
DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

ROLLOVER = timedelta(days=7)


def parse_clock_time(value: str) -> timedelta:
    """Parses an 'HH:MM' wall-clock string into an offset from midnight."""
    try:
        hour_str, minute_str = value.split(":")
        hour, minute = int(hour_str), int(minute_str)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM.") from None
    if not (0 <= hour <= 23 and 0 <= minute < 60) and (hour, minute) != (24, 0):
        raise ValueError(f"Invalid time '{value}'. Expected HH:MM.")
    return timedelta(hours=hour, minutes=minute)


def hawaii_weekday(moment: datetime) -> int:
    """Day of week of an instant in the fixed Hawaii calendar (0=Sunday)."""
    return (moment.astimezone(HAWAII_UTC_OFFSET).weekday() + 1) % 7


def hawaii_midnight(moment: datetime) -> datetime:
    """Start of the Hawaii civil day containing `moment`."""
    local = moment.astimezone(HAWAII_UTC_OFFSET)
    return local - timedelta(
        hours=local.hour,
        minutes=local.minute,
        seconds=local.second,
        microseconds=local.microsecond,
    )


@dataclass(frozen=True)
class DepartureWindow:
    """A resolved departure window.

    `shift` holds the past-window rollover decision (zero or seven days).
    It is made once, when the window is resolved, and applies to every
    timestamp derived from this window, including the goal arrival.
    """
    target_midnight: datetime
    start: datetime
    end: datetime
    interval_minutes: int
    days_ahead: int
    shift: timedelta

    @property
    def rolled_over(self) -> bool:
        return self.shift > timedelta(0)

    @property
    def is_valid(self) -> bool:
        return self.end > self.start

    @property
    def departure_date(self) -> date:
        return (self.target_midnight + self.shift).date()

    def timestamp_for(self, clock_time: str) -> int:
        """Unix timestamp of an 'HH:MM' time on this window's (shifted) day."""
        moment = self.target_midnight + parse_clock_time(clock_time) + self.shift
        return int(moment.timestamp())

    def departure_times(self) -> list[int]:
        if not self.is_valid:
            return []
        step = timedelta(minutes=self.interval_minutes)
        times = []
        current = self.start
        while current <= self.end and len(times) < MAX_DEPARTURE_SLOTS:
            times.append(int(current.timestamp()))
            current += step
        return times


def resolve_departure_window(
    start_time: str,
    end_time: str,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
    target_day: int = 1,
    now: datetime | None = None,
) -> DepartureWindow:
    """
    Resolves the window on the next occurrence of `target_day` in Hawaii time.

    Today counts as an occurrence. If the window's start on that day has
    already passed, the whole window moves to the same weekday next week,
    since the traffic provider only predicts future departures.
    `now` must be timezone-aware; it defaults to the system clock.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    days_ahead = (target_day - hawaii_weekday(now) + 7) % 7
    target_midnight = hawaii_midnight(now) + timedelta(days=days_ahead)

    start = target_midnight + parse_clock_time(start_time)
    end = target_midnight + parse_clock_time(end_time)

    shift = timedelta(0)
    if start < now:
        shift = ROLLOVER
        logger.debug(f"Window starting {start.isoformat()} already passed, rolling over to next week")

    return DepartureWindow(
        target_midnight=target_midnight,
        start=start + shift,
        end=end + shift,
        interval_minutes=interval_minutes,
        days_ahead=days_ahead,
        shift=shift,
    )


def generate_departure_times(
    start_time: str,
    end_time: str,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
    target_day: int = 1,
    now: datetime | None = None,
) -> list[int]:
    """Departure timestamps across the window, at most MAX_DEPARTURE_SLOTS of them."""
    window = resolve_departure_window(start_time, end_time, interval_minutes, target_day, now)
    return window.departure_times()
