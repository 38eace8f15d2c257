# Hawaii DOE school calendar lookup. School days carry noticeably heavier traffic.

from dataclasses import dataclass
from datetime import date, datetime, timezone

from config import HAWAII_UTC_OFFSET

# Non-school ranges (inclusive) for SY 2024-2025 and SY 2025-2026.
# Source: hawaiipublicschools.org school year calendar.
NON_SCHOOL_RANGES = (
    (date(2024, 5, 24), date(2024, 7, 28), "Summer Break"),
    (date(2024, 8, 5), date(2024, 8, 5), "Holiday (Statehood Day)"),
    (date(2024, 9, 2), date(2024, 9, 2), "Holiday (Labor Day)"),
    (date(2024, 10, 14), date(2024, 10, 14), "Holiday (Columbus Day)"),
    (date(2024, 11, 5), date(2024, 11, 5), "Holiday (Election Day)"),
    (date(2024, 11, 11), date(2024, 11, 11), "Holiday (Veterans Day)"),
    (date(2024, 11, 27), date(2024, 11, 29), "Thanksgiving Break"),
    (date(2024, 12, 23), date(2025, 1, 3), "Winter Break"),
    (date(2025, 1, 20), date(2025, 1, 20), "Holiday (MLK Day)"),
    (date(2025, 2, 17), date(2025, 2, 17), "Holiday (Presidents Day)"),
    (date(2025, 3, 17), date(2025, 3, 21), "Spring Break"),  # approx
    (date(2025, 3, 26), date(2025, 3, 26), "Holiday (Prince Kuhio Day)"),
    (date(2025, 4, 18), date(2025, 4, 18), "Holiday (Good Friday)"),
    (date(2025, 5, 26), date(2025, 5, 26), "Holiday (Memorial Day)"),
    (date(2025, 5, 23), date(2025, 7, 27), "Summer Break"),
    (date(2025, 8, 15), date(2025, 8, 15), "Holiday (Statehood Day)"),
    (date(2025, 9, 1), date(2025, 9, 1), "Holiday (Labor Day)"),
    (date(2025, 10, 13), date(2025, 10, 13), "Holiday (Columbus Day)"),
    (date(2025, 11, 11), date(2025, 11, 11), "Holiday (Veterans Day)"),
    (date(2025, 11, 26), date(2025, 11, 28), "Thanksgiving Break"),
    (date(2025, 12, 22), date(2026, 1, 2), "Winter Break"),
    (date(2026, 1, 19), date(2026, 1, 19), "Holiday (MLK Day)"),
    (date(2026, 2, 16), date(2026, 2, 16), "Holiday (Presidents Day)"),
    (date(2026, 3, 26), date(2026, 3, 26), "Holiday (Prince Kuhio Day)"),
    (date(2026, 3, 30), date(2026, 4, 3), "Spring Break"),  # approx
    (date(2026, 4, 3), date(2026, 4, 3), "Holiday (Good Friday)"),
    (date(2026, 5, 25), date(2026, 5, 25), "Holiday (Memorial Day)"),
    (date(2026, 5, 22), date(2026, 7, 26), "Summer Break"),
)


@dataclass
class SchoolDayInfo:
    is_school_day: bool
    reason: str


def get_school_day_info(when: datetime | date | None = None) -> SchoolDayInfo:
    """
    Whether a day is a Hawaii DOE school day.
    Instants are read in Hawaii time; plain dates are taken as Hawaii dates.
    """
    if when is None:
        when = datetime.now(timezone.utc)
    if isinstance(when, datetime):
        when = when.astimezone(HAWAII_UTC_OFFSET).date()

    # Saturday (5) and Sunday (6)
    if when.weekday() >= 5:
        return SchoolDayInfo(is_school_day=False, reason="Weekend")

    for start, end, label in NON_SCHOOL_RANGES:
        if start <= when <= end:
            return SchoolDayInfo(is_school_day=False, reason=label)

    return SchoolDayInfo(is_school_day=True, reason="School day")
