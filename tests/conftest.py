import pytest
from datetime import datetime, timezone

from api_structures import DepartureSample, SampleStatus

# Monday 2026-10-19, 06:30 HST (16:30 UTC)
MONDAY_0630 = 1792427400
SLOT = 600
WEEK = 7 * 24 * 3600


@pytest.fixture
def monday_early():
    """Monday 05:00 in Hawaii."""
    return datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def monday_late_morning():
    """Monday 08:00 in Hawaii, after a 06:30 window has started."""
    return datetime(2026, 10, 19, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_sample():
    def _make(index, traffic_minutes, free_flow_minutes=20, status=SampleStatus.OK):
        departure = MONDAY_0630 + index * SLOT
        if status is not SampleStatus.OK:
            return DepartureSample.failed(departure, status)
        return DepartureSample(
            departure_time=departure,
            free_flow_seconds=free_flow_minutes * 60,
            traffic_seconds=traffic_minutes * 60,
        )
    return _make
