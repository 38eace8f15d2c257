# Defines the standardized, internal data structures for the application.

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from config import HAWAII_UTC_OFFSET, RISK_FACTOR_BASE


def round_half_up(value: float) -> int:
    """Rounds .5 towards positive infinity, the way the web UI does."""
    return math.floor(value + 0.5)


def format_time_label(timestamp: int) -> str:
    """Formats a unix timestamp as a Hawaii clock label such as '6:53 AM'."""
    local = datetime.fromtimestamp(timestamp, HAWAII_UTC_OFFSET)
    hour = local.hour
    display_hour = ((hour + 11) % 12) + 1
    ampm = "AM" if hour < 12 else "PM"
    return f"{display_hour}:{local.minute:02d} {ampm}"


class SampleStatus(str, Enum):
    OK = "OK"
    NO_DATA = "NO_DATA"
    PROVIDER_ERROR = "PROVIDER_ERROR"

    @classmethod
    def from_provider(cls, status: str | None) -> "SampleStatus":
        """Maps any provider status string onto our three states."""
        if status == "OK":
            return cls.OK
        if status in ("PROVIDER_ERROR", "API_ERROR"):
            return cls.PROVIDER_ERROR
        return cls.NO_DATA


class StressLevel(str, Enum):
    STABLE = "stable"
    MODERATE = "moderate"
    VOLATILE = "volatile"


class LatenessRisk(str, Enum):
    """Arrival risk badge. Values are the colour names the UI expects."""
    ON_TIME = "green"
    TIGHT = "yellow"
    LATE = "red"


@dataclass(frozen=True)
class DepartureSample:
    """One provider answer for a single departure timestamp."""
    departure_time: int
    free_flow_seconds: int
    traffic_seconds: int
    status: SampleStatus = SampleStatus.OK

    @property
    def is_valid(self) -> bool:
        return self.status is SampleStatus.OK

    @property
    def arrival_time(self) -> int:
        return self.departure_time + self.traffic_seconds

    @property
    def free_flow_minutes(self) -> int:
        return round_half_up(self.free_flow_seconds / 60)

    @property
    def traffic_minutes(self) -> int:
        return round_half_up(self.traffic_seconds / 60)

    @property
    def departure_label(self) -> str:
        return format_time_label(self.departure_time)

    @property
    def arrival_label(self) -> str:
        if not self.is_valid:
            return "--"
        return format_time_label(self.arrival_time)

    @classmethod
    def failed(cls, departure_time: int, status: SampleStatus = SampleStatus.PROVIDER_ERROR) -> "DepartureSample":
        return cls(departure_time=departure_time, free_flow_seconds=0, traffic_seconds=0, status=status)

    @classmethod
    def from_dict(cls, data: dict) -> "DepartureSample":
        """Builds a sample from the provider's decoded JSON shape."""
        return cls(
            departure_time=int(data["departureTime"]),
            free_flow_seconds=int(data.get("durationSeconds") or 0),
            traffic_seconds=int(data.get("durationInTrafficSeconds") or 0),
            status=SampleStatus.from_provider(data.get("status")),
        )

    def to_dict(self) -> dict:
        return {
            "departureTime": self.departure_time,
            "departureLabel": self.departure_label,
            "arrivalTime": self.arrival_time if self.is_valid else 0,
            "arrivalLabel": self.arrival_label,
            "durationSeconds": self.free_flow_seconds,
            "durationInTrafficSeconds": self.traffic_seconds,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class StressResult:
    """Derived stress figures for one valid departure slot."""
    departure_label: str
    arrival_label: str
    duration_minutes: int
    duration_in_traffic_minutes: int
    stress_index: int
    stress_level: StressLevel
    lateness_risk: LatenessRisk
    minutes_buffer: int
    risk_factor: int = RISK_FACTOR_BASE
    is_sweet_spot: bool = False

    def to_dict(self) -> dict:
        return {
            "departureLabel": self.departure_label,
            "arrivalLabel": self.arrival_label,
            "durationMinutes": self.duration_minutes,
            "durationInTrafficMinutes": self.duration_in_traffic_minutes,
            "stressIndex": self.stress_index,
            "stressLevel": self.stress_level.value,
            "riskFactor": self.risk_factor,
            "latenessRisk": self.lateness_risk.value,
            "minutesBuffer": self.minutes_buffer,
            "isSweetSpot": self.is_sweet_spot,
        }


@dataclass(frozen=True)
class SlotReport:
    """A sample in its display position, with stress figures when it was valid."""
    sample: DepartureSample
    stress: StressResult | None

    def to_dict(self) -> dict:
        if self.stress is not None:
            data = self.stress.to_dict()
        else:
            data = {
                "departureLabel": self.sample.departure_label,
                "arrivalLabel": self.sample.arrival_label,
                "durationMinutes": None,
                "durationInTrafficMinutes": None,
                "stressIndex": None,
                "stressLevel": None,
                "riskFactor": None,
                "latenessRisk": None,
                "minutesBuffer": None,
                "isSweetSpot": False,
            }
        data["status"] = self.sample.status.value
        data["sample"] = self.sample.to_dict()
        return data


@dataclass
class WindowRequest:
    """A commuter's departure window intent.

    `desired_arrival_time` is an absolute unix timestamp. When it is not
    known up front, `arrive_by` ("HH:MM") is resolved against the same
    calendar day as the departure window.
    """
    start_time: str
    end_time: str
    interval_minutes: int
    target_day: int
    desired_arrival_time: int | None = None
    arrive_by: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "WindowRequest":
        desired = data.get("desiredArrivalTime")
        interval = int(data["intervalMinutes"])
        if interval <= 0:
            raise ValueError(f"intervalMinutes must be positive, got {interval}")
        return cls(
            start_time=data["startTime"],
            end_time=data["endTime"],
            interval_minutes=interval,
            target_day=int(data["targetDayOfWeek"]),
            desired_arrival_time=int(desired) if isinstance(desired, (int, float)) else None,
            arrive_by=desired if isinstance(desired, str) else data.get("arriveBy"),
        )
