# Correction stages applied to provider traffic durations before stress analysis.

from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime

from api_structures import DepartureSample, round_half_up
from config import HAWAII_UTC_OFFSET


class TrafficCorrection(ABC):
    """Blueprint for a stage that adjusts traffic-adjusted durations."""

    @abstractmethod
    def multiplier(self, departure_time: int) -> float:
        pass

    def apply(self, sample: DepartureSample) -> DepartureSample:
        """Returns the sample with its traffic duration corrected. Failed samples pass through."""
        if not sample.is_valid:
            return sample
        corrected = round_half_up(sample.traffic_seconds * self.multiplier(sample.departure_time))
        return replace(sample, traffic_seconds=corrected)

    def apply_all(self, samples: list[DepartureSample]) -> list[DepartureSample]:
        return [self.apply(s) for s in samples]


class PassthroughCorrection(TrafficCorrection):
    """Uses the provider's prediction as-is."""

    def multiplier(self, departure_time: int) -> float:
        return 1.0


class RealityMultiplierCorrection(TrafficCorrection):
    """
    Time-of-day multipliers for Oahu routes.

    The provider consistently underestimates Oahu peak-hour congestion
    (a 6:53 AM departure measured 62 min against a 30 min prediction), so a
    single multiplier per Hawaii time band is applied to the traffic duration.
    """
    # (start hour, end hour, multiplier); first match wins.
    BANDS = (
        (6.5, 9.0, 1.9),    # AM peak
        (16.5, 19.0, 1.7),  # PM peak
        (9.0, 11.0, 1.4),   # post-AM peak
        (15.0, 16.5, 1.3),  # pre-PM peak
        (5.0, 6.5, 1.3),    # early AM
    )
    DEFAULT_MULTIPLIER = 1.1

    def multiplier(self, departure_time: int) -> float:
        local = datetime.fromtimestamp(departure_time, HAWAII_UTC_OFFSET)
        fractional_hour = local.hour + local.minute / 60
        for start, end, factor in self.BANDS:
            if start <= fractional_hour < end:
                return factor
        return self.DEFAULT_MULTIPLIER


CORRECTIONS = {
    "none": PassthroughCorrection,
    "reality": RealityMultiplierCorrection,
}


def get_correction(name: str) -> TrafficCorrection:
    try:
        return CORRECTIONS[name.lower()]()
    except KeyError:
        choices = ", ".join(sorted(CORRECTIONS))
        raise ValueError(f"Unknown traffic correction '{name}'. Choose one of: {choices}.") from None
