# Computes the per-slot Stress Index and lateness risk for a departure window.
#
# Formula:
#   congestion ratio = (travel_min - free_flow_min) / free_flow_min * 100
#   lateness penalty = max(0, arrival - goal) in minutes * 2
#   volatility       = |local slope| * 8
#   StressIndex      = clamp(round(ratio + lateness + volatility), 0, 200)
#
# Levels: 0-35 stable, 36-70 moderate, 71+ volatile.

from api_structures import (
    DepartureSample,
    LatenessRisk,
    SlotReport,
    StressLevel,
    StressResult,
    round_half_up,
)
from config import (
    MODERATE_MAX,
    RISK_DELAY_GROWTH,
    RISK_FACTOR_BASE,
    RISK_FACTOR_RISING,
    STABLE_MAX,
    STRESS_INDEX_MAX,
    STRESS_LATENESS_WEIGHT,
    STRESS_VOLATILITY_WEIGHT,
    TIGHT_BUFFER_MINUTES,
)
from ranking import find_sweet_spot


def compute_stress_index(
    travel_minutes: float,
    free_flow_minutes: float,
    lateness_minutes: float,
    local_slope: float,
) -> int:
    """Stress Index for a single departure slot, bounded to [0, 200]."""
    congestion_ratio = 0.0
    # A non-positive baseline zeroes the congestion term only.
    if free_flow_minutes > 0:
        congestion_ratio = ((travel_minutes - free_flow_minutes) / free_flow_minutes) * 100
    lateness_penalty = lateness_minutes * STRESS_LATENESS_WEIGHT
    volatility_penalty = abs(local_slope) * STRESS_VOLATILITY_WEIGHT
    raw = congestion_ratio + lateness_penalty + volatility_penalty
    return min(STRESS_INDEX_MAX, max(0, round_half_up(raw)))


def to_stress_level(stress_index: int) -> StressLevel:
    if stress_index <= STABLE_MAX:
        return StressLevel.STABLE
    if stress_index <= MODERATE_MAX:
        return StressLevel.MODERATE
    return StressLevel.VOLATILE


def lateness_minutes(arrival_time: int, desired_arrival_time: int) -> float:
    """Minutes past the goal arrival. Arriving early is not rewarded."""
    return max(0, (arrival_time - desired_arrival_time) / 60)


def minutes_buffer(arrival_time: int, desired_arrival_time: int) -> int:
    """Signed minutes to spare before the goal (positive = early)."""
    return round_half_up((desired_arrival_time - arrival_time) / 60)


def lateness_risk(arrival_time: int, desired_arrival_time: int) -> LatenessRisk:
    if arrival_time > desired_arrival_time:
        return LatenessRisk.LATE
    if minutes_buffer(arrival_time, desired_arrival_time) <= TIGHT_BUFFER_MINUTES:
        return LatenessRisk.TIGHT
    return LatenessRisk.ON_TIME


def free_flow_baseline(samples: list[DepartureSample]) -> float:
    """Minimum free-flow minutes across the valid samples, 0 when there are none."""
    durations = [s.free_flow_seconds for s in samples if s.is_valid]
    if not durations:
        return 0.0
    return min(durations) / 60


def local_slopes(travel_minutes: list[int]) -> list[float]:
    """Rate of travel-time change against each slot's neighbours (min per slot).

    A missing neighbour at either end is replaced by the slot itself.
    """
    last = len(travel_minutes) - 1
    slopes = []
    for i, current in enumerate(travel_minutes):
        prev = travel_minutes[i - 1] if i > 0 else current
        nxt = travel_minutes[i + 1] if i < last else current
        slopes.append((nxt - prev) / 2)
    return slopes


def risk_factors(valid: list[DepartureSample]) -> list[int]:
    """Trend signal per slot: high when the next slot's delay grows by more than 10%."""
    factors = []
    for i, sample in enumerate(valid):
        factor = RISK_FACTOR_BASE
        if i < len(valid) - 1:
            current_delay = sample.traffic_seconds - sample.free_flow_seconds
            nxt = valid[i + 1]
            next_delay = nxt.traffic_seconds - nxt.free_flow_seconds
            if next_delay > current_delay * RISK_DELAY_GROWTH:
                factor = RISK_FACTOR_RISING
        factors.append(factor)
    return factors


def calculate_stress_data(
    samples: list[DepartureSample],
    desired_arrival_time: int,
    free_flow_seconds: int | None = None,
) -> list[StressResult]:
    """
    Stress results for the valid samples of one window, in departure order.

    Samples whose status is not OK take no part in the baseline, slopes or
    rankings. `free_flow_seconds` overrides the window's own baseline when
    the caller already knows the route's free-flow duration.
    """
    valid = [s for s in samples if s.is_valid]
    if free_flow_seconds is None:
        free_flow_min = free_flow_baseline(valid)
    else:
        free_flow_min = free_flow_seconds / 60

    travel_mins = [s.traffic_minutes for s in valid]
    slopes = local_slopes(travel_mins)
    factors = risk_factors(valid)
    sweet_index = find_sweet_spot(valid)

    results = []
    for i, sample in enumerate(valid):
        stress = compute_stress_index(
            travel_mins[i],
            free_flow_min,
            lateness_minutes(sample.arrival_time, desired_arrival_time),
            slopes[i],
        )
        results.append(StressResult(
            departure_label=sample.departure_label,
            arrival_label=sample.arrival_label,
            duration_minutes=sample.free_flow_minutes,
            duration_in_traffic_minutes=travel_mins[i],
            stress_index=stress,
            stress_level=to_stress_level(stress),
            lateness_risk=lateness_risk(sample.arrival_time, desired_arrival_time),
            minutes_buffer=minutes_buffer(sample.arrival_time, desired_arrival_time),
            risk_factor=factors[i],
            is_sweet_spot=i == sweet_index,
        ))
    return results


def build_slot_reports(
    samples: list[DepartureSample],
    desired_arrival_time: int,
    free_flow_seconds: int | None = None,
) -> list[SlotReport]:
    """Every sample in its window position, paired with its stress result if it had one."""
    results = iter(calculate_stress_data(samples, desired_arrival_time, free_flow_seconds))
    return [
        SlotReport(sample=s, stress=next(results) if s.is_valid else None)
        for s in samples
    ]
