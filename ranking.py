# Best/worst slot selection and trend helpers over an analyzed departure window.

from api_structures import DepartureSample, StressResult


def find_sweet_spot(samples: list[DepartureSample]) -> int:
    """Index (among valid samples) of the shortest traffic duration, -1 if none."""
    valid = [s for s in samples if s.is_valid]
    sweet_index = -1
    min_duration = None
    for i, sample in enumerate(valid):
        if min_duration is None or sample.traffic_seconds < min_duration:
            min_duration = sample.traffic_seconds
            sweet_index = i
    return sweet_index


def best_slot(results: list[StressResult]) -> StressResult | None:
    """Fastest slot. Ties go to the earliest departure."""
    best = None
    for result in results:
        if best is None or result.duration_in_traffic_minutes < best.duration_in_traffic_minutes:
            best = result
    return best


def worst_slot(results: list[StressResult]) -> StressResult | None:
    """Slowest slot. Ties go to the earliest departure."""
    worst = None
    for result in results:
        if worst is None or result.duration_in_traffic_minutes > worst.duration_in_traffic_minutes:
            worst = result
    return worst


def time_saved_minutes(results: list[StressResult]) -> int:
    if not results:
        return 0
    return worst_slot(results).duration_in_traffic_minutes - best_slot(results).duration_in_traffic_minutes


def trend_direction(results: list[StressResult]) -> str:
    """'worsening' if the later half of the window is slower on average, else 'improving'."""
    if len(results) < 2:
        return "improving"
    split = (len(results) + 1) // 2
    first_half = [r.duration_in_traffic_minutes for r in results[:split]]
    second_half = [r.duration_in_traffic_minutes for r in results[split:]]
    avg_first = sum(first_half) / len(first_half)
    avg_second = sum(second_half) / len(second_half)
    return "worsening" if avg_second > avg_first else "improving"
