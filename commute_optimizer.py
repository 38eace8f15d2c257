# Main script to find the least stressful departure time for an Oahu commute.

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime

from api_adapters import (
    GoogleDistanceMatrixAdapter,
    MockTrafficAdapter,
    TrafficAdapter,
    create_adapter,
    fetch_samples,
)
from api_structures import SlotReport, StressResult, WindowRequest, format_time_label, round_half_up
from commute_insights import (
    estimate_collective_impact,
    estimate_personal_impact,
    generate_commute_comment,
    peak_delay_minutes,
    window_co2_savings,
)
from config import DEFAULT_INTERVAL_MINUTES, LOG_LEVEL, TRAFFIC_CORRECTION
from departure_window import DAY_NAMES, DepartureWindow, parse_clock_time, resolve_departure_window
from ranking import best_slot, time_saved_minutes, trend_direction, worst_slot
from school_calendar import get_school_day_info
from stress_index import build_slot_reports, free_flow_baseline
from traffic_corrections import TrafficCorrection, get_correction

logger = logging.getLogger(__name__)


class InvalidWindowError(ValueError):
    """The requested window produced no departure times."""


@dataclass
class WindowAnalysis:
    window: DepartureWindow
    desired_arrival_time: int
    slots: list[SlotReport]

    @property
    def results(self) -> list[StressResult]:
        return [slot.stress for slot in self.slots if slot.stress is not None]

    @property
    def free_flow_minutes(self) -> float:
        return free_flow_baseline([slot.sample for slot in self.slots])


# --- Core Logic ---

def analyze_departure_window(
    request: WindowRequest,
    origin: str,
    destination: str,
    adapter: TrafficAdapter,
    correction: TrafficCorrection | None = None,
    now: datetime | None = None,
) -> WindowAnalysis:
    """
    Resolves the window, fetches one sample per departure time, corrects the
    traffic durations and scores every slot against the goal arrival.
    """
    window = resolve_departure_window(
        request.start_time, request.end_time, request.interval_minutes, request.target_day, now)
    departure_times = window.departure_times()
    if not departure_times:
        raise InvalidWindowError(
            "Please set a valid departure window (start time must be before end time).")

    # The goal arrival lands on the same day as the window, including any rollover.
    if request.desired_arrival_time is not None:
        desired_arrival_time = request.desired_arrival_time
    elif request.arrive_by:
        desired_arrival_time = window.timestamp_for(request.arrive_by)
    else:
        raise ValueError("A desired arrival time is required.")

    samples = fetch_samples(adapter, origin, destination, departure_times)
    if correction is not None:
        samples = correction.apply_all(samples)

    failed = sum(1 for s in samples if not s.is_valid)
    if failed:
        logger.warning(f"{failed} of {len(samples)} departure samples returned no usable data")

    slots = build_slot_reports(samples, desired_arrival_time)
    return WindowAnalysis(window=window, desired_arrival_time=desired_arrival_time, slots=slots)


def analysis_to_dict(analysis: WindowAnalysis) -> dict:
    """The response shape consumed by the web UI."""
    results = analysis.results
    best = best_slot(results)
    worst = worst_slot(results)
    comment = generate_commute_comment(results)
    co2 = window_co2_savings(results)
    return {
        "departureDate": analysis.window.departure_date.isoformat(),
        "rolledOver": analysis.window.rolled_over,
        "desiredArrivalTime": analysis.desired_arrival_time,
        "desiredArrivalLabel": format_time_label(analysis.desired_arrival_time),
        "freeFlowMinutes": round_half_up(analysis.free_flow_minutes * 100) / 100,
        "results": [slot.to_dict() for slot in analysis.slots],
        "summary": {
            "bestSlot": best.departure_label if best else None,
            "worstSlot": worst.departure_label if worst else None,
            "timeSavedMinutes": time_saved_minutes(results),
            "trend": trend_direction(results),
            "comment": vars(comment),
            "co2": vars(co2) if co2 else None,
        },
    }


def display_results(analysis: WindowAnalysis):
    """Formats and prints the results table and the final recommendation."""
    window = analysis.window
    results = analysis.results
    day = window.departure_date
    print(f"\nDepartures for {day.strftime('%A, %B %d, %Y')} (Hawaii time)")
    if window.rolled_over:
        print("NOTE: That window has already passed today, so next week's is shown instead.")
    school = get_school_day_info(day)
    print(f"School calendar: {school.reason}")
    print(f"Goal arrival: {format_time_label(analysis.desired_arrival_time)}\n")

    header = "| Leave    | Arrive   | Free-flow | In traffic | Stress | Level    | Risk   | Buffer |"
    divider = "-" * len(header)
    print(header)
    print(divider)
    for slot in analysis.slots:
        s = slot.stress
        if s is None:
            print(f"| {slot.sample.departure_label:<8} | {'--':<8} | {'--':<9} | {'--':<10} | "
                  f"{'--':<6} | {slot.sample.status.value:<8} | {'--':<6} | {'--':<6} |")
            continue
        marker = "*" if s.is_sweet_spot else " "
        print(f"| {s.departure_label:<8} | {s.arrival_label:<8} | {s.duration_minutes:>5} min | "
              f"{s.duration_in_traffic_minutes:>6} min | {s.stress_index:>6} | {s.stress_level.value:<8} | "
              f"{s.lateness_risk.value:<6} | {s.minutes_buffer:>+6} |{marker}")
    print(divider)

    if not results:
        print("\nAnalysis could not be completed. No departure returned traffic data.")
        return

    best = best_slot(results)
    comment = generate_commute_comment(results)
    print("\n✨ Best Option Found ✨")
    print(f"Leave at {best.departure_label} ({best.duration_in_traffic_minutes} min, "
          f"stress {best.stress_index}, {best.stress_level.value}).")
    print(f"\n{comment.headline}\n{comment.detail}")
    if comment.tip:
        print(f"Tip: {comment.tip}")

    co2 = window_co2_savings(results)
    if co2 and co2.savings_grams > 0:
        print(f"\nCO2: {co2.best_label} instead of {co2.worst_label} saves {co2.savings_grams} g ({co2.equivalent}).")

    peak = peak_delay_minutes(results)
    saved = time_saved_minutes(results)
    if peak > 0:
        personal = estimate_personal_impact(saved, peak)
        city = estimate_collective_impact(10, saved, peak)
        print(f"Over a year that is {personal.annual_hours:.0f} hours and ${personal.annual_fuel_cost:,.0f} "
              f"in fuel. If 10% of H-1 commuters shifted ({city.shifters:,} people), "
              f"the city would save {city.annual_hours:,} hours a year.")


def _clock_time(value: str) -> str:
    try:
        parse_clock_time(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return value


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("Please enter a positive number.")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Oahu Commute Stress Index: find the calmest departure time in a window.")
    parser.add_argument('--origin', default="160 Polihale Pl, Honolulu, HI")
    parser.add_argument('--destination', default="Mid-Pacific Institute, Honolulu, HI")
    parser.add_argument('--start', type=_clock_time, default="06:30",
                        help="Earliest departure to analyze (HH:MM, Hawaii time).")
    parser.add_argument('--end', type=_clock_time, default="07:30",
                        help="Latest departure to analyze (HH:MM, Hawaii time).")
    parser.add_argument('--interval', type=_positive_int, default=DEFAULT_INTERVAL_MINUTES,
                        help="Minutes between departure slots.")
    parser.add_argument('--day', type=int, choices=range(7), default=1,
                        help="Day of week to simulate (0=Sunday ... 6=Saturday).")
    parser.add_argument('--arrive-by', type=_clock_time, default="08:00",
                        help="Goal arrival time (HH:MM, Hawaii time).")
    parser.add_argument('--adapter', choices=("auto", "google", "mock"), default="auto",
                        help="Traffic provider. 'auto' uses Google when an API key is set.")
    parser.add_argument('--correction',
                        help="Traffic correction stage applied to provider durations (reality | none). "
                             "Defaults to TRAFFIC_CORRECTION, or none for simulated traffic.")
    parser.add_argument('--seed', type=int, help="Random seed for the mock provider.")
    parser.add_argument('--json', action='store_true', help="Print the analysis as JSON.")
    parser.add_argument('-v', '--verbose', action='store_true',
                        help="Enable verbose mode to see each provider call.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    try:
        if args.adapter == "mock":
            adapter = MockTrafficAdapter(seed=args.seed)
        elif args.adapter == "google":
            adapter = GoogleDistanceMatrixAdapter()
        else:
            adapter = create_adapter(seed=args.seed)
        correction_name = args.correction
        if correction_name is None:
            # Simulated traffic already reflects Oahu conditions.
            correction_name = "none" if isinstance(adapter, MockTrafficAdapter) else TRAFFIC_CORRECTION
        correction = get_correction(correction_name)
    except ValueError as e:
        print(e)
        return 1

    request = WindowRequest(
        start_time=args.start,
        end_time=args.end,
        interval_minutes=args.interval,
        target_day=args.day,
        arrive_by=args.arrive_by,
    )

    if not args.json:
        print(f"Analyzing {args.origin} -> {args.destination} on {DAY_NAMES[args.day]}, "
              f"{args.start}-{args.end} every {args.interval} min.")

    try:
        analysis = analyze_departure_window(request, args.origin, args.destination, adapter, correction)
    except InvalidWindowError as e:
        print(e)
        return 1

    if args.json:
        print(json.dumps(analysis_to_dict(analysis), indent=2, ensure_ascii=False))
    else:
        display_results(analysis)
    return 0


if __name__ == '__main__':
    sys.exit(main())
