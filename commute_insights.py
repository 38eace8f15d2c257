# Narrative comments and savings estimates built on an analyzed departure window.

from dataclasses import dataclass

from api_structures import LatenessRisk, StressResult, round_half_up
from config import (
    CO2_KG_PER_CONGESTION_MINUTE,
    COMMUTE_DAYS_PER_YEAR,
    FUEL_GAL_PER_CONGESTION_MINUTE,
    GAS_PRICE_PER_GALLON,
    H1_COMMUTERS,
)
from ranking import best_slot, time_saved_minutes, trend_direction, worst_slot


@dataclass
class CommuteComment:
    headline: str
    detail: str
    tip: str


@dataclass
class CO2Savings:
    savings_kg: float
    savings_grams: int
    equivalent: str
    worst_label: str = ""
    best_label: str = ""


@dataclass
class PersonalImpact:
    saved_minutes: float
    annual_hours: float
    annual_fuel_cost: float
    annual_co2_kg: float


@dataclass
class CollectiveImpact:
    shifters: int
    congestion_reduction_pct: int
    annual_hours: int
    annual_co2_tons: float


def generate_commute_comment(results: list[StressResult]) -> CommuteComment:
    """Rule-based commentary on how much departure timing matters for this window."""
    if not results:
        return CommuteComment(
            headline="Hmm, no data came back.",
            detail="Try checking your origin and destination. Sometimes the API needs a moment.",
            tip="",
        )

    best = best_slot(results)
    worst = worst_slot(results)
    all_late = all(r.lateness_risk is LatenessRisk.LATE for r in results)
    any_on_time = any(r.lateness_risk is LatenessRisk.ON_TIME for r in results)
    saved = time_saved_minutes(results)

    if all_late:
        headline = "Every slot in this window runs late. The whole window might need to shift earlier."
    elif any_on_time and saved >= 15:
        headline = (f"Whoa! Leaving at {best.departure_label} instead of {worst.departure_label} "
                    f"saves {saved} minutes. That's huge.")
    elif any_on_time and saved >= 5:
        headline = (f"Leaving at {best.departure_label} saves about {saved} minutes "
                    f"compared to {worst.departure_label}.")
    else:
        headline = "Traffic is pretty consistent across this window. Timing doesn't change much here."

    if trend_direction(results) == "worsening":
        detail = (f"Traffic gets heavier as the window goes on. The earlier you leave, the smoother "
                  f"the ride: {best.departure_label} looks like the sweet spot.")
    else:
        detail = (f"Interestingly, traffic actually eases later in this window. "
                  f"{best.departure_label} might be worth trying if your schedule allows.")

    if all_late:
        tip = ("Try moving your departure window 15-30 minutes earlier, or adjust your arrival goal. "
               "Small shifts can make a real difference.")
    elif saved >= 10:
        tip = (f"Just {saved} minutes of timing difference. That's the kind of thing most people never "
               f"think about, but it adds up fast over a whole year.")
    else:
        tip = ("Not a huge difference here, but on other days or routes the gap can be much bigger. "
               "Worth checking regularly!")

    return CommuteComment(headline=headline, detail=detail, tip=tip)


def estimate_co2_savings(worst_delay_minutes: float, best_delay_minutes: float) -> CO2Savings:
    """CO2 avoided by sitting in the smallest delay of the window instead of the largest."""
    saved_minutes = max(0, worst_delay_minutes - best_delay_minutes)
    savings_kg = saved_minutes * CO2_KG_PER_CONGESTION_MINUTE
    savings_grams = round_half_up(savings_kg * 1000)

    if savings_grams >= 500:
        equivalent = f"≈ {savings_grams / 1000:.2f} km driven equivalent saved"
    elif savings_grams >= 100:
        equivalent = f"≈ charging your phone {round_half_up(savings_grams / 8)} times"
    elif savings_grams > 0:
        equivalent = f"≈ {savings_grams}g, small but meaningful"
    else:
        equivalent = "Similar across all departure times"

    return CO2Savings(
        savings_kg=round_half_up(savings_kg * 100) / 100,
        savings_grams=savings_grams,
        equivalent=equivalent,
    )


def window_co2_savings(results: list[StressResult]) -> CO2Savings | None:
    """CO2 savings between the slots with the largest and smallest congestion delay."""
    if not results:
        return None
    delays = [r.duration_in_traffic_minutes - r.duration_minutes for r in results]
    worst_delay, best_delay = max(delays), min(delays)
    savings = estimate_co2_savings(worst_delay, best_delay)
    savings.worst_label = results[delays.index(worst_delay)].departure_label
    savings.best_label = results[delays.index(best_delay)].departure_label
    return savings


def peak_delay_minutes(results: list[StressResult]) -> int:
    """Slowest traffic duration over the window's shortest free-flow duration."""
    if not results:
        return 0
    free_flow = min(r.duration_minutes for r in results)
    return max(r.duration_in_traffic_minutes for r in results) - free_flow


def estimate_personal_impact(shift_minutes: float, peak_delay: float) -> PersonalImpact:
    """Yearly effect of leaving `shift_minutes` earlier, capped at the peak delay."""
    saved = min(shift_minutes, peak_delay)
    yearly_minutes = saved * COMMUTE_DAYS_PER_YEAR
    return PersonalImpact(
        saved_minutes=saved,
        annual_hours=yearly_minutes / 60,
        annual_fuel_cost=yearly_minutes * FUEL_GAL_PER_CONGESTION_MINUTE * GAS_PRICE_PER_GALLON,
        annual_co2_kg=yearly_minutes * CO2_KG_PER_CONGESTION_MINUTE,
    )


def estimate_collective_impact(
    participation_pct: float,
    personal_saved_minutes: float,
    peak_delay: float,
) -> CollectiveImpact:
    """City-scale projection if a share of H-1 commuters shift their departure."""
    rate = participation_pct / 100
    reduction_factor = 0.6 * rate * (max(personal_saved_minutes, 5) / 10)
    shifters = round_half_up(H1_COMMUTERS * rate)
    delay_reduced = peak_delay * reduction_factor
    yearly_minutes = shifters * delay_reduced * 365
    return CollectiveImpact(
        shifters=shifters,
        congestion_reduction_pct=round_half_up(reduction_factor * 100),
        annual_hours=round_half_up(yearly_minutes / 60),
        annual_co2_tons=round_half_up(yearly_minutes * CO2_KG_PER_CONGESTION_MINUTE / 1000 * 10) / 10,
    )
