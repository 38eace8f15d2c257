import pytest

from api_structures import LatenessRisk, SampleStatus, StressLevel
from stress_index import (
    build_slot_reports,
    calculate_stress_data,
    compute_stress_index,
    free_flow_baseline,
    lateness_risk,
    local_slopes,
    minutes_buffer,
    to_stress_level,
)

from conftest import MONDAY_0630

FAR_FUTURE_GOAL = MONDAY_0630 + 6 * 3600


def test_no_congestion_no_lateness_no_slope_is_zero():
    assert compute_stress_index(20, 20, 0, 0) == 0


def test_congestion_ratio_scenario():
    # 30 min in traffic over a 20 min free-flow baseline
    index = compute_stress_index(30, 20, 0, 0)
    assert index == 50
    assert to_stress_level(index) is StressLevel.MODERATE


def test_penalties_add_up():
    assert compute_stress_index(20, 20, 10, -1.5) == 32


def test_index_is_clamped():
    assert compute_stress_index(100, 20, 0, 0) == 200
    assert compute_stress_index(10, 20, 0, 0) == 0


def test_non_positive_baseline_zeroes_congestion_term_only():
    assert compute_stress_index(30, 0, 10, 1) == 28
    assert compute_stress_index(30, -5, 0, 0) == 0


def test_half_rounds_up():
    assert compute_stress_index(20, 20, 0.25, 0) == 1


@pytest.mark.parametrize("index,level", [
    (0, StressLevel.STABLE),
    (35, StressLevel.STABLE),
    (36, StressLevel.MODERATE),
    (70, StressLevel.MODERATE),
    (71, StressLevel.VOLATILE),
    (200, StressLevel.VOLATILE),
])
def test_stress_levels(index, level):
    assert to_stress_level(index) is level


@pytest.mark.parametrize("seconds_early,risk", [
    (-1, LatenessRisk.LATE),
    (0, LatenessRisk.TIGHT),
    (300, LatenessRisk.TIGHT),
    (301, LatenessRisk.TIGHT),
    (360, LatenessRisk.ON_TIME),
])
def test_lateness_risk_boundaries(seconds_early, risk):
    goal = MONDAY_0630
    assert lateness_risk(goal - seconds_early, goal) is risk


def test_on_time_arrival_is_never_late():
    assert lateness_risk(MONDAY_0630, MONDAY_0630) is not LatenessRisk.LATE
    assert minutes_buffer(MONDAY_0630, MONDAY_0630) == 0


def test_minutes_buffer_is_signed():
    assert minutes_buffer(MONDAY_0630, MONDAY_0630 + 600) == 10
    assert minutes_buffer(MONDAY_0630 + 600, MONDAY_0630) == -10


def test_local_slopes_substitute_self_at_edges():
    assert local_slopes([30, 34, 40]) == [2.0, 5.0, 3.0]
    assert local_slopes([42]) == [0.0]
    assert local_slopes([]) == []


def test_baseline_ignores_failed_samples(make_sample):
    samples = [
        make_sample(0, 30, free_flow_minutes=25),
        make_sample(1, 0, status=SampleStatus.PROVIDER_ERROR),
        make_sample(2, 30, free_flow_minutes=22),
    ]
    assert free_flow_baseline(samples) == 22
    assert free_flow_baseline([samples[1]]) == 0.0


def test_window_scenario(make_sample):
    samples = [make_sample(i, 30 if 2 <= i <= 4 else 25) for i in range(7)]
    results = calculate_stress_data(samples, FAR_FUTURE_GOAL)

    middle = results[3]
    assert middle.duration_minutes == 20
    assert middle.duration_in_traffic_minutes == 30
    assert middle.stress_index == 50
    assert middle.stress_level is StressLevel.MODERATE
    assert middle.lateness_risk is LatenessRisk.ON_TIME

    # Rising edge: slope (30 - 25) / 2 adds 20 points
    assert results[1].stress_index == 25 + 20


def test_slopes_skip_over_failed_samples(make_sample):
    samples = [
        make_sample(0, 30),
        make_sample(1, 0, status=SampleStatus.NO_DATA),
        make_sample(2, 34),
    ]
    results = calculate_stress_data(samples, FAR_FUTURE_GOAL)
    assert len(results) == 2
    # Each valid slot sees the other as its neighbour: slope 2, penalty 16
    assert results[0].stress_index == 50 + 16
    assert results[1].stress_index == 70 + 16


def test_lateness_adds_penalty(make_sample):
    sample = make_sample(0, 20)
    goal = sample.arrival_time - 600
    result = calculate_stress_data([sample], goal)[0]
    assert result.stress_index == 20
    assert result.lateness_risk is LatenessRisk.LATE
    assert result.minutes_buffer == -10


def test_sweet_spot_and_risk_factor(make_sample):
    samples = [make_sample(0, 30), make_sample(1, 26), make_sample(2, 26), make_sample(3, 40)]
    results = calculate_stress_data(samples, FAR_FUTURE_GOAL)
    assert [r.is_sweet_spot for r in results] == [False, True, False, False]
    assert [r.risk_factor for r in results] == [5, 5, 20, 5]


def test_explicit_free_flow_overrides_window_baseline(make_sample):
    samples = [make_sample(0, 30, free_flow_minutes=25)]
    assert calculate_stress_data(samples, FAR_FUTURE_GOAL)[0].stress_index == 20
    assert calculate_stress_data(samples, FAR_FUTURE_GOAL, free_flow_seconds=1200)[0].stress_index == 50


def test_slot_reports_keep_failed_samples_in_place(make_sample):
    samples = [
        make_sample(0, 30),
        make_sample(1, 0, status=SampleStatus.PROVIDER_ERROR),
        make_sample(2, 32),
    ]
    reports = build_slot_reports(samples, FAR_FUTURE_GOAL)
    assert [r.sample for r in reports] == samples
    assert reports[1].stress is None
    assert reports[0].stress.departure_label == "6:30 AM"
    assert reports[2].stress.departure_label == "6:50 AM"

    failed = reports[1].to_dict()
    assert failed["arrivalLabel"] == "--"
    assert failed["stressIndex"] is None
    assert failed["status"] == "PROVIDER_ERROR"
    assert failed["sample"] == samples[1].to_dict()
    assert reports[0].to_dict()["sample"]["durationInTrafficSeconds"] == 1800


def test_output_contract(make_sample):
    result = calculate_stress_data([make_sample(0, 30)], MONDAY_0630 + 3600)[0]
    data = result.to_dict()
    assert data["departureLabel"] == "6:30 AM"
    assert data["arrivalLabel"] == "7:00 AM"
    assert data["stressLevel"] == "moderate"
    assert data["latenessRisk"] == "green"
    assert data["minutesBuffer"] == 30


def test_computation_is_idempotent(make_sample):
    samples = [make_sample(i, 25 + i * 2) for i in range(5)]
    assert calculate_stress_data(samples, MONDAY_0630 + 3000) == calculate_stress_data(samples, MONDAY_0630 + 3000)
