import math

import numpy as np
import pytest

from gas_response.core.outliers import (
    REFERENCE_PERIOD_THRESHOLDS,
    find_median,
    find_time_index,
    period_bounds,
    remove_outliers,
    select_rank,
)
from gas_response.core.preprocessing import ProcessedSeries
from gas_response.profiles import parse_profile

PROFILE = parse_profile("TestGas 10")


def _alternating_series(n=200):
    # +1/-1 around zero, one sample per minute
    time_min = np.arange(float(n))
    values = np.where(np.arange(n) % 2 == 0, 1.0, -1.0)
    return ProcessedSeries(time_min=time_min, normalized=values)


def test_median_matches_sorted_rank_for_many_lengths():
    rng = np.random.default_rng(1)
    for n in range(1, 40):
        values = rng.integers(0, 5, size=n).astype(float)  # plenty of duplicates
        expected = sorted(values)[n // 2]
        assert find_median(values) == expected, f"length {n}: {values}"


def test_select_rank_every_rank():
    values = [5.0, 1.0, 4.0, 1.0, 3.0, 9.0, 2.0, 6.0]
    ordered = sorted(values)
    for rank in range(len(values)):
        assert select_rank(values, rank) == ordered[rank]


def test_median_of_empty_is_nan():
    assert math.isnan(find_median([]))


def test_median_of_equal_values():
    assert find_median([3.5] * 7) == 3.5


def test_find_time_index_exact_and_clamped():
    times = np.arange(0.0, 200.0, 0.5)
    assert find_time_index(times, 60.0) == 120
    assert find_time_index(times, 0.0) == 0
    assert find_time_index(times, -5.0) == 0
    assert find_time_index(times, 500.0) == len(times) - 1


def test_find_time_index_between_samples_lands_next_to_target():
    times = np.arange(0.0, 100.0, 1.0)
    idx = find_time_index(times, 42.5)
    assert idx in (42, 43)


def test_find_time_index_single_and_empty():
    assert find_time_index([7.0], 100.0) == 0
    assert find_time_index([7.0], 7.0) == 0
    assert find_time_index([], 1.0) == 0


def test_period_bounds_follow_protocol():
    times = np.arange(0.0, 200.0)
    bounds = period_bounds(times, PROFILE)
    assert bounds == [
        ('baseline', 0, 60),
        ('exposure', 60, 75),
        ('recovery', 75, 95),
        ('tail', 95, 199),
    ]


def test_spike_is_replaced_with_previous_sample():
    series = _alternating_series()
    series.normalized[30] = 50.0
    original = series.normalized.copy()

    cleaned = remove_outliers(series, PROFILE, 2.0, passes=1)
    assert cleaned.normalized[30] == -1.0
    others = np.arange(len(series)) != 30
    assert np.array_equal(cleaned.normalized[others], original[others])
    # input not modified
    assert np.array_equal(series.normalized, original)


def test_spike_at_first_sample_takes_next_value():
    series = _alternating_series()
    series.normalized[0] = 50.0
    cleaned = remove_outliers(series, PROFILE, 2.0, passes=1)
    assert cleaned.normalized[0] == -1.0


def test_converged_series_is_stable():
    series = _alternating_series()
    series.normalized[30] = 50.0
    series.normalized[66] = -40.0

    converged = remove_outliers(series, PROFILE, 2.0, passes=10)
    again = remove_outliers(converged, PROFILE, 2.0, passes=1)
    assert np.array_equal(again.normalized, converged.normalized)


def test_zero_passes_leaves_series_unchanged():
    series = _alternating_series()
    series.normalized[30] = 50.0
    cleaned = remove_outliers(series, PROFILE, 2.0, passes=0)
    assert np.array_equal(cleaned.normalized, series.normalized)
    assert cleaned is not series


def test_flat_and_short_periods_are_left_alone():
    flat = ProcessedSeries(time_min=np.arange(200.0), normalized=np.zeros(200))
    assert np.array_equal(remove_outliers(flat, PROFILE, 2.0, passes=3).normalized, flat.normalized)

    short = ProcessedSeries(time_min=[0.0, 1.0, 2.0], normalized=[0.0, 100.0, 0.0])
    assert np.array_equal(remove_outliers(short, PROFILE, 2.0, passes=3).normalized, short.normalized)

    single = ProcessedSeries(time_min=[0.0], normalized=[5.0])
    assert remove_outliers(single, PROFILE, 2.0, passes=3).normalized.tolist() == [5.0]


def test_per_period_thresholds():
    series = _alternating_series()
    series.normalized[30] = 50.0   # baseline
    series.normalized[66] = 50.0   # exposure

    thresholds = dict(REFERENCE_PERIOD_THRESHOLDS, baseline=100.0)
    cleaned = remove_outliers(series, PROFILE, thresholds, passes=1)
    assert cleaned.normalized[30] == 50.0
    assert cleaned.normalized[66] == -1.0


def test_per_period_thresholds_need_every_period():
    series = _alternating_series()
    with pytest.raises(ValueError):
        remove_outliers(series, PROFILE, {'baseline': 2.0}, passes=1)
