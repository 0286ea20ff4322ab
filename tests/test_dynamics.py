import numpy as np

from gas_response.core.dynamics import ResponsePoint, extract_peak_responses, responses_to_frame
from gas_response.core.preprocessing import ProcessedSeries
from gas_response.profiles import parse_profile


def _flat_series(end_min=200.0, step=1.0):
    time_min = np.arange(0.0, end_min, step)
    return ProcessedSeries(time_min=time_min, normalized=np.zeros_like(time_min))


def test_peak_response_per_exposure():
    series = _flat_series()
    series.normalized[65] = -5.0

    points = extract_peak_responses(series, parse_profile("TestGas 10 20"))
    assert points == [ResponsePoint(10.0, -5.0), ResponsePoint(20.0, 0.0)]


def test_peak_keeps_sign_of_largest_magnitude():
    series = _flat_series()
    series.normalized[62] = 3.0
    series.normalized[70] = -4.0
    series.normalized[100] = 7.5   # second cycle

    points = extract_peak_responses(series, parse_profile("TestGas 10 20"))
    assert [p.peak_response for p in points] == [-4.0, 7.5]


def test_windows_are_half_open():
    series = _flat_series()
    series.normalized[95] = 9.0   # recovery end of cycle 1, start of cycle 2
    series.normalized[59] = 9.0   # still baseline

    points = extract_peak_responses(series, parse_profile("TestGas 10 20"))
    assert [p.peak_response for p in points] == [0.0, 9.0]


def test_cycle_without_samples_reports_zero():
    series = _flat_series(end_min=80.0)
    series.normalized[61] = -2.0
    series.normalized[62] = np.nan

    points = extract_peak_responses(series, parse_profile("TestGas 10 20 30"))
    assert [p.peak_response for p in points] == [-2.0, 0.0, 0.0]
    assert [p.concentration for p in points] == [10.0, 20.0, 30.0]


def test_responses_to_frame():
    df = responses_to_frame([ResponsePoint(10.0, -5.0), ResponsePoint(20.0, 1.5)])
    assert list(df.columns) == ['concentration', 'peak_response']
    assert df['peak_response'].tolist() == [-5.0, 1.5]
