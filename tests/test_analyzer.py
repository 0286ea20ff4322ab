import numpy as np
import pandas as pd
import pytest

from gas_response.analyzer import GasResponseAnalyzer, ProcessingSettings
from gas_response.core.outliers import REFERENCE_PERIOD_THRESHOLDS
from gas_response.profiles import parse_profile


def _make_samples(spike_at_min=None):
    # one sample per minute, 1000 ohm, a 10 % drop during the first exposure
    time_min = np.arange(0.0, 170.0)
    resistance = np.full(time_min.shape, 1000.0)
    resistance[(time_min >= 60) & (time_min < 75)] = 900.0
    if spike_at_min is not None:
        resistance[int(spike_at_min)] = 5000.0
    return pd.DataFrame({'time': time_min * 60.0, 'resistance': resistance})


def test_settings_validation():
    with pytest.raises(ValueError):
        ProcessingSettings(outlier_passes=-1)
    with pytest.raises(ValueError):
        ProcessingSettings(smooth_period=-2)


def test_settings_from_config():
    config = {'processing': {'outlier_passes': 2, 'std_threshold': 3.0,
                             'period_thresholds': REFERENCE_PERIOD_THRESHOLDS,
                             'smooth_period': 5, 'baseline_drift': True}}
    settings = ProcessingSettings.from_config(config)
    assert settings.outlier_passes == 2
    assert settings.std_threshold == REFERENCE_PERIOD_THRESHOLDS
    assert settings.smooth_period == 5
    assert settings.baseline_drift is True

    assert ProcessingSettings.from_config({}) == ProcessingSettings()


def test_analyze_without_cleaning():
    analyzer = GasResponseAnalyzer({}, settings=ProcessingSettings())
    result = analyzer.analyze(_make_samples(), parse_profile("CO 10 20"))
    assert result.baseline == pytest.approx(1000.0)
    assert [p.peak_response for p in result.responses] == pytest.approx([-10.0, 0.0])
    assert result.axes.time.maximum == 200.0


def test_outlier_passes_remove_spike_before_peak_search():
    samples = _make_samples(spike_at_min=100)
    profile = parse_profile("CO 10 20")

    raw = GasResponseAnalyzer({}, settings=ProcessingSettings()).analyze(samples, profile)
    assert raw.responses[1].peak_response == pytest.approx(400.0)

    cleaned = GasResponseAnalyzer({}, settings=ProcessingSettings(outlier_passes=2)).analyze(samples, profile)
    assert cleaned.responses[1].peak_response == pytest.approx(0.0)


def test_smoothing_runs_after_outlier_removal():
    analyzer = GasResponseAnalyzer({}, settings=ProcessingSettings(smooth_period=3))
    _, series = analyzer.clean(_make_samples(), parse_profile("CO 10"))
    # each window averages values that were already smoothed
    assert series.normalized[60] == pytest.approx(-10.0 / 3)
    assert series.normalized[61] == pytest.approx(-40.0 / 9)
    assert series.normalized[62] == pytest.approx(-160.0 / 27)
    assert series.normalized[59] == 0.0
