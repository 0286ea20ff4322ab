"""Baseline, normalization and smoothing of sensor resistance series."""

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.stats import linregress

from ..exceptions import BaselineError
from .protocol import DEFAULT_PROTOCOL, ExposureProtocol

logger = logging.getLogger(__name__)


@dataclass
class ProcessedSeries:
    """Time in minutes and normalized resistance (percent), index aligned."""
    time_min: np.ndarray
    normalized: np.ndarray

    def __post_init__(self):
        self.time_min = np.asarray(self.time_min, dtype=float)
        self.normalized = np.asarray(self.normalized, dtype=float)
        if self.time_min.shape != self.normalized.shape:
            raise ValueError(
                f"time and resistance lengths differ: {self.time_min.size} != {self.normalized.size}"
            )

    def __len__(self) -> int:
        return int(self.time_min.size)

    def with_values(self, normalized: np.ndarray) -> "ProcessedSeries":
        return ProcessedSeries(time_min=self.time_min.copy(), normalized=normalized)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({'time_min': self.time_min, 'normalized': self.normalized})


def compute_baseline(samples: pd.DataFrame,
                     protocol: ExposureProtocol = DEFAULT_PROTOCOL) -> float:
    """Mean resistance of the samples strictly inside the baseline window.

    Args:
        samples: Raw samples with 'time' (seconds) and 'resistance' columns
        protocol: Experiment timing; the window is
            (baseline_window_start, baseline_duration) in minutes

    Returns:
        Baseline resistance R0 in ohms

    Raises:
        BaselineError: if no sample falls in the window
    """
    time_min = samples['time'].to_numpy(dtype=float) / 60.0
    mask = (time_min > protocol.baseline_window_start) & (time_min < protocol.baseline_duration)
    if not mask.any():
        raise BaselineError(
            f"No samples between {protocol.baseline_window_start:g} and "
            f"{protocol.baseline_duration:g} min to compute the baseline resistance"
        )
    baseline = float(samples['resistance'].to_numpy(dtype=float)[mask].mean())
    logger.debug(f"Baseline resistance {baseline:.4f} from {int(mask.sum())} samples")
    return baseline


def normalize(samples: pd.DataFrame, baseline: float) -> ProcessedSeries:
    """Convert seconds to minutes and resistance to percent change from ``baseline``."""
    if not math.isfinite(baseline) or baseline == 0:
        raise BaselineError(f"Cannot normalize against a baseline resistance of {baseline}")
    time_min = samples['time'].to_numpy(dtype=float) / 60.0
    resistance = samples['resistance'].to_numpy(dtype=float)
    normalized = (resistance - baseline) / baseline * 100.0
    return ProcessedSeries(time_min=time_min, normalized=normalized)


def denormalize(normalized: np.ndarray, baseline: float) -> np.ndarray:
    """Inverse of :func:`normalize` for the resistance values."""
    return np.asarray(normalized, dtype=float) / 100.0 * baseline + baseline


def correct_baseline_drift(series: ProcessedSeries,
                           protocol: ExposureProtocol = DEFAULT_PROTOCOL) -> ProcessedSeries:
    """Subtract a straight line fitted to the baseline period.

    The fit uses the normalized values recorded before the first exposure and
    is removed from the whole series, so a sensor drifting at a constant rate
    reads flat.
    """
    mask = series.time_min < protocol.baseline_duration
    mask &= np.isfinite(series.normalized)
    if mask.sum() < 2 or np.ptp(series.time_min[mask]) == 0:
        logger.warning("Not enough baseline samples to estimate drift; skipping drift correction")
        return series.with_values(series.normalized.copy())

    fit = linregress(series.time_min[mask], series.normalized[mask])
    logger.debug(f"Baseline drift {fit.slope:.5f} %/min (r={fit.rvalue:.3f})")
    trend = fit.intercept + fit.slope * series.time_min
    return series.with_values(series.normalized - trend)


def smooth_series(series: ProcessedSeries, period: int) -> ProcessedSeries:
    """Trailing simple moving average, applied in place in ascending order.

    Each value from index ``period - 1`` on becomes the mean of itself and the
    ``period - 1`` values before it. Those earlier values are already
    smoothed when the window reaches them, so a spike decays over the
    following samples instead of being spread evenly. The leading values are
    kept as they are.
    """
    values = series.normalized.copy()
    if period <= 1 or values.size < period:
        return series.with_values(values)

    for i in range(period - 1, values.size):
        values[i] = values[i - period + 1:i + 1].mean()
    return series.with_values(values)
