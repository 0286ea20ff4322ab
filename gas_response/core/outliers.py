"""Period-aware outlier rejection for normalized sensor series.

The series is cut into the periods of the exposure protocol (baseline, each
exposure, each recovery, tail). Within a period a sample is an outlier when
its distance from the period median exceeds ``threshold`` standard
deviations, where the deviation is measured about the median rather than the
mean. Outliers take the value of the sample before them.
"""

import logging
import math
from typing import Dict, List, Mapping, Sequence, Tuple, Union

import numpy as np

from ..profiles import ConcentrationProfile
from .preprocessing import ProcessedSeries
from .protocol import DEFAULT_PROTOCOL, ExposureProtocol

logger = logging.getLogger(__name__)

PERIOD_KINDS = ('baseline', 'exposure', 'recovery', 'tail')

# Thresholds tuned on reference measurements
REFERENCE_PERIOD_THRESHOLDS: Dict[str, float] = {
    'baseline': 2.0,
    'exposure': 2.5,
    'recovery': 2.5,
    'tail': 2.0,
}

Threshold = Union[float, Mapping[str, float]]


def select_rank(values: Sequence[float], rank: int) -> float:
    """Return the element of 0-based ``rank`` in sorted order.

    Partition select: the middle element is the pivot, elements strictly
    below and strictly above it form two buckets and the search continues in
    the bucket holding ``rank``. Ranks that land on the elements equal to
    the pivot return the pivot. Empty input, or a rank outside the input,
    gives NaN.
    """
    values = np.asarray(values, dtype=float)
    while values.size > 0:
        pivot = values[values.size // 2]
        smaller = values[values < pivot]
        greater = values[values > pivot]
        not_greater = values.size - greater.size
        if rank < smaller.size:
            values = smaller
        elif rank >= not_greater:
            values = greater
            rank -= not_greater
        else:
            return float(pivot)
    return float('nan')


def find_median(values: Sequence[float]) -> float:
    return select_rank(values, len(values) // 2)


def find_time_index(times: Sequence[float], target: float) -> int:
    """Binary search for the sample closest to ``target`` minutes.

    Targets before the first sample map to 0 and targets after the last
    sample map to the last index. Otherwise the index of an exact match, or
    of the last probe of the search, is returned.
    """
    n = len(times)
    if n == 0:
        return 0
    last = n - 1
    if last > 0:
        if target < times[0]:
            return 0
        if target > times[last]:
            return last

    low, high = 0, n
    while True:
        mid = max((low + high) // 2, 0)
        if mid > last:
            return last
        value = times[mid]
        if value == target or low > high:
            return mid
        if value > target:
            high = mid - 1
        else:
            low = mid + 1


def period_bounds(times: Sequence[float],
                  profile: ConcentrationProfile,
                  protocol: ExposureProtocol = DEFAULT_PROTOCOL) -> List[Tuple[str, int, int]]:
    """Inclusive (kind, start, stop) index bounds of every period, in time order."""
    last = len(times) - 1
    bounds = []
    stop = find_time_index(times, protocol.baseline_duration)
    bounds.append(('baseline', 0, stop))
    for window in protocol.windows(profile.concentrations):
        start = find_time_index(times, window.exposure_start)
        stop = find_time_index(times, window.exposure_end)
        bounds.append(('exposure', start, stop))
        start = stop
        stop = find_time_index(times, window.recovery_end)
        bounds.append(('recovery', start, stop))
    bounds.append(('tail', stop, last))
    return bounds


def _resolve_thresholds(std_threshold: Threshold) -> Dict[str, float]:
    if isinstance(std_threshold, Mapping):
        missing = [kind for kind in PERIOD_KINDS if kind not in std_threshold]
        if missing:
            raise ValueError(f"Missing outlier thresholds for periods: {missing}")
        return {kind: float(std_threshold[kind]) for kind in PERIOD_KINDS}
    return {kind: float(std_threshold) for kind in PERIOD_KINDS}


def _period_outliers(source: np.ndarray, start: int, stop: int, threshold: float) -> List[int]:
    """Indexes in [start, stop) whose z-score about the median exceeds ``threshold``."""
    length = stop - start
    if length <= 1:
        return []

    period = source[start:stop + 1]
    median = find_median(period)
    variance = float(np.sum((period - median) ** 2)) / (length - 1)
    std = math.sqrt(variance) if variance >= 0 else float('nan')
    if not math.isfinite(std) or std == 0:
        return []

    end = min(stop, source.size - 1)
    z_scores = np.abs(source[start:end] - median) / std
    return [start + int(i) for i in np.flatnonzero(z_scores > threshold)]


def _outlier_pass(series: ProcessedSeries,
                  bounds: List[Tuple[str, int, int]],
                  thresholds: Dict[str, float]) -> Tuple[np.ndarray, int]:
    source = series.normalized
    result = source.copy()
    replaced = 0
    for kind, start, stop in bounds:
        for i in _period_outliers(source, start, stop, thresholds[kind]):
            result[i] = source[i - 1] if i > 0 else source[i + 1]
            replaced += 1
    return result, replaced


def remove_outliers(series: ProcessedSeries,
                    profile: ConcentrationProfile,
                    std_threshold: Threshold,
                    passes: int,
                    protocol: ExposureProtocol = DEFAULT_PROTOCOL) -> ProcessedSeries:
    """
    Replace outliers period by period, ``passes`` times.

    Every pass reads the series as it stood when the pass began, so a
    replacement never feeds into another replacement of the same pass.

    Args:
        series: Normalized series
        profile: Concentration profile defining the exposure cycles
        std_threshold: One threshold for all periods, or a mapping with a
            threshold per period kind ('baseline', 'exposure', 'recovery', 'tail')
        passes: Number of passes; 0 leaves the series unchanged
        protocol: Experiment timing

    Returns:
        New ProcessedSeries with outliers replaced
    """
    thresholds = _resolve_thresholds(std_threshold)
    values = series.normalized.copy()
    if passes <= 0 or len(series) < 2:
        return series.with_values(values)

    bounds = period_bounds(series.time_min, profile, protocol)
    current = series.with_values(values)
    for pass_number in range(1, passes + 1):
        values, replaced = _outlier_pass(current, bounds, thresholds)
        logger.debug(f"Outlier pass {pass_number}/{passes}: replaced {replaced} samples")
        current = current.with_values(values)
        if replaced == 0:
            break
    return current
