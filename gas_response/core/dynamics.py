import logging
from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd

from ..profiles import ConcentrationProfile
from .preprocessing import ProcessedSeries
from .protocol import DEFAULT_PROTOCOL, ExposureProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponsePoint:
    concentration: float
    peak_response: float


def extract_peak_responses(series: ProcessedSeries,
                           profile: ConcentrationProfile,
                           protocol: ExposureProtocol = DEFAULT_PROTOCOL) -> List[ResponsePoint]:
    """Peak response of every exposure cycle.

    For each concentration the candidates are the samples recorded between
    the start of its exposure and the end of its recovery, i.e. with
    ``elapsed = time_min - baseline_duration`` in ``[j * cycle, (j + 1) * cycle)``.
    The peak is the first sample with the largest absolute normalized
    resistance. A cycle without samples, or with only zero or non-finite
    values, reports 0.0.

    Args:
        series: Cleaned normalized series
        profile: Concentration profile, one window per concentration
        protocol: Experiment timing

    Returns:
        One ResponsePoint per concentration, in profile order
    """
    points = []
    for window in protocol.windows(profile.concentrations):
        mask = (series.time_min >= window.exposure_start) & (series.time_min < window.recovery_end)
        candidates = series.normalized[mask]
        candidates = candidates[np.isfinite(candidates)]
        peak = 0.0
        if candidates.size:
            best = float(candidates[int(np.argmax(np.abs(candidates)))])
            if abs(best) > 0:
                peak = best
        points.append(ResponsePoint(concentration=window.concentration, peak_response=peak))
        logger.debug(
            f"Exposure {window.index + 1} ({window.concentration:g} ppm): "
            f"{int(mask.sum())} samples, peak {peak:.4f} %"
        )
    return points


def responses_to_frame(points: List[ResponsePoint]) -> pd.DataFrame:
    return pd.DataFrame({
        'concentration': [p.concentration for p in points],
        'peak_response': [p.peak_response for p in points],
    })
