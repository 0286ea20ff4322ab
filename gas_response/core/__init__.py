"""Core processing utilities for gas sensor resistance data.

Modules:
- protocol: exposure timing and windows
- preprocessing: baseline, normalization, drift correction, smoothing
- outliers: period-aware outlier rejection
- axes: chart axis scaling
- dynamics: peak response per exposure
- pipeline: per-file processing, exports and batch runs (not re-exported)
"""

from .protocol import ExposureProtocol, ExposureWindow, DEFAULT_PROTOCOL
from .preprocessing import (
    ProcessedSeries,
    compute_baseline,
    normalize,
    denormalize,
    correct_baseline_drift,
    smooth_series,
)
from .outliers import (
    REFERENCE_PERIOD_THRESHOLDS,
    select_rank,
    find_median,
    find_time_index,
    period_bounds,
    remove_outliers,
)
from .axes import AxisSpec, AxisSet, resistance_axis, concentration_axis, time_axis, compute_axes
from .dynamics import ResponsePoint, extract_peak_responses

# pipeline depends on the analyzer, which depends on this package; import it
# as gas_response.core.pipeline
