"""
Per-file analysis of gas sensor resistance data.
"""
from typing import Dict, List, Mapping, Optional, Union
from dataclasses import dataclass, field
import logging
import pandas as pd
from config.config_loader import load_config
from .profiles import ConcentrationProfile
from .core.protocol import ExposureProtocol
from .core.preprocessing import (
    ProcessedSeries,
    compute_baseline,
    normalize,
    correct_baseline_drift,
    smooth_series,
)
from .core.outliers import remove_outliers
from .core.axes import AxisSet, compute_axes
from .core.dynamics import ResponsePoint, extract_peak_responses

logger = logging.getLogger(__name__)


@dataclass
class ProcessingSettings:
    """Cleaning options applied to every file of a run."""
    outlier_passes: int = 0
    std_threshold: Union[float, Mapping[str, float]] = 2.0
    smooth_period: int = 0
    baseline_drift: bool = False

    def __post_init__(self):
        if self.outlier_passes < 0:
            raise ValueError(f"outlier_passes must be >= 0, got {self.outlier_passes}")
        if self.smooth_period < 0:
            raise ValueError(f"smooth_period must be >= 0, got {self.smooth_period}")

    @classmethod
    def from_config(cls, config: Optional[Dict]) -> "ProcessingSettings":
        proc_cfg = (config or {}).get('processing', {}) or {}
        period_thresholds = proc_cfg.get('period_thresholds')
        threshold = dict(period_thresholds) if period_thresholds else float(proc_cfg.get('std_threshold', 2.0))
        return cls(
            outlier_passes=int(proc_cfg.get('outlier_passes', 0)),
            std_threshold=threshold,
            smooth_period=int(proc_cfg.get('smooth_period', 0)),
            baseline_drift=bool(proc_cfg.get('baseline_drift', False)),
        )


@dataclass
class AnalysisResult:
    """Everything the chart and the response table need for one file."""
    profile: ConcentrationProfile
    baseline: float
    series: ProcessedSeries
    axes: AxisSet
    responses: List[ResponsePoint] = field(default_factory=list)


class GasResponseAnalyzer:
    """Runs the cleaning and response extraction steps on raw samples."""

    def __init__(self, config: Optional[Dict] = None,
                 settings: Optional[ProcessingSettings] = None,
                 protocol: Optional[ExposureProtocol] = None):
        """
        Initialize the analyzer.

        Args:
            config: Configuration dictionary (the packaged defaults when None)
            settings: Processing options; read from ``config`` when None
            protocol: Experiment timing; read from ``config`` when None
        """
        self.config = config if config is not None else load_config()
        self.settings = settings or ProcessingSettings.from_config(self.config)
        self.protocol = protocol or ExposureProtocol.from_config(self.config)

    def clean(self, samples: pd.DataFrame, profile: ConcentrationProfile):
        """Return the baseline resistance and the cleaned normalized series."""
        baseline = compute_baseline(samples, self.protocol)
        series = normalize(samples, baseline)

        if self.settings.baseline_drift:
            series = correct_baseline_drift(series, self.protocol)

        series = remove_outliers(
            series,
            profile,
            self.settings.std_threshold,
            self.settings.outlier_passes,
            self.protocol,
        )

        if self.settings.smooth_period > 0:
            series = smooth_series(series, self.settings.smooth_period)

        return baseline, series

    def analyze(self, samples: pd.DataFrame, profile: ConcentrationProfile) -> AnalysisResult:
        """
        Perform the complete analysis of one file.

        Args:
            samples: Raw samples with 'time' (s) and 'resistance' (ohm) columns
            profile: Gas concentration profile of the experiment

        Returns:
            AnalysisResult with the cleaned series, axes and peak responses
        """
        baseline, series = self.clean(samples, profile)
        axes = compute_axes(series, profile, self.protocol)
        responses = extract_peak_responses(series, profile, self.protocol)
        return AnalysisResult(
            profile=profile,
            baseline=baseline,
            series=series,
            axes=axes,
            responses=responses,
        )
