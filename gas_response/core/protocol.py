"""Timing of the gas exposure experiment.

An experiment starts with a baseline period, then runs one exposure and one
recovery period per concentration, and ends with a tail period. All
durations are in minutes.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

BASELINE_WINDOW_START = 45.0
BASELINE_DURATION = 60.0
EXPOSURE_DURATION = 15.0
RECOVERY_DURATION = 20.0
TAIL_DURATION = 40.0


@dataclass(frozen=True)
class ExposureWindow:
    index: int
    concentration: float
    exposure_start: float
    exposure_end: float
    recovery_end: float


@dataclass(frozen=True)
class ExposureProtocol:
    baseline_window_start: float = BASELINE_WINDOW_START
    baseline_duration: float = BASELINE_DURATION
    exposure_duration: float = EXPOSURE_DURATION
    recovery_duration: float = RECOVERY_DURATION
    tail_duration: float = TAIL_DURATION

    @property
    def cycle_duration(self) -> float:
        return self.exposure_duration + self.recovery_duration

    def total_duration(self, n_exposures: int) -> float:
        return self.baseline_duration + n_exposures * self.cycle_duration + self.tail_duration

    def windows(self, concentrations) -> List[ExposureWindow]:
        windows = []
        for j, concentration in enumerate(concentrations):
            start = self.baseline_duration + j * self.cycle_duration
            end = start + self.exposure_duration
            windows.append(ExposureWindow(
                index=j,
                concentration=float(concentration),
                exposure_start=start,
                exposure_end=end,
                recovery_end=end + self.recovery_duration,
            ))
        return windows

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "ExposureProtocol":
        cfg = (config or {}).get('protocol', {}) or {}
        return cls(
            baseline_window_start=float(cfg.get('baseline_window_start', BASELINE_WINDOW_START)),
            baseline_duration=float(cfg.get('baseline_duration', BASELINE_DURATION)),
            exposure_duration=float(cfg.get('exposure_duration', EXPOSURE_DURATION)),
            recovery_duration=float(cfg.get('recovery_duration', RECOVERY_DURATION)),
            tail_duration=float(cfg.get('tail_duration', TAIL_DURATION)),
        )


DEFAULT_PROTOCOL = ExposureProtocol()
