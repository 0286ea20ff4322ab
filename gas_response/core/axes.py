"""Chart axis limits rounded so that tick labels land on clean numbers."""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from ..profiles import ConcentrationProfile
from .preprocessing import ProcessedSeries
from .protocol import DEFAULT_PROTOCOL, ExposureProtocol

logger = logging.getLogger(__name__)

RESISTANCE_AXIS_TICKS = 9
RESISTANCE_AXIS_TICK_ROUNDOFF = 10
RESISTANCE_AXIS_MAX_ROUNDOFF = 5
# Fraction of the data range added above and below the data
RESISTANCE_AXIS_MARGIN = 0.2
# Ranges below this are scaled up before rounding
SMALL_RANGE_LIMIT = 100.0
SMALL_RANGE_SCALE = 1000.0

CONCENTRATION_AXIS_TICKS = 4
CONCENTRATION_AXIS_MARGIN = 1.25

TIME_AXIS_TICKS = 10
TIME_AXIS_TICK_ROUNDOFF = 5


@dataclass(frozen=True)
class AxisSpec:
    minimum: float
    maximum: float
    tick_count: int

    @property
    def range(self) -> float:
        return self.maximum - self.minimum

    @property
    def step(self) -> float:
        return self.range / self.tick_count

    def ticks(self) -> np.ndarray:
        return np.linspace(self.minimum, self.maximum, self.tick_count + 1)


@dataclass(frozen=True)
class AxisSet:
    time: AxisSpec
    concentration: AxisSpec
    resistance: AxisSpec


def _round_up(value: float, multiple: int) -> float:
    remainder = value % multiple
    return value if remainder == 0 else value + (multiple - remainder)


def resistance_axis(values: Sequence[float],
                    tick_count: int = RESISTANCE_AXIS_TICKS,
                    tick_roundoff: int = RESISTANCE_AXIS_TICK_ROUNDOFF) -> AxisSpec:
    """
    Normalized resistance axis with ``tick_count`` equal intervals.

    The data range is widened by 20 % on both sides. Ranges under 100 are
    rounded in units a thousand times smaller so small responses still get
    round labels. The tick step is rounded up to a multiple of
    ``tick_roundoff`` and the top of the axis up to a multiple of 5; the
    bottom follows from the two.

    Args:
        values: Normalized resistance values (percent)
        tick_count: Number of tick intervals
        tick_roundoff: The step is a multiple of this (in rounding units)

    Returns:
        AxisSpec for the resistance axis
    """
    values = np.asarray(values, dtype=float)
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        raise ValueError("Cannot scale the resistance axis: no finite values")

    maximum = float(finite.max())
    minimum = float(finite.min())
    span = maximum - minimum
    maximum += span * RESISTANCE_AXIS_MARGIN
    minimum -= span * RESISTANCE_AXIS_MARGIN
    span = maximum - minimum

    small = span < SMALL_RANGE_LIMIT
    if small:
        maximum *= SMALL_RANGE_SCALE
        minimum *= SMALL_RANGE_SCALE
        span *= SMALL_RANGE_SCALE

    span = math.floor(span)
    step = math.ceil(span / tick_count / tick_roundoff) * tick_roundoff
    step = max(step, tick_roundoff)
    maximum = _round_up(math.floor(maximum), RESISTANCE_AXIS_MAX_ROUNDOFF)
    minimum = maximum - step * tick_count

    if small:
        maximum /= SMALL_RANGE_SCALE
        minimum /= SMALL_RANGE_SCALE
    return AxisSpec(minimum=float(minimum), maximum=float(maximum), tick_count=tick_count)


def concentration_axis(profile: ConcentrationProfile) -> AxisSpec:
    maximum = profile.concentrations[-1] * CONCENTRATION_AXIS_MARGIN
    return AxisSpec(minimum=0.0, maximum=float(maximum), tick_count=CONCENTRATION_AXIS_TICKS)


def time_axis(n_exposures: int, protocol: ExposureProtocol = DEFAULT_PROTOCOL) -> AxisSpec:
    """Time axis covering the whole protocol, with a tick step that is a multiple of 5 min."""
    total = protocol.total_duration(n_exposures)
    step = math.ceil(total / TIME_AXIS_TICKS / TIME_AXIS_TICK_ROUNDOFF) * TIME_AXIS_TICK_ROUNDOFF
    return AxisSpec(minimum=0.0, maximum=float(step * TIME_AXIS_TICKS), tick_count=TIME_AXIS_TICKS)


def compute_axes(series: ProcessedSeries,
                 profile: ConcentrationProfile,
                 protocol: ExposureProtocol = DEFAULT_PROTOCOL) -> AxisSet:
    axes = AxisSet(
        time=time_axis(profile.exposure_count, protocol),
        concentration=concentration_axis(profile),
        resistance=resistance_axis(series.normalized),
    )
    logger.debug(f"Axes: {axes}")
    return axes
