"""
Response chart rendering.
"""
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, Union
import logging

import numpy as np
from matplotlib.figure import Figure

from .analyzer import AnalysisResult
from .core.protocol import DEFAULT_PROTOCOL, ExposureProtocol

logger = logging.getLogger(__name__)

TIME_AXIS_LABEL = 'Time (mins)'
RESISTANCE_AXIS_LABEL = r'$\Delta$R/R$_0$ (%)'
CONCENTRATION_AXIS_LABEL = '{gas} (ppm)'


def format_resistance(ohms: float) -> str:
    """R0 label text, switching to kilo-ohm above 1000 ohm."""
    if ohms > 1000:
        return f"R$_0$ = {ohms / 1000:.2f}kΩ"
    return f"R$_0$ = {ohms:.2f}Ω"


def _tick_labels(ticks: Sequence[float], fmt: str) -> list:
    # label every other tick, like major/minor marks
    return [format(t, fmt) if i % 2 == 0 else '' for i, t in enumerate(ticks)]


def render_response_chart(result: AnalysisResult,
                          file_name: str,
                          save_path: Union[str, Path],
                          protocol: ExposureProtocol = DEFAULT_PROTOCOL,
                          dpi: int = 100,
                          figure_size: Sequence[float] = (10, 10),
                          timestamp: Optional[datetime] = None) -> Path:
    """
    Draw the normalized response with the exposure profile and save it.

    Args:
        result: Analysis of one file
        file_name: Name shown in the chart header
        save_path: Output image path
        protocol: Experiment timing used for the exposure bars
        dpi: Image resolution
        figure_size: Figure size in inches
        timestamp: Time shown in the chart header (now when None)

    Returns:
        Path of the saved image
    """
    axes = result.axes
    series = result.series
    timestamp = timestamp or datetime.now()

    # pyplot keeps global state; a bare Figure can be drawn from worker threads
    fig = Figure(figsize=tuple(figure_size))
    ax = fig.subplots()

    # Resistance trace, clipped to the time axis
    visible = series.time_min <= axes.time.maximum
    ax.plot(series.time_min[visible], series.normalized[visible], 'k-', linewidth=1.0)

    time_ticks = axes.time.ticks()
    ax.set_xlim(axes.time.minimum, axes.time.maximum)
    ax.set_xticks(time_ticks)
    ax.set_xticklabels(_tick_labels(time_ticks, '.0f'))
    ax.set_xlabel(TIME_AXIS_LABEL)

    res_ticks = axes.resistance.ticks()
    res_fmt = '.2f' if axes.resistance.step < 1 else '.1f'
    ax.set_ylim(axes.resistance.minimum, axes.resistance.maximum)
    ax.set_yticks(res_ticks)
    ax.set_yticklabels(_tick_labels(res_ticks, res_fmt))
    ax.set_ylabel(RESISTANCE_AXIS_LABEL)

    # Exposure bars on the concentration axis
    ax_conc = ax.twinx()
    for window in protocol.windows(result.profile.concentrations):
        ax_conc.plot(
            [window.exposure_start, window.exposure_start, window.exposure_end, window.exposure_end],
            [0.0, window.concentration, window.concentration, 0.0],
            color='tab:blue', linewidth=1.0,
        )
    conc_ticks = axes.concentration.ticks()
    ax_conc.set_ylim(axes.concentration.minimum, axes.concentration.maximum)
    ax_conc.set_yticks(conc_ticks)
    ax_conc.set_yticklabels(_tick_labels(conc_ticks, 'g'))
    ax_conc.set_ylabel(CONCENTRATION_AXIS_LABEL.format(gas=result.profile.gas_name))

    # R0 goes opposite the dominant response direction
    finite = series.normalized[np.isfinite(series.normalized)]
    dominant = float(finite[np.argmax(np.abs(finite))]) if finite.size else 0.0
    label_y, va = (0.05, 'bottom') if dominant < 0 else (0.95, 'top')
    ax.text(0.05, label_y, format_resistance(result.baseline), transform=ax.transAxes, va=va)

    ax.set_title(file_name, loc='left')
    ax.set_title(timestamp.strftime('%m/%d/%Y %H:%M:%S'), loc='right')
    fig.tight_layout()

    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(save_path, dpi=dpi)
    logger.info(f"Figure saved to {save_path}")
    return save_path
