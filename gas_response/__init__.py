"""
Gas Response Package
-------------------
Cleans gas sensor resistance recordings and extracts the peak response of
every exposure cycle.
"""

__version__ = "1.0.0"

# Import key components for easier access
from .profiles import ConcentrationProfile, parse_profile, preset_profile
from .data_loader import load_resistance_data, parse_sample_lines
from .analyzer import GasResponseAnalyzer, ProcessingSettings
from .core.pipeline import run_batch, process_file

__all__ = [
    'ConcentrationProfile',
    'parse_profile',
    'preset_profile',
    'load_resistance_data',
    'parse_sample_lines',
    'GasResponseAnalyzer',
    'ProcessingSettings',
    'run_batch',
    'process_file',
]
