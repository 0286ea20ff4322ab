"""
Gas concentration profiles.

A profile names the test gas and the concentration (ppm) of every exposure
cycle, in order: ``"CO 5 25 50 75 100"``.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .exceptions import ProfileParseError

logger = logging.getLogger(__name__)

GAS_PRESETS: Dict[str, str] = {
    '1,3-Butadiene': '1,3-Butadiene 0.1 0.25 0.5 1 2',
    'Acetaldehyde': 'Acetaldehyde 20 50 100 200 400',
    'Acrolein': 'Acrolein 0.01 0.025 0.05 0.1 0.2',
    'Benzene': 'Benzene 0.1 0.25 0.5 1 2',
    'CO': 'CO 5 25 50 75 100',
    'CO2': 'CO2 500 1000 2500 5000 10000',
    'Ethylbenzene': 'Ethylbenzene 10 25 50 100 200',
    'Formaldehyde': 'Formaldehyde 0.3 0.75 1.5 3 6',
    'H2': 'H2 100 200 250 500 1000 2000',
    'H2S': 'H2S 0.5 2.5 10 20 40',
    'Hg': 'Hg 0.005 0.01 0.025 0.05 0.1',
    'Napthalene': 'Napthalene 1 2.5 5 10 20',
    'NH3': 'NH3 0.5 2.5 5 25 50 100',
    'n-Hexane': 'n-Hexane 50 100 250 500 1000',
    'NOx': 'NOx 0.1 0.5 2.5 5 10',
    'O3': 'O3 0.01 0.025 0.05 0.1 0.2',
    'PAHs': 'PAHs 0.01 0.025 0.05 0.1 0.2',
    'SO2': 'SO2 0.2 0.5 1 2 5',
    'Styrene': 'Styrene 10 25 50 100 200',
    'Toluene': 'Toluene 20 50 100 200 400',
    'Xylenes': 'Xylenes 10 25 50 100 200',
}


@dataclass(frozen=True)
class ConcentrationProfile:
    """Gas name plus one concentration (ppm) per exposure cycle."""
    gas_name: str
    concentrations: Tuple[float, ...]

    @property
    def exposure_count(self) -> int:
        return len(self.concentrations)

    def __str__(self) -> str:
        values = ' '.join(f"{c:g}" for c in self.concentrations)
        return f"{self.gas_name} {values}"


def parse_profile(text: Optional[str]) -> ConcentrationProfile:
    """
    Parse a ``"<gas> <v1> <v2> ... <vk>"`` profile string.

    Args:
        text: Whitespace separated gas name and concentrations.

    Returns:
        ConcentrationProfile with the concentrations in input order.

    Raises:
        ProfileParseError: if the text is empty, has no concentration, or a
            concentration is not a positive finite number.
    """
    if text is None or not text.strip():
        raise ProfileParseError(text, "no gas profile given")

    tokens = text.split()
    if len(tokens) < 2:
        raise ProfileParseError(text, "expected a gas name followed by at least one concentration")

    concentrations = []
    for token in tokens[1:]:
        try:
            ppm = float(token)
        except ValueError:
            raise ProfileParseError(text, f"{token!r} is not a number") from None
        if not math.isfinite(ppm) or ppm <= 0:
            raise ProfileParseError(text, f"concentration {token!r} must be a positive number")
        concentrations.append(ppm)

    profile = ConcentrationProfile(gas_name=tokens[0], concentrations=tuple(concentrations))
    logger.debug(f"Parsed profile {profile.gas_name} with {profile.exposure_count} exposures")
    return profile


def preset_profile(gas_name: str) -> ConcentrationProfile:
    """Return the built-in profile for ``gas_name`` (case-insensitive)."""
    lookup = {name.lower(): text for name, text in GAS_PRESETS.items()}
    text = lookup.get(gas_name.strip().lower())
    if text is None:
        raise ProfileParseError(gas_name, f"unknown gas preset. Must be one of {list(GAS_PRESETS.keys())}")
    return parse_profile(text)
