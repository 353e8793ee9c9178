"""Human-readable rendering of energies and classifications."""

import math
from typing import Optional

from dsplab.config.defaults import FORMAT_DECIMALS, FORMAT_SCIENTIFIC_ABOVE, FORMAT_SCIENTIFIC_BELOW


def format_energy(value: Optional[float], decimals: int = FORMAT_DECIMALS) -> str:
    """
    Format an energy or power value.

    Infinite values render as '∞', tiny or huge ones in scientific notation.
    """
    if value is None or math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    if value == 0:
        return "0"
    if abs(value) < FORMAT_SCIENTIFIC_BELOW or abs(value) > FORMAT_SCIENTIFIC_ABOVE:
        return f"{value:.{decimals}e}"
    return f"{value:.{decimals}f}"


def format_result(result) -> str:
    """One-line summary of a ClassificationResult."""
    name = result.signal_id or "signal"
    line = (
        f"{name}: E = {format_energy(result.energy)}, "
        f"P = {format_energy(result.average_power)} -> {result.label.label}"
    )
    if result.error:
        line += f" [{result.error}]"
    return line
