"""
Plot Value Normalization

Centralized handling of sample values at the plotting boundary.

DESIGN PRINCIPLE:
A sample that is not a finite number is a missing plot point, not zero.
- nan → None
- ±inf → None
- numpy scalars and ints → float
"""

import logging
from typing import Any, Optional

import numpy as np
import polars as pl

logger = logging.getLogger(__name__)


def normalize_plot_value(value: Any) -> Optional[float]:
    """
    Normalize one sample value for plotting.

    Returns:
        float if finite, None otherwise

    This is the single source of truth for "no plot point". Do not
    duplicate this logic elsewhere.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (np.floating, np.integer)):
        value = float(value)

    if isinstance(value, int):
        value = float(value)

    if isinstance(value, float):
        if np.isnan(value) or np.isinf(value):
            return None
        return value

    return None


def is_null_result(value: Any) -> bool:
    """True for None, nan or ±inf."""
    if value is None:
        return True
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value) or np.isinf(value))
    return False


def finite_mask(values: np.ndarray) -> np.ndarray:
    """Boolean mask of plottable samples."""
    mask = np.isfinite(np.asarray(values, dtype=np.float64))
    n_missing = int(mask.size - mask.sum())
    if n_missing:
        logger.debug(f"{n_missing}/{mask.size} samples are not plottable")
    return mask


def to_plot_series(name: str, values: np.ndarray) -> pl.Series:
    """Float64 polars Series with null in place of every non-finite sample."""
    values = np.asarray(values, dtype=np.float64)
    plottable = np.where(finite_mask(values), values, np.nan)
    return pl.Series(name, plottable, dtype=pl.Float64).fill_nan(None)


def round_axis(t: np.ndarray, decimals: int) -> np.ndarray:
    """Round the time axis for display (tooltips, tables)."""
    return np.round(np.asarray(t, dtype=np.float64), decimals)
