"""
Signal Sampling
===============

Uniform time grids and the sample series produced from a compiled formula.

Usage:
    from dsplab.analysis.sampling import sample_formula

    series = sample_formula("tri(2*t)", -5, 5, 500)
    df = series.to_frame()          # t, value (null where not plottable)
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Union

import numpy as np
import polars as pl

from dsplab.config.defaults import DEFAULT_NUM_SAMPLES, PLOT_T_DECIMALS
from dsplab.errors import PreconditionError
from dsplab.formula.evaluator import evaluate_series
from dsplab.formula.parser import FormulaProgram, compile_formula
from dsplab.utils.plot_values import finite_mask, normalize_plot_value, round_axis, to_plot_series


def validate_interval(t_start: float, t_end: float, num_points: int = 2) -> None:
    """
    Check the observation window and sample count.

    Raises:
        PreconditionError: Non-finite bounds, t_end <= t_start, or a sample
            count that is not a positive integer
    """
    try:
        start, end = float(t_start), float(t_end)
    except (TypeError, ValueError):
        raise PreconditionError(f"Interval bounds must be numbers: [{t_start!r}, {t_end!r}]")

    if not (math.isfinite(start) and math.isfinite(end)):
        raise PreconditionError(f"Interval bounds must be finite: [{start}, {end}]")
    if end <= start:
        raise PreconditionError(
            f"Interval must satisfy t_start < t_end, got [{start}, {end}]"
        )
    if isinstance(num_points, bool) or not isinstance(num_points, (int, np.integer)):
        raise PreconditionError(f"Sample count must be an integer, got {num_points!r}")
    if num_points < 1:
        raise PreconditionError(f"Sample count must be positive, got {num_points}")


def linspace(t_start: float, t_end: float, num_points: int) -> np.ndarray:
    """Uniform grid including both endpoints."""
    validate_interval(t_start, t_end, num_points)
    return np.linspace(float(t_start), float(t_end), int(num_points))


@dataclass(frozen=True, eq=False)
class SampleSeries:
    """Ordered (t, value) samples of one signal over one window."""
    t: np.ndarray
    values: np.ndarray

    def __post_init__(self):
        if len(self.t) != len(self.values):
            raise PreconditionError(
                f"Sample series length mismatch: {len(self.t)} times, {len(self.values)} values"
            )

    def __len__(self) -> int:
        return len(self.t)

    @property
    def t_start(self) -> float:
        return float(self.t[0])

    @property
    def t_end(self) -> float:
        return float(self.t[-1])

    @property
    def dt(self) -> float:
        """Grid spacing (0.0 for a single sample)."""
        if len(self.t) < 2:
            return 0.0
        return (self.t_end - self.t_start) / (len(self.t) - 1)

    @property
    def finite_fraction(self) -> float:
        if len(self.values) == 0:
            return 0.0
        return float(finite_mask(self.values).mean())

    def to_frame(self) -> pl.DataFrame:
        """
        Plot-ready DataFrame.

        Returns:
            DataFrame with columns t (f64) and value (f64, null where the
            sample is nan or ±inf)
        """
        return pl.DataFrame([
            pl.Series('t', self.t, dtype=pl.Float64),
            to_plot_series('value', self.values),
        ])

    def plot_points(self, decimals: int = PLOT_T_DECIMALS) -> List[Dict[str, Any]]:
        """List of {'t', 'value'} dicts; value is None for missing points."""
        t = round_axis(self.t, decimals)
        return [
            {'t': float(ti), 'value': normalize_plot_value(vi)}
            for ti, vi in zip(t, self.values)
        ]


def sample_function(
    func: Callable[[np.ndarray], np.ndarray],
    t_start: float,
    t_end: float,
    num_points: int = DEFAULT_NUM_SAMPLES,
) -> SampleSeries:
    """Sample any vectorized signal function on a uniform grid."""
    t = linspace(t_start, t_end, num_points)
    values = np.asarray(func(t), dtype=np.float64)
    return SampleSeries(t=t, values=np.array(np.broadcast_to(values, t.shape)))


def sample_program(
    program: FormulaProgram,
    t_start: float,
    t_end: float,
    num_points: int = DEFAULT_NUM_SAMPLES,
) -> SampleSeries:
    """Sample a compiled formula on a uniform grid."""
    t = linspace(t_start, t_end, num_points)
    return SampleSeries(t=t, values=evaluate_series(program, t))


def sample_formula(
    formula: Union[str, FormulaProgram],
    t_start: float,
    t_end: float,
    num_points: int = DEFAULT_NUM_SAMPLES,
) -> SampleSeries:
    """
    Compile (if needed) and sample a formula.

    Raises:
        FormulaError: Formula does not compile; nothing is evaluated
        PreconditionError: Invalid interval or sample count
    """
    program = formula if isinstance(formula, FormulaProgram) else compile_formula(formula)
    return sample_program(program, t_start, t_end, num_points)
