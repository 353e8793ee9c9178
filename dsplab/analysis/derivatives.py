"""
Numerical derivatives of compiled formulas.

Central differences, f'(t) ≈ (f(t+h) - f(t-h)) / 2h, applied twice for the
second derivative. At kinks and jumps the estimates spike (a jump of height
a gives a peak of a/2h); those points are dropped from plots with a clip.
"""

from typing import Callable, Union

import numpy as np
import polars as pl

from dsplab.analysis.sampling import linspace
from dsplab.config.defaults import DEFAULT_INTERVAL, DEFAULT_NUM_SAMPLES, DERIVATIVE_CLIP, DERIVATIVE_STEP
from dsplab.errors import PreconditionError
from dsplab.formula.evaluator import as_function
from dsplab.formula.parser import FormulaProgram, compile_formula
from dsplab.utils.plot_values import to_plot_series

SignalFunction = Callable[[np.ndarray], np.ndarray]


def _as_signal(signal: Union[str, FormulaProgram, SignalFunction]) -> SignalFunction:
    if isinstance(signal, str):
        signal = compile_formula(signal)
    if isinstance(signal, FormulaProgram):
        return as_function(signal)
    return signal


def derivative(signal: Union[str, FormulaProgram, SignalFunction], h: float = DERIVATIVE_STEP) -> SignalFunction:
    """Return the central-difference derivative of a vectorized signal."""
    if not h > 0:
        raise PreconditionError(f"Derivative step must be positive, got {h}")
    func = _as_signal(signal)

    def d(t):
        t = np.asarray(t, dtype=np.float64)
        with np.errstate(all='ignore'):
            return (func(t + h) - func(t - h)) / (2.0 * h)

    return d


def second_derivative(signal, h: float = DERIVATIVE_STEP) -> SignalFunction:
    return derivative(derivative(signal, h), h)


def derivative_table(
    signal: Union[str, FormulaProgram, SignalFunction],
    t_start: float = DEFAULT_INTERVAL[0],
    t_end: float = DEFAULT_INTERVAL[1],
    num_points: int = DEFAULT_NUM_SAMPLES,
    h: float = DERIVATIVE_STEP,
    clip: float = DERIVATIVE_CLIP,
) -> pl.DataFrame:
    """
    Signal with its first and second derivatives, ready to plot.

    Returns:
        DataFrame with columns t, value, d1, d2. Non-finite entries are null;
        d2 is also null where |d2| > clip.
    """
    func = _as_signal(signal)
    t = linspace(t_start, t_end, num_points)
    with np.errstate(all='ignore'):
        value = np.asarray(func(t), dtype=np.float64)
        d1 = derivative(func, h)(t)
        d2 = second_derivative(func, h)(t)
        d2 = np.where(np.abs(d2) > clip, np.nan, d2)

    return pl.DataFrame([
        pl.Series('t', t),
        to_plot_series('value', np.broadcast_to(value, t.shape)),
        to_plot_series('d1', np.broadcast_to(d1, t.shape)),
        to_plot_series('d2', np.broadcast_to(d2, t.shape)),
    ])
