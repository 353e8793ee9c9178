"""
Energy / Power Classification
=============================

Decides whether a signal is an energy signal or a power signal.

Decision policy:
    FINITE duration   → energy computed on the window is taken as exact;
                        always FINITE_ENERGY (power is 0, not a basis).
    INFINITE duration → energy is infinite by construction, whatever the
                        windowed number says; average power is computed on
                        the observation window:
                            finite   → FINITE_POWER
                            otherwise → INFINITE_POWER
    Failure           → COMPUTATION_ERROR, carrying the signal identifier.

Catalog signals carry a vetted duration. User formulas are INFINITE unless
the caller states otherwise.

Usage:
    from dsplab.analysis.classify import analyze_all, analyze_formula

    batch = analyze_all(method='simpson')
    batch.to_frame()

    analysis = analyze_formula("sin(t)", -10, 10)
    analysis.result.label.label     # 'Finite average power signal'

    measurement = measure_signal("x11", 0, 10)
    measurement.average_power       # windowed, duration ignored
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, Union

import polars as pl

from dsplab.analysis.integration import (
    IntegrationMethod,
    MethodLike,
    average_power,
    energy_over_interval,
)
from dsplab.analysis.sampling import SampleSeries, sample_program, validate_interval
from dsplab.config.defaults import (
    CATALOG_INTERVAL,
    CATALOG_NUM_SAMPLES,
    DEFAULT_INTERVAL,
    DEFAULT_NUM_SAMPLES,
    ENERGY_THRESHOLD_HEURISTIC,
    POWER_INTERVAL,
)
from dsplab.errors import PreconditionError, describe_error, log_error
from dsplab.formula.parser import FormulaProgram, compile_formula

if TYPE_CHECKING:
    from dsplab.catalog.signals import CatalogSignal, SignalCatalog

logger = logging.getLogger(__name__)


class SignalDuration(Enum):
    """Support of a signal, known analytically for catalog signals."""
    FINITE = "finite"
    INFINITE = "infinite"

    @classmethod
    def parse(cls, value: Union[str, "SignalDuration"]) -> "SignalDuration":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise PreconditionError(
                f"Unknown signal duration {value!r} (expected 'finite' or 'infinite')"
            )


class EnergyClass(Enum):
    """Classification outcome."""
    FINITE_ENERGY = "finite_energy"
    FINITE_POWER = "finite_power"
    INFINITE_POWER = "infinite_power"
    COMPUTATION_ERROR = "computation_error"

    @property
    def label(self) -> str:
        return ENERGY_CLASS_LABELS[self]

    @property
    def is_power(self) -> bool:
        return self in (EnergyClass.FINITE_POWER, EnergyClass.INFINITE_POWER)


ENERGY_CLASS_LABELS = {
    EnergyClass.FINITE_ENERGY: "Finite-energy signal",
    EnergyClass.FINITE_POWER: "Finite average power signal",
    EnergyClass.INFINITE_POWER: "Infinite-power signal",
    EnergyClass.COMPUTATION_ERROR: "Computation error",
}


@dataclass(frozen=True)
class ClassificationResult:
    """Energy, average power and label of one signal."""
    energy: float
    average_power: float
    label: EnergyClass
    signal_id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.label is not EnergyClass.COMPUTATION_ERROR

    def to_dict(self) -> dict:
        return {
            'signal': self.signal_id,
            'energy': self.energy,
            'average_power': self.average_power,
            'classification': self.label.label,
            'error': self.error,
        }


# =============================================================================
# Decision policy
# =============================================================================

def classify(energy: float, avg_power: float, duration: Union[str, SignalDuration]) -> EnergyClass:
    """
    Apply the energy/power decision policy.

    Args:
        energy: Energy computed on the window (basis for FINITE signals)
        avg_power: Average power on the window (basis for INFINITE signals)
        duration: Declared signal duration

    Returns:
        EnergyClass (never COMPUTATION_ERROR)
    """
    duration = SignalDuration.parse(duration)
    if duration is SignalDuration.FINITE:
        return EnergyClass.FINITE_ENERGY
    if math.isfinite(avg_power):
        return EnergyClass.FINITE_POWER
    return EnergyClass.INFINITE_POWER


def threshold_heuristic(
    window_energy: float,
    span: float,
    threshold: float = ENERGY_THRESHOLD_HEURISTIC,
) -> EnergyClass:
    """
    Magnitude heuristic for user formulas: NOT a classification law.

    Calls a signal finite-energy when its windowed energy stays below
    `threshold`, else compares windowed power to the same threshold. A
    bounded window can never prove finite energy, so this only serves as a
    hint next to the duration-based classify().
    """
    if math.isfinite(window_energy) and window_energy < threshold:
        return EnergyClass.FINITE_ENERGY
    power = window_energy / span
    if math.isfinite(power) and power < threshold:
        return EnergyClass.FINITE_POWER
    return EnergyClass.INFINITE_POWER


def _measure(
    values,
    t_start: float,
    t_end: float,
    method: IntegrationMethod,
    duration: SignalDuration,
) -> Tuple[float, float, float]:
    """Return (window_energy, energy, average_power) for a duration kind."""
    window_energy = energy_over_interval(values, t_start, t_end, method)
    if duration is SignalDuration.FINITE:
        return window_energy, window_energy, 0.0
    return window_energy, math.inf, average_power(values, t_start, t_end, method)


# =============================================================================
# Catalog signals
# =============================================================================

def analyze_signal(
    signal: Union[str, "CatalogSignal"],
    method: MethodLike = IntegrationMethod.TRAPEZOIDAL,
    t_start: float = CATALOG_INTERVAL[0],
    t_end: float = CATALOG_INTERVAL[1],
    num_points: int = CATALOG_NUM_SAMPLES,
) -> ClassificationResult:
    """
    Classify one catalog signal.

    Any failure while looking up, compiling, sampling or integrating the
    signal becomes a COMPUTATION_ERROR result instead of an exception.
    """
    name = signal if isinstance(signal, str) else signal.name
    try:
        if isinstance(signal, str):
            from dsplab.catalog import get_signal
            signal = get_signal(signal)
            name = signal.name
        method = IntegrationMethod.parse(method)
        program = compile_formula(signal.formula)
        series = sample_program(program, t_start, t_end, num_points)
        _, energy, power = _measure(series.values, t_start, t_end, method, signal.duration)
        label = classify(energy, power, signal.duration)
        logger.debug(f"{name}: E={energy} P={power} -> {label.value}")
        return ClassificationResult(energy, power, label, signal_id=name)
    except Exception as e:
        error_id = log_error(e, context=f"analyzing {name}")
        return ClassificationResult(
            energy=math.nan,
            average_power=math.nan,
            label=EnergyClass.COMPUTATION_ERROR,
            signal_id=name,
            error=describe_error(e, error_id),
        )


@dataclass(frozen=True)
class WindowMeasurement:
    """Energy and average power of a signal over one observation window."""
    signal_id: str
    t_start: float
    t_end: float
    energy: float
    average_power: float
    method: IntegrationMethod

    def to_dict(self) -> dict:
        return {
            'signal': self.signal_id,
            't_start': self.t_start,
            't_end': self.t_end,
            'energy': self.energy,
            'average_power': self.average_power,
            'method': self.method.value,
        }


def measure_signal(
    signal: Union[str, "CatalogSignal"],
    t_start: float = POWER_INTERVAL[0],
    t_end: float = POWER_INTERVAL[1],
    num_points: int = CATALOG_NUM_SAMPLES,
    method: MethodLike = IntegrationMethod.TRAPEZOIDAL,
) -> WindowMeasurement:
    """
    Energy and average power of a catalog signal over [t_start, t_end].

    Unlike analyze_signal() the declared duration is ignored: both numbers
    are what the window shows, which is what the power calculator displays.

    Args:
        signal: Catalog name ('x11' or 'x11(t)') or CatalogSignal
        t_start, t_end: Observation window (default POWER_INTERVAL)
        num_points: Samples over the window
        method: Integration method

    Returns:
        WindowMeasurement

    Raises:
        CatalogError: Unknown signal name
        PreconditionError: Invalid window, sample count or method
    """
    if isinstance(signal, str):
        from dsplab.catalog import get_signal
        signal = get_signal(signal)

    method = IntegrationMethod.parse(method)
    series = sample_program(compile_formula(signal.formula), t_start, t_end, num_points)
    energy = energy_over_interval(series.values, t_start, t_end, method)
    power = average_power(series.values, t_start, t_end, method)
    logger.debug(f"{signal.name} on [{t_start}, {t_end}]: E={energy} P={power}")
    return WindowMeasurement(
        signal_id=signal.name,
        t_start=float(t_start),
        t_end=float(t_end),
        energy=energy,
        average_power=power,
        method=method,
    )


@dataclass(frozen=True)
class BatchResult:
    """Ordered per-signal results plus aggregates over the batch."""
    results: Tuple[ClassificationResult, ...]
    method: IntegrationMethod

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    @property
    def energy_count(self) -> int:
        return sum(1 for r in self.results if r.label is EnergyClass.FINITE_ENERGY)

    @property
    def power_count(self) -> int:
        return sum(1 for r in self.results if r.label.is_power)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.ok)

    @property
    def finite_energies(self) -> List[float]:
        return [r.energy for r in self.results if math.isfinite(r.energy)]

    @property
    def min_energy(self) -> Optional[float]:
        energies = self.finite_energies
        return min(energies) if energies else None

    @property
    def max_energy(self) -> Optional[float]:
        energies = self.finite_energies
        return max(energies) if energies else None

    def get(self, signal_id: str) -> Optional[ClassificationResult]:
        for r in self.results:
            if r.signal_id == signal_id:
                return r
        return None

    def summary(self) -> dict:
        return {
            'signals': len(self.results),
            'energy_signals': self.energy_count,
            'power_signals': self.power_count,
            'errors': self.error_count,
            'min_energy': self.min_energy,
            'max_energy': self.max_energy,
        }

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            [r.to_dict() for r in self.results],
            schema={
                'signal': pl.Utf8,
                'energy': pl.Float64,
                'average_power': pl.Float64,
                'classification': pl.Utf8,
                'error': pl.Utf8,
            },
        )


def analyze_all(
    catalog: Optional[Union["SignalCatalog", Iterable["CatalogSignal"]]] = None,
    method: MethodLike = IntegrationMethod.TRAPEZOIDAL,
    t_start: float = CATALOG_INTERVAL[0],
    t_end: float = CATALOG_INTERVAL[1],
    num_points: int = CATALOG_NUM_SAMPLES,
    max_workers: Optional[int] = None,
) -> BatchResult:
    """
    Classify every signal of a catalog.

    Args:
        catalog: SignalCatalog or iterable of CatalogSignal (default catalog if None)
        method: Integration method
        t_start, t_end: Observation window
        num_points: Samples per signal
        max_workers: Thread pool size; None or 1 runs sequentially

    Returns:
        BatchResult in catalog order. One failing signal never aborts the
        batch.

    Raises:
        PreconditionError: Invalid window, sample count or method
    """
    from dsplab.catalog import default_catalog

    method = IntegrationMethod.parse(method)
    validate_interval(t_start, t_end, num_points)
    signals = list(default_catalog() if catalog is None else catalog)

    def run(signal):
        return analyze_signal(signal, method, t_start, t_end, num_points)

    if max_workers and max_workers > 1 and len(signals) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(run, signals))
    else:
        results = [run(s) for s in signals]

    batch = BatchResult(results=tuple(results), method=method)
    logger.info(
        f"Classified {len(batch)} signals ({method.value}): "
        f"{batch.energy_count} energy, {batch.power_count} power, {batch.error_count} errors"
    )
    return batch


# =============================================================================
# User formulas
# =============================================================================

@dataclass(frozen=True, eq=False)
class FormulaAnalysis:
    """Everything the custom-signal view displays for one formula."""
    program: FormulaProgram
    series: SampleSeries
    window_energy: float
    result: ClassificationResult

    @property
    def energy(self) -> float:
        return self.result.energy

    @property
    def average_power(self) -> float:
        return self.result.average_power

    @property
    def label(self) -> EnergyClass:
        return self.result.label

    def heuristic_label(self, threshold: float = ENERGY_THRESHOLD_HEURISTIC) -> EnergyClass:
        span = self.series.t_end - self.series.t_start
        return threshold_heuristic(self.window_energy, span, threshold)


def analyze_formula(
    formula: Union[str, FormulaProgram],
    t_start: float = DEFAULT_INTERVAL[0],
    t_end: float = DEFAULT_INTERVAL[1],
    num_points: int = DEFAULT_NUM_SAMPLES,
    method: MethodLike = IntegrationMethod.TRAPEZOIDAL,
    duration: Union[str, SignalDuration] = SignalDuration.INFINITE,
) -> FormulaAnalysis:
    """
    Sample and classify a user formula.

    Compilation errors propagate before anything is evaluated.

    Raises:
        FormulaError: Formula does not compile
        PreconditionError: Invalid window, sample count or method
    """
    program = formula if isinstance(formula, FormulaProgram) else compile_formula(formula)
    method = IntegrationMethod.parse(method)
    duration = SignalDuration.parse(duration)

    series = sample_program(program, t_start, t_end, num_points)
    window_energy, energy, power = _measure(series.values, t_start, t_end, method, duration)
    result = ClassificationResult(
        energy=energy,
        average_power=power,
        label=classify(energy, power, duration),
        signal_id=program.source,
    )
    return FormulaAnalysis(program=program, series=series, window_energy=window_energy, result=result)
