"""
dsplab Signal Catalog
=====================

Named, pre-registered signals with a vetted duration kind, display formula
and step-by-step decomposition into elementary signals.

The catalog is data, loaded from config/catalog.yaml. Formulas are not
compiled at load time: a broken entry only fails when that signal is
analyzed, and batch classification reports it as a COMPUTATION_ERROR.

Usage:
    from dsplab.catalog import default_catalog, get_signal, decompose

    catalog = default_catalog()
    x1 = get_signal("x1")            # same as get_signal("x1(t)")
    df = decompose("x7(t)", -5, 5)
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

import polars as pl
import yaml

from dsplab.analysis.classify import SignalDuration
from dsplab.analysis.sampling import SampleSeries, linspace, sample_program
from dsplab.config import CATALOG_PATH
from dsplab.config.defaults import DEFAULT_INTERVAL, DEFAULT_NUM_SAMPLES
from dsplab.errors import CatalogError, DspError
from dsplab.formula.evaluator import evaluate_series
from dsplab.formula.parser import FormulaProgram, compile_formula
from dsplab.utils.plot_values import to_plot_series

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecompositionStep:
    """One elementary step of a signal decomposition."""
    description: str
    formula: str


@dataclass(frozen=True)
class CatalogSignal:
    """A named signal with known duration."""
    name: str
    formula: str
    duration: SignalDuration
    display_formula: str = ""
    description: str = ""
    steps: Tuple[DecompositionStep, ...] = field(default_factory=tuple)

    def compile(self) -> FormulaProgram:
        return compile_formula(self.formula)

    def sample(
        self,
        t_start: float = DEFAULT_INTERVAL[0],
        t_end: float = DEFAULT_INTERVAL[1],
        num_points: int = DEFAULT_NUM_SAMPLES,
    ) -> SampleSeries:
        return sample_program(self.compile(), t_start, t_end, num_points)


def signal_key(name: str) -> str:
    """Canonical catalog key: 'x1' and 'x1(t)' both map to 'x1(t)'."""
    name = name.strip()
    return name if name.endswith("(t)") else f"{name}(t)"


class SignalCatalog:
    """Ordered, read-only collection of catalog signals."""

    def __init__(self, signals: List[CatalogSignal]):
        self._signals: Dict[str, CatalogSignal] = {}
        for signal in signals:
            key = signal_key(signal.name)
            if key in self._signals:
                raise CatalogError(f"Duplicate catalog signal: {key}")
            self._signals[key] = signal

    def __iter__(self) -> Iterator[CatalogSignal]:
        return iter(self._signals.values())

    def __len__(self) -> int:
        return len(self._signals)

    def __contains__(self, name: str) -> bool:
        return signal_key(name) in self._signals

    def names(self) -> List[str]:
        return list(self._signals)

    def get(self, name: str) -> CatalogSignal:
        """
        Look up a signal by name.

        Raises:
            CatalogError: If the name is not in the catalog
        """
        try:
            return self._signals[signal_key(name)]
        except KeyError:
            raise CatalogError(
                f"Unknown catalog signal: {name}. Available: {', '.join(self.names())}"
            )

    def to_frame(self) -> pl.DataFrame:
        return pl.DataFrame(
            [
                {
                    'signal': s.name,
                    'formula': s.formula,
                    'display': s.display_formula,
                    'duration': s.duration.value,
                    'steps': len(s.steps),
                }
                for s in self
            ],
            schema={
                'signal': pl.Utf8,
                'formula': pl.Utf8,
                'display': pl.Utf8,
                'duration': pl.Utf8,
                'steps': pl.Int64,
            },
        )


# =============================================================================
# Loading
# =============================================================================

def _parse_signal(name: str, entry: dict) -> CatalogSignal:
    if not isinstance(entry, dict) or 'formula' not in entry:
        raise CatalogError(f"Catalog entry {name} must define a formula")
    try:
        duration = SignalDuration.parse(entry.get('duration', 'infinite'))
    except DspError as e:
        raise CatalogError(f"Catalog entry {name}: {e.user_message}")

    steps = tuple(
        DecompositionStep(
            description=str(step.get('description', '')),
            formula=str(step['formula']),
        )
        for step in (entry.get('steps') or [])
    )
    return CatalogSignal(
        name=signal_key(str(name)),
        formula=str(entry['formula']),
        duration=duration,
        display_formula=str(entry.get('display', entry['formula'])),
        description=str(entry.get('description', '')),
        steps=steps,
    )


def catalog_from_dict(config: dict) -> SignalCatalog:
    """Build a catalog from a parsed config mapping ({'signals': {...}})."""
    entries = (config or {}).get('signals') or {}
    if not isinstance(entries, dict):
        raise CatalogError("Catalog 'signals' must be a mapping of name -> entry")
    return SignalCatalog([_parse_signal(name, entry) for name, entry in entries.items()])


def load_catalog(path: Optional[Union[str, Path]] = None) -> SignalCatalog:
    """
    Load a catalog YAML file (default: the bundled config/catalog.yaml).

    Raises:
        CatalogError: If the file is missing or malformed
    """
    path = Path(path) if path else CATALOG_PATH
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Malformed catalog file {path.name}: {e}")

    catalog = catalog_from_dict(config)
    logger.debug(f"Loaded {len(catalog)} catalog signals from {path}")
    return catalog


@lru_cache(maxsize=1)
def default_catalog() -> SignalCatalog:
    return load_catalog()


def get_signal(name: str) -> CatalogSignal:
    return default_catalog().get(name)


# =============================================================================
# Views
# =============================================================================

def decompose(
    signal: Union[str, CatalogSignal],
    t_start: float = DEFAULT_INTERVAL[0],
    t_end: float = DEFAULT_INTERVAL[1],
    num_points: int = DEFAULT_NUM_SAMPLES,
) -> pl.DataFrame:
    """
    Sample a signal and each of its decomposition steps.

    Returns:
        DataFrame with columns t, original, step_0, step_1, ... (null where a
        sample is not finite)
    """
    if isinstance(signal, str):
        signal = get_signal(signal)

    t = linspace(t_start, t_end, num_points)
    columns = [pl.Series('t', t), to_plot_series('original', evaluate_series(signal.compile(), t))]
    for i, step in enumerate(signal.steps):
        values = evaluate_series(compile_formula(step.formula), t)
        columns.append(to_plot_series(f'step_{i}', values))
    return pl.DataFrame(columns)
