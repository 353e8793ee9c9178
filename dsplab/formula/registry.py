"""
Function Registry
=================

The closed set of names a formula may use. The parser validates every name
against this registry, so an unknown name is a compile-time error and never
a silent zero at evaluation time.

Signal library (vectorized over numpy arrays):
    rect(t)  = 1 if |t| < 0.5 else 0          (t = ±0.5 evaluates to 0)
    tri(t)   = 1 - |t| if |t| < 1 else 0
    u(t)     = 1 if t >= 0 else 0             (u(0) = 1)
    ramp(t)  = t if t > 0 else 0
    delta(t) = exp(-t²/(2ε²)) / (ε√(2π))      Gaussian impulse, ε = DELTA_EPSILON

A true Dirac impulse cannot be sampled; delta() is a narrow unit-area
Gaussian used everywhere an impulse is needed.

Math functions follow IEEE-754: log(0) = -inf, sqrt(-1) = nan, and so on.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping

import numpy as np

from dsplab.config.defaults import DELTA_EPSILON


# =============================================================================
# Signal library
# =============================================================================

def rect(t: np.ndarray) -> np.ndarray:
    """Unit rectangle, open at ±0.5."""
    return np.where(np.abs(t) < 0.5, 1.0, 0.0)


def tri(t: np.ndarray) -> np.ndarray:
    """Unit triangle of half-width 1."""
    a = np.abs(t)
    return np.where(a < 1.0, 1.0 - a, 0.0)


def u(t: np.ndarray) -> np.ndarray:
    """Heaviside step, u(0) = 1."""
    return np.where(t >= 0.0, 1.0, 0.0)


def ramp(t: np.ndarray) -> np.ndarray:
    return np.where(t > 0.0, t, 0.0)


def delta(t: np.ndarray, epsilon: float = DELTA_EPSILON) -> np.ndarray:
    """Gaussian approximation of the Dirac impulse (unit area, width ~epsilon)."""
    return np.exp(-0.5 * (t / epsilon) ** 2) / (epsilon * np.sqrt(2.0 * np.pi))


# =============================================================================
# Registry
# =============================================================================

@dataclass(frozen=True)
class RegistryFunction:
    """A named unary function available in formulas."""
    name: str
    func: Callable[[np.ndarray], np.ndarray]
    category: str  # 'signal' or 'math'
    description: str
    arity: int = 1

    def __call__(self, values: np.ndarray) -> np.ndarray:
        return self.func(values)


def _entries(*functions: RegistryFunction) -> Mapping[str, RegistryFunction]:
    return MappingProxyType({f.name: f for f in functions})


REGISTRY: Mapping[str, RegistryFunction] = _entries(
    RegistryFunction('rect', rect, 'signal', 'Rectangle (1 if |t| < 0.5)'),
    RegistryFunction('tri', tri, 'signal', 'Triangle (1 - |t| if |t| < 1)'),
    RegistryFunction('u', u, 'signal', 'Unit step (1 if t >= 0)'),
    RegistryFunction('delta', delta, 'signal', 'Dirac impulse (Gaussian approximation)'),
    RegistryFunction('ramp', ramp, 'signal', 'Ramp (t if t > 0)'),
    RegistryFunction('sin', np.sin, 'math', 'Sine'),
    RegistryFunction('cos', np.cos, 'math', 'Cosine'),
    RegistryFunction('tan', np.tan, 'math', 'Tangent'),
    RegistryFunction('exp', np.exp, 'math', 'Exponential'),
    RegistryFunction('log', np.log, 'math', 'Natural logarithm'),
    RegistryFunction('ln', np.log, 'math', 'Natural logarithm'),
    RegistryFunction('sqrt', np.sqrt, 'math', 'Square root'),
    RegistryFunction('abs', np.abs, 'math', 'Absolute value'),
)

CONSTANTS: Mapping[str, float] = MappingProxyType({
    'pi': float(np.pi),
    'e': float(np.e),
})

VARIABLE = 't'

FORMULA_EXAMPLES = (
    '2*rect(2*t-1)',
    'sin(pi*t)*rect(t/2)',
    'tri(2*t)',
    'u(t-2)',
    'exp(-t)*u(t)',
    '2*sin(3*t) + cos(t)',
    'abs(sin(2*pi*t))',
)


def is_function(name: str) -> bool:
    return name in REGISTRY


def is_constant(name: str) -> bool:
    return name in CONSTANTS


def available_functions() -> Dict[str, List[Dict[str, str]]]:
    """Registry grouped by category, for help screens."""
    grouped: Dict[str, List[Dict[str, str]]] = {'signal': [], 'math': []}
    for entry in REGISTRY.values():
        grouped.setdefault(entry.category, []).append({
            'name': f"{entry.name}(t)",
            'description': entry.description,
        })
    grouped['constants'] = [
        {'name': name, 'description': f"{value:.6g}"} for name, value in CONSTANTS.items()
    ]
    return grouped
