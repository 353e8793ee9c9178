"""
dsplab Analysis - Sampling, Integration, Classification

Usage:
    from dsplab.analysis import analyze_formula, analyze_all, integrate_energy

    analysis = analyze_formula("exp(-t)*u(t)", 0, 10, duration='finite')
    batch = analyze_all(method='simpson')
"""

from dsplab.analysis.sampling import (
    SampleSeries,
    linspace,
    sample_formula,
    sample_function,
    sample_program,
    validate_interval,
)
from dsplab.analysis.integration import (
    IntegrationMethod,
    average_power,
    energy_over_interval,
    energy_simpson,
    energy_trapezoidal,
    integrate_energy,
)
from dsplab.analysis.classify import (
    BatchResult,
    ClassificationResult,
    EnergyClass,
    FormulaAnalysis,
    SignalDuration,
    WindowMeasurement,
    analyze_all,
    analyze_formula,
    analyze_signal,
    classify,
    measure_signal,
    threshold_heuristic,
)
from dsplab.analysis.derivatives import derivative, derivative_table, second_derivative
from dsplab.analysis.formatting import format_energy, format_result

__all__ = [
    # Sampling
    'SampleSeries',
    'linspace',
    'sample_formula',
    'sample_function',
    'sample_program',
    'validate_interval',
    # Integration
    'IntegrationMethod',
    'average_power',
    'energy_over_interval',
    'energy_simpson',
    'energy_trapezoidal',
    'integrate_energy',
    # Classification
    'BatchResult',
    'ClassificationResult',
    'EnergyClass',
    'FormulaAnalysis',
    'SignalDuration',
    'WindowMeasurement',
    'analyze_all',
    'analyze_formula',
    'analyze_signal',
    'classify',
    'measure_signal',
    'threshold_heuristic',
    # Derivatives
    'derivative',
    'derivative_table',
    'second_derivative',
    # Formatting
    'format_energy',
    'format_result',
]
