"""
dsplab - Signal Formula Engine and Energy/Power Classifier

Compiles time-domain signal formulas over `t` without eval(), samples them,
integrates |x(t)|² and classifies signals as energy or power signals.

Usage:
    from dsplab import analyze_formula, analyze_all, compile_formula

    analysis = analyze_formula("2*sin(pi*t)*rect(t/2)", -5, 5)
    analysis.series.to_frame()          # plot-ready t, value
    analysis.result.label.label         # human-readable classification

    batch = analyze_all(method="simpson")
    batch.to_frame()
"""

__version__ = "0.1.0"

from dsplab.errors import (
    ArityMismatchError,
    CatalogError,
    DspError,
    FormulaError,
    FormulaSyntaxError,
    FormulaTooComplexError,
    LexError,
    ParseError,
    PreconditionError,
    UnknownFunctionError,
    UnknownSymbolError,
)
from dsplab.formula import (
    FormulaProgram,
    compile_formula,
    evaluate,
    evaluate_series,
    parse,
    tokenize,
)
from dsplab.analysis import (
    BatchResult,
    ClassificationResult,
    EnergyClass,
    IntegrationMethod,
    SignalDuration,
    analyze_all,
    analyze_formula,
    analyze_signal,
    average_power,
    classify,
    integrate_energy,
    measure_signal,
    sample_formula,
)
from dsplab.catalog import default_catalog, get_signal, load_catalog

__all__ = [
    "__version__",
    # Errors
    "ArityMismatchError",
    "CatalogError",
    "DspError",
    "FormulaError",
    "FormulaSyntaxError",
    "FormulaTooComplexError",
    "LexError",
    "ParseError",
    "PreconditionError",
    "UnknownFunctionError",
    "UnknownSymbolError",
    # Formula engine
    "FormulaProgram",
    "compile_formula",
    "evaluate",
    "evaluate_series",
    "parse",
    "tokenize",
    # Analysis
    "BatchResult",
    "ClassificationResult",
    "EnergyClass",
    "IntegrationMethod",
    "SignalDuration",
    "analyze_all",
    "analyze_formula",
    "analyze_signal",
    "average_power",
    "classify",
    "integrate_energy",
    "measure_signal",
    "sample_formula",
    # Catalog
    "default_catalog",
    "get_signal",
    "load_catalog",
]
