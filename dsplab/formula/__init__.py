"""
dsplab Formula Engine - Lexer → Parser → AST → Evaluator

Compiles user-typed signal formulas over the single variable `t` and
evaluates them on numpy sample grids. No formula text ever reaches eval().

Usage:
    from dsplab.formula import compile_formula, evaluate_series

    program = compile_formula("2*sin(pi*t)*rect(t/2)")
    values = evaluate_series(program, np.linspace(-5, 5, 500))
"""

from dsplab.formula.lexer import Token, TokenKind, normalize, tokenize
from dsplab.formula.parser import FormulaProgram, compile_formula, parse, validate_formula
from dsplab.formula.evaluator import as_function, evaluate, evaluate_series
from dsplab.formula.registry import (
    CONSTANTS,
    FORMULA_EXAMPLES,
    REGISTRY,
    available_functions,
)

__all__ = [
    # Lexing
    'Token',
    'TokenKind',
    'normalize',
    'tokenize',
    # Parsing
    'FormulaProgram',
    'compile_formula',
    'parse',
    'validate_formula',
    # Evaluation
    'as_function',
    'evaluate',
    'evaluate_series',
    # Registry
    'CONSTANTS',
    'FORMULA_EXAMPLES',
    'REGISTRY',
    'available_functions',
]
