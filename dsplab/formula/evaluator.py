"""
Formula Evaluator
=================

Interprets a compiled FormulaProgram over sample points.

DESIGN PRINCIPLE:
Undefined math is DATA, not an error.
- Division by zero → ±inf
- log of a non-positive number → -inf / nan
- sqrt of a negative number → nan

Evaluation is total: it never raises for a successfully compiled program.
Each output element depends only on the matching input element, so a series
can be split and evaluated in any order.
"""

from typing import Callable, List, Sequence, Union

import numpy as np

from dsplab.formula.nodes import AstNode, BinaryOp, Literal, UnaryCall, Variable
from dsplab.formula.parser import FormulaProgram
from dsplab.formula.registry import REGISTRY

BINARY_UFUNCS = {
    '+': np.add,
    '-': np.subtract,
    '*': np.multiply,
    '/': np.divide,
    '**': np.power,
}

ArrayLike = Union[Sequence[float], np.ndarray]


def _run(root: AstNode, t: np.ndarray):
    # Post-order walk with an explicit stack; tree depth never hits the
    # interpreter recursion limit.
    values: List = []
    stack = [(root, False)]

    while stack:
        node, ready = stack.pop()

        if isinstance(node, Literal):
            values.append(np.float64(node.value))
        elif isinstance(node, Variable):
            values.append(t)
        elif isinstance(node, UnaryCall):
            if ready:
                values.append(REGISTRY[node.name](values.pop()))
            else:
                stack.append((node, True))
                stack.append((node.argument, False))
        elif isinstance(node, BinaryOp):
            if ready:
                right = values.pop()
                left = values.pop()
                values.append(BINARY_UFUNCS[node.op](left, right))
            else:
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
        else:
            raise TypeError(f"Unknown AST node: {node!r}")

    return values.pop()


def evaluate_series(program: FormulaProgram, ts: ArrayLike) -> np.ndarray:
    """
    Evaluate a program at every sample point.

    Args:
        program: Compiled formula
        ts: Sample points

    Returns:
        float64 array, same length as ts; may contain nan/inf
    """
    t = np.asarray(ts, dtype=np.float64)
    with np.errstate(all='ignore'):
        result = _run(program.root, t)
    return np.array(np.broadcast_to(result, t.shape), dtype=np.float64)


def evaluate(program: FormulaProgram, t: float) -> float:
    """Evaluate a program at a single point."""
    return float(evaluate_series(program, np.array([t], dtype=np.float64))[0])


def as_function(program: FormulaProgram) -> Callable[[ArrayLike], np.ndarray]:
    """Wrap a program as a plain vectorized signal function."""
    def signal(ts: ArrayLike) -> np.ndarray:
        return evaluate_series(program, ts)

    signal.__name__ = f"signal[{program.normalized}]"
    return signal
