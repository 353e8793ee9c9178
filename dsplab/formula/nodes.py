"""
Formula AST nodes.

Nodes are frozen dataclasses; the parser builds trees bottom-up, so every
child is owned by exactly one parent. Equality is structural.
"""

from dataclasses import dataclass
from typing import Iterator, Union


@dataclass(frozen=True)
class Literal:
    value: float

    def __str__(self):
        return repr(self.value)


@dataclass(frozen=True)
class Variable:
    """The free variable `t`."""
    name: str = "t"

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class UnaryCall:
    name: str
    argument: "AstNode"

    def __str__(self):
        return f"{self.name}({self.argument})"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "AstNode"
    right: "AstNode"

    def __str__(self):
        return f"({self.left} {self.op} {self.right})"


AstNode = Union[Literal, Variable, UnaryCall, BinaryOp]

BINARY_OPERATORS = ("+", "-", "*", "/", "**")


def children(node: AstNode) -> tuple:
    if isinstance(node, UnaryCall):
        return (node.argument,)
    if isinstance(node, BinaryOp):
        return (node.left, node.right)
    return ()


def walk(node: AstNode) -> Iterator[AstNode]:
    """Pre-order traversal without recursion."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def tree_depth(node: AstNode) -> int:
    """Number of nodes on the longest root-to-leaf path."""
    depth = 0
    stack = [(node, 1)]
    while stack:
        current, level = stack.pop()
        depth = max(depth, level)
        for child in children(current):
            stack.append((child, level + 1))
    return depth
