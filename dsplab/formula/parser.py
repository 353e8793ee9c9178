"""
Formula Parser
==============

Recursive-descent parser over the closed formula grammar. Produces an AST;
never evaluates anything and never hands text to the host interpreter.

Grammar (precedence low → high):
    expr    := term (('+' | '-') term)*
    term    := power (('*' | '/') power)*
    power   := unary ('**' power)?              right-associative
    unary   := ('-')? primary
    primary := Number | 't' | Constant
             | Identifier '(' expr (',' expr)* ')'
             | '(' expr ')'

Note that unary minus binds tighter than '**': -t**2 is (-t)**2.

Usage:
    from dsplab.formula.parser import compile_formula

    program = compile_formula("2*sin(pi*t)*rect(t/2)")
    program.node_count
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Sequence

from dsplab.config.defaults import FORMULA_CACHE_SIZE, MAX_AST_NODES, MAX_NESTING_DEPTH
from dsplab.errors import (
    ArityMismatchError,
    DspError,
    FormulaSyntaxError,
    FormulaTooComplexError,
    PreconditionError,
    UnknownFunctionError,
    UnknownSymbolError,
)
from dsplab.formula import registry
from dsplab.formula.lexer import Token, TokenKind, normalize, scan
from dsplab.formula.nodes import AstNode, BinaryOp, Literal, UnaryCall, Variable, tree_depth

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormulaProgram:
    """
    A compiled formula.

    Immutable and hashable: callers may cache it keyed on `source` and reuse
    it for every redraw. Equality, hash and repr come from the text, never
    from walking `root`. Evaluating it never raises; undefined math yields
    nan/inf values.
    """
    source: str
    normalized: str
    root: AstNode = field(compare=False, repr=False)
    node_count: int
    depth: int

    def __str__(self):
        return self.normalized


class Parser:
    """Single-use parser over one token list."""

    def __init__(
        self,
        tokens: Sequence[Token],
        max_nodes: int = MAX_AST_NODES,
        max_depth: int = MAX_NESTING_DEPTH,
    ):
        if not tokens or tokens[-1].kind is not TokenKind.END:
            end = tokens[-1].position + len(tokens[-1].text) if tokens else 0
            tokens = list(tokens) + [Token(TokenKind.END, "", end)]
        self.tokens = tokens
        self.pos = 0
        self.max_nodes = max_nodes
        self.max_depth = max_depth
        self.node_count = 0
        self._depth = 0

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind is not TokenKind.END:
            self.pos += 1
        return token

    def _at_operator(self, *ops: str) -> bool:
        return self.current.kind is TokenKind.OPERATOR and self.current.text in ops

    def _expect(self, kind: TokenKind, detail: str) -> Token:
        if self.current.kind is not kind:
            raise FormulaSyntaxError(self.current.position, detail)
        return self._advance()

    def _node(self, node: AstNode) -> AstNode:
        self.node_count += 1
        if self.node_count > self.max_nodes:
            raise FormulaTooComplexError(
                f"Formula too large: more than {self.max_nodes} nodes"
            )
        return node

    def _enter(self) -> None:
        self._depth += 1
        if self._depth > self.max_depth:
            raise FormulaTooComplexError(
                f"Formula nested too deeply: more than {self.max_depth} levels"
            )

    def _leave(self) -> None:
        self._depth -= 1

    # -------------------------------------------------------------------------
    # Grammar
    # -------------------------------------------------------------------------

    def parse(self) -> AstNode:
        if self.current.kind is TokenKind.END:
            raise FormulaSyntaxError(self.current.position, "empty expression")
        root = self._expr()
        if self.current.kind is not TokenKind.END:
            token = self.current
            if token.kind is TokenKind.RPAREN:
                detail = "unbalanced ')'"
            else:
                detail = f"unexpected {str(token)!r}"
            raise FormulaSyntaxError(token.position, detail)
        return root

    def _expr(self) -> AstNode:
        node = self._term()
        while self._at_operator('+', '-'):
            op = self._advance().text
            node = self._node(BinaryOp(op, node, self._term()))
        return node

    def _term(self) -> AstNode:
        node = self._power()
        while self._at_operator('*', '/'):
            op = self._advance().text
            node = self._node(BinaryOp(op, node, self._power()))
        return node

    def _power(self) -> AstNode:
        base = self._unary()
        if not self._at_operator('**'):
            return base
        self._advance()
        self._enter()
        exponent = self._power()
        self._leave()
        return self._node(BinaryOp('**', base, exponent))

    def _unary(self) -> AstNode:
        if self._at_operator('-'):
            self._advance()
            operand = self._primary()
            # -x is -1 * x so that -0.0 keeps its sign
            return self._node(BinaryOp('*', self._node(Literal(-1.0)), operand))
        return self._primary()

    def _primary(self) -> AstNode:
        token = self.current

        if token.kind is TokenKind.NUMBER:
            self._advance()
            return self._node(Literal(token.value))

        if token.kind is TokenKind.LPAREN:
            self._advance()
            self._enter()
            node = self._expr()
            self._leave()
            self._expect(TokenKind.RPAREN, "missing ')'")
            return node

        if token.kind is TokenKind.IDENTIFIER:
            self._advance()
            if self.current.kind is TokenKind.LPAREN:
                return self._call(token)
            return self._symbol(token)

        if token.kind is TokenKind.END:
            raise FormulaSyntaxError(token.position, "unexpected end of formula")
        raise FormulaSyntaxError(token.position, f"unexpected {str(token)!r}")

    def _symbol(self, token: Token) -> AstNode:
        name = token.text
        if name == registry.VARIABLE:
            return self._node(Variable())
        if registry.is_constant(name):
            return self._node(Literal(registry.CONSTANTS[name]))
        if registry.is_function(name):
            raise ArityMismatchError(name, registry.REGISTRY[name].arity, 0)
        raise UnknownSymbolError(name)

    def _call(self, token: Token) -> AstNode:
        name = token.text
        if not registry.is_function(name):
            raise UnknownFunctionError(name)

        self._advance()  # '('
        self._enter()
        args: List[AstNode] = []
        if self.current.kind is not TokenKind.RPAREN:
            args.append(self._expr())
            while self.current.kind is TokenKind.COMMA:
                self._advance()
                args.append(self._expr())
        self._leave()
        self._expect(TokenKind.RPAREN, f"missing ')' after arguments of {name}()")

        expected = registry.REGISTRY[name].arity
        if len(args) != expected:
            raise ArityMismatchError(name, expected, len(args))
        return self._node(UnaryCall(name, args[0]))


def parse(
    tokens: Sequence[Token],
    source: Optional[str] = None,
    *,
    max_nodes: int = MAX_AST_NODES,
    max_depth: int = MAX_NESTING_DEPTH,
) -> FormulaProgram:
    """
    Parse a token stream into a FormulaProgram.

    Args:
        tokens: Output of tokenize()
        source: Original formula text (defaults to the joined tokens)
        max_nodes: AST node count bound
        max_depth: Nesting depth bound

    Returns:
        FormulaProgram

    Raises:
        ParseError: FormulaSyntaxError, UnknownFunctionError,
            UnknownSymbolError, ArityMismatchError or FormulaTooComplexError
    """
    parser = Parser(tokens, max_nodes=max_nodes, max_depth=max_depth)
    root = parser.parse()
    normalized = "".join(t.text for t in tokens)
    return FormulaProgram(
        source=normalized if source is None else source,
        normalized=normalized,
        root=root,
        node_count=parser.node_count,
        depth=tree_depth(root),
    )


@lru_cache(maxsize=FORMULA_CACHE_SIZE)
def _compile_cached(source: str) -> FormulaProgram:
    normalized = normalize(source)
    program = parse(scan(normalized), source)
    logger.debug(f"Compiled {source!r} -> {program.normalized} ({program.node_count} nodes)")
    return program


def compile_formula(source: str) -> FormulaProgram:
    """
    Tokenize and parse a formula. Results are cached per source string.

    Raises:
        PreconditionError: If source is not a string
        FormulaError: LexError or ParseError; nothing has been evaluated
    """
    if not isinstance(source, str):
        raise PreconditionError(f"Formula must be a string, got {type(source).__name__}")
    return _compile_cached(source)


def validate_formula(source: str) -> dict:
    """
    Check a formula without evaluating it.

    Returns:
        {'valid': True} or {'valid': False, 'error': <message>, ...}
    """
    try:
        compile_formula(source)
    except DspError as e:
        return {'valid': False, **e.to_dict()}
    return {'valid': True}
