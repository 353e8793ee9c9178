"""
Formula Lexer
=============

Turns a user-typed formula into a flat token stream.

Pipeline:
    1. Reject characters outside the formula alphabet (positions refer to the
       raw input).
    2. Strip whitespace, substitute symbols: π→pi, ×→*, ÷→/, ^→**.
       π multiplies its neighbours implicitly: 2πt → 2*pi*t.
    3. Insert explicit multiplication: 2t→2*t, 2(→2*(, )2→)*2, )(→)*(.
    4. Scan numbers, identifiers, operators, parentheses and commas.

Identifiers are maximal runs of ASCII letters and are resolved by the parser,
not here.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from dsplab.errors import LexError


class TokenKind(Enum):
    """Token categories."""
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","
    END = "end"


@dataclass(frozen=True)
class Token:
    """A lexed token. `position` is an offset into the normalized formula."""
    kind: TokenKind
    text: str
    position: int
    value: Optional[float] = None

    def __str__(self):
        return self.text if self.kind is not TokenKind.END else "<end>"


OPERATORS = ("**", "+", "-", "*", "/")

SYMBOL_SUBSTITUTIONS = (
    ("π", "pi"),
    ("×", "*"),
    ("÷", "/"),
    ("^", "**"),
)

_ALLOWED_SYMBOLS = frozenset("+-*/(),.^π÷×")
_ASCII_LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
_DIGITS = frozenset("0123456789")

_IMPLICIT_MULTIPLICATION = (
    (re.compile(r"(\d)([a-zA-Z(])"), r"\1*\2"),
    (re.compile(r"\)(\d)"), r")*\1"),
    (re.compile(r"\)\("), r")*("),
)

_PI_BOUNDARIES = (
    (re.compile(r"(?<=[0-9a-zA-Z)π])π"), "*π"),
    (re.compile(r"π(?=[0-9a-zA-Z(.])"), "π*"),
)

_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_IDENTIFIER = re.compile(r"[a-zA-Z]+")


def _is_allowed(ch: str) -> bool:
    return ch in _DIGITS or ch in _ASCII_LETTERS or ch in _ALLOWED_SYMBOLS or ch.isspace()


def check_alphabet(source: str) -> None:
    """Raise LexError on the first character outside the formula alphabet."""
    for position, ch in enumerate(source):
        if not _is_allowed(ch):
            raise LexError(ch, position)


def normalize(source: str) -> str:
    """
    Rewrite a formula into its canonical textual form.

    Args:
        source: Raw formula text

    Returns:
        Whitespace-free formula with symbols substituted and implicit
        multiplication made explicit

    Raises:
        LexError: If the formula contains a character outside the alphabet
    """
    check_alphabet(source)
    text = "".join(source.split())
    # π is a symbol on its own: πt is pi*t, never the identifier "pit"
    for pattern, replacement in _PI_BOUNDARIES:
        text = pattern.sub(replacement, text)
    for symbol, replacement in SYMBOL_SUBSTITUTIONS:
        text = text.replace(symbol, replacement)
    for pattern, replacement in _IMPLICIT_MULTIPLICATION:
        text = pattern.sub(replacement, text)
    return text


def scan(text: str) -> List[Token]:
    """Scan an already-normalized formula into tokens (END-terminated)."""
    tokens: List[Token] = []
    pos = 0
    n = len(text)

    while pos < n:
        ch = text[pos]

        if ch in _DIGITS or ch == ".":
            match = _NUMBER.match(text, pos)
            if match is None:
                raise LexError(ch, pos)
            tokens.append(Token(TokenKind.NUMBER, match.group(), pos, float(match.group())))
            pos = match.end()
        elif ch in _ASCII_LETTERS:
            match = _IDENTIFIER.match(text, pos)
            tokens.append(Token(TokenKind.IDENTIFIER, match.group(), pos))
            pos = match.end()
        elif text.startswith("**", pos):
            tokens.append(Token(TokenKind.OPERATOR, "**", pos))
            pos += 2
        elif ch in "+-*/":
            tokens.append(Token(TokenKind.OPERATOR, ch, pos))
            pos += 1
        elif ch == "(":
            tokens.append(Token(TokenKind.LPAREN, ch, pos))
            pos += 1
        elif ch == ")":
            tokens.append(Token(TokenKind.RPAREN, ch, pos))
            pos += 1
        elif ch == ",":
            tokens.append(Token(TokenKind.COMMA, ch, pos))
            pos += 1
        else:
            raise LexError(ch, pos)

    tokens.append(Token(TokenKind.END, "", n))
    return tokens


def tokenize(source: str) -> List[Token]:
    """
    Tokenize a formula.

    Args:
        source: Raw formula text, e.g. "2sin(πt)×rect(t/2)"

    Returns:
        Token list terminated by an END token

    Raises:
        LexError: On a character outside [0-9a-zA-Zπ×÷^+-*/(),.] and whitespace
    """
    return scan(normalize(source))
