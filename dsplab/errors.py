"""
dsplab Error Handling
=====================

Every failure in the core is a typed exception carrying a message that is
safe to show to users. Internal details are logged, never returned.

Hierarchy:
    DspError
    ├── FormulaError
    │   ├── LexError
    │   └── ParseError
    │       ├── FormulaSyntaxError
    │       ├── UnknownFunctionError
    │       ├── UnknownSymbolError
    │       ├── ArityMismatchError
    │       └── FormulaTooComplexError
    ├── PreconditionError
    └── CatalogError

A failure while classifying one catalog signal is not raised: it becomes a
result labelled COMPUTATION_ERROR (see dsplab.analysis.classify).
"""

import logging
import traceback
import uuid
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def _new_error_id() -> str:
    return str(uuid.uuid4())[:8]


class DspError(Exception):
    """
    User-safe error.

    Use this (through a subclass) for errors that should be shown to users.
    """

    def __init__(self, user_message: str):
        self.user_message = user_message
        self.error_id = _new_error_id()
        logger.debug(f"Error {self.error_id} ({type(self).__name__}): {user_message}")
        super().__init__(user_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display layers."""
        return {
            "error": self.user_message,
            "error_type": type(self).__name__,
            "error_id": self.error_id,
        }


# =============================================================================
# Formula compilation
# =============================================================================

class FormulaError(DspError):
    """Formula could not be compiled. Nothing was evaluated."""


class LexError(FormulaError):
    """Character outside the formula alphabet."""

    def __init__(self, character: str, position: int):
        self.character = character
        self.position = position
        super().__init__(f"Unexpected character {character!r} at position {position}")

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["position"] = self.position
        return d


class ParseError(FormulaError):
    """Token stream does not form a valid formula."""


class FormulaSyntaxError(ParseError):
    """Malformed syntax: unbalanced parentheses, trailing tokens, empty input."""

    def __init__(self, position: int, detail: str = "invalid syntax"):
        self.position = position
        self.detail = detail
        super().__init__(f"Syntax error at position {position}: {detail}")

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["position"] = self.position
        return d


class UnknownFunctionError(ParseError):
    """Call to a name that is not in the function registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown function: {name}")


class UnknownSymbolError(ParseError):
    """Bare identifier that is neither `t` nor a known constant."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown symbol: {name}")


class ArityMismatchError(ParseError):
    """Registry function called with the wrong number of arguments."""

    def __init__(self, name: str, expected: int, received: int):
        self.name = name
        self.expected = expected
        self.received = received
        super().__init__(
            f"Function {name}() takes {expected} argument(s), {received} given"
        )


class FormulaTooComplexError(ParseError):
    """Formula exceeds the node count or nesting depth bounds."""


# =============================================================================
# Analysis
# =============================================================================

class PreconditionError(DspError):
    """Caller supplied an invalid interval, sample count or sample vector."""


class CatalogError(DspError):
    """Unknown catalog signal or malformed catalog file."""


def log_error(error: Exception, context: str = "") -> str:
    """
    Log an error and return an error ID for reference.

    Args:
        error: The exception to log
        context: Optional context string

    Returns:
        Error ID for support reference
    """
    error_id = _new_error_id()
    logger.error(
        f"Error {error_id}"
        + (f" ({context})" if context else "")
        + f": {error}\n{traceback.format_exc()}"
    )
    return error_id


def describe_error(error: Exception, error_id: Optional[str] = None) -> str:
    """User-safe one-line description of any exception."""
    if isinstance(error, DspError):
        return error.user_message
    message = f"{type(error).__name__}: {error}"
    if error_id:
        message += f" (ref {error_id})"
    return message
