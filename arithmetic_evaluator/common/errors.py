"""Typed errors raised while tokenizing or evaluating an expression."""
from enum import Enum
from typing import ClassVar, Optional


class ErrorKind(str, Enum):
    """Stable identifiers for every failure an evaluation can report."""

    LEX_ERROR = "lex_error"
    UNBALANCED_PARENTHESES = "unbalanced_parentheses"
    INSUFFICIENT_OPERANDS = "insufficient_operands"
    INVALID_EXPRESSION = "invalid_expression"
    DIVISION_BY_ZERO = "division_by_zero"
    NUMERIC_DOMAIN = "numeric_domain"
    INTERNAL_ERROR = "internal_error"


class EvaluationError(ValueError):
    """
    Base class of all expression errors.

    :param str message: Human-readable description
    :param Optional[int] position: 0-based index of the offending character, if known
    """

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


class LexError(EvaluationError):
    """Unrecognized character or malformed numeric literal."""

    kind = ErrorKind.LEX_ERROR

    def __init__(self, position: int, cause: str):
        super().__init__(cause, position)
        self.cause = cause


class UnbalancedParentheses(EvaluationError):
    kind = ErrorKind.UNBALANCED_PARENTHESES


class InsufficientOperands(EvaluationError):
    kind = ErrorKind.INSUFFICIENT_OPERANDS


class InvalidExpression(EvaluationError):
    kind = ErrorKind.INVALID_EXPRESSION


class DivisionByZero(EvaluationError):
    kind = ErrorKind.DIVISION_BY_ZERO


class NumericDomainError(EvaluationError):
    """Result is not a real number (negative base with fractional exponent, overflow, NaN)."""

    kind = ErrorKind.NUMERIC_DOMAIN
