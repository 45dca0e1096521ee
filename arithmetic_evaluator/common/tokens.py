"""Pydantic models for the tokens produced by the tokenizer."""
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from arithmetic_evaluator.common.operators import OPERATORS, Associativity


class _Token(BaseModel):
    """Common base: tokens are immutable and remember where they came from."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=0, description="0-based index of the first character of the token")


class Number(_Token):
    """A numeric literal."""

    kind: Literal["number"] = "number"
    value: float = Field(..., description="Parsed value of the literal")


class Operator(_Token):
    """A binary operator, with its precedence and associativity taken from ``OPERATORS``."""

    kind: Literal["operator"] = "operator"
    symbol: Literal["+", "-", "*", "/", "%", "^", "E"] = Field(..., description="Operator symbol")
    precedence: int = Field(..., ge=1, description="Higher binds tighter")
    associativity: Associativity = Field(..., description="Grouping of a chain of equal precedence")

    @classmethod
    def from_symbol(cls, symbol: str, position: int) -> "Operator":
        """
        Build an operator token from the operator table.

        :param str symbol: One of the keys of ``OPERATORS``
        :param int position: Position of the symbol in the input

        :return: Operator token
        :rtype: Operator
        """
        entry = OPERATORS[symbol]
        return cls(
            symbol=symbol,
            precedence=entry.precedence,
            associativity=entry.associativity,
            position=position,
        )


class LeftParen(_Token):
    kind: Literal["left_paren"] = "left_paren"


class RightParen(_Token):
    kind: Literal["right_paren"] = "right_paren"


Token = Union[Number, Operator, LeftParen, RightParen]
