"""Pydantic models for evaluation outcomes."""
from typing import Optional, Union

from pydantic import BaseModel, Field

from arithmetic_evaluator.common.errors import ErrorKind, EvaluationError


def format_number(value: float) -> str:
    """Render a result with up to 15 significant digits ("300", "0.3", "1e+20")."""
    return f"{value:.15g}"


class OperationResult(BaseModel):
    """Represents a successfully evaluated arithmetic expression."""

    expression: str = Field(..., description="Original arithmetic expression")
    result: float = Field(..., description="Evaluated numeric result of the expression")
    line_number: Optional[int] = Field(default=None, ge=1, description="Line in the batch input, if any")

    @property
    def ok(self) -> bool:
        return True

    def render(self) -> str:
        return f"{self.expression} = {format_number(self.result)}"


class OperationError(BaseModel):
    """Represents an expression that could not be evaluated."""

    expression: str = Field(..., description="Original arithmetic expression")
    kind: ErrorKind = Field(..., description="Category of the failure")
    message: str = Field(..., description="Human-readable description of the failure")
    position: Optional[int] = Field(default=None, ge=0, description="0-based index of the offending character")
    line_number: Optional[int] = Field(default=None, ge=1, description="Line in the batch input, if any")

    @classmethod
    def from_exception(
        cls, expression: str, exc: EvaluationError, line_number: Optional[int] = None
    ) -> "OperationError":
        """
        Build an error outcome from a raised evaluation error.

        :param str expression: Expression that failed
        :param EvaluationError exc: Error raised by the tokenizer or the evaluator
        :param Optional[int] line_number: Line in the batch input, if any

        :return: Error outcome
        :rtype: OperationError
        """
        return cls(
            expression=expression,
            kind=exc.kind,
            message=exc.message,
            position=exc.position,
            line_number=line_number,
        )

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"

    def render(self) -> str:
        return f"{self.expression} -> ERROR: {self.describe()}"


Outcome = Union[OperationResult, OperationError]
