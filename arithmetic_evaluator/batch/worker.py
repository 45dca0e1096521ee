"""Worker process evaluating a single expression of a batch."""
from multiprocessing.connection import Connection
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from arithmetic_evaluator.common.errors import ErrorKind
from arithmetic_evaluator.common.evaluator import calculate
from arithmetic_evaluator.common.logger import logger
from arithmetic_evaluator.common.models import Outcome, OperationError


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch runner
        - Receives one expression only
        - Sends its ``OperationResult`` or ``OperationError`` through a Pipe
        - Terminates immediately after computation
    """

    # Immutable once spawned; Connection is not a pydantic type
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending the outcome back to the runner")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def run(self) -> None:
        """
        Evaluate the expression and send the outcome through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        outcome: Optional[Outcome] = None
        try:
            outcome = calculate(self.expression, line_number=self.line_number)
        except Exception as exc:
            # A bug in one evaluation must not leave the runner waiting on this pipe
            logger.exception(f"👷💥 Worker crashed on line {self.line_number}: {self.expression!r}")
            outcome = OperationError(
                expression=self.expression,
                kind=ErrorKind.INTERNAL_ERROR,
                message=f"{type(exc).__name__}: {exc}",
                line_number=self.line_number,
            )
        finally:
            if outcome is not None:
                self.conn.send(outcome)
            # Always close the connection
            self.conn.close()

        if outcome.ok:
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.result}")
        else:
            logger.warning(
                f"👷❌ Worker failed on line {self.line_number}: {outcome.describe()}\n"
                f"Invalid arithmetic expression, could not evaluate: {self.expression!r}"
            )
