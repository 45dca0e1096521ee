"""
Command-line entry point.

Two modes:
- evaluate the expression given as arguments and print its result
- evaluate every line of a file (or archive) with ``--file`` and write a results file

Exit codes: 0 on success, 1 if an expression failed, 2 on invalid arguments.
"""

import argparse
from multiprocessing import cpu_count
from pathlib import Path
import sys
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, FilePath, ValidationError, model_validator

from arithmetic_evaluator.batch.runner import BatchRunner, build_output_path
from arithmetic_evaluator.batch.sources import read_expressions
from arithmetic_evaluator.common.evaluator import calculate
from arithmetic_evaluator.common.logger import configure_logging, logger
from arithmetic_evaluator.common.models import OperationError, format_number


EXIT_OK = 0
EXIT_FAILURE = 1


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : Optional[str]
        Expression to evaluate, when not in batch mode.
    file_path : Optional[FilePath]
        Path to the file containing one expression per line.
    workers : int
        Maximum number of worker processes in batch mode.
    log_level : str
        Level of the project logger.
    """

    expression: Optional[str] = None
    file_path: Optional[FilePath] = None
    workers: int = Field(default_factory=cpu_count, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    @model_validator(mode="after")
    def exactly_one_input(self) -> "CliArgs":
        """Require either an expression or a file, not both."""
        if (self.expression is None) == (self.file_path is None):
            raise ValueError("Provide either an expression or --file, not both")
        return self


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser of the command line.

    :return: Parser accepting an expression or ``--file``
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="arithmetic-evaluator",
        description="Evaluate arithmetic expressions (+ - * / % ^ E and parentheses)",
        epilog="Use '--' before an expression starting with '-', e.g. arithmetic-evaluator -- -3 + 4",
    )
    parser.add_argument(
        "expression",
        nargs="*",
        help="Expression to evaluate; several arguments are joined with spaces",
    )
    parser.add_argument(
        "-f",
        "--file",
        dest="file_path",
        help="Evaluate every line of a .txt, .zip, .tar.xz or .7z file",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Maximum number of worker processes in batch mode (default: CPU count)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param Optional[List[str]] argv: Arguments, defaults to ``sys.argv[1:]``

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    values = {
        "expression": " ".join(args.expression) if args.expression else None,
        "file_path": args.file_path,
        "log_level": args.log_level,
    }
    if args.workers is not None:
        values["workers"] = args.workers

    try:
        return CliArgs(**values)
    except ValidationError as exc:
        parser.error(str(exc))


def format_error(error: OperationError) -> str:
    """
    Render an error, pointing at the offending character when its position is known.

    :param OperationError error: Failed outcome

    :return: Message, possibly followed by the expression and a caret line
    :rtype: str
    """
    message = f"Error: {error.message}"
    if error.position is None:
        return message
    return f"{message}\n  {error.expression}\n  {' ' * error.position}^"


def evaluate_single(expression: str) -> int:
    """
    Evaluate one expression and print its result or error.

    :param str expression: Arithmetic expression

    :return: Process exit code
    :rtype: int
    """
    outcome = calculate(expression)
    if outcome.ok:
        print(f"Result: {format_number(outcome.result)}")
        return EXIT_OK
    logger.debug(f"🧮❌ {outcome.kind.value}: {outcome.describe()}")
    print(format_error(outcome), file=sys.stderr)
    return EXIT_FAILURE


def evaluate_file(input_path: Path, workers: int) -> int:
    """
    Evaluate every expression of ``input_path`` and write them next to it.

    :param Path input_path: Text file or archive
    :param int workers: Maximum number of concurrent workers

    :return: Process exit code
    :rtype: int
    """
    output_path = build_output_path(input_path)
    try:
        expressions = read_expressions(input_path)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    outcomes = BatchRunner(output_file=output_path, max_workers=workers).run(expressions)
    failures = [outcome for outcome in outcomes if not outcome.ok]
    print(f"Evaluated {len(outcomes)} expressions, {len(failures)} failed. Results: {output_path}")
    return EXIT_FAILURE if failures else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function, also used as the console script.
    """
    cli_args = parse_args(argv)
    configure_logging(cli_args.log_level)

    if cli_args.file_path is not None:
        return evaluate_file(Path(cli_args.file_path), cli_args.workers)
    return evaluate_single(cli_args.expression)


if __name__ == "__main__":
    sys.exit(main())
