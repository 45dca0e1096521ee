"""Evaluate a batch of expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
from typing import List, NamedTuple, TextIO

from pydantic import BaseModel, Field

from arithmetic_evaluator.batch.worker import WorkerProcess
from arithmetic_evaluator.common.errors import ErrorKind
from arithmetic_evaluator.common.logger import logger
from arithmetic_evaluator.common.models import Outcome, OperationError


class ActiveWorker(NamedTuple):
    process: Process
    conn: Connection
    expression: str
    line_number: int


def build_output_path(input_path: Path) -> Path:
    """
    Construct the results path of a batch input.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations.txt
    output: resources/operations_txt_results.txt

    input: resources/operations.tar.xz
    output: resources/operations_tar_xz_results.txt

    :param Path input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


class BatchRunner(BaseModel):
    """
    Evaluate many independent expressions in parallel.

    Features:
        - Spawns one short-lived worker process per expression.
        - Keeps at most ``max_workers`` workers alive at once.
        - Writes each outcome to disk as soon as its worker finishes.
    """

    output_file: Path = Field(..., description="Path to write computation results")
    max_workers: int = Field(default_factory=cpu_count, ge=1, description="Maximum number of concurrent workers")

    def _spawn_worker(self, expr: str, line_number: int) -> ActiveWorker:
        """
        Spawn a WorkerProcess for the given expression.

        :param str expr: Arithmetic expression
        :param int line_number: Line number of expression in input

        :return: Running worker with the parent end of its pipe
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe(duplex=False)
        worker = WorkerProcess(conn=child_conn, expression=expr, line_number=line_number)
        process = Process(target=worker.run)
        process.start()
        # The child holds its own copy of the sending end
        child_conn.close()
        return ActiveWorker(process, parent_conn, expr, line_number)

    @staticmethod
    def _receive(worker: ActiveWorker) -> Outcome:
        """Read the outcome of a finished worker, then reap it."""
        try:
            outcome: Outcome = worker.conn.recv()
        except EOFError:
            # The process died before sending anything
            outcome = OperationError(
                expression=worker.expression,
                kind=ErrorKind.INTERNAL_ERROR,
                message="Worker exited without a result",
                line_number=worker.line_number,
            )
        finally:
            worker.conn.close()
            worker.process.join()

        if not outcome.ok and outcome.kind is ErrorKind.INTERNAL_ERROR:
            logger.error(f"🔌❌ Line {worker.line_number}: {outcome.message}")
        return outcome

    def _collect_finished_workers(
        self, active_workers: List[ActiveWorker], f_out: TextIO, outcomes: List[Outcome]
    ) -> None:
        """
        Block until at least one worker has sent its outcome, then collect every ready one.

        Collected workers are removed from ``active_workers``, their outcome is
        written to ``f_out`` and appended to ``outcomes``.

        :param List[ActiveWorker] active_workers: Running workers
        :param TextIO f_out: Open file handle for writing results
        :param List[Outcome] outcomes: Collected outcomes
        """
        ready = wait([worker.conn for worker in active_workers])
        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            worker = active_workers[i]
            if worker.conn not in ready:
                continue
            active_workers.pop(i)
            outcome = self._receive(worker)
            outcomes.append(outcome)

            # Write output immediately
            f_out.write(outcome.render() + "\n")
            f_out.flush()

    def run(self, expressions: List[str]) -> List[Outcome]:
        """
        Evaluate every expression and write one result line per expression.

        Lines are written in completion order; the returned list is sorted by line number.

        :param List[str] expressions: Non-empty expressions, line numbers start at 1

        :return: Outcomes in input order
        :rtype: List[Outcome]
        """
        logger.info(f"🖥️ Evaluating {len(expressions)} expressions with up to {self.max_workers} workers")
        outcomes: List[Outcome] = []
        active_workers: List[ActiveWorker] = []

        with self.output_file.open("w", encoding="utf-8") as f_out:
            for line_number, expr in enumerate(expressions, start=1):
                # Wait until a worker slot is available
                while len(active_workers) >= self.max_workers:
                    self._collect_finished_workers(active_workers, f_out, outcomes)
                active_workers.append(self._spawn_worker(expr, line_number))

            # Collect remaining active workers
            while active_workers:
                self._collect_finished_workers(active_workers, f_out, outcomes)

        failures = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(f"✉️ Results written to {self.output_file} ({failures} failed)")
        return sorted(outcomes, key=lambda outcome: outcome.line_number)
