"""Progress reporting and outcome collection for concurrent batch runs.

Workers never write to the console or touch counters directly. They post
messages onto a queue; a single consumer thread owns the counters, the
collected outcomes, and the output sink, so every line is written whole and
the tally is updated in one place.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
from dataclasses import dataclass
from types import TracebackType

from deepzoom_pack.application.results import (
    ProgressSnapshot,
    RunSummary,
    Task,
    TaskOutcome,
)
from deepzoom_pack.types import LineSink

logger = logging.getLogger(__name__)


def write_line(line: str, err: bool = False) -> None:
    """Default sink: write one line to stdout (or stderr) and flush."""
    stream = sys.stderr if err else sys.stdout
    stream.write(line + "\n")
    stream.flush()


@dataclass(frozen=True)
class _LineMessage:
    line: str
    err: bool


@dataclass(frozen=True)
class _OutcomeMessage:
    task: Task
    outcome: TaskOutcome


_STOP = object()


class ResultAggregator:
    """Single-consumer collector of task outcomes and progress lines.

    Parameters
    ----------
    total : int
        Number of tasks in the run, used for ``succeeded/total`` output.
    sink : LineSink | None, default=None
        Callable receiving ``(line, err)``; defaults to :func:`write_line`.
    """

    def __init__(self, total: int, sink: LineSink | None = None) -> None:
        self._total = total
        self._sink = sink or write_line
        self._queue: queue.SimpleQueue[object] = queue.SimpleQueue()
        self._thread: threading.Thread | None = None
        self._closed = False
        self._outcomes: list[TaskOutcome] = []
        self._snapshot = ProgressSnapshot(succeeded=0, completed=0, total=total)

    def __enter__(self) -> ResultAggregator:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def total(self) -> int:
        """Number of tasks expected in this run."""
        return self._total

    def start(self) -> None:
        """Start the consumer thread. Calling twice is a no-op."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._consume,
            name="deepzoom-pack-progress",
            daemon=True,
        )
        self._thread.start()

    def close(self) -> None:
        """Drain pending messages and stop the consumer thread."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        if self._thread is None:
            # never started: drain inline so nothing posted is lost
            self._consume()
            return
        self._thread.join()

    def emit(self, line: str, err: bool = False) -> None:
        """Queue one output line for the sink."""
        self._post(_LineMessage(line=line, err=err))

    def record(self, task: Task, outcome: TaskOutcome) -> None:
        """Queue a finished task's outcome."""
        self._post(_OutcomeMessage(task=task, outcome=outcome))

    def snapshot(self) -> ProgressSnapshot:
        """Return the latest published ``succeeded/completed/total`` counts."""
        return self._snapshot

    def summary(self) -> RunSummary:
        """Return the final tally. Call after :meth:`close`.

        Raises
        ------
        RuntimeError
            If the aggregator is still accepting messages.
        """
        if not self._closed:
            raise RuntimeError("summary() requires the aggregator to be closed.")
        outcomes = tuple(sorted(self._outcomes, key=lambda item: item.sequence_index))
        return RunSummary(
            total=self._total,
            succeeded=sum(1 for item in outcomes if item.success),
            outcomes=outcomes,
        )

    def _post(self, message: object) -> None:
        if self._closed:
            raise RuntimeError("ResultAggregator is closed.")
        self._queue.put(message)

    def _consume(self) -> None:
        while True:
            message = self._queue.get()
            if message is _STOP:
                return
            if isinstance(message, _OutcomeMessage):
                self._apply(message.task, message.outcome)
            elif isinstance(message, _LineMessage):
                self._write(message.line, message.err)

    def _apply(self, task: Task, outcome: TaskOutcome) -> None:
        self._outcomes.append(outcome)
        previous = self._snapshot
        succeeded = previous.succeeded + (1 if outcome.success else 0)
        self._snapshot = ProgressSnapshot(
            succeeded=succeeded,
            completed=previous.completed + 1,
            total=self._total,
        )
        if outcome.success:
            self._write(
                f"[{succeeded}/{self._total}] ✓ {task.source_path} -> "
                f"{task.dest_folder} ({outcome.tile_count} tiles)",
                False,
            )
        else:
            self._write(f"[ERROR] {task.source_path}: {outcome.error_message}", True)
        for warning in outcome.warnings:
            self._write(f"[WARN] {task.source_path}: {warning}", True)

    def _write(self, line: str, err: bool) -> None:
        try:
            self._sink(line, err)
        except Exception:
            logger.exception("Progress sink failed to write a line")
