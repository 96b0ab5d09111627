"""Bounded-concurrency execution of per-image jobs."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, as_completed, wait
from typing import TypeAlias

from deepzoom_pack.application.results import Task, TaskOutcome

logger = logging.getLogger(__name__)

FALLBACK_WORKERS = 4

TaskJob: TypeAlias = Callable[[Task], TaskOutcome]
CompletionCallback: TypeAlias = Callable[[Task, TaskOutcome], None]


def default_worker_count() -> int:
    """Return the host's CPU count, or a small constant when it is unknown."""
    return os.cpu_count() or FALLBACK_WORKERS


class TaskScheduler:
    """Run one job per task with at most ``workers`` jobs in flight.

    Tasks are admitted in ``sequence_index`` order. Once ``workers`` jobs are
    outstanding, admission waits for whichever job finishes first, so a slow
    image never holds back the rest of the pool.

    Parameters
    ----------
    workers : int | None, default=None
        Maximum concurrent jobs; defaults to :func:`default_worker_count`.
    """

    def __init__(self, workers: int | None = None) -> None:
        resolved = default_worker_count() if workers is None else workers
        if resolved < 1:
            raise ValueError("workers must be >= 1.")
        self.workers = resolved
        self.peak_in_flight = 0

    def run(
        self,
        tasks: Iterable[Task],
        job: TaskJob,
        on_complete: CompletionCallback | None = None,
    ) -> list[TaskOutcome]:
        """Execute ``job`` for every task and return outcomes in completion order.

        A job that raises (``SystemExit`` included) is recorded as a failed
        outcome; it never stops the remaining tasks.

        Parameters
        ----------
        tasks : Iterable[Task]
            Tasks to run, admitted in ``sequence_index`` order.
        job : TaskJob
            Callable producing one outcome per task.
        on_complete : CompletionCallback | None, default=None
            Called on the submitting thread with every collected outcome,
            including failures built for jobs that raised.
        """
        ordered = sorted(tasks, key=lambda task: task.sequence_index)
        outcomes: list[TaskOutcome] = []
        in_flight: dict[Future[TaskOutcome], Task] = {}

        def collect(future: Future[TaskOutcome], task: Task) -> None:
            outcome = self._collect(future, task)
            outcomes.append(outcome)
            if on_complete is not None:
                on_complete(task, outcome)

        with ThreadPoolExecutor(
            max_workers=self.workers,
            thread_name_prefix="deepzoom-pack",
        ) as executor:
            for task in ordered:
                if len(in_flight) >= self.workers:
                    done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                    for future in done:
                        collect(future, in_flight.pop(future))
                logger.debug("Dispatching task %d: %s", task.sequence_index, task.source_path)
                in_flight[executor.submit(job, task)] = task
                self.peak_in_flight = max(self.peak_in_flight, len(in_flight))

            for future in as_completed(in_flight):
                collect(future, in_flight[future])
        return outcomes

    @staticmethod
    def _collect(future: Future[TaskOutcome], task: Task) -> TaskOutcome:
        try:
            return future.result()
        except (Exception, SystemExit) as exc:
            logger.exception("Job for task %d raised", task.sequence_index)
            return TaskOutcome(
                sequence_index=task.sequence_index,
                success=False,
                error_message=f"{type(exc).__name__}: {exc}",
            )
