"""
Runs item tasks with a bounded number in flight at any one time.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from storebatch.batch.exception import BatchValueError
from storebatch.log.logger import StoreBatchLogger

type Task[T] = Callable[[], Awaitable[T]]
type ProgressCallback = Callable[[float], Any]


class TaskState(StrEnum):
    """The final state of a submitted task."""
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class TaskResult[T]:
    """The outcome of a single submitted task."""
    #: The position of the task in the order it was submitted.
    index: int
    state: TaskState
    value: T | None = None
    error: Exception | None = None
    #: The position of the task in the order tasks completed. None when the task was skipped.
    completed: int | None = None

    @property
    def ok(self) -> bool:
        """Did the task complete successfully."""
        return self.state == TaskState.DONE


class ConcurrencyLimiter:
    """
    Runs tasks in submission order with at most ``concurrency`` tasks in flight.
    As soon as a task completes, the next pending task is started.

    Once any task fails, no further pending tasks are started and these are reported as skipped.
    Tasks already in flight always run to completion.

    :param concurrency: The maximum number of tasks in flight. When None, all tasks are started at once.
    :param progress: Called with the percentage of tasks completed after each task completes.
    """

    __slots__ = ("logger", "concurrency", "progress")

    def __init__(self, concurrency: int | None = None, progress: ProgressCallback | None = None):
        if concurrency is not None and (isinstance(concurrency, bool) or concurrency < 1):
            raise BatchValueError(f"Concurrency must be a positive integer or None, got: {concurrency!r}")

        # noinspection PyTypeChecker
        #: The :py:class:`StoreBatchLogger` for this  object
        self.logger: StoreBatchLogger = logging.getLogger(__name__)

        self.concurrency = concurrency
        self.progress = progress

    async def gather[T](self, tasks: Sequence[Task[T]]) -> list[TaskResult[T]]:
        """
        Run all ``tasks`` and return their results in submission order.
        Failures are recorded in the results and never raised.
        """
        if not tasks:
            return []

        total = len(tasks)
        results: list[TaskResult[T] | None] = [None] * total
        pending = iter(enumerate(tasks))
        completed = 0
        failed = False

        async def _worker() -> None:
            nonlocal completed, failed

            for index, task in pending:
                if failed:
                    results[index] = TaskResult(index=index, state=TaskState.SKIPPED)
                    continue

                try:
                    value = await task()
                except Exception as ex:
                    failed = True
                    completed += 1
                    self.logger.debug(f"Task {index + 1}/{total} failed: {ex}")
                    results[index] = TaskResult(index=index, state=TaskState.FAILED, error=ex, completed=completed)
                else:
                    completed += 1
                    results[index] = TaskResult(index=index, state=TaskState.DONE, value=value, completed=completed)

                if self.progress is not None:
                    self.progress(completed / total * 100)

        workers = min(self.concurrency or total, total)
        await asyncio.gather(*(_worker() for _ in range(workers)))
        return results

    async def run[T](self, tasks: Sequence[Task[T]]) -> list[T]:
        """
        Run all ``tasks`` and return their values in submission order.

        :raise Exception: The first error to occur in any task, once all started tasks have completed.
        """
        results = await self.gather(tasks)
        error = self.first_error(results)
        if error is not None:
            raise error
        return [result.value for result in results]

    @staticmethod
    def first_error(results: Sequence[TaskResult]) -> Exception | None:
        """Return the first error recorded in the given ``results``, by completion order."""
        failed = [result for result in results if result.state == TaskState.FAILED]
        if not failed:
            return
        return min(failed, key=lambda result: result.completed).error
