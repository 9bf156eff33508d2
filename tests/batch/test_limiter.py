import asyncio

import pytest

from storebatch.batch.exception import BatchValueError
from storebatch.batch.limiter import ConcurrencyLimiter, TaskState


class Tracker:
    """Tracks the order and number of running tasks created by :py:meth:`task`"""

    def __init__(self):
        self.started: list[int] = []
        self.finished: list[int] = []
        self.running = 0
        self.max_running = 0

    def task(self, value: int, delay: float = 0.01, fail: bool = False):
        """Return a task which returns ``value`` after ``delay`` seconds or raises when ``fail`` is True"""
        async def _task() -> int:
            self.started.append(value)
            self.running += 1
            self.max_running = max(self.running, self.max_running)
            try:
                await asyncio.sleep(delay)
            finally:
                self.running -= 1

            self.finished.append(value)
            if fail:
                raise ValueError(f"Task {value} failed")
            return value

        return _task


@pytest.fixture
def tracker() -> Tracker:
    return Tracker()


def test_invalid_concurrency():
    with pytest.raises(BatchValueError):
        ConcurrencyLimiter(concurrency=0)
    with pytest.raises(BatchValueError):
        ConcurrencyLimiter(concurrency=True)


async def test_empty():
    assert await ConcurrencyLimiter().gather([]) == []
    assert await ConcurrencyLimiter(concurrency=1).run([]) == []


async def test_unbounded(tracker: Tracker):
    tasks = [tracker.task(i) for i in range(10)]
    assert await ConcurrencyLimiter().run(tasks) == list(range(10))
    assert tracker.max_running == 10


@pytest.mark.parametrize("concurrency", [1, 2, 3, 7])
async def test_bounded(tracker: Tracker, concurrency: int):
    tasks = [tracker.task(i, delay=0.001 * (i % 3)) for i in range(10)]
    assert await ConcurrencyLimiter(concurrency=concurrency).run(tasks) == list(range(10))

    assert tracker.max_running == concurrency
    assert tracker.started == list(range(10))


async def test_serial_order(tracker: Tracker):
    tasks = [tracker.task(i, delay=0.001 * (5 - i)) for i in range(5)]
    await ConcurrencyLimiter(concurrency=1).run(tasks)
    assert tracker.started == tracker.finished == list(range(5))


async def test_next_task_starts_when_slot_frees(tracker: Tracker):
    tasks = [tracker.task(0, delay=0.05), tracker.task(1, delay=0.001), tracker.task(2, delay=0.001)]
    await ConcurrencyLimiter(concurrency=2).run(tasks)

    # task 2 takes the slot freed by task 1 while task 0 is still running
    assert tracker.finished == [1, 2, 0]


async def test_failure_skips_pending(tracker: Tracker):
    tasks = [tracker.task(0), tracker.task(1, fail=True), tracker.task(2), tracker.task(3)]
    results = await ConcurrencyLimiter(concurrency=1).gather(tasks)

    assert [result.state for result in results] == [
        TaskState.DONE, TaskState.FAILED, TaskState.SKIPPED, TaskState.SKIPPED
    ]
    assert [result.index for result in results] == list(range(4))
    assert results[0].ok and results[0].value == 0
    assert isinstance(results[1].error, ValueError)
    assert results[2].completed is None
    assert tracker.started == [0, 1]


async def test_failure_lets_running_finish(tracker: Tracker):
    tasks = [tracker.task(0, delay=0.001, fail=True), tracker.task(1, delay=0.02), tracker.task(2)]
    limiter = ConcurrencyLimiter(concurrency=2)
    results = await limiter.gather(tasks)

    assert [result.state for result in results] == [TaskState.FAILED, TaskState.DONE, TaskState.SKIPPED]
    assert tracker.finished == [0, 1]

    with pytest.raises(ValueError, match="Task 0 failed"):
        await limiter.run([tracker.task(0, delay=0.001, fail=True), tracker.task(1, delay=0.02)])


async def test_first_error_by_completion(tracker: Tracker):
    tasks = [tracker.task(0, delay=0.03, fail=True), tracker.task(1, delay=0.001, fail=True)]
    limiter = ConcurrencyLimiter()
    results = await limiter.gather(tasks)

    assert results[1].completed < results[0].completed
    assert str(limiter.first_error(results)) == "Task 1 failed"
    assert limiter.first_error(results[:0]) is None


async def test_progress(tracker: Tracker):
    progress = []
    tasks = [tracker.task(i) for i in range(4)]
    await ConcurrencyLimiter(concurrency=2, progress=progress.append).run(tasks)
    assert progress == [25, 50, 75, 100]


async def test_progress_counts_failures(tracker: Tracker):
    progress = []
    tasks = [tracker.task(0), tracker.task(1, fail=True), tracker.task(2)]
    await ConcurrencyLimiter(concurrency=1, progress=progress.append).gather(tasks)
    assert progress == [pytest.approx(100 / 3), pytest.approx(200 / 3)]
