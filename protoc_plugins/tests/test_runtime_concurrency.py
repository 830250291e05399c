import threading
import time

import pytest

from protoc_plugins.runtime.concurrency import ConcurrentExecutor, default_max_workers


def test_await_all_returns_results_in_submission_order():
    def task(value: int, delay: float) -> int:
        time.sleep(delay)
        return value

    with ConcurrentExecutor(max_workers=4) as executor:
        futures = [
            executor.submit(task, 0, 0.05),
            executor.submit(task, 1, 0.0),
            executor.submit(task, 2, 0.02),
        ]
        assert executor.await_all(futures) == [0, 1, 2]


def test_await_all_of_nothing_is_empty():
    with ConcurrentExecutor(max_workers=1) as executor:
        assert executor.await_all([]) == []


def test_await_all_raises_earliest_failure_and_cancels_pending_tasks():
    ran: list[int] = []
    release = threading.Event()

    def fail(message: str) -> None:
        ran.append(0)
        raise ValueError(message)

    def block() -> None:
        ran.append(1)
        release.wait(timeout=5)

    def record() -> None:
        ran.append(2)

    executor = ConcurrentExecutor(max_workers=1)
    try:
        futures = [
            executor.submit(fail, "first"),
            executor.submit(block),
            executor.submit(record),
        ]
        with pytest.raises(ValueError, match="first"):
            executor.await_all(futures)
        assert futures[2].cancelled()
    finally:
        release.set()
        executor.shutdown()

    assert 2 not in ran


def test_await_all_prefers_lowest_index_when_several_fail():
    def fail(message: str) -> None:
        raise RuntimeError(message)

    executor = ConcurrentExecutor(max_workers=1)
    try:
        futures = [executor.submit(fail, "zero"), executor.submit(fail, "one")]
        # Let both finish before waiting so both are reported as failed.
        while not all(future.done() for future in futures):
            time.sleep(0.01)
        with pytest.raises(RuntimeError, match="zero"):
            executor.await_all(futures)
    finally:
        executor.shutdown()


def test_executor_rejects_non_positive_worker_count():
    with pytest.raises(ValueError, match="max_workers"):
        ConcurrentExecutor(max_workers=0)


def test_default_max_workers_is_bounded():
    assert 1 <= default_max_workers() <= 32
