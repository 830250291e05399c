from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, TypeVar

R = TypeVar("R")

_LOGGER = logging.getLogger("protoc_plugins.concurrency")


def default_max_workers() -> int:
    # Tasks are IO bound, so oversubscribe the CPUs.
    return min(32, (os.cpu_count() or 1) * 8)


class ConcurrentExecutor:
    """
    Thread pool for IO-bound resolution tasks.

    `await_all` surfaces exactly one failure and cancels whatever has not
    started yet; tasks already running are left to drain.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        workers = max_workers if max_workers is not None else default_max_workers()
        if workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="protoc-plugins")

    def __enter__(self) -> ConcurrentExecutor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def submit(self, fn: Callable[..., R], *args: Any, **kwargs: Any) -> Future[R]:
        return self._pool.submit(fn, *args, **kwargs)

    def await_all(self, futures: Sequence[Future[R]]) -> list[R]:
        """Return results in submission order, or raise the first failure."""
        if not futures:
            return []

        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [
            future
            for future in futures
            if future in done and not future.cancelled() and future.exception() is not None
        ]
        if failed:
            for future in pending:
                future.cancel()
            _LOGGER.debug(
                "%d task(s) failed, cancelled %d pending task(s)", len(failed), len(pending)
            )
            # Several tasks may have failed before we woke up; prefer the
            # earliest declared one so the reported error is deterministic.
            raise failed[0].exception()  # type: ignore[misc]

        return [future.result() for future in futures]

    def shutdown(self) -> None:
        _LOGGER.debug("Shutting down executor")
        self._pool.shutdown(wait=True, cancel_futures=True)
