"""Bounded concurrency group with first-error capture."""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Optional


class ConcurrencyGroup:
    """
    Runs tasks on at most ``limit`` threads and remembers the first failure.

    A failing task never stops its siblings: every task scheduled with
    :meth:`go` runs to completion, and :meth:`wait` raises the first error
    once all of them are done.

    Example:
        group = ConcurrencyGroup(limit=4)
        for artifact in artifacts:
            group.go(upload, artifact)
        group.wait()
    """

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self._limit = limit
        self._executor = ThreadPoolExecutor(max_workers=limit, thread_name_prefix="upload")
        self._futures: List[Future] = []
        self._lock = threading.Lock()
        self._error: Optional[BaseException] = None

    @property
    def limit(self) -> int:
        return self._limit

    def go(self, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule ``fn(*args)``; an exception it raises is recorded as the task's error."""
        self._futures.append(self._executor.submit(self._run, fn, *args))

    def wait(self) -> None:
        """
        Wait for every scheduled task.

        Raises:
            BaseException: The first error recorded by any task
        """
        try:
            wait(self._futures)
        finally:
            self._executor.shutdown(wait=True)
        if self._error is not None:
            raise self._error

    def _run(self, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception as e:
            with self._lock:
                if self._error is None:
                    self._error = e
