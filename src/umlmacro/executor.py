"""Background execution of block-level diagram renders."""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TypeVar

from loguru import logger

__all__ = ["RenderExecutor"]

T = TypeVar("T")


class RenderExecutor:
    """Thread pool that shares in-flight jobs with the same key.

    While a job is pending, submitting another job under the same key
    returns the existing future instead of starting a second render.
    Finished jobs are forgotten, so later submissions run again (the
    artifact store makes those cheap).

    Args:
        max_workers: Threads in the pool.
    """

    def __init__(self, max_workers: int = 4) -> None:
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="umlmacro")
        self._pending: dict[Hashable, Future] = {}
        self._lock = threading.Lock()

    def submit(self, key: Hashable, fn: Callable[[], T]) -> Future[T]:
        """Run ``fn`` in the pool unless a job for ``key`` is already pending."""
        with self._lock:
            pending = self._pending.get(key)
            if pending is not None:
                logger.debug(f"Joining pending render {key}")
                return pending

            future = self._pool.submit(fn)
            self._pending[key] = future

        future.add_done_callback(lambda f: self._forget(key, f))
        return future

    def _forget(self, key: Hashable, future: Future) -> None:
        with self._lock:
            if self._pending.get(key) is future:
                del self._pending[key]

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> RenderExecutor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
