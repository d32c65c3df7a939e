#lifecycle_engine\reconciler\scheduler.py

"""Schedulers for fire-and-forget background work (status reconciliation)."""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)


class ReconcileScheduler(ABC):
    """Accepts a task and returns immediately. Callers never see the outcome."""

    @abstractmethod
    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        pass


class ThreadPoolScheduler(ReconcileScheduler):
    """
    Production scheduler.

    Tasks are not bound to the submitting request: they are never cancelled
    when it finishes, and several tasks for one application may interleave.
    """

    def __init__(self, max_workers: int = 8):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="reconcile",
        )

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(_log_task_failure)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class SynchronousScheduler(ReconcileScheduler):
    """Runs each task inline. Used by tests."""

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        try:
            fn(*args, **kwargs)
        except Exception as e:
            logger.error(f"Background task {getattr(fn, '__name__', fn)} failed: {e}", exc_info=True)


class ManualScheduler(ReconcileScheduler):
    """Holds tasks until run_pending() is called."""

    def __init__(self):
        self._pending: List[Tuple[Callable[..., Any], tuple, dict]] = []
        self._lock = Lock()

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._pending.append((fn, args, kwargs))

    @property
    def pending(self) -> int:
        return len(self._pending)

    def pending_args(self) -> List[tuple]:
        return [args for _, args, _ in self._pending]

    def run_pending(self) -> int:
        """Run queued tasks in submission order. Returns how many ran."""
        with self._lock:
            tasks, self._pending = self._pending, []

        for fn, args, kwargs in tasks:
            fn(*args, **kwargs)
        return len(tasks)


def _log_task_failure(future: Future) -> None:
    exc = future.exception()
    if exc is not None:
        logger.error(f"Background task failed: {exc}", exc_info=exc)
