"""
Single-Slot Dispatcher
======================

Background task runner with capacity 1 that rejects work while busy.

Design Rules:
    - At most one task in flight; submit() while busy returns None
    - Busy is set before the task is queued and cleared exactly once,
      after the completion callback has run
    - Nothing is queued or coalesced
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleSlotDispatcher:
    """
    Capacity-1, reject-if-busy task runner.

    Example:
        dispatcher = SingleSlotDispatcher()
        future = dispatcher.submit(work, on_complete=show)
        if future is None:
            print("still busy")
    """

    def __init__(self, name: str = "caption-worker") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._busy: bool = False
        self._rejected_count: int = 0
        self._completed_count: int = 0

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    @property
    def rejected_count(self) -> int:
        """Submissions dropped because a task was in flight."""
        return self._rejected_count

    def submit(
        self,
        task: Callable[[], T],
        on_complete: Optional[Callable[[T], None]] = None,
        on_accept: Optional[Callable[[], None]] = None,
    ) -> Optional["Future[T]"]:
        """
        Run task in the background unless one is already running.

        Args:
            task: Zero-argument callable to run on the worker thread
            on_complete: Called on the worker with the task's return value
            on_accept: Called synchronously once the slot is taken,
                before the task is queued

        Returns:
            Future for the task, or None if the slot was busy
        """
        with self._lock:
            if self._busy:
                self._rejected_count += 1
                logger.debug("Dispatcher busy, submission rejected")
                return None
            self._busy = True

        try:
            if on_accept is not None:
                on_accept()
            return self._executor.submit(self._run, task, on_complete)
        except BaseException:
            self._release()
            raise

    def _run(self, task: Callable[[], T], on_complete: Optional[Callable[[T], None]]) -> T:
        try:
            result = task()
            if on_complete is not None:
                on_complete(result)
            return result
        except Exception as e:
            logger.error(f"Background task failed: {e}")
            raise
        finally:
            self._completed_count += 1
            self._release()

    def _release(self) -> None:
        with self._lock:
            self._busy = False

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for the running task."""
        self._executor.shutdown(wait=wait)

    def metrics(self) -> dict:
        return {
            "busy": self.busy,
            "rejected_count": self._rejected_count,
            "completed_count": self._completed_count,
        }
