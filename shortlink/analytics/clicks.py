"""
Click recording for the Shortlink Platform.

Responsibilities:
    - Apply click-count increments off the redirect path
    - Route increment failures to the log, never to the caller

Design:
    - Each `record()` submits one increment to a ThreadPoolExecutor and returns
      the Future at once; the resolver never waits on it.
    - The worker catches every failure and logs it, so the Future always
      completes normally. Counts are best-effort: an increment still queued or
      running when the process dies is lost. That window is accepted; there is
      no retry and no outbox.
    - At most `max_pending` increments are queued or running. Past that, and
      after `shutdown()`, `record()` drops the click with a warning and
      returns None instead of a Future.
    - `shutdown(wait=True)` drains queued increments on a graceful stop.

LLM Prompt Example:
    "Show how to run a best-effort side effect after an HTTP response without
    blocking it, and where its errors should go."
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from ..storage.base import BaseStorage
from .base import BaseClickRecorder

log = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 10000


class ClickRecorder(BaseClickRecorder):
    def __init__(
        self,
        storage: BaseStorage,
        max_workers: int = 4,
        executor: Optional[ThreadPoolExecutor] = None,
        max_pending: int = DEFAULT_MAX_PENDING,
    ):
        """
        Args:
            storage (BaseStorage): Backend whose increment_click_count is called.
            max_workers (int): Pool size when no executor is injected.
            executor (Optional[ThreadPoolExecutor]): Shared pool to submit to instead.
            max_pending (int): Cap on increments queued or in flight.
        """
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")
        self.storage = storage
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="click-count"
        )
        self._slots = threading.BoundedSemaphore(max_pending)

    def record(self, short_code: str) -> "Optional[Future[None]]":
        """Schedule one increment for `short_code`; returns without waiting.

        Returns None when the click is dropped (queue full or recorder shut down).
        """
        if not self._slots.acquire(blocking=False):
            log.warning("Click for %r dropped: increment queue is full", short_code)
            return None
        try:
            return self.executor.submit(self._increment, short_code)
        except RuntimeError as exc:
            # executor already shut down
            self._slots.release()
            log.warning("Click for %r dropped: %s", short_code, exc)
            return None

    def _increment(self, short_code: str) -> None:
        try:
            if not self.storage.increment_click_count(short_code):
                log.warning("Click for %r not counted: code no longer exists", short_code)
        except Exception:
            # The redirect has already been served; nothing upstream can act on this.
            log.exception("Error updating click count for %r", short_code)
        finally:
            self._slots.release()

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=wait)
