"""
Delayed-call schedulers for the computer's "thinking" pause.

A scheduler runs a callback after a delay and can cancel it before it
fires. The GameSession only needs schedule() and cancel().
"""

import itertools
import logging
import threading
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)


class ThreadingScheduler:
    """Runs callbacks on daemon threading.Timer threads."""

    def schedule(self, delay: float, callback: Callable[[], Any]) -> threading.Timer:
        timer = threading.Timer(max(delay, 0.0), callback)
        timer.daemon = True
        timer.start()
        return timer

    def cancel(self, handle: threading.Timer):
        handle.cancel()


class ManualScheduler:
    """
    Queues callbacks until run_pending() is called.

    Delays are recorded but not waited for; the caller decides when time
    has passed. Used by the console game and by tests.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._pending: List[Tuple[int, float, Callable[[], Any]]] = []

    def schedule(self, delay: float, callback: Callable[[], Any]) -> int:
        handle = next(self._ids)
        self._pending.append((handle, delay, callback))
        return handle

    def cancel(self, handle: int):
        self._pending = [p for p in self._pending if p[0] != handle]

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def next_delay(self) -> float:
        """Delay of the oldest pending call, 0 if nothing is queued."""
        return self._pending[0][1] if self._pending else 0.0

    def run_pending(self) -> int:
        """
        Run everything queued so far, oldest first.

        Calls scheduled while running wait for the next run_pending().

        Returns:
            Number of callbacks run.
        """
        batch, self._pending = self._pending, []
        for handle, _delay, callback in batch:
            logger.debug("Running scheduled call %d", handle)
            callback()
        return len(batch)
