from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

TimerFactory = Callable[[int, Callable[[], None]], "PeriodicTask"]


class PeriodicTask:
    """
    Runs a callback every interval_ms on a daemon thread until cancelled.

    A threading.Event doubles as the sleep and the stop signal, so cancel() wakes the
    worker immediately. cancel() is idempotent and safe to call before start(); a
    cancelled task cannot be restarted.
    """

    def __init__(self, interval_ms: int, callback: Callable[[], None]) -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self.stop_event = threading.Event()
        self.thread: Optional[threading.Thread] = None

    def start(self) -> 'PeriodicTask':
        if self.thread is not None or self.stop_event.is_set():
            return self
        self.thread = threading.Thread(target=self._run, name="nqueens-timer", daemon=True)
        self.thread.start()
        return self

    def _run(self) -> None:
        interval_s = self.interval_ms / 1000.0
        while not self.stop_event.wait(interval_s):
            try:
                self.callback()
            except Exception:
                logger.exception("timer callback failed; stopping timer")
                self.stop_event.set()

    @property
    def running(self) -> bool:
        return self.thread is not None and not self.stop_event.is_set()

    def cancel(self) -> None:
        # Does not join: a callback already in flight may still run once.
        self.stop_event.set()


def start_periodic(interval_ms: int, callback: Callable[[], None]) -> PeriodicTask:
    return PeriodicTask(interval_ms, callback).start()
