"""Timer primitives used for polling, tracking ticks and delayed submission.

Services take a ``Scheduler`` so tests can drive time by hand.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class RepeatingTimer(threading.Thread):
    """Runs ``callback`` every ``interval`` seconds until cancelled.

    An exception from one run is logged and the timer keeps going.
    """

    def __init__(self, interval: float, callback: Callable[[], None]):
        super().__init__(daemon=True, name=f"repeating-timer-{interval:g}s")
        self.interval = float(interval)
        self.callback = callback
        self._stopped = threading.Event()

    def run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Repeating timer callback failed")

    def cancel(self) -> None:
        self._stopped.set()

    @property
    def cancelled(self) -> bool:
        return self._stopped.is_set()


class ThreadingScheduler:
    """Scheduler backed by daemon threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(float(delay), callback)
        timer.daemon = True
        timer.start()
        return timer

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        timer = RepeatingTimer(interval, callback)
        timer.start()
        return timer
