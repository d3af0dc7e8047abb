"""
scheduler.py — Cooperative Timer Scheduler
============================================
Playback needs a repeating timer, but the core stays single-threaded:
nothing fires on its own.  The host (an HTTP request, a UI event loop,
a test) calls `poll()` and every timer that has come due runs on the
caller's thread.

Each `schedule_repeating()` returns a TimerHandle that its owner keeps
and cancels explicitly.  Callbacks receive their own handle so an owner
can tell a current timer from a stale one.

The clock is injectable; tests drive it by hand.
"""

import logging
import time
from typing import Callable, List

logger = logging.getLogger(__name__)


class TimerHandle:
    """One repeating timer.  Cancelling is permanent and idempotent."""

    __slots__ = ("interval", "callback", "next_due", "_cancelled")

    def __init__(self, interval: float, callback: Callable[["TimerHandle"], None], next_due: float):
        self.interval   = interval
        self.callback   = callback
        self.next_due   = next_due
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def active(self) -> bool:
        return not self._cancelled

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        return f"TimerHandle(interval={self.interval:.3f}s, {state})"


class PollingScheduler:

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._timers: List[TimerHandle] = []

    def schedule_repeating(self, interval: float, callback: Callable[[TimerHandle], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        handle = TimerHandle(interval, callback, self.clock() + interval)
        self._timers.append(handle)
        return handle

    def poll(self) -> int:
        """
        Fire every due callback, catching up on missed intervals one tick
        at a time.  Returns the number of callbacks fired.
        """
        now = self.clock()
        fired = 0
        for handle in list(self._timers):
            while handle.active and handle.next_due <= now:
                handle.next_due += handle.interval
                handle.callback(handle)
                fired += 1
        self._timers = [h for h in self._timers if h.active]
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for h in self._timers if h.active)

    def cancel_all(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers = []
