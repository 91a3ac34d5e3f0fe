"""
Interval timers for playback.

Playback advances on a repeating timer. The timer is injected so that
production code runs on the asyncio loop while tests drive a deterministic
clock by hand.
"""

import asyncio
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

Callback = Callable[[], None]


class TimerHandle:
    """Handle for one repeating timer; cancelled handles never fire again."""

    def __init__(self, callback: Callback, interval_ms: float) -> None:
        if interval_ms <= 0:
            raise ValueError(f"Timer interval must be positive, got {interval_ms}")
        self.callback = callback
        self.interval_ms = interval_ms
        self.cancelled = False


class IntervalTimer(ABC):
    """
    Source of repeating timers.

    Usage:
        handle = timer.start(tick, 500)
        ...
        timer.cancel(handle)
    """

    @abstractmethod
    def start(self, callback: Callback, interval_ms: float) -> TimerHandle:
        """Call callback every interval_ms until cancelled."""

    @abstractmethod
    def cancel(self, handle: TimerHandle) -> None:
        """Stop a timer. Cancelling twice is a no-op."""

    @property
    @abstractmethod
    def active(self) -> int:
        """Number of timers currently running."""


class AsyncioIntervalTimer(IntervalTimer):
    """
    Interval timer backed by the running asyncio event loop.

    start() must be called from code running inside the loop.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._pending = {}

    def start(self, callback: Callback, interval_ms: float) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        handle = TimerHandle(callback, interval_ms)

        def fire() -> None:
            if handle.cancelled:
                return
            # Re-arm before running so a callback that cancels wins.
            self._pending[id(handle)] = loop.call_later(handle.interval_ms / 1000.0, fire)
            handle.callback()

        self._pending[id(handle)] = loop.call_later(interval_ms / 1000.0, fire)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancelled = True
        pending = self._pending.pop(id(handle), None)
        if pending is not None:
            pending.cancel()

    @property
    def active(self) -> int:
        return len(self._pending)


class DeterministicClock(IntervalTimer):
    """
    Manually advanced time source.

    Nothing fires until advance() is called, which makes every playback
    test reproducible:

        clock = DeterministicClock()
        handle = clock.start(tick, 500)
        clock.advance(1500)   # tick runs 3 times
    """

    def __init__(self, now: float = 0) -> None:
        self.now = now
        self._seq = itertools.count()
        self._timers: List[list] = []  # [next_due, seq, handle]

    def start(self, callback: Callback, interval_ms: float) -> TimerHandle:
        handle = TimerHandle(callback, interval_ms)
        self._timers.append([self.now + interval_ms, next(self._seq), handle])
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        handle.cancelled = True
        self._timers = [t for t in self._timers if t[2] is not handle]

    @property
    def active(self) -> int:
        return len(self._timers)

    def advance(self, ms: float) -> None:
        """Move time forward, firing due callbacks in time order."""
        target = self.now + ms
        while True:
            due = [t for t in self._timers if t[0] <= target]
            if not due:
                break
            entry = min(due, key=lambda t: (t[0], t[1]))
            self.now = entry[0]
            entry[0] += entry[2].interval_ms
            entry[2].callback()
        self.now = target
