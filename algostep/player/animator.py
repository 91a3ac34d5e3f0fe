"""
Incremental replay of sandbox script events.

Script executions produce a flat event list; the animator applies it one
event per tick on top of the input's initial snapshot, using the same
reducer as the playback controller.
"""

import logging
from typing import Optional, Sequence, Tuple

from ..config import EngineConfig
from ..core.clock import AsyncioIntervalTimer, IntervalTimer, TimerHandle
from ..core.events import Event, Value
from ..core.reducer import Reducer, default_reducer
from ..core.snapshot import Snapshot

logger = logging.getLogger(__name__)


class ScriptAnimator:
    def __init__(
        self,
        timer: Optional[IntervalTimer] = None,
        reducer: Optional[Reducer] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self._timer = timer or AsyncioIntervalTimer()
        self._reducer = reducer or default_reducer()
        self._interval = (config or EngineConfig()).animation_interval_ms
        self._handle: Optional[TimerHandle] = None
        self._events: Tuple[Event, ...] = ()
        self._snapshot = Snapshot.initial(())
        self._position = 0

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def position(self) -> int:
        """Number of events applied so far."""
        return self._position

    @property
    def finished(self) -> bool:
        return self._position >= len(self._events)

    @property
    def running(self) -> bool:
        return self._handle is not None

    def load(self, values: Sequence[Value], events: Sequence[Event]) -> None:
        self.stop()
        self._events = tuple(events)
        self._snapshot = Snapshot.initial(values)
        self._position = 0

    def start(self) -> None:
        if self._handle is not None or self.finished:
            return
        self._handle = self._timer.start(self._tick, self._interval)

    def stop(self) -> None:
        if self._handle is not None:
            self._timer.cancel(self._handle)
            self._handle = None

    def step(self) -> bool:
        """Apply the next event. Returns False when nothing is left."""
        if self.finished:
            return False
        self._snapshot = self._reducer.apply(self._snapshot, self._events[self._position])
        self._position += 1
        return True

    def run_to_end(self) -> Snapshot:
        self.stop()
        while self.step():
            pass
        return self._snapshot

    def _tick(self) -> None:
        self.step()
        if self.finished:
            self.stop()
            logger.debug("Animation finished", extra={"events": self._position})
