"""
Playback controller.

Owns one loaded run (events plus precomputed timeline) and a cursor into it.
All state changes go through the public actions; at most one interval timer
is active per controller.

Usage:
    controller = PlaybackController(timer=DeterministicClock())
    controller.load_algorithm("bubble-sort", [3, 1, 2])
    controller.play()
"""

from enum import Enum
from typing import Dict, Optional, Sequence, Tuple, Union

from ..algorithms.contract import ArrayInput, ParamValue, drain
from ..algorithms.registry import AlgorithmRegistry
from ..config import MAX_SPEED_MS, MIN_SPEED_MS, SPEED_PRESETS, EngineConfig
from ..core.auxiliary import AuxiliaryState
from ..core.clock import AsyncioIntervalTimer, IntervalTimer, TimerHandle
from ..core.events import Event, Value
from ..core.ids import run_id
from ..core.reducer import Reducer
from ..core.snapshot import Snapshot
from ..logging_config import get_logger
from ..timeline import Timeline, build_timeline


class PlaybackStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


class PlaybackController:
    """
    Step-through player for one algorithm run at a time.

    Args:
        registry: Producer lookup (built-ins if None)
        timer: Interval timer source (asyncio loop timer if None)
        reducer: Reducer for timeline building (default handlers if None)
        config: Engine configuration (defaults if None)
    """

    def __init__(
        self,
        registry: Optional[AlgorithmRegistry] = None,
        timer: Optional[IntervalTimer] = None,
        reducer: Optional[Reducer] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self._registry = registry or AlgorithmRegistry.default()
        self._timer = timer or AsyncioIntervalTimer()
        self._reducer = reducer
        config = config or EngineConfig()

        self._status = PlaybackStatus.IDLE
        self._index = 0
        self._speed_preset: Optional[str] = config.default_speed
        self._speed = SPEED_PRESETS[config.default_speed]
        self._handle: Optional[TimerHandle] = None

        self._algorithm_id: Optional[str] = None
        self._input: Tuple[Value, ...] = ()
        self._params: Dict[str, ParamValue] = {}
        self._events: Tuple[Event, ...] = ()
        self._timeline: Optional[Timeline] = None
        self._log = get_logger(__name__)

    # Read-only state

    @property
    def status(self) -> PlaybackStatus:
        return self._status

    @property
    def current_step(self) -> int:
        return self._index

    @property
    def current_snapshot(self) -> Optional[Snapshot]:
        if self._timeline is None:
            return None
        return self._timeline[self._index]

    @property
    def auxiliary(self) -> Optional[AuxiliaryState]:
        snapshot = self.current_snapshot
        return snapshot.auxiliary if snapshot is not None else None

    @property
    def speed(self) -> int:
        return self._speed

    @property
    def speed_preset(self) -> Optional[str]:
        return self._speed_preset

    @property
    def algorithm_id(self) -> Optional[str]:
        return self._algorithm_id

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._events

    @property
    def timeline(self) -> Optional[Timeline]:
        return self._timeline

    @property
    def input_values(self) -> Tuple[Value, ...]:
        return self._input

    @property
    def params(self) -> Dict[str, ParamValue]:
        return dict(self._params)

    @property
    def timer_active(self) -> bool:
        return self._handle is not None

    # Loading

    def load_algorithm(
        self,
        algorithm_id: str,
        values: Sequence[Value],
        params: Optional[Dict[str, ParamValue]] = None,
    ) -> Timeline:
        """
        Drain a producer and make its timeline the current session.

        The new run is fully built before any state changes, so a failed
        load leaves the previous session as it was.

        Raises:
            UnknownAlgorithmError: If algorithm_id is not registered
            InputValidationError: If the producer rejects the input
        """
        algorithm = self._registry.get(algorithm_id)
        params = dict(params or {})
        events = drain(algorithm, ArrayInput.of(values), params)
        timeline = build_timeline(values, events, self._reducer)

        self._clear_timer()
        self._algorithm_id = algorithm_id
        self._input = tuple(values)
        self._params = params
        self._events = tuple(events)
        self._timeline = timeline
        self._index = 0
        self._status = PlaybackStatus.IDLE

        self._log = get_logger(__name__, trace_id=run_id(algorithm_id, values, params))
        self._log.info(
            "Loaded algorithm",
            extra={"algorithm": algorithm_id, "events": len(events), "size": len(values)},
        )
        return timeline

    # Transport

    def play(self) -> None:
        if self._status == PlaybackStatus.PLAYING or self._timeline is None:
            return
        if self._index >= self._last_index:
            self._index = 0
        self._clear_timer()
        self._status = PlaybackStatus.PLAYING
        self._handle = self._timer.start(self._tick, self._speed)
        self._log.debug("Playback started", extra={"step": self._index, "speed_ms": self._speed})

    def pause(self) -> None:
        self._clear_timer()
        self._status = PlaybackStatus.PAUSED

    def step(self) -> None:
        self._clear_timer()
        if self._timeline is None:
            return
        if self._index + 1 > self._last_index:
            self._status = PlaybackStatus.FINISHED
            return
        self._index += 1
        self._status = PlaybackStatus.PAUSED

    def step_back(self) -> None:
        self._clear_timer()
        if self._timeline is None:
            return
        self._index = max(0, self._index - 1)
        self._status = PlaybackStatus.PAUSED

    def seek(self, step: int) -> None:
        self._clear_timer()
        if self._timeline is None:
            return
        self._index = max(0, min(step, self._last_index))
        self._status = PlaybackStatus.PAUSED

    def reset(self) -> None:
        self._clear_timer()
        self._index = 0
        self._status = PlaybackStatus.IDLE

    def set_speed(self, speed: Union[str, int, float]) -> None:
        """
        Change playback speed by preset name or interval in ms.

        A preset must be one of slow, normal, fast. A number is clamped to
        [MIN_SPEED_MS, MAX_SPEED_MS] and clears the preset.
        """
        if isinstance(speed, str):
            if speed not in SPEED_PRESETS:
                raise ValueError(f"Unknown speed preset: {speed}")
            self._speed_preset = speed
            self._speed = SPEED_PRESETS[speed]
        else:
            self._speed_preset = None
            self._speed = int(max(MIN_SPEED_MS, min(MAX_SPEED_MS, speed)))

        if self._status == PlaybackStatus.PLAYING:
            self._clear_timer()
            self._handle = self._timer.start(self._tick, self._speed)

    def set_speed_ms(self, ms: Union[int, float]) -> None:
        self.set_speed(ms)

    # Progress

    def get_total_steps(self) -> int:
        if self._timeline is None:
            return 0
        return self._timeline.total_steps

    def get_progress(self) -> float:
        """Percent of the timeline played (0 when there is nothing to play)."""
        if self._timeline is None or len(self._timeline) < 2:
            return 0.0
        return self._index / self._last_index * 100

    def close(self) -> None:
        self._clear_timer()

    # Internals

    @property
    def _last_index(self) -> int:
        return len(self._timeline) - 1 if self._timeline is not None else 0

    def _tick(self) -> None:
        if self._index < self._last_index:
            self._index += 1
        if self._index >= self._last_index:
            self._clear_timer()
            self._status = PlaybackStatus.FINISHED
            self._log.debug("Playback finished", extra={"step": self._index})

    def _clear_timer(self) -> None:
        if self._handle is not None:
            self._timer.cancel(self._handle)
            self._handle = None
