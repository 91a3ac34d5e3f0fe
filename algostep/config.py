"""
Engine configuration.

Resource limits and playback defaults live here as named constants and are
overridable per instance or through the environment.

Environment Variables:
    ALGOSTEP_MAX_EXECUTION_MS: Sandbox wall-clock budget in ms - default: 5000
    ALGOSTEP_MAX_EVENTS: Sandbox event buffer cap - default: 10000
    ALGOSTEP_PREEMPT: Preempt synchronous script loops (true/false) - default: true
    ALGOSTEP_ANIMATION_MS: Script animator tick in ms - default: 80
    ALGOSTEP_SPEED: Default playback preset (slow, normal, fast) - default: normal
"""

import os
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

DEFAULT_MAX_EXECUTION_MS = 5000
DEFAULT_MAX_EVENTS = 10000
DEFAULT_ANIMATION_INTERVAL_MS = 80

SPEED_PRESETS: Dict[str, int] = {
    "slow": 1000,
    "normal": 500,
    "fast": 200,
}
DEFAULT_SPEED_PRESET = "normal"
MIN_SPEED_MS = 100
MAX_SPEED_MS = 2000

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EngineConfig:
    max_execution_ms: int = DEFAULT_MAX_EXECUTION_MS
    max_events: int = DEFAULT_MAX_EVENTS
    preempt_sync_loops: bool = True
    animation_interval_ms: int = DEFAULT_ANIMATION_INTERVAL_MS
    default_speed: str = DEFAULT_SPEED_PRESET

    def __post_init__(self) -> None:
        if self.max_execution_ms <= 0:
            raise ValueError("max_execution_ms must be positive")
        if self.max_events < 0:
            raise ValueError("max_events must not be negative")
        if self.animation_interval_ms <= 0:
            raise ValueError("animation_interval_ms must be positive")
        if self.default_speed not in SPEED_PRESETS:
            raise ValueError(f"Unknown speed preset: {self.default_speed}")

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        env = os.environ if env is None else env
        return EngineConfig(
            max_execution_ms=int(env.get("ALGOSTEP_MAX_EXECUTION_MS", DEFAULT_MAX_EXECUTION_MS)),
            max_events=int(env.get("ALGOSTEP_MAX_EVENTS", DEFAULT_MAX_EVENTS)),
            preempt_sync_loops=env.get("ALGOSTEP_PREEMPT", "true").strip().lower() in _TRUE,
            animation_interval_ms=int(env.get("ALGOSTEP_ANIMATION_MS", DEFAULT_ANIMATION_INTERVAL_MS)),
            default_speed=env.get("ALGOSTEP_SPEED", DEFAULT_SPEED_PRESET).strip().lower(),
        )
