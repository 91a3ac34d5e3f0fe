"""
Core step-engine primitives.

This module provides the foundational abstractions for step-through playback:
- Event: Immutable operation records emitted by producers
- Snapshot: Visual/algorithmic state after a prefix of events
- Reducer: Pure functions for snapshot transitions
- Canonical: Deterministic serialization
- Clock: Interval timers (asyncio-backed and deterministic)
- IDs: Stable run identifiers
"""

from .events import Event, parse_events, dump_events
from .snapshot import Snapshot, READY_MESSAGE, snapshot_hash
from .reducer import Reducer, default_reducer
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str
from .clock import IntervalTimer, AsyncioIntervalTimer, DeterministicClock
from .ids import stable_id, run_id
from .errors import (
    AlgostepError,
    InputValidationError,
    InvalidTransitionError,
    ProducerError,
    UnknownAlgorithmError,
)

__all__ = [
    "Event",
    "parse_events",
    "dump_events",
    "Snapshot",
    "READY_MESSAGE",
    "snapshot_hash",
    "Reducer",
    "default_reducer",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "IntervalTimer",
    "AsyncioIntervalTimer",
    "DeterministicClock",
    "stable_id",
    "run_id",
    "AlgostepError",
    "InputValidationError",
    "InvalidTransitionError",
    "ProducerError",
    "UnknownAlgorithmError",
]
