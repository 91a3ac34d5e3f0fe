"""
Timeline builder: precompute every snapshot of a run.

All snapshots are held in memory so that seeking anywhere, backwards
included, is a plain index lookup with no re-execution and no inverse
operations.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .. import metrics
from ..core.events import Event, Value
from ..core.reducer import Reducer, default_reducer
from ..core.snapshot import Snapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Timeline:
    """
    Immutable run timeline.

    Fields:
        events: Events in production order
        snapshots: snapshots[0] is the raw input; snapshots[i+1] = apply(snapshots[i], events[i])
    """
    events: Tuple[Event, ...]
    snapshots: Tuple[Snapshot, ...]

    def __len__(self) -> int:
        return len(self.snapshots)

    def __getitem__(self, index: int) -> Snapshot:
        return self.snapshots[index]

    @property
    def initial(self) -> Snapshot:
        return self.snapshots[0]

    @property
    def final(self) -> Snapshot:
        return self.snapshots[-1]

    @property
    def total_steps(self) -> int:
        return len(self.snapshots) - 1


@dataclass(frozen=True)
class ReplayResult:
    """
    Result of replaying a prefix of events.

    Fields:
        snapshot: Snapshot after the applied events
        applied: Number of events applied
    """
    snapshot: Snapshot
    applied: int


def build_timeline(
    values: Sequence[Value],
    events: Sequence[Event],
    reducer: Optional[Reducer] = None,
) -> Timeline:
    """
    Fold the reducer over all events.

    Args:
        values: Raw input array
        events: Fully drained event list
        reducer: Reducer to use (default handlers if None)

    Returns:
        Timeline with len(events) + 1 snapshots
    """
    reducer = reducer or default_reducer()
    started = time.perf_counter()

    current = Snapshot.initial(values)
    snapshots = [current]
    for ev in events:
        current = reducer.apply(current, ev)
        snapshots.append(current)

    elapsed = time.perf_counter() - started
    metrics.track_timeline_build(elapsed)
    logger.debug("Built timeline", extra={"events": len(events), "seconds": round(elapsed, 6)})
    return Timeline(events=tuple(events), snapshots=tuple(snapshots))


def replay(
    values: Sequence[Value],
    events: Sequence[Event],
    reducer: Optional[Reducer] = None,
    to_step: Optional[int] = None,
) -> ReplayResult:
    """
    Reconstruct a single snapshot by folding a prefix of events.

    Produces the same snapshot as build_timeline(values, events)[to_step].

    Args:
        values: Raw input array
        events: Event list
        reducer: Reducer to use (default handlers if None)
        to_step: Stop after this many events (None = all)

    Returns:
        ReplayResult with snapshot and count
    """
    reducer = reducer or default_reducer()
    st = Snapshot.initial(values)
    count = 0

    for ev in events:
        if to_step is not None and count >= to_step:
            break
        st = reducer.apply(st, ev)
        count += 1

    return ReplayResult(snapshot=st, applied=count)
