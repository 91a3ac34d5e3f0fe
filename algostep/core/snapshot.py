"""
Snapshot model for step-through playback.

A Snapshot is the full visual/algorithmic state after a prefix of events.
"""

import hashlib
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .auxiliary import AuxiliaryState
from .canonical import canonical_json_bytes
from .events import Pointer, ResultEvent, Value, Variable

READY_MESSAGE = "ready"


def _initial_metrics() -> Mapping[str, float]:
    return MappingProxyType({"comparisons": 0, "swaps": 0})


def _empty_marks() -> Mapping[int, str]:
    return MappingProxyType({})


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable state at one point of a run.

    Fields:
        step: Index of this snapshot in its timeline
        array_state: Current values
        marks: index -> mark kind (last write wins)
        message: Last message text
        highlighted_lines: Highlighted pseudocode line numbers
        metrics: Cumulative counters (comparisons, swaps, ...)
        pointers: Active pointers (replaced per pointer event)
        variables: Inspector variables (upserted by name)
        expression: Last expression shown with the pointers
        auxiliary: Algorithm-specific payload (replaced wholesale)
        result: Terminal outcome, once reached

    Snapshot is immutable. Handlers build a new one with dataclasses.replace()
    and fresh containers; marks and metrics are stored as read-only mapping
    proxies over a private copy, so snapshots sharing them cannot leak writes.
    """
    step: int = 0
    array_state: Tuple[Value, ...] = ()
    marks: Mapping[int, str] = field(default_factory=_empty_marks)
    message: Optional[str] = READY_MESSAGE
    highlighted_lines: Tuple[int, ...] = ()
    metrics: Mapping[str, float] = field(default_factory=_initial_metrics)
    pointers: Tuple[Pointer, ...] = ()
    variables: Tuple[Variable, ...] = ()
    expression: Optional[str] = None
    auxiliary: Optional[AuxiliaryState] = None
    result: Optional[ResultEvent] = None

    def __post_init__(self) -> None:
        for name in ("marks", "metrics"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))

    @staticmethod
    def initial(values: Sequence[Value]) -> "Snapshot":
        """Snapshot derived only from the raw input."""
        return Snapshot(array_state=tuple(values))

    def variable(self, name: str) -> Optional[Variable]:
        for var in self.variables:
            if var.name == name:
                return var
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.step,
            "array_state": list(self.array_state),
            "marks": {str(k): v for k, v in sorted(self.marks.items())},
            "message": self.message,
            "highlighted_lines": list(self.highlighted_lines),
            "metrics": dict(self.metrics),
            "pointers": [p.model_dump(mode="json") for p in self.pointers],
            "variables": [v.model_dump(mode="json") for v in self.variables],
            "expression": self.expression,
            "auxiliary": self.auxiliary.model_dump(mode="json") if self.auxiliary is not None else None,
            "result": self.result.model_dump(mode="json", exclude={"timestamp"}) if self.result is not None else None,
        }


def snapshot_hash(snapshot: Snapshot) -> str:
    """
    Compute SHA-256 hash of a snapshot's canonical form.

    Two snapshots with equal hashes are structurally identical.
    """
    return hashlib.sha256(canonical_json_bytes(snapshot.to_dict())).hexdigest()
