"""
Event model for step-through algorithm runs.

Events are immutable records of single observable operations. Producers emit
them in order; the reducer folds them into snapshots.

Usage:
    from algostep.core import events as ev

    yield ev.compare(0, 1, "gt")
    yield ev.swap(0, 1)
"""

from typing import Annotated, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .auxiliary import AuxiliaryState

Value = Union[int, float, str]
CompareResult = Literal["lt", "gt", "eq"]
MessageLevel = Literal["info", "step", "explanation", "log"]
ResultKind = Literal["string", "indices", "boolean", "frequency", "search"]
Structure = Literal["stack", "queue"]


class BaseEvent(BaseModel):
    """
    Fields shared by all events.

    Fields:
        timestamp: Milliseconds since execution start (sandbox hooks only)
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: Optional[float] = None


class CompareEvent(BaseEvent):
    type: Literal["compare"] = "compare"
    indices: Tuple[int, int]
    result: Optional[CompareResult] = None


class SwapEvent(BaseEvent):
    type: Literal["swap"] = "swap"
    indices: Tuple[int, int]


class SetEvent(BaseEvent):
    type: Literal["set"] = "set"
    index: int
    value: Value
    previous_value: Optional[Value] = None


class VisitEvent(BaseEvent):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    type: Literal["visit"] = "visit"
    node_id: Union[int, str]
    from_: Optional[Union[int, str]] = Field(default=None, alias="from")


class MarkEvent(BaseEvent):
    type: Literal["mark"] = "mark"
    indices: Tuple[int, ...]
    kind: str


class UnmarkEvent(BaseEvent):
    type: Literal["unmark"] = "unmark"
    indices: Tuple[int, ...]


class MessageEvent(BaseEvent):
    type: Literal["message"] = "message"
    text: str
    level: Optional[MessageLevel] = None
    highlight_line: Optional[int] = None


class HighlightEvent(BaseEvent):
    type: Literal["highlight"] = "highlight"
    line_numbers: Tuple[int, ...]


class MetricEvent(BaseEvent):
    type: Literal["metric"] = "metric"
    name: str
    value: Union[int, float]
    delta: Optional[Union[int, float]] = None


class Pointer(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    index: int
    label: str
    color: Optional[str] = None


class Variable(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    value: Value
    highlight: bool = False


class PointerEvent(BaseEvent):
    type: Literal["pointer"] = "pointer"
    pointers: Tuple[Pointer, ...] = ()
    variables: Tuple[Variable, ...] = ()
    expression: Optional[str] = None


class PushEvent(BaseEvent):
    type: Literal["push"] = "push"
    value: Value
    structure: Structure


class PopEvent(BaseEvent):
    type: Literal["pop"] = "pop"
    value: Value
    structure: Structure


class AuxiliaryEvent(BaseEvent):
    type: Literal["auxiliary"] = "auxiliary"
    state: AuxiliaryState


class ResultEvent(BaseEvent):
    type: Literal["result"] = "result"
    kind: ResultKind
    value: Union[bool, int, float, str, Tuple[int, ...]]
    label: Optional[str] = None


Event = Annotated[
    Union[
        CompareEvent,
        SwapEvent,
        SetEvent,
        VisitEvent,
        MarkEvent,
        UnmarkEvent,
        MessageEvent,
        HighlightEvent,
        MetricEvent,
        PointerEvent,
        PushEvent,
        PopEvent,
        AuxiliaryEvent,
        ResultEvent,
    ],
    Field(discriminator="type"),
]

EVENT_TYPES = (
    "compare",
    "swap",
    "set",
    "visit",
    "mark",
    "unmark",
    "message",
    "highlight",
    "metric",
    "pointer",
    "push",
    "pop",
    "auxiliary",
    "result",
)

_EVENT_LIST = TypeAdapter(List[Event])


def parse_events(raw: Sequence[dict]) -> List[Event]:
    """
    Build typed events from plain dicts (e.g. decoded JSON).

    Raises:
        pydantic.ValidationError: If any record is not a valid event
    """
    return _EVENT_LIST.validate_python(list(raw))


def dump_events(events: Sequence[Event]) -> List[dict]:
    return [e.model_dump(mode="json", by_alias=True, exclude_none=True) for e in events]


# Factories used by producers.

def compare(a: int, b: int, result: Optional[CompareResult] = None) -> CompareEvent:
    return CompareEvent(indices=(a, b), result=result)


def swap(a: int, b: int) -> SwapEvent:
    return SwapEvent(indices=(a, b))


def set_value(index: int, value: Value, previous_value: Optional[Value] = None) -> SetEvent:
    return SetEvent(index=index, value=value, previous_value=previous_value)


def visit(node_id: Union[int, str], from_: Optional[Union[int, str]] = None) -> VisitEvent:
    return VisitEvent(node_id=node_id, from_=from_)


def mark(indices: Sequence[int], kind: str) -> MarkEvent:
    return MarkEvent(indices=tuple(indices), kind=kind)


def unmark(indices: Sequence[int]) -> UnmarkEvent:
    return UnmarkEvent(indices=tuple(indices))


def message(text: str, level: Optional[MessageLevel] = None, highlight_line: Optional[int] = None) -> MessageEvent:
    return MessageEvent(text=text, level=level, highlight_line=highlight_line)


def highlight(line_numbers: Sequence[int]) -> HighlightEvent:
    return HighlightEvent(line_numbers=tuple(line_numbers))


def metric(name: str, value: Union[int, float], delta: Optional[Union[int, float]] = None) -> MetricEvent:
    return MetricEvent(name=name, value=value, delta=delta)


def pointer(pointers: Sequence[Pointer], variables: Sequence[Variable] = (), expression: Optional[str] = None) -> PointerEvent:
    return PointerEvent(pointers=tuple(pointers), variables=tuple(variables), expression=expression)


def push(value: Value, structure: Structure) -> PushEvent:
    return PushEvent(value=value, structure=structure)


def pop(value: Value, structure: Structure) -> PopEvent:
    return PopEvent(value=value, structure=structure)


def auxiliary(state: AuxiliaryState) -> AuxiliaryEvent:
    return AuxiliaryEvent(state=state)


def result(kind: ResultKind, value, label: Optional[str] = None) -> ResultEvent:
    return ResultEvent(kind=kind, value=value, label=label)
