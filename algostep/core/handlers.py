"""
Reducer handlers for snapshot state.

All handlers are pure and deterministic: they copy every container they
change and return a new Snapshot.

The reducer is total: indices outside the current array (negative ones
included) are ignored rather than wrapped, so script events that point past
the array still apply.
"""

from dataclasses import replace
from typing import Dict

from .events import (
    AuxiliaryEvent,
    CompareEvent,
    Event,
    HighlightEvent,
    MarkEvent,
    MessageEvent,
    MetricEvent,
    PointerEvent,
    ResultEvent,
    SetEvent,
    SwapEvent,
    UnmarkEvent,
    Variable,
)
from .snapshot import Snapshot

COMPARING = "comparing"
SWAPPING = "swapping"


def register_handlers(reducer) -> None:
    reducer.register("compare", on_compare)
    reducer.register("swap", on_swap)
    reducer.register("set", on_set)
    reducer.register("mark", on_mark)
    reducer.register("unmark", on_unmark)
    reducer.register("message", on_message)
    reducer.register("highlight", on_highlight)
    reducer.register("metric", on_metric)
    reducer.register("pointer", on_pointer)
    reducer.register("auxiliary", on_auxiliary)
    reducer.register("result", on_result)
    # Recorded for the timeline, no visual effect.
    reducer.register("visit", on_passthrough)
    reducer.register("push", on_passthrough)
    reducer.register("pop", on_passthrough)


def _bump(metrics: Dict[str, float], name: str, by: float = 1) -> Dict[str, float]:
    out = dict(metrics)
    out[name] = out.get(name, 0) + by
    return out


def _in_range(cur: Snapshot, idx: int) -> bool:
    return 0 <= idx < len(cur.array_state)


def on_compare(cur: Snapshot, ev: CompareEvent) -> Snapshot:
    return replace(
        cur,
        marks={i: COMPARING for i in ev.indices if _in_range(cur, i)},
        metrics=_bump(cur.metrics, "comparisons"),
    )


def on_swap(cur: Snapshot, ev: SwapEvent) -> Snapshot:
    a, b = ev.indices
    if not (_in_range(cur, a) and _in_range(cur, b)):
        return cur
    values = list(cur.array_state)
    values[a], values[b] = values[b], values[a]
    return replace(
        cur,
        array_state=tuple(values),
        marks={a: SWAPPING, b: SWAPPING},
        metrics=_bump(cur.metrics, "swaps"),
    )


def on_set(cur: Snapshot, ev: SetEvent) -> Snapshot:
    if not _in_range(cur, ev.index):
        return cur
    values = list(cur.array_state)
    values[ev.index] = ev.value
    return replace(cur, array_state=tuple(values))


def on_mark(cur: Snapshot, ev: MarkEvent) -> Snapshot:
    marks = dict(cur.marks)
    for idx in ev.indices:
        if _in_range(cur, idx):
            marks[idx] = ev.kind
    return replace(cur, marks=marks)


def on_unmark(cur: Snapshot, ev: UnmarkEvent) -> Snapshot:
    marks = dict(cur.marks)
    for idx in ev.indices:
        marks.pop(idx, None)
    return replace(cur, marks=marks)


def on_message(cur: Snapshot, ev: MessageEvent) -> Snapshot:
    if ev.highlight_line is not None:
        return replace(cur, message=ev.text, highlighted_lines=(ev.highlight_line,))
    return replace(cur, message=ev.text)


def on_highlight(cur: Snapshot, ev: HighlightEvent) -> Snapshot:
    return replace(cur, highlighted_lines=tuple(ev.line_numbers))


def on_metric(cur: Snapshot, ev: MetricEvent) -> Snapshot:
    if ev.delta is not None:
        return replace(cur, metrics=_bump(cur.metrics, ev.name, ev.delta))
    metrics = dict(cur.metrics)
    metrics[ev.name] = ev.value
    return replace(cur, metrics=metrics)


def on_pointer(cur: Snapshot, ev: PointerEvent) -> Snapshot:
    # Pointers are per-step; variables accumulate by name in first-seen order.
    merged: Dict[str, Variable] = {v.name: v for v in cur.variables}
    for var in ev.variables:
        merged[var.name] = var
    expression = ev.expression if ev.expression is not None else cur.expression
    return replace(
        cur,
        pointers=tuple(ev.pointers),
        variables=tuple(merged.values()),
        expression=expression,
    )


def on_auxiliary(cur: Snapshot, ev: AuxiliaryEvent) -> Snapshot:
    return replace(cur, auxiliary=ev.state)


def on_result(cur: Snapshot, ev: ResultEvent) -> Snapshot:
    return replace(cur, result=ev)


def on_passthrough(cur: Snapshot, ev: Event) -> Snapshot:
    return cur
