"""
Algorithm-specific visualization payloads.

Auxiliary state carries what the generic array/marks/pointers model cannot
show (heap trees, merge buffers, search ranges, ...). Each visualization kind
is its own model, tagged by ``type``, so a producer cannot emit a payload that
mixes fields of two kinds.
"""

from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


Number = Union[int, float]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class IndexRange(_Frozen):
    start: int
    end: int


class SearchRangeState(_Frozen):
    type: Literal["search-range"] = "search-range"
    phase: Optional[str] = None
    algorithm: str
    array_length: int
    low: int
    high: int
    target: Number
    mid: Optional[int] = None
    current_value: Optional[Number] = None
    comparisons: int = 0
    eliminated: Tuple[IndexRange, ...] = ()
    jump_block: Optional[int] = None


class HeapNode(_Frozen):
    index: int
    value: Number
    highlight: bool = False
    is_removing: bool = False
    swap_with: Optional[Number] = None
    reason: Optional[str] = None
    left: Optional[int] = None
    right: Optional[int] = None


class HeapState(_Frozen):
    type: Literal["heap"] = "heap"
    phase: Optional[str] = None
    nodes: Tuple[HeapNode, ...] = ()
    heap_size: int = 0


class PartitionState(_Frozen):
    type: Literal["partition"] = "partition"
    phase: Optional[str] = None
    low: int
    high: int
    pivot_index: int
    pivot_value: Number
    boundary: int


class MergeState(_Frozen):
    type: Literal["merge"] = "merge"
    phase: Optional[str] = None
    left: Tuple[Number, ...] = ()
    right: Tuple[Number, ...] = ()
    left_index: int = 0
    right_index: int = 0
    left_start: int = 0
    right_start: int = 0


class GapState(_Frozen):
    type: Literal["gap"] = "gap"
    phase: Optional[str] = None
    gap: int
    gaps: Tuple[int, ...] = ()
    current_index: int = 0
    comparing_index: int = 0


class CountItem(_Frozen):
    index: int
    count: int
    highlight: bool = False


class CountState(_Frozen):
    type: Literal["count"] = "count"
    phase: Optional[str] = None
    counts: Tuple[CountItem, ...] = ()
    output: Tuple[Optional[Number], ...] = ()
    sorted_portion: int = 0


AuxiliaryState = Annotated[
    Union[
        SearchRangeState,
        HeapState,
        PartitionState,
        MergeState,
        GapState,
        CountState,
    ],
    Field(discriminator="type"),
]
