"""
Built-in searching producers.

All searches read a numeric "target" parameter and finish with exactly one
search result: the index found, or -1.
"""

import math
from typing import Iterator, List, Optional

from ..core import events as ev
from ..core.auxiliary import IndexRange, SearchRangeState
from ..core.events import Event, Pointer, Variable
from .contract import Algorithm, ArrayInput, Complexity, NumberParameter, Params

TARGET = NumberParameter(id="target", label="Target", default=7, min=-1000, max=1000, step=1)


def _order(a, b) -> str:
    if a > b:
        return "gt"
    if a < b:
        return "lt"
    return "eq"


def _sort_in_place(arr: List) -> Iterator[Event]:
    """Sort arr, emitting a set event for each position that changes."""
    ordered = sorted(arr)
    if ordered == arr:
        return
    yield ev.message("Array must be sorted, sorting first", "info")
    for idx, value in enumerate(ordered):
        if arr[idx] != value:
            yield ev.set_value(idx, value, arr[idx])
            arr[idx] = value


class LinearSearch(Algorithm):
    id = "linear-search"
    name = "Linear Search"
    category = "searching"
    difficulty = "beginner"
    pseudocode_lines = (
        "function linearSearch(arr, target):",
        "  for i from 0 to n-1:",
        "    if arr[i] == target:",
        "      return i",
        "  return -1",
    )
    time_complexity = Complexity(best="O(1)", average="O(n)", worst="O(n)")
    space_complexity = "O(1)"
    parameters = (TARGET,)
    description = "Checks every element in order until the target is found."

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        target = self.param(params, "target")

        yield ev.message(f"Searching for {target} in {len(arr)} elements", "info", 0)
        for i, value in enumerate(arr):
            yield ev.pointer(
                [Pointer(index=i, label="i")],
                [Variable(name="i", value=i), Variable(name="target", value=target)],
                f"arr[{i}] == {target} → {value} == {target} = {value == target}",
            )
            yield ev.mark([i], "current")
            yield ev.highlight([2])
            yield ev.metric("comparisons", 1, delta=1)
            if value == target:
                yield ev.mark([i], "found")
                yield ev.message(f"Found {target} at index {i}", "info", 3)
                yield ev.result("search", i, f"Found at index {i}")
                return
            yield ev.mark([i], "eliminated")

        yield ev.message(f"{target} is not in the array", "info", 4)
        yield ev.result("search", -1, "Not found")


class BinarySearch(Algorithm):
    id = "binary-search"
    name = "Binary Search"
    category = "searching"
    difficulty = "beginner"
    pseudocode_lines = (
        "function binarySearch(arr, target):",
        "  low = 0, high = n - 1",
        "  while low <= high:",
        "    mid = (low + high) / 2",
        "    if arr[mid] == target: return mid",
        "    else if arr[mid] < target: low = mid + 1",
        "    else: high = mid - 1",
        "  return -1",
    )
    time_complexity = Complexity(best="O(1)", average="O(log n)", worst="O(log n)")
    space_complexity = "O(1)"
    parameters = (TARGET,)
    description = "Halves a sorted search range until the target is found or the range is empty."

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)
        target = self.param(params, "target")
        yield from _sort_in_place(arr)

        low, high = 0, n - 1
        comparisons = 0
        eliminated: List[IndexRange] = []

        def state(phase: str, mid: Optional[int] = None) -> SearchRangeState:
            return SearchRangeState(
                phase=phase,
                algorithm="binary",
                array_length=n,
                low=low,
                high=high,
                target=target,
                mid=mid,
                current_value=arr[mid] if mid is not None else None,
                comparisons=comparisons,
                eliminated=tuple(eliminated),
            )

        yield ev.message(f"Searching for {target} in sorted array", "info", 0)
        yield ev.highlight([1])
        yield ev.auxiliary(state("init"))

        while low <= high:
            mid = (low + high) // 2
            yield ev.highlight([3])
            yield ev.pointer(
                [Pointer(index=low, label="low"), Pointer(index=mid, label="mid"), Pointer(index=high, label="high")],
                [Variable(name="low", value=low), Variable(name="mid", value=mid),
                 Variable(name="high", value=high), Variable(name="target", value=target)],
                f"arr[{mid}] = {arr[mid]}",
            )
            yield ev.mark([mid], "current")
            comparisons += 1
            yield ev.metric("comparisons", 1, delta=1)
            yield ev.auxiliary(state("compare", mid))

            if arr[mid] == target:
                yield ev.mark([mid], "found")
                yield ev.auxiliary(state("found", mid))
                yield ev.message(f"Found {target} at index {mid}", "info", 4)
                yield ev.result("search", mid, f"Found at index {mid}")
                return

            if arr[mid] < target:
                yield ev.message(f"{arr[mid]} < {target}, search right half", "explanation", 5)
                eliminated.append(IndexRange(start=low, end=mid))
                yield ev.mark(range(low, mid + 1), "eliminated")
                low = mid + 1
            else:
                yield ev.message(f"{arr[mid]} > {target}, search left half", "explanation", 6)
                eliminated.append(IndexRange(start=mid, end=high))
                yield ev.mark(range(mid, high + 1), "eliminated")
                high = mid - 1
            yield ev.auxiliary(state("narrow"))

        yield ev.auxiliary(state("not-found"))
        yield ev.message(f"{target} is not in the array", "info", 7)
        yield ev.result("search", -1, "Not found")


class JumpSearch(Algorithm):
    id = "jump-search"
    name = "Jump Search"
    category = "searching"
    difficulty = "intermediate"
    pseudocode_lines = (
        "function jumpSearch(arr, target):",
        "  step = sqrt(n), prev = 0",
        "  while arr[min(step, n) - 1] < target:",
        "    prev = step; step += sqrt(n)",
        "    if prev >= n: return -1",
        "  for i from prev to min(step, n) - 1:",
        "    if arr[i] == target: return i",
        "  return -1",
    )
    time_complexity = Complexity(best="O(1)", average="O(√n)", worst="O(√n)")
    space_complexity = "O(1)"
    parameters = (TARGET,)
    description = "Jumps ahead in sqrt(n) blocks, then scans the block that may hold the target."

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)
        target = self.param(params, "target")
        yield from _sort_in_place(arr)

        block = max(1, int(math.sqrt(n)))
        prev, step = 0, block
        comparisons = 0
        eliminated: List[IndexRange] = []

        def state(phase: str, low: int, high: int, mid: Optional[int] = None,
                  jump_block: Optional[int] = None) -> SearchRangeState:
            return SearchRangeState(
                phase=phase,
                algorithm="jump",
                array_length=n,
                low=low,
                high=high,
                target=target,
                mid=mid,
                current_value=arr[mid] if mid is not None else None,
                comparisons=comparisons,
                eliminated=tuple(eliminated),
                jump_block=jump_block,
            )

        yield ev.message(f"Jump search for {target} with block size {block}", "info", 1)
        yield ev.auxiliary(state("init", 0, n - 1))

        while True:
            block_end = min(step, n) - 1
            yield ev.pointer(
                [Pointer(index=prev, label="prev"), Pointer(index=block_end, label="step")],
                [Variable(name="prev", value=prev), Variable(name="step", value=step),
                 Variable(name="target", value=target)],
                f"arr[{block_end}] < {target} → {arr[block_end]} < {target} = {arr[block_end] < target}",
            )
            comparisons += 1
            yield ev.metric("comparisons", 1, delta=1)
            yield ev.mark([block_end], "current")
            yield ev.auxiliary(state("jump", prev, block_end, mid=block_end, jump_block=step))
            yield ev.highlight([2])
            if arr[block_end] >= target:
                break
            eliminated.append(IndexRange(start=prev, end=block_end))
            yield ev.mark(range(prev, block_end + 1), "eliminated")
            prev, step = step, step + block
            yield ev.highlight([3])
            if prev >= n:
                yield ev.auxiliary(state("not-found", 0, n - 1))
                yield ev.message(f"{target} is larger than every element", "info", 4)
                yield ev.result("search", -1, "Not found")
                return

        end = min(step, n)
        yield ev.message(f"Scanning block [{prev}..{end - 1}]", "step", 5)
        for i in range(prev, end):
            comparisons += 1
            yield ev.metric("comparisons", 1, delta=1)
            yield ev.pointer([Pointer(index=i, label="i")], [Variable(name="i", value=i)])
            yield ev.auxiliary(state("scan", prev, end - 1, mid=i, jump_block=step))
            if arr[i] == target:
                yield ev.mark([i], "found")
                yield ev.message(f"Found {target} at index {i}", "info", 6)
                yield ev.result("search", i, f"Found at index {i}")
                return
            yield ev.mark([i], "eliminated")

        yield ev.auxiliary(state("not-found", 0, n - 1))
        yield ev.message(f"{target} is not in the array", "info", 7)
        yield ev.result("search", -1, "Not found")
