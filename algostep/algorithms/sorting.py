"""
Built-in sorting producers.

Each producer works on a private copy of the input and reports every
observable operation as an event. The arrays they keep locally always match
what the reducer reconstructs from their events.
"""

from typing import Iterator, List, Optional

from ..core import events as ev
from ..core.auxiliary import (
    CountItem,
    CountState,
    GapState,
    HeapNode,
    HeapState,
    MergeState,
    PartitionState,
)
from ..core.events import Event, Pointer, Variable
from .contract import Algorithm, ArrayInput, Complexity, Params, ValidationResult


def _order(a, b) -> str:
    if a > b:
        return "gt"
    if a < b:
        return "lt"
    return "eq"


class BubbleSort(Algorithm):
    id = "bubble-sort"
    name = "Bubble Sort"
    category = "sorting"
    difficulty = "beginner"
    pseudocode_lines = (
        "function bubbleSort(arr):",
        "  n = length(arr)",
        "  for i from 0 to n-1:",
        "    for j from 0 to n-i-2:",
        "      if arr[j] > arr[j+1]:",
        "        swap(arr[j], arr[j+1])",
        "  return arr",
    )
    time_complexity = Complexity(best="O(n)", average="O(n²)", worst="O(n²)")
    space_complexity = "O(1)"
    description = "Repeatedly compares adjacent elements and swaps them when out of order."

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)

        yield ev.message(f"Starting Bubble Sort with {n} elements", "info", 0)
        yield ev.highlight([0, 1])

        for i in range(n - 1):
            yield ev.message(f"Pass {i + 1}: bubbling largest unsorted element to position {n - 1 - i}", "step", 2)
            swapped = False

            for j in range(n - i - 1):
                yield ev.highlight([3])
                yield ev.pointer(
                    [Pointer(index=j, label="j"), Pointer(index=j + 1, label="j+1")],
                    [Variable(name="i", value=i), Variable(name="j", value=j)],
                    f"arr[{j}] > arr[{j + 1}] → {arr[j]} > {arr[j + 1]} = {arr[j] > arr[j + 1]}",
                )
                yield ev.message(f"Comparing {arr[j]} and {arr[j + 1]}", "explanation", 4)
                yield ev.compare(j, j + 1, _order(arr[j], arr[j + 1]))

                if arr[j] > arr[j + 1]:
                    yield ev.message(f"{arr[j]} > {arr[j + 1]}, swapping", "explanation", 5)
                    arr[j], arr[j + 1] = arr[j + 1], arr[j]
                    yield ev.swap(j, j + 1)
                    swapped = True
                else:
                    yield ev.message(f"{arr[j]} ≤ {arr[j + 1]}, no swap needed", "explanation")

            yield ev.mark([n - 1 - i], "sorted")
            yield ev.message(f"Element {arr[n - 1 - i]} is now in its final position", "step")

            if not swapped:
                yield ev.message("No swaps in this pass - array is sorted!", "info")
                yield ev.mark(range(n - 1 - i), "sorted")
                break

        yield ev.mark([0], "sorted")
        yield ev.pointer([], [])
        yield ev.message("Bubble Sort complete!", "info", 6)


class SelectionSort(Algorithm):
    id = "selection-sort"
    name = "Selection Sort"
    category = "sorting"
    difficulty = "beginner"
    pseudocode_lines = (
        "function selectionSort(arr):",
        "  for i from 0 to n-2:",
        "    minIdx = i",
        "    for j from i+1 to n-1:",
        "      if arr[j] < arr[minIdx]:",
        "        minIdx = j",
        "    swap(arr[i], arr[minIdx])",
    )
    time_complexity = Complexity(best="O(n²)", average="O(n²)", worst="O(n²)")
    space_complexity = "O(1)"
    description = "Selects the minimum of the unsorted suffix and moves it to the front."

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)

        yield ev.message(f"Starting Selection Sort with {n} elements", "info", 0)

        for i in range(n - 1):
            min_idx = i
            yield ev.message(f"Finding minimum for position {i}", "step", 2)
            for j in range(i + 1, n):
                yield ev.pointer(
                    [Pointer(index=i, label="i"), Pointer(index=min_idx, label="min"), Pointer(index=j, label="j")],
                    [Variable(name="i", value=i), Variable(name="minIdx", value=min_idx), Variable(name="j", value=j)],
                )
                yield ev.compare(j, min_idx, _order(arr[j], arr[min_idx]))
                yield ev.highlight([4])
                if arr[j] < arr[min_idx]:
                    min_idx = j
                    yield ev.mark([min_idx], "minimum")
                    yield ev.message(f"New minimum {arr[min_idx]} at index {min_idx}", "explanation", 5)

            if min_idx != i:
                yield ev.message(f"Swapping {arr[i]} and {arr[min_idx]}", "explanation", 6)
                arr[i], arr[min_idx] = arr[min_idx], arr[i]
                yield ev.swap(i, min_idx)
            yield ev.mark(range(i + 1), "sorted")

        yield ev.mark(range(n), "sorted")
        yield ev.pointer([], [])
        yield ev.message("Selection Sort complete!", "info")


class InsertionSort(Algorithm):
    id = "insertion-sort"
    name = "Insertion Sort"
    category = "sorting"
    difficulty = "beginner"
    pseudocode_lines = (
        "function insertionSort(arr):",
        "  for i from 1 to n-1:",
        "    j = i",
        "    while j > 0 and arr[j-1] > arr[j]:",
        "      swap(arr[j-1], arr[j])",
        "      j = j - 1",
    )
    time_complexity = Complexity(best="O(n)", average="O(n²)", worst="O(n²)")
    space_complexity = "O(1)"

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)

        yield ev.message(f"Starting Insertion Sort with {n} elements", "info", 0)
        yield ev.mark([0], "sorted")

        for i in range(1, n):
            yield ev.message(f"Inserting {arr[i]} into the sorted prefix", "step", 1)
            j = i
            while j > 0:
                yield ev.pointer(
                    [Pointer(index=j, label="j")],
                    [Variable(name="i", value=i), Variable(name="j", value=j), Variable(name="key", value=arr[j])],
                )
                yield ev.compare(j - 1, j, _order(arr[j - 1], arr[j]))
                yield ev.highlight([3])
                if arr[j - 1] <= arr[j]:
                    break
                arr[j - 1], arr[j] = arr[j], arr[j - 1]
                yield ev.swap(j - 1, j)
                yield ev.highlight([4, 5])
                j -= 1
            yield ev.mark(range(i + 1), "sorted")

        yield ev.pointer([], [])
        yield ev.message("Insertion Sort complete!", "info")


class HeapSort(Algorithm):
    id = "heap-sort"
    name = "Heap Sort"
    category = "sorting"
    difficulty = "intermediate"
    pseudocode_lines = (
        "function heapSort(arr):",
        "  buildMaxHeap(arr)",
        "  for end from n-1 down to 1:",
        "    swap(arr[0], arr[end])",
        "    heapify(arr, 0, end)",
        "",
        "function heapify(arr, i, size):",
        "  largest = max(i, left(i), right(i))",
        "  if largest != i:",
        "    swap(arr[i], arr[largest])",
        "    heapify(arr, largest, size)",
    )
    time_complexity = Complexity(best="O(n log n)", average="O(n log n)", worst="O(n log n)")
    space_complexity = "O(1)"

    @staticmethod
    def _heap(arr: List, size: int, phase: str, focus: Optional[int] = None, removing: bool = False) -> HeapState:
        nodes = []
        for idx in range(size):
            left, right = 2 * idx + 1, 2 * idx + 2
            nodes.append(HeapNode(
                index=idx,
                value=arr[idx],
                highlight=idx == focus,
                is_removing=removing and idx == 0,
                left=left if left < size else None,
                right=right if right < size else None,
            ))
        return HeapState(phase=phase, nodes=tuple(nodes), heap_size=size)

    def _sift_down(self, arr: List, i: int, size: int) -> Iterator[Event]:
        while True:
            largest = i
            for child in (2 * i + 1, 2 * i + 2):
                if child < size:
                    yield ev.compare(child, largest, _order(arr[child], arr[largest]))
                    if arr[child] > arr[largest]:
                        largest = child
            yield ev.highlight([7])
            if largest == i:
                return
            yield ev.message(f"Sifting {arr[i]} down below {arr[largest]}", "explanation", 9)
            arr[i], arr[largest] = arr[largest], arr[i]
            yield ev.swap(i, largest)
            yield ev.auxiliary(self._heap(arr, size, "Heapify", focus=largest))
            i = largest

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)

        yield ev.message(f"Starting Heap Sort with {n} elements", "info", 0)
        yield ev.message("Building max heap", "step", 1)
        yield ev.auxiliary(self._heap(arr, n, "Build heap"))

        for i in range(n // 2 - 1, -1, -1):
            yield from self._sift_down(arr, i, n)

        for end in range(n - 1, 0, -1):
            yield ev.auxiliary(self._heap(arr, end + 1, "Extract max", focus=0, removing=True))
            yield ev.message(f"Moving max {arr[0]} to position {end}", "step", 3)
            arr[0], arr[end] = arr[end], arr[0]
            yield ev.swap(0, end)
            yield ev.mark([end], "sorted")
            yield ev.auxiliary(self._heap(arr, end, "Heapify", focus=0))
            yield from self._sift_down(arr, 0, end)

        yield ev.mark([0], "sorted")
        yield ev.auxiliary(self._heap(arr, 0, "Done"))
        yield ev.message("Heap Sort complete!", "info")


class QuickSort(Algorithm):
    id = "quick-sort"
    name = "Quick Sort"
    category = "sorting"
    difficulty = "intermediate"
    pseudocode_lines = (
        "function quickSort(arr, low, high):",
        "  if low < high:",
        "    p = partition(arr, low, high)",
        "    quickSort(arr, low, p - 1)",
        "    quickSort(arr, p + 1, high)",
        "",
        "function partition(arr, low, high):",
        "  pivot = arr[high]",
        "  i = low",
        "  for j from low to high-1:",
        "    if arr[j] < pivot:",
        "      swap(arr[i], arr[j]); i++",
        "  swap(arr[i], arr[high])",
        "  return i",
    )
    time_complexity = Complexity(best="O(n log n)", average="O(n log n)", worst="O(n²)")
    space_complexity = "O(log n)"

    def _partition(self, arr: List, low: int, high: int, out: List[int]) -> Iterator[Event]:
        pivot = arr[high]
        i = low
        yield ev.mark([high], "pivot")
        yield ev.message(f"Partitioning [{low}..{high}] around pivot {pivot}", "step", 7)
        for j in range(low, high):
            yield ev.auxiliary(PartitionState(
                phase="Partitioning", low=low, high=high, pivot_index=high, pivot_value=pivot, boundary=i,
            ))
            yield ev.pointer(
                [Pointer(index=i, label="i"), Pointer(index=j, label="j"), Pointer(index=high, label="pivot")],
                [Variable(name="low", value=low), Variable(name="high", value=high),
                 Variable(name="pivot", value=pivot), Variable(name="i", value=i), Variable(name="j", value=j)],
            )
            yield ev.compare(j, high, _order(arr[j], pivot))
            yield ev.highlight([10])
            if arr[j] < pivot:
                if i != j:
                    arr[i], arr[j] = arr[j], arr[i]
                    yield ev.swap(i, j)
                i += 1
            yield ev.mark([high], "pivot")
        if i != high:
            arr[i], arr[high] = arr[high], arr[i]
            yield ev.swap(i, high)
        yield ev.auxiliary(PartitionState(
            phase="Pivot placed", low=low, high=high, pivot_index=i, pivot_value=pivot, boundary=i,
        ))
        yield ev.mark([i], "sorted")
        yield ev.message(f"Pivot {pivot} placed at index {i}", "explanation", 12)
        out.append(i)

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)
        yield ev.message(f"Starting Quick Sort with {n} elements", "info", 0)

        ranges = [(0, n - 1)]
        while ranges:
            low, high = ranges.pop()
            if low > high:
                continue
            if low == high:
                yield ev.mark([low], "sorted")
                continue
            placed: List[int] = []
            yield from self._partition(arr, low, high, placed)
            p = placed[0]
            ranges.append((p + 1, high))
            ranges.append((low, p - 1))

        yield ev.mark(range(n), "sorted")
        yield ev.pointer([], [])
        yield ev.message("Quick Sort complete!", "info")


class MergeSort(Algorithm):
    id = "merge-sort"
    name = "Merge Sort"
    category = "sorting"
    difficulty = "intermediate"
    pseudocode_lines = (
        "function mergeSort(arr, left, right):",
        "  if left >= right: return",
        "  mid = (left + right) / 2",
        "  mergeSort(arr, left, mid)",
        "  mergeSort(arr, mid + 1, right)",
        "  merge(arr, left, mid, right)",
    )
    time_complexity = Complexity(best="O(n log n)", average="O(n log n)", worst="O(n log n)")
    space_complexity = "O(n)"

    def _merge(self, arr: List, left: int, mid: int, right: int) -> Iterator[Event]:
        lhs = arr[left:mid + 1]
        rhs = arr[mid + 1:right + 1]
        yield ev.message(f"Merging [{left}..{mid}] and [{mid + 1}..{right}]", "step", 5)
        i = j = 0
        k = left
        while i < len(lhs) and j < len(rhs):
            yield ev.auxiliary(MergeState(
                phase="Merging", left=tuple(lhs), right=tuple(rhs),
                left_index=i, right_index=j, left_start=left, right_start=mid + 1,
            ))
            # Original positions of the two heads are still intact for comparison.
            yield ev.compare(left + i, mid + 1 + j, _order(lhs[i], rhs[j]))
            if lhs[i] <= rhs[j]:
                value = lhs[i]
                i += 1
            else:
                value = rhs[j]
                j += 1
            yield ev.set_value(k, value, arr[k])
            arr[k] = value
            k += 1
        for value in lhs[i:] + rhs[j:]:
            yield ev.set_value(k, value, arr[k])
            arr[k] = value
            k += 1
        yield ev.auxiliary(MergeState(
            phase="Merged", left=tuple(lhs), right=tuple(rhs),
            left_index=len(lhs), right_index=len(rhs), left_start=left, right_start=mid + 1,
        ))

    def _sort(self, arr: List, left: int, right: int) -> Iterator[Event]:
        if left >= right:
            return
        mid = (left + right) // 2
        yield ev.pointer(
            [Pointer(index=left, label="left"), Pointer(index=mid, label="mid"), Pointer(index=right, label="right")],
            [Variable(name="left", value=left), Variable(name="mid", value=mid), Variable(name="right", value=right)],
        )
        yield from self._sort(arr, left, mid)
        yield from self._sort(arr, mid + 1, right)
        yield from self._merge(arr, left, mid, right)

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)
        yield ev.message(f"Starting Merge Sort with {n} elements", "info", 0)
        yield from self._sort(arr, 0, n - 1)
        yield ev.mark(range(n), "sorted")
        yield ev.pointer([], [])
        yield ev.message("Merge Sort complete!", "info")


class ShellSort(Algorithm):
    id = "shell-sort"
    name = "Shell Sort"
    category = "sorting"
    difficulty = "intermediate"
    pseudocode_lines = (
        "function shellSort(arr):",
        "  gap = n / 2",
        "  while gap > 0:",
        "    for i from gap to n-1:",
        "      j = i",
        "      while j >= gap and arr[j-gap] > arr[j]:",
        "        swap(arr[j-gap], arr[j]); j -= gap",
        "    gap = gap / 2",
    )
    time_complexity = Complexity(best="O(n log n)", average="O(n^1.25)", worst="O(n²)")
    space_complexity = "O(1)"

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)
        gaps: List[int] = []
        gap = n // 2

        yield ev.message(f"Starting Shell Sort with {n} elements", "info", 0)
        while gap > 0:
            gaps.append(gap)
            yield ev.message(f"Gap = {gap}", "step", 2)
            for i in range(gap, n):
                j = i
                while j >= gap:
                    yield ev.auxiliary(GapState(
                        phase="Gapped insertion", gap=gap, gaps=tuple(gaps), current_index=j, comparing_index=j - gap,
                    ))
                    yield ev.compare(j - gap, j, _order(arr[j - gap], arr[j]))
                    if arr[j - gap] <= arr[j]:
                        break
                    arr[j - gap], arr[j] = arr[j], arr[j - gap]
                    yield ev.swap(j - gap, j)
                    j -= gap
            gap //= 2

        yield ev.mark(range(n), "sorted")
        yield ev.message("Shell Sort complete!", "info")


class CountingSort(Algorithm):
    id = "counting-sort"
    name = "Counting Sort"
    category = "sorting"
    difficulty = "intermediate"
    pseudocode_lines = (
        "function countingSort(arr):",
        "  count = array of zeros(max + 1)",
        "  for x in arr: count[x]++",
        "  k = 0",
        "  for v from 0 to max:",
        "    repeat count[v] times: arr[k++] = v",
    )
    time_complexity = Complexity(best="O(n + k)", average="O(n + k)", worst="O(n + k)")
    space_complexity = "O(k)"
    max_value = 100

    def validate(self, input: ArrayInput) -> ValidationResult:
        base = super().validate(input)
        if not base.ok:
            return base
        for v in input.values:
            if v != int(v) or v < 0:
                return ValidationResult.failure("Counting Sort requires non-negative integers")
            if v > self.max_value:
                return ValidationResult.failure(f"Values must be {self.max_value} or less for Counting Sort")
        return ValidationResult.success()

    @staticmethod
    def _state(counts: List[int], output: List, phase: str, focus: Optional[int] = None, placed: int = 0) -> CountState:
        return CountState(
            phase=phase,
            counts=tuple(CountItem(index=i, count=c, highlight=i == focus) for i, c in enumerate(counts)),
            output=tuple(output),
            sorted_portion=placed,
        )

    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        arr = list(input.values)
        n = len(arr)
        counts = [0] * (int(max(arr)) + 1)
        output: List = [None] * n

        yield ev.message(f"Starting Counting Sort with {n} elements", "info", 0)
        yield ev.auxiliary(self._state(counts, output, "Counting"))
        for idx, v in enumerate(arr):
            counts[int(v)] += 1
            yield ev.mark([idx], "current")
            yield ev.auxiliary(self._state(counts, output, "Counting", focus=int(v)))
            yield ev.unmark([idx])

        k = 0
        for value, count in enumerate(counts):
            for _ in range(count):
                output[k] = value
                yield ev.set_value(k, value, arr[k])
                arr[k] = value
                yield ev.mark([k], "sorted")
                k += 1
                yield ev.auxiliary(self._state(counts, output, "Writing back", focus=value, placed=k))

        yield ev.message("Counting Sort complete!", "info")
