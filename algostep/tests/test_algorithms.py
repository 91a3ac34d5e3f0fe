"""
Tests for built-in producers and the algorithm contract.
"""

import math

import pytest

from algostep.algorithms import Algorithm, AlgorithmRegistry, ArrayInput, ValidationResult, drain
from algostep.core import events as ev
from algostep.core.auxiliary import HeapState, SearchRangeState
from algostep.core.errors import InputValidationError, ProducerError, UnknownAlgorithmError
from algostep.timeline import build_timeline

SORTING = [m.id for m in AlgorithmRegistry.default().by_category("sorting")]
SEARCHING = [m.id for m in AlgorithmRegistry.default().by_category("searching")]

INPUTS = [
    [5, 3, 8, 1, 9, 2],
    [1],
    [2, 2, 1],
    [1, 2, 3, 4, 5],
    [9, 8, 7, 6, 5, 4, 3, 2, 1, 0],
    [4.5, -1, 3, 0],
]


def _run(algorithm_id, values, params=None):
    algorithm = AlgorithmRegistry.default().get(algorithm_id)
    events = drain(algorithm, ArrayInput.of(values), params)
    return events, build_timeline(values, events)


def test_registry_lists_builtins():
    registry = AlgorithmRegistry.default()
    ids = [m.id for m in registry.all()]

    assert "bubble-sort" in ids
    assert "binary-search" in ids
    assert len(SORTING) == 8
    assert len(SEARCHING) == 3
    assert set(SORTING) | set(SEARCHING) == set(ids)


def test_registry_unknown_id():
    with pytest.raises(UnknownAlgorithmError):
        AlgorithmRegistry.default().get("bogo-sort")


def test_bubble_sort_scenario():
    """Bubble sort on [3,1,2] swaps at least once and ends sorted."""
    events, timeline = _run("bubble-sort", [3, 1, 2])

    assert any(e.type == "swap" for e in events)
    assert timeline.final.array_state == (1, 2, 3)


def test_binary_search_scenario():
    """Binary search for 5 in [1,3,5,7] ends with result index 2."""
    events, timeline = _run("binary-search", [1, 3, 5, 7], {"target": 5})

    results = [e for e in events if e.type == "result"]
    assert len(results) == 1
    assert results[0].kind == "search"
    assert results[0].value == 2
    assert events[-1].type == "result"
    assert timeline.final.result.value == 2


@pytest.mark.parametrize("algorithm_id", SORTING + SEARCHING)
def test_timeline_length_matches_events(algorithm_id):
    algorithm = AlgorithmRegistry.default().get(algorithm_id)
    for values in INPUTS:
        if not algorithm.validate(ArrayInput.of(values)).ok:
            continue
        events, timeline = _run(algorithm_id, values)
        assert len(timeline) == len(events) + 1


@pytest.mark.parametrize("algorithm_id", SORTING)
def test_sorting_producers_sort(algorithm_id):
    algorithm = AlgorithmRegistry.default().get(algorithm_id)
    for values in INPUTS:
        if not algorithm.validate(ArrayInput.of(values)).ok:
            continue
        _, timeline = _run(algorithm_id, values)
        assert list(timeline.final.array_state) == sorted(values), values


@pytest.mark.parametrize("algorithm_id", SEARCHING)
def test_search_found_and_missing(algorithm_id):
    values = [1, 3, 5, 7, 9, 11, 13, 15, 17]
    for target, expected in ((13, 6), (1, 0), (17, 8), (20, -1), (0, -1), (4, -1)):
        events, _ = _run(algorithm_id, values, {"target": target})
        results = [e for e in events if e.type == "result"]
        assert len(results) == 1
        assert results[0].value == expected, (target, results[0].value)


def test_linear_search_does_not_sort():
    events, timeline = _run("linear-search", [4, 2, 7], {"target": 7})

    assert not any(e.type == "set" for e in events)
    assert timeline.final.result.value == 2
    assert timeline.final.array_state == (4, 2, 7)


def test_binary_search_sorts_unsorted_input_first():
    events, timeline = _run("binary-search", [7, 1, 5, 3], {"target": 5})

    assert any(e.type == "set" for e in events)
    assert timeline.final.array_state == (1, 3, 5, 7)
    assert timeline.final.result.value == 2


def test_binary_search_default_target():
    """Without params the declared default target (7) is used."""
    events, _ = _run("binary-search", [1, 3, 5, 7])
    assert events[-1].value == 3


def test_search_range_auxiliary():
    _, timeline = _run("jump-search", [1, 3, 5, 7, 9, 11, 13, 15, 17], {"target": 13})

    states = [s.auxiliary for s in timeline.snapshots if isinstance(s.auxiliary, SearchRangeState)]
    assert states
    assert states[0].algorithm == "jump"
    assert states[-1].mid == 6


def test_heap_sort_emits_heap_state():
    _, timeline = _run("heap-sort", [4, 10, 3, 5, 1])

    heaps = [s.auxiliary for s in timeline.snapshots if isinstance(s.auxiliary, HeapState)]
    assert heaps
    assert heaps[0].heap_size == 5
    assert heaps[-1].heap_size == 0


def test_comparisons_metric_counts_compare_events():
    events, timeline = _run("selection-sort", [3, 2, 1])
    compares = sum(1 for e in events if e.type == "compare")

    assert timeline.final.metrics["comparisons"] == compares


@pytest.mark.parametrize(
    "values,message",
    [
        ([], "Array cannot be empty"),
        (list(range(51)), "Array size must be 50 or less for visualization"),
        ([1, math.nan], "All elements must be valid numbers"),
        ([1, math.inf], "All elements must be valid numbers"),
        ([-math.inf, 1], "All elements must be valid numbers"),
        ([1, True], "All elements must be valid numbers"),
        ([1, "2"], "All elements must be valid numbers"),
    ],
)
def test_default_validation(values, message):
    algorithm = AlgorithmRegistry.default().get("bubble-sort")
    result = algorithm.validate(ArrayInput.of(values))
    assert not result.ok
    assert result.error == message

    with pytest.raises(InputValidationError, match=message):
        drain(algorithm, ArrayInput.of(values))


def test_counting_sort_rejects_negative_and_fractional():
    algorithm = AlgorithmRegistry.default().get("counting-sort")
    assert not algorithm.validate(ArrayInput.of([3, -1])).ok
    assert not algorithm.validate(ArrayInput.of([3, 1.5])).ok
    assert algorithm.validate(ArrayInput.of([3, 0, 2])).ok


class _TwoResults(Algorithm):
    id = "two-results"
    name = "Two results"
    category = "test"

    def run(self, input, params=None):
        yield ev.result("boolean", True)
        yield ev.result("boolean", False)


class _Unvalidated(Algorithm):
    id = "never-runs"
    name = "Never runs"
    category = "test"

    def validate(self, input):
        return ValidationResult.failure("nope")

    def run(self, input, params=None):
        raise AssertionError("run() called after failed validation")


def test_drain_rejects_second_result():
    with pytest.raises(ProducerError):
        drain(_TwoResults(), ArrayInput.of([1]))


def test_drain_does_not_run_on_invalid_input():
    with pytest.raises(InputValidationError, match="nope"):
        drain(_Unvalidated(), ArrayInput.of([1]))


@pytest.mark.parametrize(
    "params,message",
    [
        ({"target": "x"}, "Parameter 'target' must be a number"),
        ({"target": math.inf}, "Parameter 'target' must be a number"),
        ({"target": True}, "Parameter 'target' must be a number"),
        ({"target": 5000}, "Parameter 'target' must be between -1000 and 1000"),
    ],
)
def test_drain_rejects_params_outside_declaration(params, message):
    algorithm = AlgorithmRegistry.default().get("binary-search")
    assert algorithm.validate_params(params).error == message

    with pytest.raises(InputValidationError, match=message):
        drain(algorithm, ArrayInput.of([1, 2]), params)


def test_undeclared_params_pass_through():
    algorithm = AlgorithmRegistry.default().get("bubble-sort")
    assert algorithm.validate_params({"anything": object()}).ok
    assert algorithm.validate_params(None).ok


def test_param_fallback_and_unknown():
    algorithm = AlgorithmRegistry.default().get("linear-search")
    assert algorithm.param(None, "target") == 7
    assert algorithm.param({"target": 3}, "target") == 3
    with pytest.raises(KeyError):
        algorithm.param({}, "missing")


def test_meta_serializes_parameters():
    meta = AlgorithmRegistry.default().get("binary-search").meta()
    dumped = meta.model_dump(mode="json")

    assert dumped["parameters"][0]["type"] == "number"
    assert dumped["parameters"][0]["id"] == "target"
    assert dumped["time_complexity"]["worst"] == "O(log n)"
