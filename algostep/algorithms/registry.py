"""
Algorithm registry.

Maps producer ids to algorithm instances. The default registry holds every
built-in sorting and searching producer.
"""

from typing import Dict, List, Optional

from ..core.errors import UnknownAlgorithmError
from .contract import Algorithm, AlgorithmMeta
from .searching import BinarySearch, JumpSearch, LinearSearch
from .sorting import (
    BubbleSort,
    CountingSort,
    HeapSort,
    InsertionSort,
    MergeSort,
    QuickSort,
    SelectionSort,
    ShellSort,
)

BUILTINS = (
    BubbleSort,
    SelectionSort,
    InsertionSort,
    HeapSort,
    QuickSort,
    MergeSort,
    ShellSort,
    CountingSort,
    LinearSearch,
    BinarySearch,
    JumpSearch,
)

_default: Optional["AlgorithmRegistry"] = None


class AlgorithmRegistry:
    def __init__(self):
        self._algorithms: Dict[str, Algorithm] = {}

    @staticmethod
    def default() -> "AlgorithmRegistry":
        """Shared registry populated with the built-in producers."""
        global _default
        if _default is None:
            registry = AlgorithmRegistry()
            for cls in BUILTINS:
                registry.register(cls())
            _default = registry
        return _default

    def register(self, algorithm: Algorithm) -> None:
        if not algorithm.id:
            raise ValueError(f"{type(algorithm).__name__} has no id")
        self._algorithms[algorithm.id] = algorithm

    def get(self, algorithm_id: str) -> Algorithm:
        try:
            return self._algorithms[algorithm_id]
        except KeyError:
            raise UnknownAlgorithmError(f"Algorithm '{algorithm_id}' not found") from None

    def __contains__(self, algorithm_id: str) -> bool:
        return algorithm_id in self._algorithms

    def all(self) -> List[AlgorithmMeta]:
        return [a.meta() for a in self._algorithms.values()]

    def by_category(self, category: str) -> List[AlgorithmMeta]:
        return [a.meta() for a in self._algorithms.values() if a.category == category]
