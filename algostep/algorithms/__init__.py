"""
Algorithm producers.

- contract: Algorithm base class, parameter declarations, drain()
- registry: id -> producer lookup with the built-in producers
- sorting, searching: built-in producers
"""

from .contract import (
    Algorithm,
    AlgorithmMeta,
    AlgorithmParameter,
    ArrayInput,
    Complexity,
    NumberParameter,
    SelectOption,
    SelectParameter,
    TextParameter,
    ValidationResult,
    drain,
)
from .registry import AlgorithmRegistry

__all__ = [
    "Algorithm",
    "AlgorithmMeta",
    "AlgorithmParameter",
    "ArrayInput",
    "Complexity",
    "NumberParameter",
    "SelectOption",
    "SelectParameter",
    "TextParameter",
    "ValidationResult",
    "drain",
    "AlgorithmRegistry",
]
