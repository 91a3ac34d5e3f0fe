"""
Algorithm contract.

Every producer validates its input and then emits an ordered, finite
sequence of events. Producers are written as generators for convenience;
the engine always drains them completely before building a timeline.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from numbers import Real
from typing import Annotated, Any, Dict, Iterator, List, Literal, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .. import metrics
from ..core.errors import InputValidationError, ProducerError
from ..core.events import Event

logger = logging.getLogger(__name__)

ParamValue = Union[int, float, str]
Params = Mapping[str, ParamValue]
Difficulty = Literal["beginner", "intermediate", "advanced"]


@dataclass(frozen=True)
class ArrayInput:
    values: Tuple[Any, ...]

    @staticmethod
    def of(values: Sequence[Any]) -> "ArrayInput":
        return ArrayInput(values=tuple(values))


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    error: Optional[str] = None

    @staticmethod
    def success() -> "ValidationResult":
        return ValidationResult(ok=True)

    @staticmethod
    def failure(error: str) -> "ValidationResult":
        return ValidationResult(ok=False, error=error)


class _Model(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Complexity(_Model):
    best: str
    average: str
    worst: str


class NumberParameter(_Model):
    type: Literal["number"] = "number"
    id: str
    label: str
    default: Union[int, float]
    min: Union[int, float]
    max: Union[int, float]
    step: Optional[Union[int, float]] = None


class SelectOption(_Model):
    value: str
    label: str


class SelectParameter(_Model):
    type: Literal["select"] = "select"
    id: str
    label: str
    default: str
    options: Tuple[SelectOption, ...]


class TextParameter(_Model):
    type: Literal["text"] = "text"
    id: str
    label: str
    default: str
    placeholder: Optional[str] = None
    max_length: Optional[int] = None


AlgorithmParameter = Annotated[
    Union[NumberParameter, SelectParameter, TextParameter],
    Field(discriminator="type"),
]


class AlgorithmMeta(_Model):
    """Catalog entry consumed by listing UIs."""
    id: str
    name: str
    category: str
    difficulty: Difficulty
    time_complexity: Complexity
    space_complexity: str
    parameters: Tuple[AlgorithmParameter, ...] = ()
    tags: Tuple[str, ...] = ()
    description: str = ""


class Algorithm(ABC):
    """
    Base class for event producers.

    Subclasses set the metadata class attributes and implement run().
    validate() defaults to the array checks shared by all array algorithms.
    """

    id: str = ""
    name: str = ""
    category: str = ""
    difficulty: Difficulty = "beginner"
    pseudocode_lines: Tuple[str, ...] = ()
    time_complexity: Complexity = Complexity(best="", average="", worst="")
    space_complexity: str = ""
    parameters: Tuple[AlgorithmParameter, ...] = ()
    description: str = ""
    max_size: int = 50

    def validate(self, input: ArrayInput) -> ValidationResult:
        values = input.values
        if values is None or isinstance(values, (str, bytes)):
            return ValidationResult.failure("Input must be an array of numbers")
        if len(values) == 0:
            return ValidationResult.failure("Array cannot be empty")
        if len(values) > self.max_size:
            return ValidationResult.failure(f"Array size must be {self.max_size} or less for visualization")
        for v in values:
            if isinstance(v, bool) or not isinstance(v, Real) or not math.isfinite(v):
                return ValidationResult.failure("All elements must be valid numbers")
        return ValidationResult.success()

    def validate_params(self, params: Optional[Params]) -> ValidationResult:
        """Check supplied values against their declarations. Undeclared keys pass through."""
        declared = parameters_by_id(self.parameters)
        for key, value in (params or {}).items():
            p = declared.get(key)
            if p is None:
                continue
            if isinstance(p, NumberParameter):
                if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
                    return ValidationResult.failure(f"Parameter '{key}' must be a number")
                if not p.min <= value <= p.max:
                    return ValidationResult.failure(f"Parameter '{key}' must be between {p.min} and {p.max}")
            elif isinstance(p, SelectParameter):
                if value not in {o.value for o in p.options}:
                    return ValidationResult.failure(f"Parameter '{key}' must be one of {[o.value for o in p.options]}")
            elif not isinstance(value, str):
                return ValidationResult.failure(f"Parameter '{key}' must be text")
            elif p.max_length is not None and len(value) > p.max_length:
                return ValidationResult.failure(f"Parameter '{key}' must be at most {p.max_length} characters")
        return ValidationResult.success()

    @abstractmethod
    def run(self, input: ArrayInput, params: Optional[Params] = None) -> Iterator[Event]:
        """Yield the events of one run over an already validated input."""

    def param(self, params: Optional[Params], param_id: str) -> ParamValue:
        """Value of a declared parameter, falling back to its default."""
        if params and param_id in params:
            return params[param_id]
        for p in self.parameters:
            if p.id == param_id:
                return p.default
        raise KeyError(f"{self.id} declares no parameter {param_id!r}")

    def meta(self) -> AlgorithmMeta:
        return AlgorithmMeta(
            id=self.id,
            name=self.name,
            category=self.category,
            difficulty=self.difficulty,
            time_complexity=self.time_complexity,
            space_complexity=self.space_complexity,
            parameters=self.parameters,
            description=self.description,
        )


def drain(algorithm: Algorithm, input: ArrayInput, params: Optional[Params] = None) -> List[Event]:
    """
    Validate input and collect every event of one run.

    Raises:
        InputValidationError: If validate() rejects the input or
            validate_params() rejects the params (nothing is run)
        ProducerError: If the producer emits more than one result event
    """
    validation = algorithm.validate(input)
    if not validation.ok:
        raise InputValidationError(validation.error or "Invalid input")
    checked = algorithm.validate_params(params)
    if not checked.ok:
        raise InputValidationError(checked.error or "Invalid params")

    events: List[Event] = []
    results = 0
    for ev in algorithm.run(input, dict(params or {})):
        if ev.type == "result":
            results += 1
            if results > 1:
                raise ProducerError(f"{algorithm.id} emitted more than one result event")
        events.append(ev)

    metrics.track_run(algorithm.id, len(events))
    logger.debug("Drained run", extra={"algorithm": algorithm.id, "events": len(events)})
    return events


def parameters_by_id(parameters: Sequence[AlgorithmParameter]) -> Dict[str, AlgorithmParameter]:
    return {p.id: p for p in parameters}
