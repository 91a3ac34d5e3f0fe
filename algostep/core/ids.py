"""
Stable identifier generation.

Run ids are derived from the run's inputs, so the same algorithm, input and
parameters always log under the same trace id.
"""

import hashlib
from typing import Mapping, Optional, Sequence

from .canonical import canonical_json_str


def stable_id(*parts: str) -> str:
    """
    Generate stable ID derived from inputs (no randomness).

    Example:
        stable_id("bubble-sort", "[3,1,2]") -> "9c1e..."
    """
    raw = "|".join(parts).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def run_id(algorithm_id: str, values: Sequence, params: Optional[Mapping] = None) -> str:
    """Short stable id for one (algorithm, input, params) load."""
    return stable_id(
        algorithm_id,
        canonical_json_str(list(values)),
        canonical_json_str(dict(params or {})),
    )[:16]
