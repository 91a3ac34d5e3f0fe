"""
Canonical JSON for snapshots and events.

Timeline comparisons, snapshot hashes and the CLI's JSON output all render
state through here, so equal snapshots always produce equal text.
"""

import json
from collections.abc import Mapping
from typing import Any


def canonicalize(obj: Any) -> Any:
    """
    Normalize nested snapshot data for JSON.

    Mappings, read-only snapshot marks included, become dicts whose keys
    are stringified and sorted as text. Tuples become lists.
    """
    if isinstance(obj, Mapping):
        items = {str(k): v for k, v in obj.items()}
        return {k: canonicalize(items[k]) for k in sorted(items)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj


def canonical_json_bytes(obj: Any) -> bytes:
    """UTF-8 JSON with no whitespace, the input to snapshot_hash()."""
    return canonical_json_str(obj).encode("utf-8")


def canonical_json_str(obj: Any) -> str:
    return json.dumps(canonicalize(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
