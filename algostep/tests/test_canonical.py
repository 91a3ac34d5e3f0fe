"""
Tests for canonical serialization and stable ids.

Critical: These tests verify determinism guarantees.
"""

from algostep.core.canonical import canonical_json_bytes, canonical_json_str, canonicalize
from algostep.core.ids import run_id, stable_id
from algostep.core.snapshot import Snapshot, snapshot_hash


def test_canonicalize_dict_key_order():
    """Dict key order must not affect canonical output."""
    assert canonicalize({"z": 1, "a": 2}) == canonicalize({"a": 2, "z": 1})


def test_canonicalize_int_keys_and_tuples():
    canon = canonicalize({2: (1, 2), 10: "x"})
    assert list(canon.keys()) == ["10", "2"]
    assert canon["2"] == [1, 2]


def test_canonicalize_read_only_mappings():
    marks = Snapshot(marks={1: "sorted"}).marks
    assert canonicalize({"marks": marks}) == {"marks": {"1": "sorted"}}


def test_canonical_json_no_whitespace():
    assert canonical_json_str({"b": [1, 2], "a": None}) == '{"a":null,"b":[1,2]}'
    assert canonical_json_bytes({"k": "ü"}) == '{"k":"ü"}'.encode("utf-8")


def test_snapshot_hash_stable():
    s1 = Snapshot(array_state=(1, 2), marks={1: "sorted", 0: "comparing"})
    s2 = Snapshot(array_state=(1, 2), marks={0: "comparing", 1: "sorted"})
    assert snapshot_hash(s1) == snapshot_hash(s2)
    assert snapshot_hash(s1) != snapshot_hash(Snapshot(array_state=(2, 1)))


def test_run_id_stable_and_input_sensitive():
    a = run_id("bubble-sort", [3, 1, 2], {})
    assert a == run_id("bubble-sort", (3, 1, 2), None)
    assert len(a) == 16
    assert a != run_id("bubble-sort", [3, 2, 1])
    assert a != run_id("bubble-sort", [3, 1, 2], {"target": 1})


def test_stable_id_no_randomness():
    assert stable_id("a", "b") == stable_id("a", "b")
    assert stable_id("a", "b") != stable_id("b", "a")
