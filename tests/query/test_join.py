from __future__ import annotations

import pytest

from perch.core import JoinKeyMismatch, Table, TypeMismatch
from perch.query import JoinSpec, full_join, inner_join, join, left_join, right_join

KEYS = ("year", "state")


def _left() -> Table:
    return Table({"year": [2008, 2009], "state": ["IL", "IL"], "species": ["Sora", "Sora"]})


def _right() -> Table:
    return Table({"year": [2008, 2010], "state": ["IL", "IL"], "samplesize": [3, 9]})


def test_full_join_layout_and_order() -> None:
    out = join(_left(), _right(), JoinSpec("full", KEYS))
    assert out.columns == ("year", "state", "species", "samplesize")
    assert out.rows() == [
        {"year": 2008, "state": "IL", "species": "Sora", "samplesize": 3},
        {"year": 2009, "state": "IL", "species": "Sora", "samplesize": None},
        {"year": 2010, "state": "IL", "species": None, "samplesize": 9},
    ]


def test_join_kinds_row_counts() -> None:
    l, r = _left(), _right()
    inner = inner_join(l, r, KEYS)
    left = left_join(l, r, KEYS)
    right = right_join(l, r, KEYS)
    full = full_join(l, r, KEYS)
    assert inner.height == 1
    assert inner.height <= left.height <= full.height
    assert inner.height <= right.height <= full.height
    assert left.column("year").to_list() == [2008, 2009]
    assert right.column("year").to_list() == [2008, 2010]


def test_join_one_to_many_keeps_right_order() -> None:
    l = Table({"k": [1, 2]})
    r = Table({"k": [1, 1], "v": ["a", "b"]})
    out = left_join(l, r, "k")
    assert out.rows() == [{"k": 1, "v": "a"}, {"k": 1, "v": "b"}, {"k": 2, "v": None}]


def test_join_suffixes_shared_columns() -> None:
    l = Table({"k": [1], "v": ["l"]})
    r = Table({"k": [1], "v": ["r"]})
    assert inner_join(l, r, "k").columns == ("k", "v_left", "v_right")
    assert inner_join(l, r, "k", suffixes=(".x", ".y")).columns == ("k", "v.x", "v.y")
    with pytest.raises(ValueError):
        JoinSpec("inner", ("k",), ("_a", "_a"))


def test_join_suffix_collision_raises_before_renaming() -> None:
    l = Table({"k": [1], "v": ["a"], "v_left": ["b"]})
    r = Table({"k": [1], "v": ["c"]})
    with pytest.raises(ValueError, match="duplicate column names"):
        inner_join(l, r, "k")
    with pytest.raises(ValueError, match="duplicate column names"):
        left_join(Table({"k": [1], "v": ["a"]}), Table({"k": [1], "v": ["c"], "v_left": ["d"]}), "k")


def test_join_keeps_columns_named_like_row_markers() -> None:
    l = Table({"k": [2, 1], "__left_row__": ["x", "y"]})
    r = Table({"k": [1, 3], "__right_row__": [10, 30]})
    out = full_join(l, r, "k")
    assert out.columns == ("k", "__left_row__", "__right_row__")
    assert out.rows() == [
        {"k": 2, "__left_row__": "x", "__right_row__": None},
        {"k": 1, "__left_row__": "y", "__right_row__": 10},
        {"k": 3, "__left_row__": None, "__right_row__": 30},
    ]


def test_join_null_keys_never_match() -> None:
    l = Table({"k": [None, 1], "a": [1, 2]})
    r = Table({"k": [None, 1], "b": [3, 4]})
    assert inner_join(l, r, "k").rows() == [{"k": 1, "a": 2, "b": 4}]


def test_join_key_errors() -> None:
    with pytest.raises(JoinKeyMismatch):
        inner_join(_left(), _right(), ["species"])
    with pytest.raises(TypeMismatch):
        inner_join(Table({"k": [1]}), Table({"k": ["1"]}), "k")
    with pytest.raises(ValueError):
        JoinSpec("cross", ("k",))  # type: ignore[arg-type]


def test_inner_join_single_match() -> None:
    l = Table({"year": [2008], "state": ["IL"], "species": ["Sora"]})
    r = Table({"year": [2008], "state": ["IL"], "samplesize": [3]})
    out = inner_join(l, r, ["year", "state"])
    assert out.rows() == [{"year": 2008, "state": "IL", "species": "Sora", "samplesize": 3}]
