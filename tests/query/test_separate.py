from __future__ import annotations

import polars as pl
import pytest

from perch.core import ColumnNotFound, MalformedValue, Table, TypeMismatch
from perch.query import mutate, separate


def test_separate_delimiter_takes_source_position() -> None:
    t = Table({"id": [1, 2], "state_year": ["AK_2008", "IL_2009"], "n": [3, 4]})
    out = separate(t, "state_year", "_", ["state", "year"])
    assert out.columns == ("id", "state", "year", "n")
    assert out.column("state").to_list() == ["AK", "IL"]
    assert out.column("year").to_list() == ["2008", "2009"]


def test_separate_keep_original() -> None:
    t = Table({"state_year": ["AK_2008"]})
    out = separate(t, "state_year", "_", ["state", "year"], keep_original=True)
    assert out.columns == ("state_year", "state", "year")


def test_separate_round_trip_with_concat() -> None:
    t = Table({"state": ["AK", "IL"], "year": ["2008", "2009"]})
    joined = mutate(t, "state_year", pl.concat_str([pl.col("state"), pl.col("year")], separator="_"))
    back = separate(joined, "state_year", "_", ["s", "y"])
    assert back.column("s").to_list() == t.column("state").to_list()
    assert back.column("y").to_list() == t.column("year").to_list()


def test_separate_positions() -> None:
    t = Table({"year": ["2008", "2015"]})
    out = separate(t, "year", [2], ["century", "endpart"])
    assert out.rows() == [
        {"century": "20", "endpart": "08"},
        {"century": "20", "endpart": "15"},
    ]
    assert separate(t, "year", [-1], ["head", "last"]).column("last").to_list() == ["8", "5"]


def test_separate_position_past_end() -> None:
    with pytest.raises(MalformedValue):
        separate(Table({"year": ["2008", "9"]}), "year", [2], ["a", "b"])


def test_separate_mismatch_policies() -> None:
    t = Table({"v": ["a_b_c", "a"]})
    with pytest.raises(MalformedValue):
        separate(t, "v", "_", ["x", "y"])
    with pytest.raises(MalformedValue):
        separate(t, "v", "_", ["x", "y"], on_mismatch="pad")

    short = Table({"v": ["a_b", "a"]})
    padded = separate(short, "v", "_", ["x", "y"], on_mismatch="pad")
    assert padded.column("y").to_list() == ["b", None]

    long = Table({"v": ["a_b_c", "a_b"]})
    cut = separate(long, "v", "_", ["x", "y"], on_mismatch="truncate")
    assert cut.column("y").to_list() == ["b", "b"]


def test_separate_nulls_pass_through() -> None:
    t = Table({"v": ["a_b", None]})
    out = separate(t, "v", "_", ["x", "y"])
    assert out.rows()[1] == {"x": None, "y": None}


def test_separate_argument_errors() -> None:
    t = Table({"v": ["a_b"], "n": [1]})
    with pytest.raises(ColumnNotFound):
        separate(t, "w", "_", ["x", "y"])
    with pytest.raises(TypeMismatch):
        separate(t, "n", "_", ["x", "y"])
    with pytest.raises(ValueError):
        separate(t, "v", "_", ["x", "x"])
    with pytest.raises(ValueError):
        separate(t, "v", [1, 2], ["x", "y"])
