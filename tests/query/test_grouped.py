from __future__ import annotations

import pytest

from perch.core import ColumnNotFound, InsufficientRows, Table, TypeMismatch
from perch.query import group_by, head, sample_n, summarize
from perch.query import aggregations as agg


def test_group_by_first_occurrence_order(ebird: Table) -> None:
    g = group_by(ebird, "state")
    assert g.group_keys == [("AK",), ("AZ",), ("IL",)]
    assert g.sizes() == {("AK",): 3, ("AZ",): 4, ("IL",): 2}
    assert g.ungroup() is ebird
    with pytest.raises(ColumnNotFound):
        group_by(ebird, "county")


def test_summarize_mean_example() -> None:
    t = Table({"state": ["AK", "AK", "AZ"], "samplesize": [10, 20, 5]})
    out = summarize(group_by(t, "state"), {"mean": agg.mean("samplesize")})
    assert out.rows() == [{"state": "AK", "mean": 15.0}, {"state": "AZ", "mean": 5.0}]


def test_summarize_counts_add_up(ebird: Table) -> None:
    out = summarize(group_by(ebird, ["state", "year"]), {"n": agg.count()})
    assert out.columns == ("state", "year", "n")
    assert sum(out.column("n").to_list()) == ebird.height
    assert out.height == len(group_by(ebird, ["state", "year"]))


def test_summarize_several_aggregations(ebird: Table) -> None:
    out = summarize(
        group_by(ebird, "state"),
        {
            "median": agg.median("samplesize"),
            "max": agg.max("presence"),
            "species": agg.n_distinct("species"),
        },
    )
    rows = {r["state"]: r for r in out.rows()}
    assert rows["AK"]["median"] == 20.0
    assert rows["AZ"]["median"] == 11.0
    assert rows["IL"]["max"] == 0.9
    assert rows["AZ"]["species"] == 2


def test_summarize_rejects_bad_inputs(ebird: Table) -> None:
    g = group_by(ebird, "state")
    with pytest.raises(ValueError):
        summarize(g, {"state": agg.count()})
    with pytest.raises(TypeMismatch):
        summarize(g, {"mean": agg.mean("species")})
    with pytest.raises(ColumnNotFound):
        summarize(g, {"mean": agg.mean("county")})


def test_summarize_without_keys_is_one_row(ebird: Table) -> None:
    out = summarize(group_by(ebird, []), {"n": agg.count()})
    assert out.rows() == [{"n": ebird.height}]


def test_summarize_empty_table_without_keys(ebird: Table) -> None:
    empty = head(ebird, 0)
    out = summarize(
        group_by(empty, []),
        {"n": agg.count(), "one": agg.sample("samplesize", seed=1), "mean": agg.mean("samplesize")},
    )
    assert out.rows() == [{"n": 0, "one": None, "mean": None}]


def test_sample_n_is_seeded_and_sized(ebird: Table) -> None:
    g = group_by(ebird, "state")
    a = sample_n(g, 2, seed=7)
    b = sample_n(g, 2, seed=7)
    assert a.table == b.table
    assert a.sizes() == {("AK",): 2, ("AZ",): 2, ("IL",): 2}
    assert a.group_keys == g.group_keys
    source = ebird.rows()
    for row in a.table.rows():
        assert row in source, f"sampled row {row} not in source"


def test_sample_n_insufficient_rows(ebird: Table) -> None:
    with pytest.raises(InsufficientRows):
        sample_n(group_by(ebird, "state"), 3, seed=1)
    with pytest.raises(ValueError):
        sample_n(group_by(ebird, "state"), -1)


def test_count_column_and_sample(ebird: Table) -> None:
    t = Table({"state": ["AK", "AK", "AZ"], "presence": [0.1, None, 0.4]})
    g = group_by(t, "state")
    counts = summarize(g, {"rows": agg.count(), "seen": agg.count("presence")})
    assert counts.rows() == [
        {"state": "AK", "rows": 2, "seen": 1},
        {"state": "AZ", "rows": 1, "seen": 1},
    ]
    drawn = summarize(group_by(ebird, "state"), {"one": agg.sample("samplesize", seed=5)})
    for row in drawn.rows():
        pool = [r["samplesize"] for r in ebird.rows() if r["state"] == row["state"]]
        assert row["one"] in pool


def test_aggregation_needs_column() -> None:
    with pytest.raises(ValueError):
        agg.Aggregation("mean")
    with pytest.raises(ValueError):
        agg.Aggregation("mode", "x")  # type: ignore[arg-type]
