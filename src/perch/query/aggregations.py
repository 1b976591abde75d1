"""
Per-group reductions used by ``summarize``.

Each helper returns a frozen Aggregation naming one reduction over one column. Aggregations are
validated against the grouped table when ``summarize`` runs: absent columns raise
ColumnNotFound and numeric reductions over non-numeric columns raise TypeMismatch.

Examples
```python
from perch.query import group_by, summarize
from perch.query import aggregations as agg
summarize(group_by(ebird, "state"), {"mean": agg.mean("samplesize"), "n": agg.count()})
```

Notes
- ``sum``, ``min`` and ``max`` shadow builtins inside this module, mirroring ``pl.sum`` et al.;
  import the module (``from perch.query import aggregations as agg``) rather than the names.
- Numeric reductions skip nulls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, get_args

import polars as pl

from perch.core.errors import TypeMismatch
from perch.core.table import Table

__all__ = [
    "Aggregation",
    "AggregationKind",
    "mean",
    "median",
    "count",
    "sample",
    "sum",
    "min",
    "max",
    "n_distinct",
]

AggregationKind = Literal["mean", "median", "count", "sample", "sum", "min", "max", "n_distinct"]

_NUMERIC_ONLY: frozenset[str] = frozenset({"mean", "median", "sum", "min", "max"})


@dataclass(frozen=True)
class Aggregation:
    """
    A named reduction over one column.

    Attributes:
        kind (AggregationKind): Reduction to apply per group.
        column (str | None): Source column; only ``count`` may omit it (row count).
        seed (int | None): Seed for ``sample``; None draws non-deterministically.
    """

    kind: AggregationKind
    column: str | None = None
    seed: int | None = None

    def __post_init__(self) -> None:
        if self.kind not in get_args(AggregationKind):
            raise ValueError(f"unknown aggregation kind {self.kind!r}")
        if self.column is None and self.kind != "count":
            raise ValueError(f"aggregation {self.kind!r} needs a column")

    def to_expr(self, table: Table, name: str) -> pl.Expr:
        """Validate against ``table`` and build the Polars expression aliased to ``name``."""
        if self.column is None:
            return pl.len().alias(name)

        dtype = table.dtype(self.column)
        if self.kind in _NUMERIC_ONLY and not dtype.is_numeric():
            raise TypeMismatch(
                f"{self.kind}() needs a numeric column; {self.column!r} is {dtype}"
            )

        col = pl.col(self.column)
        if self.kind == "mean":
            expr = col.mean()
        elif self.kind == "median":
            expr = col.median()
        elif self.kind == "count":
            expr = col.count()
        elif self.kind == "sample":
            # first of a shuffle is a uniform draw and null on an empty frame
            expr = col.shuffle(seed=self.seed).first()
        elif self.kind == "sum":
            expr = col.sum()
        elif self.kind == "min":
            expr = col.min()
        elif self.kind == "max":
            expr = col.max()
        else:
            expr = col.n_unique()
        return expr.alias(name)


def mean(column: str) -> Aggregation:
    return Aggregation("mean", column)


def median(column: str) -> Aggregation:
    return Aggregation("median", column)


def count(column: str | None = None) -> Aggregation:
    """Row count per group, or the non-null count of ``column`` when given."""
    return Aggregation("count", column)


def sample(column: str, seed: int | None = None) -> Aggregation:
    """One value drawn from ``column`` per group; null when there are no rows."""
    return Aggregation("sample", column, seed=seed)


def sum(column: str) -> Aggregation:
    return Aggregation("sum", column)


def min(column: str) -> Aggregation:
    return Aggregation("min", column)


def max(column: str) -> Aggregation:
    return Aggregation("max", column)


def n_distinct(column: str) -> Aggregation:
    return Aggregation("n_distinct", column)
