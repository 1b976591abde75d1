"""
Grouping, summarising and per-group sampling.

Overview
- group_by(): partition rows by equal key tuples; groups keep first-occurrence order.
- summarize(): one output row per group (key columns + aggregation outputs).
- sample_n(): draw n rows per group without replacement, seeded for reproducibility.

Notes
- A GroupedTable is a frozen value: the source Table, its key columns, and the row indices of
  each group. Sampling builds a new Table holding only the drawn rows (in group order) and
  regroups it, so summarize() works identically on sampled and unsampled inputs.
- ``sample_n(seed=None)`` is deliberately non-deterministic; pass an integer seed in tests and
  reproducible pipelines.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import polars as pl

from perch.core.errors import InsufficientRows
from perch.core.table import Table

from .aggregations import Aggregation

__all__ = [
    "GroupedTable",
    "group_by",
    "summarize",
    "sample_n",
]

logger = logging.getLogger(__name__)

GroupKey = tuple[Any, ...]


def _free_name(columns: Sequence[str], base: str) -> str:
    name = base
    while name in columns:
        name = f"_{name}"
    return name


def _take(df: pl.DataFrame, rows: Sequence[int]) -> pl.DataFrame:
    return df.select(pl.all().gather(pl.Series(list(rows), dtype=pl.Int64)))


def _partition(table: Table, keys: tuple[str, ...]) -> tuple[tuple[GroupKey, tuple[int, ...]], ...]:
    if table.height == 0:
        return ()
    if not keys:
        return (((), tuple(range(table.height))),)
    df = table.to_polars()
    idx = _free_name(df.columns, "__row__")
    parts = (
        df.with_row_index(idx)
        .group_by(list(keys), maintain_order=True)
        .agg(pl.col(idx))
    )
    return tuple(
        (tuple(rec[k] for k in keys), tuple(int(i) for i in rec[idx]))
        for rec in parts.iter_rows(named=True)
    )


@dataclass(frozen=True)
class GroupedTable:
    """
    A Table partitioned by key columns.

    Attributes:
        table (Table): Source rows.
        keys (tuple[str, ...]): Grouping columns, in order.
        groups (tuple[tuple[GroupKey, tuple[int, ...]], ...]): ``(key_tuple, row_indices)`` per
            group, ordered by each key tuple's first occurrence in ``table``.
    """

    table: Table
    keys: tuple[str, ...]
    groups: tuple[tuple[GroupKey, tuple[int, ...]], ...]

    def __len__(self) -> int:
        return len(self.groups)

    def __iter__(self) -> Iterator[tuple[GroupKey, Table]]:
        df = self.table.to_polars()
        for key, rows in self.groups:
            yield key, Table(_take(df, rows))

    @property
    def group_keys(self) -> list[GroupKey]:
        return [key for key, _ in self.groups]

    def sizes(self) -> dict[GroupKey, int]:
        return {key: len(rows) for key, rows in self.groups}

    def ungroup(self) -> Table:
        return self.table


def group_by(table: Table, keys: str | Sequence[str]) -> GroupedTable:
    """
    Partition ``table`` by ``keys``.

    Args:
        table (Table): Input table.
        keys (str | Sequence[str]): One or more key column names. An empty sequence yields a
            single group holding every row.

    Returns:
        GroupedTable: Groups in order of first occurrence of each distinct key tuple.

    Raises:
        ColumnNotFound: If a key column is absent.
    """
    names = (keys,) if isinstance(keys, str) else tuple(dict.fromkeys(keys))
    table.require(*names)
    grouped = GroupedTable(table=table, keys=names, groups=_partition(table, names))
    logger.debug("group_by %s -> %d groups", list(names), len(grouped))
    return grouped


def summarize(grouped: GroupedTable, aggregations: Mapping[str, Aggregation]) -> Table:
    """
    Reduce each group to one row.

    Args:
        grouped (GroupedTable): Grouped input.
        aggregations (Mapping[str, Aggregation]): Output column name -> reduction, in output order.

    Returns:
        Table: Key columns followed by aggregation outputs; one row per group in group order.

    Raises:
        ColumnNotFound: If an aggregation names an absent column.
        TypeMismatch: If a numeric reduction targets a non-numeric column.
        ValueError: If an output name repeats a key column.

    Examples:
        >>> from perch.query import aggregations as agg
        >>> t = Table({"state": ["AK", "AK", "AZ"], "samplesize": [10, 20, 5]})
        >>> summarize(group_by(t, "state"), {"mean": agg.mean("samplesize")}).rows()
        [{'state': 'AK', 'mean': 15.0}, {'state': 'AZ', 'mean': 5.0}]
    """
    clash = [name for name in aggregations if name in grouped.keys]
    if clash:
        raise ValueError(f"aggregation outputs collide with key columns: {clash!r}")

    table = grouped.table
    exprs = [agg.to_expr(table, name) for name, agg in aggregations.items()]
    df = table.to_polars()
    if grouped.keys:
        out = df.group_by(list(grouped.keys), maintain_order=True).agg(exprs)
    else:
        out = df.select(exprs)
    return Table(out)


def sample_n(grouped: GroupedTable, n: int, seed: int | None = None) -> GroupedTable:
    """
    Draw ``n`` rows per group without replacement.

    Args:
        grouped (GroupedTable): Grouped input.
        n (int): Rows to draw from each group (>= 0).
        seed (int | None): Seed for the draw; None uses fresh OS entropy (non-deterministic).

    Returns:
        GroupedTable: Drawn rows grouped by the same keys, groups in the same order.

    Raises:
        InsufficientRows: If any group has fewer than ``n`` rows.
        ValueError: If ``n`` is negative.
    """
    if n < 0:
        raise ValueError(f"n must be >= 0, got {n}")
    short = [(key, len(rows)) for key, rows in grouped.groups if len(rows) < n]
    if short:
        key, size = short[0]
        raise InsufficientRows(f"group {key!r} has {size} rows; cannot sample {n} without replacement")

    rng = random.Random(seed)
    picked: list[int] = []
    for _, rows in grouped.groups:
        picked.extend(rng.sample(rows, n))

    df = grouped.table.to_polars()
    return group_by(Table(_take(df, picked)), grouped.keys)
