"""
Split one string column into several.

Two splitting modes:
- Delimiter: ``sep="_"`` splits ``"AK_2008"`` into ``("AK", "2008")``. The delimiter is a literal
  string, not a regular expression.
- Positions: ``sep=[2]`` splits ``"2008"`` into ``("20", "08")``. Negative positions count from the
  end of the value.

Mismatch policy (``on_mismatch``)
- "error" (default): any value that does not split into exactly ``len(into)`` pieces raises
  MalformedValue.
- "pad": too few pieces are null-padded on the right; too many still raise.
- "truncate": surplus pieces are dropped; too few still raise.

Position splits always yield ``len(sep) + 1`` pieces; a value shorter than a split position
raises MalformedValue regardless of policy. Null values yield nulls in every new column.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

import polars as pl

from perch.core.errors import MalformedValue, TypeMismatch
from perch.core.table import Table

__all__ = [
    "MismatchPolicy",
    "separate",
]

MismatchPolicy = Literal["error", "pad", "truncate"]


def _split_delimited(
    value: str, sep: str, n: int, policy: MismatchPolicy, row: int
) -> list[str | None]:
    parts: list[str | None] = list(value.split(sep))
    if len(parts) == n:
        return parts
    if len(parts) > n and policy == "truncate":
        return parts[:n]
    if len(parts) < n and policy == "pad":
        return parts + [None] * (n - len(parts))
    raise MalformedValue(
        f"row {row}: {value!r} splits into {len(parts)} pieces on {sep!r}; expected {n}"
    )


def _split_positions(value: str, positions: Sequence[int], row: int) -> list[str | None]:
    size = len(value)
    cuts = [p if p >= 0 else size + p for p in positions]
    if any(c < 0 or c > size for c in cuts) or cuts != sorted(cuts):
        raise MalformedValue(
            f"row {row}: {value!r} (length {size}) cannot be split at positions {list(positions)}"
        )
    bounds = [0, *cuts, size]
    return [value[lo:hi] for lo, hi in zip(bounds, bounds[1:])]


def separate(
    table: Table,
    column_name: str,
    sep: str | Sequence[int],
    into: Sequence[str],
    *,
    keep_original: bool = False,
    on_mismatch: MismatchPolicy = "error",
) -> Table:
    """
    Split ``column_name`` into the columns named by ``into``.

    Args:
        table (Table): Input table.
        column_name (str): String column to split.
        sep (str | Sequence[int]): Literal delimiter, or character positions to cut at.
        into (Sequence[str]): Names of the new columns, left to right.
        keep_original (bool): Keep the source column (placed before the new ones).
        on_mismatch (MismatchPolicy): How delimiter splits with the wrong piece count are handled.

    Returns:
        Table: New columns take the source column's position; existing columns named in
        ``into`` are replaced.

    Raises:
        ColumnNotFound: If ``column_name`` is absent.
        TypeMismatch: If ``column_name`` is not a string column.
        MalformedValue: If a value cannot be split per the policy.
        ValueError: If the arguments are inconsistent (empty/duplicate ``into``, position count
            not matching ``len(into) - 1``, or a kept source column named in ``into``).

    Examples:
        >>> t = Table({"state_year": ["AK_2008", "IL_2009"]})
        >>> separate(t, "state_year", "_", ["state", "year"]).rows()
        [{'state': 'AK', 'year': '2008'}, {'state': 'IL', 'year': '2009'}]
    """
    names = list(into)
    if not names:
        raise ValueError("into must name at least one column")
    if len(set(names)) != len(names):
        raise ValueError(f"into has duplicate names: {names!r}")
    if keep_original and column_name in names:
        raise ValueError(f"cannot keep {column_name!r} and also write a piece into it")
    if on_mismatch not in ("error", "pad", "truncate"):
        raise ValueError(f"unknown mismatch policy {on_mismatch!r}")

    dtype = table.dtype(column_name)
    if dtype != pl.String:
        raise TypeMismatch(f"separate() needs a string column; {column_name!r} is {dtype}")

    n = len(names)
    if isinstance(sep, str):
        if not sep:
            raise ValueError("delimiter must be a non-empty string")
    else:
        positions = [int(p) for p in sep]
        if len(positions) + 1 != n:
            raise ValueError(
                f"{len(positions)} split positions give {len(positions) + 1} pieces; into has {n}"
            )

    pieces: list[list[str | None]] = []
    for row, value in enumerate(table.column(column_name).to_list()):
        if value is None:
            pieces.append([None] * n)
        elif isinstance(sep, str):
            pieces.append(_split_delimited(value, sep, n, on_mismatch, row))
        else:
            pieces.append(_split_positions(value, positions, row))

    new_series = [
        pl.Series(name, [p[i] for p in pieces], dtype=pl.String) for i, name in enumerate(names)
    ]

    df = table.to_polars()
    out: list[pl.Series] = []
    for name in df.columns:
        if name == column_name:
            if keep_original:
                out.append(df.get_column(name))
            out.extend(new_series)
        elif name not in names:
            out.append(df.get_column(name))
    return Table(pl.DataFrame(out))
