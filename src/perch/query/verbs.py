"""
Row and column verbs over immutable Tables.

Overview
- filter(): keep rows satisfying a predicate (Polars expression or Row callable).
- select()/distinct(): project columns, optionally de-duplicating rows.
- mutate(): append or overwrite one column computed from existing ones.
- arrange()/head()/tail(): stable ordering and inspection helpers.

Failure policy
- Unknown column references raise ColumnNotFound before any work is done.
- Dtype problems raise TypeMismatch; nothing is coerced.
- Inputs are never modified; each call returns a new Table or raises.

Notes
- Expressions are checked against the table via ``Expr.meta.root_names()`` so a misspelt column
  surfaces as ColumnNotFound rather than a backend error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import polars as pl

from perch.core.constants import HEAD_ROWS
from perch.core.errors import ColumnNotFound, TypeMismatch
from perch.core.table import Table
from perch.core.typing import RowFunction, RowPredicate

__all__ = [
    "filter",
    "select",
    "distinct",
    "mutate",
    "arrange",
    "head",
    "tail",
]

logger = logging.getLogger(__name__)

_BACKEND_TYPE_ERRORS = (
    pl.exceptions.InvalidOperationError,
    pl.exceptions.ComputeError,
    pl.exceptions.SchemaError,
)


def _as_names(columns: str | Sequence[str]) -> list[str]:
    if isinstance(columns, str):
        return [columns]
    return list(dict.fromkeys(columns))


def _check_expr_columns(table: Table, expr: pl.Expr) -> None:
    table.require(*expr.meta.root_names())


def _evaluate(df: pl.DataFrame, expr: pl.Expr, name: str) -> pl.Series:
    try:
        return df.select(expr.alias(name)).to_series()
    except pl.exceptions.ColumnNotFoundError as exc:
        raise ColumnNotFound(str(exc).splitlines()[0], df.columns) from exc
    except _BACKEND_TYPE_ERRORS as exc:
        raise TypeMismatch(str(exc).splitlines()[0]) from exc


def filter(table: Table, predicate: RowPredicate) -> Table:
    """
    Retain rows satisfying ``predicate``; order and columns are preserved.

    Args:
        table (Table): Input table.
        predicate (pl.Expr | Callable[[Row], bool]): Boolean expression, or a callable that
            returns a bool for each Row. Null expression results drop the row.

    Returns:
        Table: Rows for which the predicate holds.

    Raises:
        ColumnNotFound: If the predicate references an absent column.
        TypeMismatch: If the predicate does not produce booleans or compares mismatched dtypes.

    Examples:
        >>> import polars as pl
        >>> t = Table({"state": ["AK", "AZ", "AL"], "year": [2008, 2009, 2008]})
        >>> filter(t, pl.col("state").is_in(["AK", "AZ"])).height
        2
        >>> filter(t, lambda row: row["year"] == 2008).height
        2
    """
    df = table.to_polars()
    if isinstance(predicate, pl.Expr):
        _check_expr_columns(table, predicate)
        mask = _evaluate(df, predicate, "__mask__")
        if mask.dtype != pl.Boolean:
            raise TypeMismatch(f"predicate must yield booleans, got {mask.dtype}")
        if mask.len() == 1 and df.height != 1:
            mask = pl.repeat(mask[0], df.height, eager=True, dtype=pl.Boolean)
    elif callable(predicate):
        flags: list[bool] = []
        for i, row in enumerate(table.iter_rows()):
            flag = predicate(row)
            if not isinstance(flag, bool):
                raise TypeMismatch(
                    f"predicate returned {type(flag).__name__} for row {i}; expected bool"
                )
            flags.append(flag)
        mask = pl.Series("__mask__", flags, dtype=pl.Boolean)
    else:
        raise TypeMismatch(f"predicate must be a polars expression or callable, got {predicate!r}")

    out = df.filter(mask)
    logger.debug("filter kept %d of %d rows", out.height, df.height)
    return Table(out)


def select(table: Table, columns: str | Sequence[str]) -> Table:
    """Keep only ``columns``, in the requested order. Raises ColumnNotFound for absent names."""
    names = _as_names(columns)
    table.require(*names)
    return Table(table.to_polars().select(names))


def distinct(table: Table, columns: str | Sequence[str] | None = None) -> Table:
    """
    Unique rows in first-occurrence order.

    When ``columns`` is given the result holds only those columns (dplyr ``distinct(state)``).
    """
    df = table.to_polars()
    if columns is not None:
        names = _as_names(columns)
        table.require(*names)
        df = df.select(names)
    return Table(df.unique(maintain_order=True))


def mutate(table: Table, column_name: str, fn: RowFunction) -> Table:
    """
    Append ``column_name`` (or overwrite it in place) with values computed from existing columns.

    Args:
        table (Table): Input table.
        column_name (str): Output column; an existing column keeps its position.
        fn (pl.Expr | Callable[[Row], Any]): Column expression, or a callable evaluated per Row.

    Returns:
        Table: New table with the computed column.

    Raises:
        ColumnNotFound: If ``fn`` references an absent column.
        TypeMismatch: If the computed values do not share one dtype, or the expression applies
            an operation to an incompatible dtype.

    Examples:
        >>> import polars as pl
        >>> t = Table({"state": ["AK", "IL"], "year": [2008, 2009]})
        >>> mutate(
        ...     t,
        ...     "state_year",
        ...     pl.concat_str([pl.col("state"), pl.col("year").cast(pl.String)], separator="_"),
        ... ).column("state_year").to_list()
        ['AK_2008', 'IL_2009']
    """
    df = table.to_polars()
    if isinstance(fn, pl.Expr):
        _check_expr_columns(table, fn)
        values = _evaluate(df, fn, column_name)
        if values.len() == 1 and df.height != 1:
            values = pl.repeat(values[0], df.height, eager=True, dtype=values.dtype).alias(
                column_name
            )
    elif callable(fn):
        computed: list[Any] = [fn(row) for row in table.iter_rows()]
        try:
            values = pl.Series(column_name, computed, strict=True)
        except (TypeError, pl.exceptions.PolarsError) as exc:
            raise TypeMismatch(f"values for {column_name!r} do not share one dtype: {exc}") from exc
    else:
        raise TypeMismatch(f"fn must be a polars expression or callable, got {fn!r}")

    return Table(df.with_columns(values))


def arrange(
    table: Table,
    columns: str | Sequence[str],
    descending: bool | Sequence[bool] = False,
) -> Table:
    """Stable sort by ``columns``; nulls sort last."""
    names = _as_names(columns)
    table.require(*names)
    df = table.to_polars().sort(names, descending=descending, nulls_last=True, maintain_order=True)
    return Table(df)


def head(table: Table, n: int = HEAD_ROWS) -> Table:
    return Table(table.to_polars().head(n))


def tail(table: Table, n: int = HEAD_ROWS) -> Table:
    return Table(table.to_polars().tail(n))
