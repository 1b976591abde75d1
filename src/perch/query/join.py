"""
Relational joins between two Tables.

Semantics (dplyr-compatible)
- inner: one row per matching (left, right) pair.
- left: every left row; right columns null-filled where unmatched.
- right: every right row; left columns null-filled where unmatched.
- full: union of both; the unmatched side null-filled.

Output layout
- Columns: left columns in left order (key columns coalesced from both sides), then the right
  non-key columns in right order.
- Non-key columns present on both sides are renamed ``<name><suffixes[0]>`` (left) and
  ``<name><suffixes[1]>`` (right); default suffixes are ``("_left", "_right")``.
- Rows: left rows in left order, each followed by its right matches in right order; right-only
  rows come last, in right order.
- Null keys never match.

Notes
- Every kind is computed from one coalescing full join with row-origin markers, then filtered
  and ordered, so row order does not depend on the backend's join strategy.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import polars as pl

from perch.core.errors import JoinKeyMismatch, TypeMismatch
from perch.core.table import Table

from .grouped import _free_name

__all__ = [
    "JoinKind",
    "JoinSpec",
    "join",
    "inner_join",
    "left_join",
    "right_join",
    "full_join",
]

logger = logging.getLogger(__name__)

JoinKind = Literal["inner", "left", "right", "full"]


@dataclass(frozen=True)
class JoinSpec:
    """
    Join kind, key columns and the suffix pair for shared non-key columns.

    Attributes:
        kind (JoinKind): "inner" | "left" | "right" | "full".
        on (tuple[str, ...]): Key columns present in both tables (a single name is accepted).
        suffixes (tuple[str, str]): Left/right suffixes for shared non-key column names.

    Raises:
        ValueError: On unknown kind, empty keys, or identical suffixes.
    """

    kind: JoinKind
    on: tuple[str, ...]
    suffixes: tuple[str, str] = ("_left", "_right")

    def __post_init__(self) -> None:
        on = (self.on,) if isinstance(self.on, str) else tuple(self.on)
        object.__setattr__(self, "on", on)
        object.__setattr__(self, "suffixes", tuple(self.suffixes))
        if self.kind not in ("inner", "left", "right", "full"):
            raise ValueError(f"unknown join kind {self.kind!r}")
        if not on:
            raise ValueError("join needs at least one key column")
        if len(self.suffixes) != 2 or self.suffixes[0] == self.suffixes[1]:
            raise ValueError(f"suffixes must be two distinct strings, got {self.suffixes!r}")


def _check_keys(left: Table, right: Table, on: tuple[str, ...]) -> None:
    for key in on:
        if key not in left.columns:
            raise JoinKeyMismatch(f"join key {key!r} missing from left table {list(left.columns)!r}")
        if key not in right.columns:
            raise JoinKeyMismatch(
                f"join key {key!r} missing from right table {list(right.columns)!r}"
            )
        ldt, rdt = left.dtype(key), right.dtype(key)
        if ldt != rdt:
            raise TypeMismatch(f"join key {key!r} is {ldt} on the left but {rdt} on the right")


def join(left: Table, right: Table, spec: JoinSpec) -> Table:
    """
    Join ``left`` and ``right`` per ``spec``.

    Raises:
        JoinKeyMismatch: If a key column is absent from either side.
        TypeMismatch: If a key column has different dtypes on the two sides.
        ValueError: If suffixing would produce a name that already exists.

    Examples:
        >>> a = Table({"year": [2008, 2009], "state": ["IL", "IL"], "species": ["Sora", "Sora"]})
        >>> b = Table({"year": [2008], "state": ["IL"], "samplesize": [3]})
        >>> join(a, b, JoinSpec("full", ("year", "state"))).rows()[1]
        {'year': 2009, 'state': 'IL', 'species': 'Sora', 'samplesize': None}
    """
    on = spec.on
    _check_keys(left, right, on)

    ldf, rdf = left.to_polars(), right.to_polars()
    shared = [c for c in ldf.columns if c in rdf.columns and c not in on]
    lsuf, rsuf = spec.suffixes
    lnames = {c: f"{c}{lsuf}" if c in shared else c for c in ldf.columns}
    rnames = {c: f"{c}{rsuf}" if c in shared else c for c in rdf.columns}

    out_cols = [*lnames.values(), *(rnames[c] for c in rdf.columns if c not in on)]
    if len(set(out_cols)) != len(out_cols):
        dupes = sorted({c for c in out_cols if out_cols.count(c) > 1})
        raise ValueError(f"suffixes {spec.suffixes!r} produce duplicate column names: {dupes!r}")
    ldf = ldf.rename({c: n for c, n in lnames.items() if c != n})
    rdf = rdf.rename({c: n for c, n in rnames.items() if c != n})

    taken = [*out_cols, *on]
    left_row = _free_name(taken, "__left_row__")
    right_row = _free_name([*taken, left_row], "__right_row__")
    joined = ldf.with_row_index(left_row).join(
        rdf.with_row_index(right_row),
        on=list(on),
        how="full",
        coalesce=True,
    )
    if spec.kind == "inner":
        joined = joined.filter(pl.col(left_row).is_not_null() & pl.col(right_row).is_not_null())
    elif spec.kind == "left":
        joined = joined.filter(pl.col(left_row).is_not_null())
    elif spec.kind == "right":
        joined = joined.filter(pl.col(right_row).is_not_null())

    out = joined.sort([left_row, right_row], nulls_last=True).select(out_cols)
    logger.debug(
        "%s join on %s: %d x %d -> %d rows", spec.kind, list(on), left.height, right.height, out.height
    )
    return Table(out)


def _spec(kind: JoinKind, on: str | Sequence[str], suffixes: tuple[str, str]) -> JoinSpec:
    return JoinSpec(kind, (on,) if isinstance(on, str) else tuple(on), suffixes)


def inner_join(
    left: Table, right: Table, on: str | Sequence[str], suffixes: tuple[str, str] = ("_left", "_right")
) -> Table:
    return join(left, right, _spec("inner", on, suffixes))


def left_join(
    left: Table, right: Table, on: str | Sequence[str], suffixes: tuple[str, str] = ("_left", "_right")
) -> Table:
    return join(left, right, _spec("left", on, suffixes))


def right_join(
    left: Table, right: Table, on: str | Sequence[str], suffixes: tuple[str, str] = ("_left", "_right")
) -> Table:
    return join(left, right, _spec("right", on, suffixes))


def full_join(
    left: Table, right: Table, on: str | Sequence[str], suffixes: tuple[str, str] = ("_left", "_right")
) -> Table:
    return join(left, right, _spec("full", on, suffixes))
