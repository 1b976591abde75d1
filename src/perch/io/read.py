"""
Read utilities for delimited data files.

Overview
- TableDescriptor: frozen declaration of required columns and their scalar dtypes.
- EBIRD_DESCRIPTOR: the eBird workshop layout (state, year, species, samplesize, presence).
- read_table(): read a CSV with Polars, validate it against a descriptor, return a Table.

Validation
- Required columns must be present.
- Scalar columns ("i64", "f64", "str") whose inferred dtype differs are cast; a cast that would
  turn a non-null value into null (e.g. "abc" -> i64) fails rather than losing data.
- Extra columns are kept unless ``strict=True``.

Notes
- Every failure raises ReadError with the underlying cause chained.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import polars as pl

from perch.core.table import Table

from .errors import ReadError

__all__ = [
    "TableDescriptor",
    "EBIRD_DESCRIPTOR",
    "validate_frame",
    "read_table",
]

logger = logging.getLogger(__name__)

# Polars dtype classes are singleton-like; keep the mapping loosely typed.
_DTYPE_MAP: dict[str, object] = {
    "i64": pl.Int64,
    "f64": pl.Float64,
    "str": pl.Utf8,
}


@dataclass(frozen=True)
class TableDescriptor:
    """
    Frozen descriptor for a tabular data file.

    Attributes:
        name (str): Human-readable name used in error messages.
        columns (dict[str, str]): column -> dtype where dtype ∈ {"i64", "f64", "str"}.
        required (list[str]): Columns that must be present.

    Examples:
        >>> "samplesize" in EBIRD_DESCRIPTOR.columns
        True
    """

    name: str
    columns: dict[str, str]
    required: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        unknown = {c: d for c, d in self.columns.items() if d not in _DTYPE_MAP}
        if unknown:
            raise ValueError(f"unsupported descriptor dtypes: {unknown!r}")
        missing = [c for c in self.required if c not in self.columns]
        if missing:
            raise ValueError(f"required columns not declared in columns: {missing!r}")


EBIRD_DESCRIPTOR = TableDescriptor(
    name="ebird",
    columns={
        "state": "str",
        "year": "i64",
        "species": "str",
        "samplesize": "f64",
        "presence": "f64",
    },
    required=["state", "year", "species", "samplesize", "presence"],
)


def _ensure_columns_present(df: pl.DataFrame, needed: Iterable[str], name: str) -> None:
    missing = [c for c in needed if c not in df.columns]
    if missing:
        raise ReadError(f"{name}: missing required columns: {missing!r} (found={df.columns!r})")


def _safe_cast(df: pl.DataFrame, col: str, target: object, name: str) -> pl.DataFrame:
    cast = df.get_column(col).cast(target, strict=False)  # type: ignore[arg-type]
    lost = cast.is_null() & df.get_column(col).is_not_null()
    if lost.any():
        bad = df.get_column(col).filter(lost).head(3).to_list()
        raise ReadError(f"{name}: column {col!r} cannot be read as {target}: e.g. {bad!r}")
    return df.with_columns(cast)


def validate_frame(df: pl.DataFrame, desc: TableDescriptor, *, strict: bool = False) -> pl.DataFrame:
    """
    Validate a Polars DataFrame against a TableDescriptor.

    Args:
        df (pl.DataFrame): Frame to validate.
        desc (TableDescriptor): Expected layout.
        strict (bool): Reject columns not declared by the descriptor when True.

    Returns:
        pl.DataFrame: Possibly with safe casts applied.

    Raises:
        ReadError: Missing required columns, undeclared columns under strict mode, or values that
            cannot be cast to the declared dtype.
    """
    _ensure_columns_present(df, desc.required, desc.name)
    if strict:
        extras = [c for c in df.columns if c not in desc.columns]
        if extras:
            raise ReadError(f"{desc.name}: unexpected columns present: {extras!r}")
    for col, dtype_name in desc.columns.items():
        if col not in df.columns:
            continue
        expected = _DTYPE_MAP[dtype_name]
        if df.schema[col] != expected:
            df = _safe_cast(df, col, expected, desc.name)
    return df


def read_table(
    path: str | os.PathLike[str],
    descriptor: TableDescriptor | None = EBIRD_DESCRIPTOR,
    *,
    separator: str = ",",
    strict: bool = False,
) -> Table:
    """
    Read a delimited file into a Table.

    Args:
        path (str | PathLike): File to read.
        descriptor (TableDescriptor | None): Expected layout; None skips validation.
        separator (str): Field delimiter.
        strict (bool): Reject undeclared columns.

    Returns:
        Table: Validated table; column order follows the file.

    Raises:
        ReadError: File missing or unparsable, or descriptor validation failed.

    Examples:
        >>> ebird = read_table("eBird_workshop.csv")  # doctest: +SKIP
    """
    p = Path(path)
    if not p.is_file():
        raise ReadError(f"data file not found: {p}")
    try:
        df = pl.read_csv(p, separator=separator, infer_schema_length=None, null_values=["NA", ""])
    except (OSError, pl.exceptions.PolarsError) as exc:
        raise ReadError(f"cannot parse {p}: {exc}") from exc
    if descriptor is not None:
        df = validate_frame(df, descriptor, strict=strict)
    logger.debug("read %s: %d rows x %d columns", p, df.height, df.width)
    return Table(df)
