"""
Immutable, Polars-backed table used by every query and plot operation.

Responsibilities
- Hold an ordered set of uniquely named, typed columns of equal length.
- Validate column references at operation boundaries (``require``), raising ColumnNotFound.
- Hand out copies only; the backing ``pl.DataFrame`` is never exposed for mutation.

Notes
- Construction from Python values is strict: a column whose values do not share one dtype
  raises TypeMismatch rather than being coerced.
- Row-wise callables receive a ``Row``, a read-only mapping whose missing keys raise
  ColumnNotFound instead of KeyError.

Examples
```python
from perch.core.table import Table
t = Table.from_rows([
    {"state": "AK", "year": 2008, "samplesize": 10.0},
    {"state": "AZ", "year": 2008, "samplesize": 5.0},
])
t.columns        # ('state', 'year', 'samplesize')
t.height         # 2
t.column("state").to_list()  # ['AK', 'AZ']
```
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import polars as pl

from .errors import ColumnNotFound, TypeMismatch

__all__ = [
    "Row",
    "Table",
]


class Row(Mapping[str, Any]):
    """Read-only view of one table row keyed by column name."""

    __slots__ = ("_values",)

    def __init__(self, values: dict[str, Any]) -> None:
        self._values = values

    def __getitem__(self, key: str) -> Any:
        try:
            return self._values[key]
        except KeyError:
            raise ColumnNotFound(key, self._values.keys()) from None

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Row({self._values!r})"


class Table:
    """
    Immutable in-memory relation (rows × named columns).

    Args:
        data (pl.DataFrame | Mapping[str, Sequence[Any]] | None): Columns to hold. A DataFrame is
            cloned; a mapping is built into a DataFrame with strict dtype inference.
        schema (Mapping[str, pl.DataType] | None): Optional explicit dtypes for mapping input.

    Raises:
        TypeMismatch: If a column's values do not share a single dtype.

    Notes:
        - Every transformation in perch.query returns a new Table.
        - Equality is value equality over column names, dtypes and cell values.
    """

    __slots__ = ("_df",)

    def __init__(
        self,
        data: pl.DataFrame | Mapping[str, Sequence[Any]] | None = None,
        *,
        schema: Mapping[str, Any] | None = None,
    ) -> None:
        if isinstance(data, pl.DataFrame):
            df = data.clone()
        else:
            try:
                df = pl.DataFrame(data, schema=schema, strict=True)
            except (TypeError, pl.exceptions.PolarsError) as exc:
                raise TypeMismatch(f"cannot build table: {exc}") from exc
        object.__setattr__(self, "_df", df)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Table is immutable")

    # ---------- constructors ----------

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Mapping[str, Any]],
        schema: Mapping[str, Any] | None = None,
    ) -> Table:
        """Build a Table from row mappings; all rows are scanned for dtype inference."""
        if not rows and schema is None:
            return cls(pl.DataFrame())
        try:
            df = pl.from_dicts(list(rows), schema=schema, infer_schema_length=None)
        except (TypeError, pl.exceptions.PolarsError) as exc:
            raise TypeMismatch(f"cannot build table from rows: {exc}") from exc
        return cls(df)

    @classmethod
    def from_polars(cls, df: pl.DataFrame) -> Table:
        return cls(df)

    # ---------- typed accessors ----------

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._df.columns)

    @property
    def schema(self) -> dict[str, pl.DataType]:
        return dict(self._df.schema)

    @property
    def height(self) -> int:
        return self._df.height

    @property
    def width(self) -> int:
        return self._df.width

    def __len__(self) -> int:
        return self._df.height

    def require(self, *names: str) -> None:
        """Raise ColumnNotFound for the first name not present in this table."""
        for name in names:
            if name not in self._df.columns:
                raise ColumnNotFound(name, self._df.columns)

    def dtype(self, name: str) -> pl.DataType:
        self.require(name)
        return self._df.schema[name]

    def column(self, name: str) -> pl.Series:
        """Return a copy of one column as a Series."""
        self.require(name)
        return self._df.get_column(name).clone()

    def rows(self) -> list[dict[str, Any]]:
        return self._df.to_dicts()

    def iter_rows(self) -> Iterator[Row]:
        for values in self._df.iter_rows(named=True):
            yield Row(values)

    def to_polars(self) -> pl.DataFrame:
        """Return a copy of the backing frame."""
        return self._df.clone()

    # ---------- value semantics ----------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self._df.schema == other._df.schema and self._df.equals(other._df)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Table({self.height} rows x {self.width} columns)\n{self._df}"
