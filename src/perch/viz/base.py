"""Shared helpers for turning Polars frames into Vega-Lite data and field types."""

from __future__ import annotations

import datetime as dt
from typing import Any, Literal

import polars as pl

__all__ = [
    "MeasurementType",
    "measurement_type",
    "to_values",
]

MeasurementType = Literal["quantitative", "nominal", "temporal"]


def measurement_type(dtype: pl.DataType) -> MeasurementType:
    """Numeric -> quantitative, date/time -> temporal, everything else -> nominal."""
    if dtype.is_numeric():
        return "quantitative"
    if dtype.is_temporal():
        return "temporal"
    return "nominal"


def _jsonable(v: Any) -> Any:
    if isinstance(v, (dt.datetime, dt.date, dt.time)):
        return v.isoformat()
    if isinstance(v, dt.timedelta):
        return v.total_seconds()
    return v


def to_values(df: pl.DataFrame) -> list[dict[str, Any]]:
    """Row dicts suitable for ``alt.Data(values=...)``; temporal values become ISO strings."""
    if not any(dtype.is_temporal() for dtype in df.schema.values()):
        return df.to_dicts()
    return [{k: _jsonable(v) for k, v in row.items()} for row in df.iter_rows(named=True)]
