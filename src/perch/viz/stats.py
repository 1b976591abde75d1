"""
Derived-data computations for layers that do not draw raw rows.

- linear_fit(): ordinary least squares of y on x per group, evaluated on an even x grid.
- boxplot_stats(): quartiles, 1.5×IQR whiskers and outliers per x group.
- axis transforms used for fitting on (and filtering to) a transformed scale.

All functions are Polars-in / Polars-out and pure.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from typing import Any

import polars as pl

from perch.core.constants import FIT_POINTS
from perch.core.errors import TypeMismatch

__all__ = [
    "FIT_POINTS",
    "ols",
    "linear_fit",
    "boxplot_stats",
    "domain_filter",
    "forward",
    "inverse",
]

logger = logging.getLogger(__name__)

_FORWARD: dict[str, Callable[[float], float]] = {
    "identity": lambda v: v,
    "reverse": lambda v: v,
    "log10": math.log10,
    "sqrt": math.sqrt,
}
_INVERSE: dict[str, Callable[[float], float]] = {
    "identity": lambda v: v,
    "reverse": lambda v: v,
    "log10": lambda v: 10.0**v,
    "sqrt": lambda v: v * v,
}


def forward(transform: str) -> Callable[[float], float]:
    return _FORWARD[transform]


def inverse(transform: str) -> Callable[[float], float]:
    return _INVERSE[transform]


def domain_filter(column: str, transform: str) -> pl.Expr | None:
    """Expression keeping rows inside the transform's domain (None when every value is valid)."""
    if transform == "log10":
        return pl.col(column) > 0
    if transform == "sqrt":
        return pl.col(column) >= 0
    return None


def _require_numeric(df: pl.DataFrame, *columns: str) -> None:
    for c in columns:
        if not df.schema[c].is_numeric():
            raise TypeMismatch(f"column {c!r} must be numeric for this geometry, got {df.schema[c]}")


def ols(xs: list[float], ys: list[float]) -> tuple[float, float]:
    """
    Ordinary least squares fit ``y = intercept + slope * x``.

    Returns:
        tuple[float, float]: (intercept, slope).

    Raises:
        ValueError: If fewer than two distinct x values are given.

    Examples:
        >>> ols([0.0, 1.0, 2.0], [1.0, 3.0, 5.0])
        (1.0, 2.0)
    """
    n = len(xs)
    if n != len(ys):
        raise ValueError("xs and ys must have equal length")
    if len(set(xs)) < 2:
        raise ValueError("need at least two distinct x values")
    mx = sum(xs) / n
    my = sum(ys) / n
    sxx = sum((x - mx) ** 2 for x in xs)
    sxy = sum((x - mx) * (y - my) for x, y in zip(xs, ys))
    slope = sxy / sxx
    return my - slope * mx, slope


def linear_fit(
    df: pl.DataFrame,
    x: str,
    y: str,
    group: str | None = None,
    *,
    x_transform: str = "identity",
    y_transform: str = "identity",
    points: int = FIT_POINTS,
) -> pl.DataFrame:
    """
    Fit one line per ``group`` value and evaluate it on ``points`` evenly spaced x values.

    The fit runs on the transformed scale; the returned x/y are back-transformed to data units so
    the renderer's scale transform places them correctly.

    Returns:
        pl.DataFrame: Columns ``[x, y]`` (+ ``group``) holding the fitted lines, groups in
        first-occurrence order. Groups with fewer than two distinct x values are skipped.

    Raises:
        TypeMismatch: If x or y is not numeric.
    """
    _require_numeric(df, x, y)
    work = df.drop_nulls([x, y])
    parts = work.partition_by(group, maintain_order=True) if group else [work]
    fx, fy = forward(x_transform), forward(y_transform)
    ix, iy = inverse(x_transform), inverse(y_transform)

    xs_out: list[float] = []
    ys_out: list[float] = []
    groups_out: list[Any] = []
    for part in parts:
        if part.is_empty():
            continue
        key = part.get_column(group)[0] if group else None
        xs = [fx(float(v)) for v in part.get_column(x).to_list()]
        ys = [fy(float(v)) for v in part.get_column(y).to_list()]
        try:
            intercept, slope = ols(xs, ys)
        except ValueError:
            logger.warning("smooth: skipping group %r (fewer than two distinct x values)", key)
            continue
        lo, hi = min(xs), max(xs)
        step = (hi - lo) / (points - 1)
        for i in range(points):
            gx = lo + step * i
            xs_out.append(ix(gx))
            ys_out.append(iy(intercept + slope * gx))
            groups_out.append(key)

    columns: dict[str, pl.Series] = {
        x: pl.Series(x, xs_out, dtype=pl.Float64),
        y: pl.Series(y, ys_out, dtype=pl.Float64),
    }
    if group:
        columns[group] = pl.Series(group, groups_out, dtype=df.schema[group])
    return pl.DataFrame(columns)


def boxplot_stats(df: pl.DataFrame, keys: list[str], y: str) -> tuple[pl.DataFrame, pl.DataFrame]:
    """
    Per-group box statistics in the ggplot2 convention.

    Args:
        df (pl.DataFrame): Layer data.
        keys (list[str]): Grouping columns (x plus any fill/color column); may be empty.
        y (str): Numeric value column.

    Returns:
        tuple[pl.DataFrame, pl.DataFrame]:
            - stats: ``keys + [ymin, lower, middle, upper, ymax]`` sorted by keys, where
              lower/middle/upper are the linear-interpolated quartiles and ymin/ymax the most
              extreme values within 1.5×IQR of the box.
            - outliers: ``keys + [y]`` rows beyond the whiskers.

    Raises:
        TypeMismatch: If ``y`` is not numeric.
    """
    _require_numeric(df, y)
    work = df.drop_nulls([y])
    agg = [
        pl.col(y).quantile(0.25, interpolation="linear").alias("lower"),
        pl.col(y).median().alias("middle"),
        pl.col(y).quantile(0.75, interpolation="linear").alias("upper"),
        pl.col(y).alias("_values"),
    ]
    if keys:
        grouped = work.group_by(keys, maintain_order=True).agg(agg).sort(keys, nulls_last=True)
    else:
        grouped = work.select([*agg[:3], pl.col(y).implode().alias("_values")])

    stats_rows: list[dict[str, Any]] = []
    outlier_rows: list[dict[str, Any]] = []
    for rec in grouped.iter_rows(named=True):
        values = rec.pop("_values") or []
        if not values:
            continue
        lower, upper = float(rec["lower"]), float(rec["upper"])
        fence = 1.5 * (upper - lower)
        inside = [v for v in values if lower - fence <= v <= upper + fence]
        key = {k: rec[k] for k in keys}
        stats_rows.append(
            {
                **key,
                "ymin": float(min(inside)),
                "lower": lower,
                "middle": float(rec["middle"]),
                "upper": upper,
                "ymax": float(max(inside)),
            }
        )
        outlier_rows.extend({**key, y: v} for v in values if v < lower - fence or v > upper + fence)

    key_schema = {k: df.schema[k] for k in keys}
    stats = pl.DataFrame(
        stats_rows,
        schema={
            **key_schema,
            "ymin": pl.Float64,
            "lower": pl.Float64,
            "middle": pl.Float64,
            "upper": pl.Float64,
            "ymax": pl.Float64,
        },
        orient="row",
    )
    outliers = pl.DataFrame(outlier_rows, schema={**key_schema, y: df.schema[y]}, orient="row")
    return stats, outliers
