"""
Resolution of a PlotSpec into a concrete, backend-neutral RenderPlan.

Responsibilities
- Merge base and layer aesthetics; validate every referenced column against the data each layer
  actually sees (ColumnNotFound) before anything is computed.
- Check manual palettes against the distinct values they must cover (PaletteTooSmall).
- Partition layer data into facet panels (sorted facet values, nulls last, tiled row-major).
- Compute per-panel derived data: linear fits for "smooth", box statistics for "boxplot",
  x-ordered rows for "line", mapped columns for "point".
- Drop rows outside a log10/sqrt axis domain, and rows missing x/y, with a logged warning.

Failure policy
- All validation runs before any panel is built; a failing resolve returns nothing.

Notes
- The plan carries Tables, not Altair objects; perch.viz.render is the only Altair consumer.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import polars as pl

from perch.core.errors import ColumnNotFound, PaletteTooSmall, TypeMismatch
from perch.core.table import Table

from .base import MeasurementType, measurement_type
from .spec import Channel, Geometry, Labels, Layer, PlotSpec, Theme, Transform
from .stats import boxplot_stats, domain_filter, linear_fit

__all__ = [
    "Encoding",
    "Primitive",
    "Panel",
    "ResolvedScale",
    "RenderPlan",
    "resolve",
    "merge_aes",
]

logger = logging.getLogger(__name__)

# Channels whose mapped column splits a smooth fit into several lines, in priority order.
_GROUPING_CHANNELS: tuple[Channel, ...] = ("color", "fill", "group")
_LEGEND_CHANNELS: tuple[Channel, ...] = ("color", "fill", "shape", "size", "alpha")
_REQUIRED: dict[str, tuple[Channel, ...]] = {
    "point": ("x", "y"),
    "line": ("x", "y"),
    "smooth": ("x", "y"),
    "boxplot": ("y",),
}


@dataclass(frozen=True)
class Encoding:
    """A channel bound to a column of the primitive's data, with its measurement type."""

    channel: Channel
    field: str
    kind: MeasurementType


@dataclass(frozen=True)
class Primitive:
    """
    One layer's drawable contribution to one panel.

    Attributes:
        layer (int): Index of the source layer (draw order).
        geom (Geometry): Geometry to draw.
        encodings (dict[Channel, Encoding]): Mapped channels.
        fixed (dict[Channel, str | float]): Constant visual values.
        data (Table): Rows to draw; for "boxplot" the per-group statistics
            (ymin, lower, middle, upper, ymax), for "smooth" the fitted line.
        outliers (Table | None): Boxplot outlier rows; None for other geometries.
    """

    layer: int
    geom: Geometry
    encodings: dict[Channel, Encoding]
    fixed: dict[Channel, Any]
    data: Table
    outliers: Table | None = None


@dataclass(frozen=True)
class Panel:
    value: Any
    row: int
    col: int
    primitives: tuple[Primitive, ...]


@dataclass(frozen=True)
class ResolvedScale:
    channel: Channel
    transform: Transform = "identity"
    title: str | None = None
    domain: tuple[Any, ...] | None = None
    palette: tuple[str, ...] | None = None


@dataclass(frozen=True)
class RenderPlan:
    """
    Fully resolved plot: panels in row-major order plus scales, theme and labels.

    Attributes:
        panels (tuple[Panel, ...]): One panel per facet value (or a single panel).
        nrow (int): Panel grid rows.
        ncol (int): Panel grid columns.
        facet_column (str | None): Facet column, if faceted.
        scales (dict[Channel, ResolvedScale]): Scales for every channel in use, titles resolved.
        theme (Theme): Theme to apply at render time.
        labels (Labels): Plot labels (title is read from here).
        base_encodings (dict[Channel, Encoding]): Encodings of the base mapping, used to draw
            axes for a plot without layers.
    """

    panels: tuple[Panel, ...]
    nrow: int
    ncol: int
    facet_column: str | None
    scales: dict[Channel, ResolvedScale]
    theme: Theme
    labels: Labels
    base_encodings: dict[Channel, Encoding] = field(default_factory=dict)

    @property
    def is_faceted(self) -> bool:
        return self.facet_column is not None


def merge_aes(base: Mapping[Channel, str], layer: Layer) -> dict[Channel, str]:
    """
    Effective mapping for ``layer``: base mapping overridden per channel by the layer's own,
    minus channels the layer fixes to a constant.

    Examples:
        >>> merge_aes({"x": "year", "color": "state"}, Layer(geom="line", fixed={"color": "red"}))
        {'x': 'year'}
    """
    merged: dict[Channel, str] = dict(base) if layer.inherit_aes else {}
    merged.update(layer.aes)
    for channel in layer.fixed:
        merged.pop(channel, None)
    return merged


# ----------------------------
# Validation
# ----------------------------


def _validate_layer(
    idx: int, layer: Layer, mapping: Mapping[Channel, str], table: Table, facet: str | None
) -> None:
    table.require(*mapping.values())
    if facet is not None:
        table.require(facet)
    missing = [c for c in _REQUIRED[layer.geom] if c not in mapping]
    if missing:
        raise ValueError(f"layer {idx} ({layer.geom}) requires channel(s) {missing}")
    if layer.geom == "smooth":
        numeric = ("x", "y")
    elif layer.geom == "boxplot":
        numeric = ("y",)
    else:
        numeric = ()
    for channel in numeric:
        dtype = table.dtype(mapping[channel])
        if not dtype.is_numeric():
            raise TypeMismatch(
                f"layer {idx} ({layer.geom}): {channel} column {mapping[channel]!r} must be numeric, got {dtype}"
            )


def _validate_transforms(spec: PlotSpec, mappings: list[dict[Channel, str]], tables: list[Table]) -> None:
    for channel in ("x", "y"):
        scale = spec.scales.get(channel)  # type: ignore[call-overload]
        if scale is None or scale.transform == "identity":
            continue
        for mapping, table in zip(mappings, tables):
            if channel in mapping and not table.dtype(mapping[channel]).is_numeric():
                raise TypeMismatch(
                    f"{scale.transform} scale on {channel} needs a numeric column, "
                    f"got {mapping[channel]!r} ({table.dtype(mapping[channel])})"
                )


def _sorted_distinct(values: list[Any]) -> list[Any]:
    uniq = list(dict.fromkeys(values))
    return sorted(uniq, key=lambda v: (v is None, v))


def _palette_domains(
    spec: PlotSpec, mappings: list[dict[Channel, str]], frames: list[pl.DataFrame]
) -> dict[Channel, tuple[Any, ...]]:
    domains: dict[Channel, tuple[Any, ...]] = {}
    for channel, scale in spec.scales.items():
        if scale.palette is None:
            continue
        values: list[Any] = []
        for mapping, df in zip(mappings, frames):
            if channel in mapping:
                values.extend(df.get_column(mapping[channel]).drop_nulls().unique().to_list())
        domain = tuple(_sorted_distinct(values))
        if len(domain) > len(scale.palette):
            raise PaletteTooSmall(
                f"{channel} palette has {len(scale.palette)} value(s) but the data has "
                f"{len(domain)} distinct value(s): {list(domain)}"
            )
        domains[channel] = domain
    return domains


# ----------------------------
# Data preparation
# ----------------------------


def _drop_out_of_domain(
    idx: int, df: pl.DataFrame, mapping: Mapping[Channel, str], transforms: Mapping[str, Transform]
) -> pl.DataFrame:
    for channel in ("x", "y"):
        if channel not in mapping:
            continue
        keep = domain_filter(mapping[channel], transforms.get(channel, "identity"))  # type: ignore[arg-type]
        if keep is None:
            continue
        kept = df.filter(keep.fill_null(True))
        dropped = df.height - kept.height
        if dropped:
            logger.warning(
                "layer %d: dropped %d row(s) outside the %s domain of %s",
                idx,
                dropped,
                transforms[channel],
                mapping[channel],
            )
        df = kept
    return df


def _drop_missing_xy(idx: int, df: pl.DataFrame, mapping: Mapping[Channel, str], geom: str) -> pl.DataFrame:
    cols = [mapping[c] for c in ("x", "y") if c in mapping]
    kept = df.drop_nulls(cols)
    if kept.height < df.height:
        logger.warning(
            "layer %d (%s): removed %d row(s) containing missing values", idx, geom, df.height - kept.height
        )
    return kept


def _encodings(mapping: Mapping[Channel, str], schema: Mapping[str, pl.DataType]) -> dict[Channel, Encoding]:
    return {
        channel: Encoding(channel=channel, field=col, kind=measurement_type(schema[col]))
        for channel, col in mapping.items()
        if col in schema
    }


def _grouping_column(mapping: Mapping[Channel, str]) -> str | None:
    for channel in _GROUPING_CHANNELS:
        if channel in mapping:
            return mapping[channel]
    return None


def _primitive(
    idx: int,
    layer: Layer,
    mapping: dict[Channel, str],
    df: pl.DataFrame,
    transforms: Mapping[str, Transform],
) -> Primitive:
    geom = layer.geom
    fixed = dict(layer.fixed)
    if geom == "smooth":
        group = _grouping_column(mapping)
        fitted = linear_fit(
            df,
            mapping["x"],
            mapping["y"],
            group,
            x_transform=transforms.get("x", "identity"),
            y_transform=transforms.get("y", "identity"),
        )
        keep = {c: col for c, col in mapping.items() if c in ("x", "y") or col == group}
        return Primitive(idx, geom, _encodings(keep, fitted.schema), fixed, Table(fitted))
    if geom == "boxplot":
        keys = list(dict.fromkeys(mapping[c] for c in ("x", "fill", "color") if c in mapping))
        stats, outliers = boxplot_stats(df, keys, mapping["y"])
        encodings = _encodings(mapping, df.schema)
        if "x" in encodings:
            encodings["x"] = Encoding("x", mapping["x"], "nominal")
        return Primitive(idx, geom, encodings, fixed, Table(stats), Table(outliers))
    columns = list(dict.fromkeys(mapping.values()))
    out = df.select(columns)
    if geom == "line":
        out = out.sort(mapping["x"], maintain_order=True, nulls_last=True)
    return Primitive(idx, geom, _encodings(mapping, out.schema), fixed, Table(out))


def _panel_slice(df: pl.DataFrame, column: str, value: Any) -> pl.DataFrame:
    if value is None:
        return df.filter(pl.col(column).is_null())
    return df.filter(pl.col(column) == value)


# ----------------------------
# Scales
# ----------------------------


def _resolve_scales(
    spec: PlotSpec, mappings: list[dict[Channel, str]], domains: Mapping[Channel, tuple[Any, ...]]
) -> dict[Channel, ResolvedScale]:
    in_use: dict[Channel, str] = {}
    for mapping in [dict(spec.aes), *mappings]:
        for channel, col in mapping.items():
            in_use.setdefault(channel, col)
    labelled = {"x": spec.labels.x, "y": spec.labels.y}

    scales: dict[Channel, ResolvedScale] = {}
    for channel in ("x", "y", *_LEGEND_CHANNELS):
        scale = spec.scales.get(channel)  # type: ignore[call-overload]
        if channel not in in_use and scale is None:
            continue
        title = labelled.get(channel) or (scale.title if scale else None) or in_use.get(channel)
        scales[channel] = ResolvedScale(  # type: ignore[index]
            channel=channel,  # type: ignore[arg-type]
            transform=scale.transform if scale else "identity",
            title=title,
            domain=domains.get(channel),  # type: ignore[call-overload]
            palette=scale.palette if scale else None,
        )
    return scales


# ----------------------------
# Entry point
# ----------------------------


def resolve(spec: PlotSpec) -> RenderPlan:
    """
    Validate ``spec`` against its data and compute the panel-by-panel RenderPlan.

    Raises:
        ColumnNotFound: A mapped column or the facet column is missing from a layer's data.
        TypeMismatch: A smooth x/y, boxplot y, or log10/sqrt axis column is not numeric.
        PaletteTooSmall: A manual palette has fewer values than the distinct data it maps.
        ValueError: A layer lacks a channel its geometry requires (x/y; y for boxplot).
    """
    facet = spec.facet.column if spec.facet else None
    layers = spec.layers
    mappings = [merge_aes(spec.aes, layer) for layer in layers]
    tables = [layer.data if layer.data is not None else spec.data for layer in layers]

    if not layers:
        spec.data.require(*spec.aes.values())
    if facet is not None:
        spec.data.require(facet)
    for idx, (layer, mapping, table) in enumerate(zip(layers, mappings, tables)):
        _validate_layer(idx, layer, mapping, table, facet)
    _validate_transforms(spec, mappings, tables)

    transforms: dict[str, Transform] = {c: s.transform for c, s in spec.scales.items() if c in ("x", "y")}
    frames: list[pl.DataFrame] = []
    for idx, (layer, mapping, table) in enumerate(zip(layers, mappings, tables)):
        df = _drop_out_of_domain(idx, table.to_polars(), mapping, transforms)
        frames.append(_drop_missing_xy(idx, df, mapping, layer.geom))
    domains = _palette_domains(spec, mappings, frames)

    if facet is None:
        facet_values: list[Any] = [None]
        ncol, nrow = 1, 1
    else:
        seen: list[Any] = spec.data.column(facet).unique().to_list()
        for df in frames:
            seen.extend(df.get_column(facet).unique().to_list())
        facet_values = _sorted_distinct(seen)
        ncol = spec.facet.ncol  # type: ignore[union-attr]
        nrow = max(1, math.ceil(len(facet_values) / ncol))

    panels: list[Panel] = []
    for i, value in enumerate(facet_values):
        primitives = []
        for idx, (layer, mapping, df) in enumerate(zip(layers, mappings, frames)):
            part = df if facet is None else _panel_slice(df, facet, value)
            primitives.append(_primitive(idx, layer, mapping, part, transforms))
        panels.append(Panel(value=value, row=i // ncol, col=i % ncol, primitives=tuple(primitives)))

    plan = RenderPlan(
        panels=tuple(panels),
        nrow=nrow,
        ncol=ncol,
        facet_column=facet,
        scales=_resolve_scales(spec, mappings, domains),
        theme=spec.theme,
        labels=spec.labels,
        base_encodings=_encodings(spec.aes, spec.data.schema),
    )
    logger.debug(
        "resolved plot: %d layer(s), %d panel(s) in %dx%d grid", len(layers), len(panels), nrow, ncol
    )
    return plan
