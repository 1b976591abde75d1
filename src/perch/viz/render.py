"""
Altair rendering of a RenderPlan.

- One ``alt.LayerChart`` per panel; primitives become marks in layer order.
- Faceted plans become a wrapped ``alt.concat`` (``columns=ncol``) of titled panels with shared
  x/y scales, so panels tile row-major like ``facet_wrap``.
- Boxplots are drawn from precomputed statistics: whisker rule, IQR bar, median tick and
  outlier points.
- Theme configuration is applied at the top level unless ``configure=False`` (used when the
  chart is embedded in a grid).
"""

from __future__ import annotations

from typing import Any

import altair as alt

from perch.core.table import Table

from .base import to_values
from .resolve import Encoding, Panel, Primitive, RenderPlan, ResolvedScale
from .spec import Channel
from .themes import apply_theme, strip_title_params

__all__ = [
    "render",
    "field_ref",
]

# ggplot's default point size (1.5) lands on Vega's default point area (~30 px²).
POINT_AREA_PER_SIZE2: float = 13.0
# ggplot sizes are in mm; 1 mm = 72.27 / 25.4 pt.
PT_PER_MM: float = 72.27 / 25.4

_DEFAULT_COLOR: dict[str, str] = {
    "point": "#000000",
    "line": "#000000",
    "smooth": "#3366FF",
}
_BOX_STROKE = "#333333"


def field_ref(name: str) -> str:
    """Escape characters Vega-Lite reads as nested field access."""
    return name.replace("\\", "\\\\").replace(".", "\\.").replace("[", "\\[").replace("]", "\\]")


def _title(plan: RenderPlan, channel: Channel, fallback: str) -> str:
    rs = plan.scales.get(channel)
    return rs.title if rs is not None and rs.title else fallback


def _position_scale(rs: ResolvedScale | None, kind: str) -> alt.Scale | None:
    params: dict[str, Any] = {}
    if kind == "quantitative":
        params["zero"] = False
    if rs is not None:
        if rs.transform == "log10":
            params["type"] = "log"
        elif rs.transform == "sqrt":
            params["type"] = "sqrt"
        elif rs.transform == "reverse":
            params["reverse"] = True
    return alt.Scale(**params) if params else None


def _discrete_scale(rs: ResolvedScale | None) -> alt.Scale | None:
    if rs is None or rs.palette is None or rs.domain is None:
        return None
    return alt.Scale(domain=list(rs.domain), range=list(rs.palette[: len(rs.domain)]))


def _channel(plan: RenderPlan, enc: Encoding, *, field: str | None = None) -> Any:
    """Build the Altair channel object for one encoding (``field`` overrides the data column)."""
    rs = plan.scales.get(enc.channel)
    kw: dict[str, Any] = {"field": field_ref(field or enc.field), "type": enc.kind}
    if enc.channel in ("x", "y"):
        kw["title"] = _title(plan, enc.channel, enc.field)
        scale = _position_scale(rs, "quantitative" if field else enc.kind)
        if scale is not None:
            kw["scale"] = scale
        if field:
            kw["type"] = "quantitative"
        return (alt.X if enc.channel == "x" else alt.Y)(**kw)
    if enc.channel == "group":
        return alt.Detail(**kw)
    kw["title"] = _title(plan, enc.channel, enc.field)
    scale = _discrete_scale(rs)
    if scale is not None:
        kw["scale"] = scale
    cls = {
        "color": alt.Color,
        "fill": alt.Fill,
        "shape": alt.Shape,
        "size": alt.Size,
        "alpha": alt.Opacity,
    }[enc.channel]
    return cls(**kw)


def _encode_kwargs(plan: RenderPlan, encodings: dict[Channel, Encoding], skip: tuple[str, ...] = ()) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for channel, enc in encodings.items():
        if channel in skip:
            continue
        key = {"alpha": "opacity", "group": "detail"}.get(channel, channel)
        out[key] = _channel(plan, enc)
    return out


def _mark_kwargs(geom: str, fixed: dict[str, Any], encodings: dict[Channel, Encoding]) -> dict[str, Any]:
    kw: dict[str, Any] = {}
    if "color" in fixed:
        kw["color"] = fixed["color"]
    elif geom in _DEFAULT_COLOR and "color" not in encodings and "fill" not in encodings and "fill" not in fixed:
        kw["color"] = _DEFAULT_COLOR[geom]
    if "fill" in fixed:
        kw["fill"] = fixed["fill"]
    if "alpha" in fixed:
        kw["opacity"] = float(fixed["alpha"])
    if "size" in fixed:
        size = float(fixed["size"])
        if geom == "point":
            kw["size"] = POINT_AREA_PER_SIZE2 * size * size
        else:
            kw["strokeWidth"] = size * PT_PER_MM
    if "shape" in fixed and geom == "point":
        kw["shape"] = fixed["shape"]
    if geom == "smooth" and "strokeWidth" not in kw:
        kw["strokeWidth"] = 2
    return kw


def _base(table: Table) -> alt.Chart:
    return alt.Chart(alt.Data(values=to_values(table.to_polars())))


def _boxplot_charts(plan: RenderPlan, prim: Primitive) -> list[alt.Chart]:
    enc = prim.encodings
    y = enc["y"]
    extra = _encode_kwargs(plan, enc, skip=("y", "shape", "size", "alpha"))
    x_only = {"x": extra["x"]} if "x" in extra else {}
    stroke = prim.fixed.get("color", _BOX_STROKE)
    box_fill = {} if ("fill" in enc or "color" in enc) else {"fill": prim.fixed.get("fill", "#FFFFFF")}
    opacity = {"opacity": float(prim.fixed["alpha"])} if "alpha" in prim.fixed else {}

    whisker = _base(prim.data).mark_rule(color=stroke).encode(
        y=_channel(plan, y, field="ymin"), y2=alt.Y2(field="ymax"), **x_only
    )
    box = _base(prim.data).mark_bar(stroke=stroke, **box_fill, **opacity).encode(
        y=_channel(plan, y, field="lower"), y2=alt.Y2(field="upper"), **extra
    )
    median = _base(prim.data).mark_tick(color=stroke, thickness=2).encode(
        y=_channel(plan, y, field="middle"), **x_only
    )
    charts = [whisker, box, median]
    if prim.outliers is not None and prim.outliers.height:
        charts.append(
            _base(prim.outliers)
            .mark_point(filled=True, color=stroke)
            .encode(y=_channel(plan, y), **x_only)
        )
    return charts


def _primitive_charts(plan: RenderPlan, prim: Primitive) -> list[alt.Chart]:
    if prim.geom == "boxplot":
        return _boxplot_charts(plan, prim)
    base = _base(prim.data)
    mark_kw = _mark_kwargs(prim.geom, prim.fixed, prim.encodings)
    if prim.geom == "point":
        chart = base.mark_point(filled=True, **mark_kw)
    else:
        chart = base.mark_line(**mark_kw)
    return [chart.encode(**_encode_kwargs(plan, prim.encodings))]


def _panel_chart(plan: RenderPlan, panel: Panel, width: float | None, height: float | None) -> alt.TopLevelMixin:
    charts: list[alt.Chart] = []
    for prim in panel.primitives:
        charts.extend(_primitive_charts(plan, prim))
    if not charts:
        # No layers: draw axes from the base mapping only.
        charts.append(
            alt.Chart(alt.Data(values=[]))
            .mark_point(opacity=0)
            .encode(**_encode_kwargs(plan, plan.base_encodings))
        )
    chart: alt.TopLevelMixin = charts[0] if len(charts) == 1 else alt.layer(*charts)
    props: dict[str, Any] = {}
    if width is not None:
        props["width"] = width
    if height is not None:
        props["height"] = height
    if plan.is_faceted:
        label = "NA" if panel.value is None else str(panel.value)
        props["title"] = alt.TitleParams(label, **strip_title_params(plan.theme))
    return chart.properties(**props) if props else chart


def render(
    plan: RenderPlan,
    width: float | None = None,
    height: float | None = None,
    *,
    configure: bool = True,
) -> alt.TopLevelMixin:
    """
    Turn a RenderPlan into an Altair chart.

    Args:
        plan (RenderPlan): Output of ``perch.viz.resolve.resolve``.
        width (float | None): Panel width in pixels (Vega-Lite default when None).
        height (float | None): Panel height in pixels.
        configure (bool): Apply theme configuration; False for charts nested in a grid.

    Returns:
        alt.TopLevelMixin: A LayerChart/Chart, or a ConcatChart for faceted plans.
    """
    panels = [_panel_chart(plan, p, width, height) for p in plan.panels]
    if plan.is_faceted:
        chart: alt.TopLevelMixin = alt.concat(*panels, columns=plan.ncol).resolve_scale(x="shared", y="shared")
    else:
        chart = panels[0]
    if plan.labels.title:
        chart = chart.properties(title=plan.labels.title)
    if configure:
        chart = apply_theme(chart, plan.theme)
    return chart
