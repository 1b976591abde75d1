"""
Functional builder API over PlotSpec plus ggplot-style component helpers.

Every function returns a new value; nothing here mutates a spec. Both styles compose:

```python
from perch.viz.builder import new_plot, add_layer, geom_line, geom_point, facet_wrap

# explicit value passing
spec = add_layer(new_plot(abird, {"x": "year", "y": "samplesize"}), geom_line())

# additive composition
spec = new_plot(abird, {"x": "year", "y": "samplesize", "color": "state"}) \\
    + geom_line() + geom_point() + facet_wrap("state", ncol=2)
```
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from perch.core.constants import FACET_NCOL
from perch.core.table import Table

from .spec import Channel, Facet, Labels, Layer, PlotSpec, Scale, Theme, Transform

__all__ = [
    "new_plot",
    "add_layer",
    "with_facet",
    "with_scale",
    "with_theme",
    "with_labels",
    "geom_point",
    "geom_line",
    "geom_boxplot",
    "geom_smooth",
    "facet_wrap",
    "scale_x_log10",
    "scale_y_log10",
    "scale_color_manual",
    "scale_fill_manual",
    "scale_color_discrete",
    "theme",
    "labs",
]


def new_plot(table: Table, aes: Mapping[Channel, str] | None = None) -> PlotSpec:
    """Seed a PlotSpec with ``table`` and a base aesthetic mapping."""
    return PlotSpec(data=table, aes=dict(aes or {}))


def add_layer(spec: PlotSpec, layer: Layer) -> PlotSpec:
    return spec.add_layer(layer)


def with_facet(spec: PlotSpec, column: str, columns_per_row: int = FACET_NCOL) -> PlotSpec:
    return spec.with_facet(Facet(column=column, ncol=columns_per_row))


def with_scale(
    spec: PlotSpec,
    channel: Channel,
    transform: Transform = "identity",
    palette: Sequence[str] | None = None,
    title: str | None = None,
) -> PlotSpec:
    """Set the scale for ``channel`` (replacing any earlier scale on that channel)."""
    return spec.with_scale(
        Scale(
            channel=channel,
            transform=transform,
            palette=tuple(palette) if palette is not None else None,
            title=title,
        )
    )


def with_theme(spec: PlotSpec, theme_or_overrides: Theme | str | Mapping[str, Any]) -> PlotSpec:
    """Replace the theme (Theme or preset name) or merge element overrides onto it."""
    return spec.with_theme(theme_or_overrides)


def with_labels(
    spec: PlotSpec, x: str | None = None, y: str | None = None, title: str | None = None
) -> PlotSpec:
    return spec.with_labels(Labels(x=x, y=y, title=title))


# ----------------------------
# Component helpers
# ----------------------------


def _layer(
    geom: str, aes: Mapping[Channel, str] | None, data: Table | None, inherit_aes: bool, fixed: dict
) -> Layer:
    return Layer(
        geom=geom,  # type: ignore[arg-type]
        aes=dict(aes or {}),
        fixed=fixed,
        data=data,
        inherit_aes=inherit_aes,
    )


def geom_point(
    aes: Mapping[Channel, str] | None = None,
    *,
    data: Table | None = None,
    inherit_aes: bool = True,
    **fixed: Any,
) -> Layer:
    """Point layer; keyword arguments set fixed values, e.g. ``geom_point(color="red", size=2)``."""
    return _layer("point", aes, data, inherit_aes, fixed)


def geom_line(
    aes: Mapping[Channel, str] | None = None,
    *,
    data: Table | None = None,
    inherit_aes: bool = True,
    **fixed: Any,
) -> Layer:
    return _layer("line", aes, data, inherit_aes, fixed)


def geom_boxplot(
    aes: Mapping[Channel, str] | None = None,
    *,
    data: Table | None = None,
    inherit_aes: bool = True,
    **fixed: Any,
) -> Layer:
    return _layer("boxplot", aes, data, inherit_aes, fixed)


def geom_smooth(
    aes: Mapping[Channel, str] | None = None,
    *,
    method: str = "lm",
    data: Table | None = None,
    inherit_aes: bool = True,
    **fixed: Any,
) -> Layer:
    """Linear-fit overlay, one line per color/fill/group value."""
    return Layer(
        geom="smooth",
        aes=dict(aes or {}),
        fixed=fixed,
        data=data,
        inherit_aes=inherit_aes,
        method=method,  # type: ignore[arg-type]
    )


def facet_wrap(column: str, ncol: int = FACET_NCOL) -> Facet:
    return Facet(column=column, ncol=ncol)


def scale_x_log10(title: str | None = None) -> Scale:
    return Scale(channel="x", transform="log10", title=title)


def scale_y_log10(title: str | None = None) -> Scale:
    return Scale(channel="y", transform="log10", title=title)


def scale_color_manual(values: Sequence[str], title: str | None = None) -> Scale:
    return Scale(channel="color", palette=tuple(values), title=title)


def scale_fill_manual(values: Sequence[str], title: str | None = None) -> Scale:
    return Scale(channel="fill", palette=tuple(values), title=title)


def scale_color_discrete(title: str | None = None) -> Scale:
    """Default discrete colour scale; used to retitle the legend."""
    return Scale(channel="color", title=title)


def theme(name: str | None = None, **elements: Any) -> Theme:
    """
    Build a Theme from a preset name and/or element overrides.

    Without ``name`` the result is incomplete: added to a spec, it only overrides elements of
    the current theme (``spec + theme(axis_text_x=...)``).

    Examples:
        >>> theme("economist").name
        'economist'
        >>> theme(axis_text_y={"size": 2, "color": "red"}).elements["axis_text_y"].size
        2.0
    """
    if name is None:
        return Theme(elements=elements, complete=False)
    return Theme(name=name, elements=elements)


def labs(x: str | None = None, y: str | None = None, title: str | None = None) -> Labels:
    return Labels(x=x, y=y, title=title)
