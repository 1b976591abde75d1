"""
perch.viz — Layered grammar-of-graphics plots over perch Tables, rendered with Altair.

## Responsibilities
- Accumulate plot descriptions as persistent PlotSpec values (builder functions or ``+``).
- Resolve a PlotSpec into a RenderPlan: validated columns, facet panels, fitted lines and box
  statistics computed with Polars.
- Render plans to Altair charts; export to HTML/JSON/PNG/SVG/PDF; arrange plots in grids.

## Public API
- builder — new_plot, add_layer, with_facet/with_scale/with_theme/with_labels, geom_* and
  component helpers (facet_wrap, scale_*, theme, labs).
- resolve — resolve() and the RenderPlan types.
- render — render() to Altair.
- save — save() by file suffix, physical units and dpi.
- grid — plot_grid().
- palettes — brewer_palette().

## Examples
```python
from perch.viz import new_plot, geom_point, geom_smooth, scale_x_log10, save

spec = (
    new_plot(ebird, {"x": "samplesize", "y": "presence", "color": "state"})
    + geom_point(alpha=0.5)
    + geom_smooth()
    + scale_x_log10()
)
save(spec, "presence.png", width=4, height=4, unit="cm", dpi=600)  # doctest: +SKIP
```
"""

from __future__ import annotations

from .builder import (
    add_layer,
    facet_wrap,
    geom_boxplot,
    geom_line,
    geom_point,
    geom_smooth,
    labs,
    new_plot,
    scale_color_discrete,
    scale_color_manual,
    scale_fill_manual,
    scale_x_log10,
    scale_y_log10,
    theme,
    with_facet,
    with_labels,
    with_scale,
    with_theme,
)
from .grid import plot_grid
from .palettes import available_palettes, brewer_palette
from .render import render
from .resolve import Encoding, Panel, Primitive, RenderPlan, ResolvedScale, resolve
from .save import save
from .spec import Facet, Labels, Layer, PlotSpec, Scale, Theme

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
    "Layer",
    "Facet",
    "Scale",
    "Theme",
    "Labels",
    "PlotSpec",
    "Encoding",
    "Primitive",
    "Panel",
    "ResolvedScale",
    "RenderPlan",
    "resolve",
    "render",
    "save",
    "plot_grid",
    "brewer_palette",
    "available_palettes",
]
