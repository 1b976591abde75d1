"""Arrange several plots into one figure (cowplot's ``plot_grid``)."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any, Literal, Union

import altair as alt

from .render import render
from .resolve import RenderPlan, resolve
from .spec import PlotSpec
from .themes import apply_theme

__all__ = [
    "Align",
    "plot_grid",
]

logger = logging.getLogger(__name__)

Align = Literal["hv", "h", "v", "none"]
GridItem = Union[PlotSpec, RenderPlan, alt.TopLevelMixin]

_VL_ALIGN: dict[str, Any] = {
    "hv": "all",
    "h": {"row": "all", "column": "none"},
    "v": {"row": "none", "column": "all"},
    "none": "none",
}


def plot_grid(
    plots: Sequence[GridItem],
    nrow: int | None = None,
    ncol: int | None = None,
    align: Align = "hv",
    *,
    width: float | None = None,
    height: float | None = None,
) -> alt.ConcatChart:
    """
    Concatenate plots row-major into an ``nrow`` × ``ncol`` grid.

    Args:
        plots (Sequence[PlotSpec | RenderPlan | alt.TopLevelMixin]): Plots in reading order. Altair charts must
            be unconfigured (no top-level theme).
        nrow (int | None): Grid rows; derived from ``ncol`` when None.
        ncol (int | None): Grid columns; derived from ``nrow`` (or ceil(sqrt(n))) when None.
        align (Align): Axis alignment; "hv" aligns both directions, "h"/"v" align per row/column,
            "none" leaves sub-plots unaligned.
        width (float | None): Per-plot width in pixels for specs/plans.
        height (float | None): Per-plot height in pixels for specs/plans.

    Returns:
        alt.ConcatChart: One figure; the first resolved plot's theme is applied to it.

    Raises:
        ValueError: If ``plots`` is empty, ``align`` is unknown, or the grid is too small.
    """
    if not plots:
        raise ValueError("plot_grid needs at least one plot")
    if align not in _VL_ALIGN:
        raise ValueError(f"align must be one of {list(_VL_ALIGN)}, got {align!r}")
    n = len(plots)
    if ncol is None:
        ncol = math.ceil(n / nrow) if nrow else math.ceil(math.sqrt(n))
    if nrow is None:
        nrow = math.ceil(n / ncol)
    if ncol < 1 or nrow * ncol < n:
        raise ValueError(f"a {nrow}x{ncol} grid cannot hold {n} plots")

    charts: list[alt.TopLevelMixin] = []
    theme = None
    for item in plots:
        if isinstance(item, PlotSpec):
            item = resolve(item)
        if isinstance(item, RenderPlan):
            theme = theme or item.theme
            charts.append(render(item, width=width, height=height, configure=False))
        else:
            charts.append(item)

    grid = alt.concat(*charts, columns=ncol).properties(align=_VL_ALIGN[align])  # type: ignore[arg-type]
    logger.debug("plot_grid: %d plot(s) in %dx%d (align=%s)", n, nrow, ncol, align)
    return apply_theme(grid, theme) if theme is not None else grid
