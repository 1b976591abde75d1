"""
Export of plots to HTML, JSON, PNG, JPEG, SVG or PDF.

Overview
- save(): accepts a PlotSpec, a RenderPlan or an Altair chart; the format follows the file suffix
  (``.jpg`` is read as JPEG).
- Physical sizes (in, cm, mm) are converted at 72 px per inch for layout; PNG and JPEG output
  are additionally rasterised at ``dpi`` via ``scale_factor = dpi / 72``.

Converters
- HTML and JSON are written by Altair directly.
- PNG, JPEG, SVG and PDF need the optional ``vl-convert-python`` package
  (``pip install perch[export]``); its absence raises WriteError before any file is touched.

Notes
- The parent directory must exist; save() does not create directories.
"""

from __future__ import annotations

import importlib
import logging
import os
from pathlib import Path
from typing import Any, Literal, Union

import altair as alt

from perch.io.errors import WriteError

from .render import render
from .resolve import RenderPlan, resolve
from .spec import PlotSpec

__all__ = [
    "Unit",
    "FORMATS",
    "to_pixels",
    "save",
]

logger = logging.getLogger(__name__)

Unit = Literal["in", "cm", "mm", "px"]
Plottable = Union[PlotSpec, RenderPlan, alt.TopLevelMixin]

# Vega-Lite lays out in CSS pixels at 72 per inch (vl-convert's PDF/SVG unit).
PX_PER_INCH: float = 72.0

_PER_INCH: dict[str, float] = {"in": 1.0, "cm": 2.54, "mm": 25.4}
FORMATS: tuple[str, ...] = ("html", "json", "png", "jpeg", "svg", "pdf")
_ALIASES: dict[str, str] = {"jpg": "jpeg"}
_IMAGE_FORMATS = frozenset({"png", "jpeg", "svg", "pdf"})


def to_pixels(value: float, unit: Unit) -> float:
    """
    Convert a physical length to layout pixels.

    Examples:
        >>> to_pixels(4, "cm")  # doctest: +ELLIPSIS
        113.38...
        >>> to_pixels(300, "px")
        300.0
    """
    if unit == "px":
        return float(value)
    if unit not in _PER_INCH:
        raise ValueError(f"unit must be one of in/cm/mm/px, got {unit!r}")
    return float(value) / _PER_INCH[unit] * PX_PER_INCH


def _as_chart(obj: Plottable, width: float | None, height: float | None) -> alt.TopLevelMixin:
    if isinstance(obj, PlotSpec):
        obj = resolve(obj)
    if isinstance(obj, RenderPlan):
        # Physical size is the whole figure; split it across the facet grid.
        w = width / obj.ncol if width is not None else None
        h = height / obj.nrow if height is not None else None
        return render(obj, width=w, height=h)
    if width is None and height is None:
        return obj
    if not isinstance(obj, (alt.Chart, alt.LayerChart)):
        # Concatenated figures size each sub-plot; there is no top-level width/height.
        logger.debug("chart of type %s does not accept width/height; keeping its own size", type(obj).__name__)
        return obj
    props: dict[str, Any] = {}
    if width is not None:
        props["width"] = width
    if height is not None:
        props["height"] = height
    return obj.properties(**props)


def _converter() -> Any:
    try:
        return importlib.import_module("vl_convert")
    except ImportError as exc:
        raise WriteError(
            "PNG/JPEG/SVG/PDF export requires the 'vl-convert-python' package "
            "(pip install vl-convert-python)"
        ) from exc


def save(
    obj: Plottable,
    path: str | os.PathLike[str],
    *,
    width: float | None = None,
    height: float | None = None,
    unit: Unit = "in",
    dpi: int = 300,
) -> Path:
    """
    Write ``obj`` to ``path``; the format is taken from the suffix.

    Args:
        obj (PlotSpec | RenderPlan | alt.TopLevelMixin): What to draw.
        path (str | PathLike): Destination (.html, .json, .png, .jpeg/.jpg, .svg, .pdf).
        width (float | None): Figure width in ``unit``; None keeps the chart's own size.
        height (float | None): Figure height in ``unit``.
        unit (Unit): "in" | "cm" | "mm" | "px".
        dpi (int): Raster resolution for PNG and JPEG.

    Returns:
        Path: The written path.

    Raises:
        WriteError: Unsupported suffix, missing converter for image formats, or an OS error
            while writing.
        ColumnNotFound | TypeMismatch | PaletteTooSmall: When ``obj`` is a PlotSpec that fails
            to resolve.
    """
    out = Path(path)
    suffix = out.suffix.lower().lstrip(".")
    fmt = _ALIASES.get(suffix, suffix)
    if fmt not in FORMATS:
        raise WriteError(f"unsupported output format {out.suffix!r}; expected one of {list(FORMATS)}")
    if dpi <= 0:
        raise ValueError(f"dpi must be > 0, got {dpi}")

    w_px = to_pixels(width, unit) if width is not None else None
    h_px = to_pixels(height, unit) if height is not None else None
    vlc = _converter() if fmt in _IMAGE_FORMATS else None
    chart = _as_chart(obj, w_px, h_px)

    try:
        if fmt == "html":
            chart.save(str(out), format="html")
        elif fmt == "json":
            out.write_text(chart.to_json(), encoding="utf-8")
        else:
            spec = chart.to_dict()
            if fmt == "png":
                data = vlc.vegalite_to_png(spec, scale=dpi / PX_PER_INCH, ppi=dpi)
                out.write_bytes(data)
            elif fmt == "jpeg":
                out.write_bytes(vlc.vegalite_to_jpeg(spec, scale=dpi / PX_PER_INCH))
            elif fmt == "svg":
                out.write_text(vlc.vegalite_to_svg(spec), encoding="utf-8")
            else:
                out.write_bytes(vlc.vegalite_to_pdf(spec))
    except OSError as exc:
        raise WriteError(f"failed to write {out}: {exc}") from exc

    logger.info("saved %s (%s)", out, fmt)
    return out
