"""
Theme presets and element overrides applied as Altair top-level configuration.

Each preset is a set of Vega-Lite config blocks (axis, view, legend, ...) layered over shared
defaults. Element overrides from ``Theme.elements`` are translated onto the same blocks, then each
block is applied once with the matching ``configure_*`` call.

Element translation (ggplot name -> Vega-Lite config)
- axis_text_x / axis_text_y     -> axisX / axisY label size, angle, colour
- axis_title_x / axis_title_y   -> axisX / axisY title size, angle, colour
- title                         -> title font size, angle, colour
- legend_text / legend_title    -> legend label / title size, colour
- plot_background               -> chart background
- panel_background              -> view fill and stroke
- legend_background             -> legend fill and stroke
- panel_grid_major              -> axis grid colour and width
- axis_line                     -> axis domain colour and width
- strip_text                    -> facet panel titles (see ``strip_title_params``)

ggplot angles run counter-clockwise while Vega-Lite's run clockwise, so angles are negated.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

import altair as alt

from .spec import ElementLine, ElementRect, ElementText, Theme

__all__ = [
    "PRESETS",
    "theme_config",
    "strip_title_params",
    "apply_theme",
]

logger = logging.getLogger(__name__)

_DEFAULTS: dict[str, dict[str, Any]] = {
    "axis": {"labelFontSize": 12, "titleFontSize": 12},
    "legend": {"labelFontSize": 12, "titleFontSize": 12},
    "title": {"fontSize": 14},
}

PRESETS: dict[str, dict[str, dict[str, Any]]] = {
    "grey": {
        "view": {"fill": "#EBEBEB", "stroke": None},
        "axis": {"grid": True, "gridColor": "#FFFFFF", "domain": False, "tickColor": "#333333", "labelColor": "#4D4D4D"},
    },
    "minimal": {
        "view": {"stroke": None},
        "axis": {"grid": True, "gridColor": "#EBEBEB", "domain": False, "ticks": False},
    },
    "few": {
        "view": {"stroke": "#D9D9D9"},
        "axis": {"grid": False, "domainColor": "#D9D9D9", "tickColor": "#D9D9D9", "labelColor": "#4D4D4D"},
        "range": {"category": ["#5DA5DA", "#FAA43A", "#60BD68", "#F17CB0", "#B2912F", "#B276B2", "#DECF3F", "#F15854", "#4D4D4D"]},
    },
    "economist": {
        "config": {"background": "#D5E4EB"},
        "view": {"fill": "#D5E4EB", "stroke": None},
        "axis": {"gridColor": "#FFFFFF", "domainColor": "#000000"},
        "axisX": {"grid": False},
        "axisY": {"grid": True, "domain": False},
        "range": {"category": ["#6794A7", "#014D64", "#76C0C1", "#01A2D9", "#7AD2F6", "#00887D", "#ADADAD", "#7BD3F6", "#7C260B", "#EE8F71", "#A18376"]},
    },
    "gdocs": {
        "view": {"stroke": "#CCCCCC"},
        "axis": {"grid": True, "gridColor": "#CCCCCC", "domain": False, "labelColor": "#222222"},
        "range": {"category": ["#3366CC", "#DC3912", "#FF9900", "#109618", "#990099", "#0099C6", "#DD4477", "#66AA00", "#B82E2E", "#316395"]},
    },
    "excel": {
        "view": {"fill": "#C0C0C0", "stroke": "#000000"},
        "axis": {"grid": True, "gridColor": "#000000", "domainColor": "#000000", "tickColor": "#000000"},
        "range": {"category": ["#4F81BD", "#C0504D", "#9BBB59", "#8064A2", "#4BACC6", "#F79646"]},
    },
}

_UNSUPPORTED: frozenset[str] = frozenset({"panel_grid_minor", "strip_background", "legend_key"})


def _text_params(el: ElementText, prefix: str = "", *, angle: bool = True) -> dict[str, Any]:
    def key(name: str) -> str:
        return f"{prefix}{name[0].upper()}{name[1:]}" if prefix else name

    out: dict[str, Any] = {}
    if el.size is not None:
        out[key("fontSize")] = el.size
    if angle and el.angle is not None:
        out[key("angle")] = -el.angle
    if el.color is not None:
        out[key("color")] = el.color
    return out


def strip_title_params(theme: Theme) -> dict[str, Any]:
    """``alt.TitleParams`` keyword arguments for facet panel titles."""
    el = theme.elements.get("strip_text")
    if not isinstance(el, ElementText):
        return {}
    return _text_params(el)


def theme_config(theme: Theme) -> dict[str, dict[str, Any]]:
    """
    Merge shared defaults, the preset and element overrides into config blocks.

    Returns:
        dict[str, dict[str, Any]]: Block name ("config", "axis", "axisX", "axisY", "view",
        "legend", "title", "range") -> keyword arguments.

    Examples:
        >>> theme_config(Theme(name="minimal", elements={"axis_text_x": {"angle": 90}}))["axisX"]
        {'labelAngle': -90.0}
    """
    blocks: dict[str, dict[str, Any]] = copy.deepcopy(_DEFAULTS)
    for block, params in PRESETS[theme.name].items():
        blocks.setdefault(block, {}).update(copy.deepcopy(params))

    for name, el in theme.elements.items():
        if name in _UNSUPPORTED:
            logger.debug("theme element %r has no Vega-Lite counterpart; ignored", name)
            continue
        if name == "strip_text":
            continue
        if isinstance(el, ElementText):
            if name in ("axis_text_x", "axis_text_y"):
                blocks.setdefault("axisX" if name.endswith("x") else "axisY", {}).update(_text_params(el, "label"))
            elif name in ("axis_title_x", "axis_title_y"):
                blocks.setdefault("axisX" if name.endswith("x") else "axisY", {}).update(_text_params(el, "title"))
            elif name == "title":
                blocks.setdefault("title", {}).update(_text_params(el))
            elif name == "legend_text":
                blocks.setdefault("legend", {}).update(_text_params(el, "label", angle=False))
            elif name == "legend_title":
                blocks.setdefault("legend", {}).update(_text_params(el, "title", angle=False))
        elif isinstance(el, ElementRect):
            if name == "plot_background" and el.fill is not None:
                blocks.setdefault("config", {})["background"] = el.fill
            elif name == "panel_background":
                view = blocks.setdefault("view", {})
                if el.fill is not None:
                    view["fill"] = el.fill
                if el.color is not None:
                    view["stroke"] = el.color
            elif name == "legend_background":
                legend = blocks.setdefault("legend", {})
                if el.fill is not None:
                    legend["fillColor"] = el.fill
                if el.color is not None:
                    legend["strokeColor"] = el.color
        elif isinstance(el, ElementLine):
            axis = blocks.setdefault("axis", {})
            prefix = "grid" if name == "panel_grid_major" else "domain"
            if prefix == "grid":
                axis["grid"] = True
            else:
                axis["domain"] = True
            if el.color is not None:
                axis[f"{prefix}Color"] = el.color
            if el.width is not None:
                axis[f"{prefix}Width"] = el.width
    return blocks


def apply_theme(chart: alt.TopLevelMixin, theme: Theme) -> alt.TopLevelMixin:
    """Return ``chart`` with the theme's configuration applied (top-level charts only)."""
    blocks = theme_config(theme)
    out = chart
    if blocks.get("config"):
        out = out.configure(**blocks["config"])
    for block in ("axis", "axisX", "axisY", "view", "legend", "title", "range"):
        params = blocks.get(block)
        if params:
            out = getattr(out, f"configure_{block}")(**params)
    return out
