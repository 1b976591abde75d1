"""
Pydantic v2 models describing a layered plot before resolution.

Responsibilities
- Define frozen models for layers, facets, scales, themes, labels, and the PlotSpec that
  accumulates them.
- Validate argument shapes at construction (geometry names, channel names, fixed-value ranges,
  theme element names) so bad input fails before resolution.
- Provide persistent, additive composition: every ``with_*``/``add_layer`` call and ``spec + part``
  returns a new PlotSpec and leaves the receiver untouched.

Style
- Models are frozen with ``extra="forbid"``; Table fields use ``arbitrary_types_allowed``.
- Column existence is NOT checked here; that happens in perch.viz.resolve against the data
  each layer actually sees.

Examples
```python
from perch.viz.spec import Layer, PlotSpec
spec = PlotSpec(data=abird, aes={"x": "year", "y": "samplesize"})
spec = spec + Layer(geom="line", aes={"color": "state"}) + Layer(geom="point")
len(spec.layers)  # 2
```
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, Literal, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

from perch.core.constants import FACET_NCOL, THEME_PRESETS
from perch.core.table import Table

__all__ = [
    "Channel",
    "Geometry",
    "Transform",
    "THEME_PRESETS",
    "Layer",
    "Facet",
    "Scale",
    "ElementText",
    "ElementRect",
    "ElementLine",
    "Theme",
    "Labels",
    "PlotSpec",
]

Channel = Literal["x", "y", "color", "fill", "shape", "size", "alpha", "group"]
Geometry = Literal["point", "line", "boxplot", "smooth"]
Transform = Literal["identity", "log10", "sqrt", "reverse"]

_FIXABLE: frozenset[str] = frozenset({"color", "fill", "shape", "size", "alpha"})
_PALETTE_CHANNELS: frozenset[str] = frozenset({"color", "fill", "shape"})
_POSITION_CHANNELS: frozenset[str] = frozenset({"x", "y"})


def _freeze(v: Mapping[Any, Any]) -> Mapping[Any, Any]:
    """Copy ``v`` into a read-only view so derived specs never share a writable dict."""
    return MappingProxyType(dict(v))


def _thaw(v: Mapping[Any, Any]) -> dict[Any, Any]:
    return dict(v)


def _empty() -> Mapping[Any, Any]:
    return MappingProxyType({})


AesMapping = Annotated[Mapping[Channel, str], AfterValidator(_freeze), PlainSerializer(_thaw)]
FixedMapping = Annotated[
    Mapping[Channel, Union[str, float]], AfterValidator(_freeze), PlainSerializer(_thaw)
]


# ============================================================================
# Layers
# ============================================================================


class Layer(BaseModel):
    """
    One visual contribution to a plot.

    Attributes:
        geom (Geometry): "point" | "line" | "boxplot" | "smooth".
        aes (Mapping[Channel, str]): Read-only channel -> column mapping; overrides the plot's
            base mapping per channel.
        fixed (Mapping[Channel, str | float]): Constant visual values (e.g. ``{"color": "red"}``,
            ``{"alpha": 0.5}``); a fixed channel is removed from the mapping.
        data (Table | None): Per-layer data override; None uses the plot's table.
        inherit_aes (bool): When False, the base mapping is ignored for this layer.
        method (Literal["lm"]): Fit method for "smooth" (ordinary least squares only).

    Raises:
        pydantic.ValidationError: On unknown geometry/channel, x/y/group given as fixed values,
            alpha outside [0, 1], or non-positive size.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    geom: Geometry
    aes: AesMapping = Field(default_factory=_empty)
    fixed: FixedMapping = Field(default_factory=_empty)
    data: Table | None = None
    inherit_aes: bool = True
    method: Literal["lm"] = "lm"

    @field_validator("fixed")
    @classmethod
    def _check_fixed(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        for channel, value in v.items():
            if channel not in _FIXABLE:
                raise ValueError(f"channel {channel!r} cannot take a fixed value")
            if channel in ("size", "alpha"):
                if isinstance(value, str):
                    raise ValueError(f"fixed {channel} must be numeric, got {value!r}")
                if channel == "alpha" and not 0.0 <= float(value) <= 1.0:
                    raise ValueError(f"alpha must be in [0, 1], got {value}")
                if channel == "size" and float(value) <= 0:
                    raise ValueError(f"size must be > 0, got {value}")
            elif not isinstance(value, str):
                raise ValueError(f"fixed {channel} must be a string, got {value!r}")
        return v


# ============================================================================
# Facets and scales
# ============================================================================


class Facet(BaseModel):
    """Wrap panels by the distinct values of ``column``, ``ncol`` panels per row."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    column: str
    ncol: int = Field(default=FACET_NCOL, ge=1)


class Scale(BaseModel):
    """
    Scale override for one channel.

    Attributes:
        channel (Channel): Channel the scale applies to.
        transform (Transform): Axis transform for x/y ("log10", "sqrt", "reverse").
        palette (tuple[str, ...] | None): Manual discrete values for color/fill/shape, assigned to
            the sorted distinct data values in order.
        title (str | None): Axis or legend title.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    channel: Channel
    transform: Transform = "identity"
    palette: tuple[str, ...] | None = None
    title: str | None = None

    @model_validator(mode="after")
    def _check_channel_fit(self) -> Scale:
        if self.transform != "identity" and self.channel not in _POSITION_CHANNELS:
            raise ValueError(f"transform {self.transform!r} only applies to x/y, not {self.channel!r}")
        if self.palette is not None:
            if self.channel not in _PALETTE_CHANNELS:
                raise ValueError(f"palette only applies to color/fill/shape, not {self.channel!r}")
            if not self.palette:
                raise ValueError("palette must hold at least one value")
        return self


ScaleMapping = Annotated[Mapping[Channel, Scale], AfterValidator(_freeze), PlainSerializer(_thaw)]


# ============================================================================
# Themes
# ============================================================================


class ElementText(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    size: float | None = Field(default=None, gt=0)
    angle: float | None = None
    color: str | None = None


class ElementRect(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    fill: str | None = None
    color: str | None = None


class ElementLine(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    color: str | None = None
    width: float | None = Field(default=None, gt=0)


_TEXT_ELEMENTS: frozenset[str] = frozenset(
    {
        "axis_text_x",
        "axis_text_y",
        "axis_title_x",
        "axis_title_y",
        "title",
        "strip_text",
        "legend_text",
        "legend_title",
    }
)
_RECT_ELEMENTS: frozenset[str] = frozenset(
    {"plot_background", "panel_background", "strip_background", "legend_background", "legend_key"}
)
_LINE_ELEMENTS: frozenset[str] = frozenset({"panel_grid_major", "panel_grid_minor", "axis_line"})

ThemeElement = Union[ElementText, ElementRect, ElementLine]
ElementMapping = Annotated[
    Mapping[str, ThemeElement], AfterValidator(_freeze), PlainSerializer(_thaw)
]


def _element_for(name: str, value: Any) -> ThemeElement:
    if name in _TEXT_ELEMENTS:
        kind: type[BaseModel] = ElementText
    elif name in _RECT_ELEMENTS:
        kind = ElementRect
    elif name in _LINE_ELEMENTS:
        kind = ElementLine
    else:
        known = sorted(_TEXT_ELEMENTS | _RECT_ELEMENTS | _LINE_ELEMENTS)
        raise ValueError(f"unknown theme element {name!r}; expected one of {known}")
    if isinstance(value, kind):
        return value  # type: ignore[return-value]
    if isinstance(value, BaseModel):
        raise ValueError(f"theme element {name!r} takes {kind.__name__}, got {type(value).__name__}")
    return kind.model_validate(value)  # type: ignore[return-value]


class Theme(BaseModel):
    """
    Named preset plus per-element overrides (R-style element names, lower_snake).

    Attributes:
        name (str): One of THEME_PRESETS.
        complete (bool): A complete theme replaces the current one; an incomplete theme only
            merges its elements onto the current theme (keeping its preset).
        elements (Mapping[str, ThemeElement]): Element overrides; plain dicts are validated into
            ElementText / ElementRect / ElementLine by element name.

    Examples:
        >>> Theme(name="few", elements={"axis_text_x": {"size": 15, "angle": 90, "color": "purple"}})
        ... # doctest: +ELLIPSIS
        Theme(name='few', ...)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = "grey"
    elements: ElementMapping = Field(default_factory=_empty)
    complete: bool = True

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str) -> str:
        lo = v.strip().lower()
        if lo == "gray":
            lo = "grey"
        if lo not in THEME_PRESETS:
            raise ValueError(f"unknown theme {v!r}; expected one of {list(THEME_PRESETS)}")
        return lo

    @field_validator("elements", mode="before")
    @classmethod
    def _coerce_elements(cls, v: Any) -> Any:
        if not isinstance(v, Mapping):
            return v
        return {str(k): _element_for(str(k), val) for k, val in v.items()}

    def merged(self, overrides: Mapping[str, Any]) -> Theme:
        """Return a new Theme with ``overrides`` (element name -> element) applied on top."""
        extra = dict(overrides)
        name = extra.pop("name", self.name)
        return Theme(name=name, elements={**self.elements, **extra})


# ============================================================================
# Labels and the plot spec
# ============================================================================


class Labels(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    x: str | None = None
    y: str | None = None
    title: str | None = None


class PlotSpec(BaseModel):
    """
    Accumulated, unresolved plot description.

    Attributes:
        data (Table): Base data inherited by layers without an override.
        aes (Mapping[Channel, str]): Base aesthetic mapping (read-only).
        layers (tuple[Layer, ...]): Layers in draw order (later on top).
        facet (Facet | None): Optional facet wrap.
        scales (Mapping[Channel, Scale]): Scale overrides keyed by channel (read-only).
        theme (Theme): Preset and element overrides.
        labels (Labels): Axis titles and plot title.

    Notes:
        - Persistent: builders return copies, so a partial spec can seed several plots.
        - ``spec + part`` dispatches on the part's type (Layer, Facet, Scale, Theme, Labels).
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    data: Table
    aes: AesMapping = Field(default_factory=_empty)
    layers: tuple[Layer, ...] = ()
    facet: Facet | None = None
    scales: ScaleMapping = Field(default_factory=_empty)
    theme: Theme = Field(default_factory=Theme)
    labels: Labels = Field(default_factory=Labels)

    def add_layer(self, layer: Layer) -> PlotSpec:
        return self.model_copy(update={"layers": (*self.layers, layer)})

    def with_facet(self, facet: Facet) -> PlotSpec:
        return self.model_copy(update={"facet": facet})

    def with_scale(self, scale: Scale) -> PlotSpec:
        return self.model_copy(update={"scales": _freeze({**self.scales, scale.channel: scale})})

    def with_theme(self, theme: Theme | str | Mapping[str, Any]) -> PlotSpec:
        if isinstance(theme, Theme) and theme.complete:
            new = theme
        elif isinstance(theme, Theme):
            new = Theme(name=self.theme.name, elements={**self.theme.elements, **theme.elements})
        elif isinstance(theme, str):
            new = Theme(name=theme)
        else:
            new = self.theme.merged(theme)
        return self.model_copy(update={"theme": new})

    def with_labels(self, labels: Labels) -> PlotSpec:
        current = self.labels.model_dump()
        current.update({k: v for k, v in labels.model_dump().items() if v is not None})
        return self.model_copy(update={"labels": Labels(**current)})

    def __add__(self, other: object) -> PlotSpec:
        if isinstance(other, Layer):
            return self.add_layer(other)
        if isinstance(other, Facet):
            return self.with_facet(other)
        if isinstance(other, Scale):
            return self.with_scale(other)
        if isinstance(other, Theme):
            return self.with_theme(other)
        if isinstance(other, Labels):
            return self.with_labels(other)
        return NotImplemented
