from __future__ import annotations

import pytest

from perch.viz import available_palettes, brewer_palette, theme
from perch.viz.themes import PRESETS, strip_title_params, theme_config


def test_brewer_palettes() -> None:
    assert brewer_palette("Set2", 4) == ("#66C2A5", "#FC8D62", "#8DA0CB", "#E78AC3")
    assert len(brewer_palette("Greens", 9)) == 9
    assert "Set1" in available_palettes()
    with pytest.raises(ValueError):
        brewer_palette("Set2", 20)
    with pytest.raises(ValueError):
        brewer_palette("Greens", 7)
    with pytest.raises(ValueError):
        brewer_palette("Rainbow", 3)


def test_every_preset_has_a_config() -> None:
    for name in PRESETS:
        blocks = theme_config(theme(name))
        assert blocks["axis"]["labelFontSize"] == 12, f"{name} lost the shared defaults"


def test_element_overrides_translate() -> None:
    blocks = theme_config(
        theme(
            "few",
            axis_text_x={"size": 15, "angle": 90, "color": "purple"},
            axis_text_y={"size": 2, "color": "red"},
            legend_text={"size": 9, "angle": 45},
            panel_background={"fill": "#FFFFFF"},
            panel_grid_minor={"color": "#EEEEEE"},
        )
    )
    assert blocks["axisX"] == {"labelFontSize": 15.0, "labelAngle": -90.0, "labelColor": "purple"}
    assert blocks["axisY"] == {"labelFontSize": 2.0, "labelColor": "red"}
    assert "labelAngle" not in blocks["legend"]
    assert blocks["legend"]["labelFontSize"] == 9.0
    assert blocks["view"]["fill"] == "#FFFFFF"


def test_strip_text_and_preset_category_range() -> None:
    assert strip_title_params(theme("grey", strip_text={"size": 10})) == {"fontSize": 10.0}
    assert strip_title_params(theme("grey")) == {}
    assert "range" not in theme_config(theme("grey"))
    assert theme_config(theme("excel"))["range"]["category"][0] == "#4F81BD"
