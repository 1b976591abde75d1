from __future__ import annotations

from typing import Any

import altair as alt

from perch.core import Table
from perch.viz import (
    facet_wrap,
    geom_boxplot,
    geom_line,
    geom_point,
    geom_smooth,
    labs,
    new_plot,
    render,
    resolve,
    scale_x_log10,
    theme,
)
from perch.viz.render import field_ref


def find_in_spec(obj: Any, predicate) -> bool:
    """Recursively scan a chart spec dict for a predicate match."""
    if isinstance(obj, dict):
        if predicate(obj):
            return True
        return any(find_in_spec(v, predicate) for v in obj.values())
    if isinstance(obj, list):
        return any(find_in_spec(v, predicate) for v in obj)
    return False


def mark_is(kind: str):
    def check(d: dict) -> bool:
        mark = d.get("mark")
        return mark == kind or (isinstance(mark, dict) and mark.get("type") == kind)

    return check


def test_point_chart_encodes_columns(ebird: Table) -> None:
    chart = render(resolve(new_plot(ebird, {"x": "presence", "y": "samplesize", "color": "state"}) + geom_point()))
    spec = chart.to_dict()
    assert find_in_spec(spec, mark_is("point")), "expected a point mark"
    assert find_in_spec(
        spec, lambda d: d.get("field") == "state" and d.get("type") == "nominal"
    ), "color should encode state as nominal"
    assert find_in_spec(spec, lambda d: d.get("field") == "samplesize" and d.get("type") == "quantitative")


def test_unmapped_point_is_black(ebird: Table) -> None:
    spec = render(resolve(new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_point())).to_dict()
    assert find_in_spec(spec, lambda d: d.get("type") == "point" and d.get("color") == "#000000")


def test_log_scale_and_layering(ebird: Table) -> None:
    spec = render(
        resolve(
            new_plot(ebird, {"x": "presence", "y": "samplesize"})
            + geom_point(alpha=0.5)
            + geom_smooth({"color": "state"})
            + scale_x_log10()
        )
    ).to_dict()
    assert "layer" in spec, "two geometries should render as a layered chart"
    assert find_in_spec(spec, lambda d: d.get("type") == "log"), "x scale should be log"
    assert find_in_spec(spec, mark_is("line"))
    assert find_in_spec(spec, lambda d: d.get("type") == "point" and d.get("opacity") == 0.5)


def test_facets_render_as_wrapped_concat(ebird: Table) -> None:
    spec = render(
        resolve(
            new_plot(ebird, {"x": "year", "y": "samplesize", "color": "state"})
            + geom_line()
            + facet_wrap("state", ncol=2)
            + labs(title="Figure 1")
        )
    ).to_dict()
    assert spec.get("columns") == 2
    assert len(spec["concat"]) == 3
    panel_titles = [p["title"]["text"] for p in spec["concat"]]
    assert panel_titles == ["AK", "AZ", "IL"]
    assert spec["resolve"]["scale"] == {"x": "shared", "y": "shared"}
    assert find_in_spec(spec, lambda d: d.get("text") == "Figure 1" or d.get("title") == "Figure 1")


def test_boxplot_draws_whisker_box_and_median(ebird: Table) -> None:
    spec = render(resolve(new_plot(ebird, {"x": "state", "y": "samplesize"}) + geom_boxplot())).to_dict()
    for kind in ("rule", "bar", "tick"):
        assert find_in_spec(spec, mark_is(kind)), f"boxplot should draw a {kind}"
    assert find_in_spec(spec, lambda d: d.get("field") == "ymax")


def test_theme_is_applied_unless_disabled(ebird: Table) -> None:
    plan = resolve(
        new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_point() + theme("minimal", axis_text_x={"angle": 90})
    )
    configured = render(plan).to_dict()
    assert configured["config"]["axisX"]["labelAngle"] == -90
    bare = render(plan, configure=False)
    assert isinstance(bare, alt.Chart)
    assert "config" not in bare.to_dict() or "axisX" not in bare.to_dict()["config"]


def test_plot_without_layers_still_has_axes(ebird: Table) -> None:
    spec = render(resolve(new_plot(ebird, {"x": "year", "y": "samplesize"}))).to_dict()
    assert find_in_spec(spec, lambda d: d.get("field") == "year")


def test_field_ref_escapes_nested_access() -> None:
    assert field_ref("a.b") == "a\\.b"
    assert field_ref("x[0]") == "x\\[0\\]"
    assert field_ref("plain") == "plain"
