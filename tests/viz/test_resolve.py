from __future__ import annotations

import logging

import pytest

from perch.core import ColumnNotFound, PaletteTooSmall, Table, TypeMismatch
from perch.viz import (
    facet_wrap,
    geom_boxplot,
    geom_line,
    geom_point,
    geom_smooth,
    labs,
    new_plot,
    resolve,
    scale_color_discrete,
    scale_fill_manual,
    scale_x_log10,
)


def test_unknown_column_fails_before_rendering(ebird: Table) -> None:
    with pytest.raises(ColumnNotFound):
        resolve(new_plot(ebird, {"x": "year", "y": "county"}) + geom_point())
    with pytest.raises(ColumnNotFound):
        resolve(new_plot(ebird, {"x": "year", "y": "county"}))
    with pytest.raises(ColumnNotFound):
        resolve(new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_point() + facet_wrap("county"))


def test_layer_data_override_is_validated(ebird: Table) -> None:
    other = Table({"year": [2008], "n": [1.0]})
    spec = new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_point(data=other)
    with pytest.raises(ColumnNotFound):
        resolve(spec)
    ok = new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_point({"y": "n"}, data=other)
    assert resolve(ok).panels[0].primitives[0].data.height == 1


def test_missing_required_channel(ebird: Table) -> None:
    with pytest.raises(ValueError):
        resolve(new_plot(ebird, {"x": "year"}) + geom_line())


def test_palette_too_small(ebird: Table) -> None:
    spec = (
        new_plot(ebird, {"x": "state", "y": "samplesize", "fill": "state"})
        + geom_boxplot()
        + scale_fill_manual(["#000000", "#FFFFFF"])
    )
    with pytest.raises(PaletteTooSmall):
        resolve(spec)
    ok = spec + scale_fill_manual(["#111111", "#222222", "#333333"])
    assert resolve(ok).scales["fill"].domain == ("AK", "AZ", "IL")


def test_facet_grid_is_row_major(ebird: Table) -> None:
    plan = resolve(new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_line() + facet_wrap("state", ncol=2))
    assert plan.is_faceted
    assert (plan.nrow, plan.ncol) == (2, 2)
    assert [(p.value, p.row, p.col) for p in plan.panels] == [("AK", 0, 0), ("AZ", 0, 1), ("IL", 1, 0)]
    for panel in plan.panels:
        states = set(panel.primitives[0].data.column("year").to_list())
        assert states, f"panel {panel.value} has no rows"


def test_unfaceted_plan_has_one_panel(ebird: Table) -> None:
    plan = resolve(new_plot(ebird, {"x": "year", "y": "samplesize"}) + geom_point())
    assert not plan.is_faceted
    assert (plan.nrow, plan.ncol, len(plan.panels)) == (1, 1, 1)
    assert plan.panels[0].primitives[0].data.height == ebird.height


def test_line_rows_sorted_by_x(ebird: Table) -> None:
    plan = resolve(new_plot(ebird, {"x": "year", "y": "samplesize", "color": "state"}) + geom_line())
    years = plan.panels[0].primitives[0].data.column("year").to_list()
    assert years == sorted(years)


def test_fixed_value_removes_mapping(ebird: Table) -> None:
    plan = resolve(new_plot(ebird, {"x": "year", "y": "samplesize", "color": "state"}) + geom_point(color="red"))
    prim = plan.panels[0].primitives[0]
    assert "color" not in prim.encodings
    assert prim.fixed == {"color": "red"}


def test_smooth_fits_least_squares_line() -> None:
    t = Table({"x": [1.0, 2.0, 3.0], "y": [3.0, 5.0, 7.0]})
    plan = resolve(new_plot(t, {"x": "x", "y": "y"}) + geom_smooth())
    fit = plan.panels[0].primitives[0].data
    xs, ys = fit.column("x").to_list(), fit.column("y").to_list()
    assert len(xs) == 80
    assert xs[0] == pytest.approx(1.0) and xs[-1] == pytest.approx(3.0)
    for x, y in zip(xs, ys):
        assert y == pytest.approx(1.0 + 2.0 * x)


def test_smooth_fits_one_line_per_color(ebird: Table) -> None:
    plan = resolve(new_plot(ebird, {"x": "presence", "y": "samplesize"}) + geom_smooth({"color": "state"}))
    prim = plan.panels[0].primitives[0]
    assert set(prim.data.column("state").to_list()) == {"AK", "AZ", "IL"}
    assert prim.encodings["color"].field == "state"


def test_smooth_needs_numeric_axes(ebird: Table) -> None:
    with pytest.raises(TypeMismatch):
        resolve(new_plot(ebird, {"x": "state", "y": "samplesize"}) + geom_smooth())


def test_boxplot_statistics() -> None:
    t = Table({"g": ["a"] * 5 + ["b"] * 4, "v": [1.0, 2.0, 3.0, 4.0, 100.0, 10.0, 20.0, 30.0, 40.0]})
    prim = resolve(new_plot(t, {"x": "g", "y": "v"}) + geom_boxplot()).panels[0].primitives[0]
    rows = {r["g"]: r for r in prim.data.rows()}
    assert rows["a"] == {"g": "a", "ymin": 1.0, "lower": 2.0, "middle": 3.0, "upper": 4.0, "ymax": 4.0}
    assert rows["b"]["lower"] == pytest.approx(17.5)
    assert rows["b"]["middle"] == pytest.approx(25.0)
    assert rows["b"]["upper"] == pytest.approx(32.5)
    assert prim.outliers is not None
    assert prim.outliers.rows() == [{"g": "a", "v": 100.0}]
    assert prim.encodings["x"].kind == "nominal"


def test_log_axis_drops_non_positive_rows(caplog: pytest.LogCaptureFixture) -> None:
    t = Table({"x": [0.0, 1.0, 10.0], "y": [1.0, 2.0, 3.0]})
    with caplog.at_level(logging.WARNING, logger="perch.viz.resolve"):
        plan = resolve(new_plot(t, {"x": "x", "y": "y"}) + geom_point() + scale_x_log10())
    assert plan.panels[0].primitives[0].data.column("x").to_list() == [1.0, 10.0]
    assert plan.scales["x"].transform == "log10"
    assert any("log10" in r.getMessage() for r in caplog.records)


def test_missing_xy_rows_are_removed() -> None:
    t = Table({"x": [1.0, None, 3.0], "y": [1.0, 2.0, None]})
    plan = resolve(new_plot(t, {"x": "x", "y": "y"}) + geom_point())
    assert plan.panels[0].primitives[0].data.height == 1


def test_scale_titles(ebird: Table) -> None:
    plan = resolve(
        new_plot(ebird, {"x": "year", "y": "samplesize", "color": "state"})
        + geom_line()
        + labs(x="Year")
        + scale_color_discrete(title="State")
    )
    assert plan.scales["x"].title == "Year"
    assert plan.scales["y"].title == "samplesize"
    assert plan.scales["color"].title == "State"
    assert "fill" not in plan.scales
