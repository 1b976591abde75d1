from __future__ import annotations

from typing import Any

import pytest

from perch.core import Table
from perch.viz import geom_line, geom_point, new_plot, plot_grid, theme


def find_in_spec(obj: Any, predicate) -> bool:
    """Recursively scan a chart spec dict for a predicate match."""
    if isinstance(obj, dict):
        if predicate(obj):
            return True
        return any(find_in_spec(v, predicate) for v in obj.values())
    if isinstance(obj, list):
        return any(find_in_spec(v, predicate) for v in obj)
    return False


def _plots(ebird: Table):
    one = new_plot(ebird, {"x": "year", "y": "samplesize", "group": "state"}) + geom_line() + theme("economist")
    two = new_plot(ebird, {"x": "samplesize", "y": "presence"}) + geom_point()
    return [one, two]


def test_stacked_grid(ebird: Table) -> None:
    spec = plot_grid(_plots(ebird), nrow=2, align="hv").to_dict()
    assert spec["columns"] == 1
    assert spec["align"] == "all"
    assert len(spec["concat"]) == 2
    assert spec["config"]["background"] == "#D5E4EB", "first plot's theme applies to the grid"


def test_side_by_side_default_and_row_alignment(ebird: Table) -> None:
    spec = plot_grid(_plots(ebird), align="h").to_dict()
    assert spec["columns"] == 2
    assert spec["align"] == {"row": "all", "column": "none"}
    assert find_in_spec(spec, lambda d: d.get("field") == "presence")


def test_grid_argument_errors(ebird: Table) -> None:
    with pytest.raises(ValueError):
        plot_grid([])
    with pytest.raises(ValueError):
        plot_grid(_plots(ebird), align="diagonal")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        plot_grid(_plots(ebird), nrow=1, ncol=1)
