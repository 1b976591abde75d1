"""
Workshop lessons over the eBird data, as pure functions.

Lessons (Table -> Table)
- a_state_summary, state_year_presence, median_samplesize_after, mark_a_states,
  split_state_year, split_year_century, cool_bird_tables, join_years,
  sampled_state_presence.

Plot recipes (Table -> PlotSpec, or a grid chart for stacked_figure)
- presence_vs_samplesize, samplesize_over_time, smooth_by_state, faceted_state_lines,
  state_boxplot, stacked_figure.

Recipes filter to the "A" states themselves, so they accept the full eBird table.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Literal

import altair as alt
import polars as pl

from perch.core.table import Table
from perch.query import (
    JoinSpec,
    distinct,
    filter,
    group_by,
    join,
    mutate,
    sample_n,
    select,
    separate,
    summarize,
)
from perch.query import aggregations as agg
from perch.viz import (
    PlotSpec,
    brewer_palette,
    facet_wrap,
    geom_boxplot,
    geom_line,
    geom_point,
    geom_smooth,
    labs,
    new_plot,
    plot_grid,
    scale_color_discrete,
    scale_fill_manual,
    scale_x_log10,
    theme,
)

__all__ = [
    "A_STATES",
    "COOL_BIRDS",
    "YEARS_TO_KEEP",
    "JOIN_KEYS",
    "LESSONS",
    "RECIPES",
    "a_states_only",
    "a_state_summary",
    "state_year_presence",
    "median_samplesize_after",
    "mark_a_states",
    "split_state_year",
    "split_year_century",
    "cool_bird_tables",
    "join_years",
    "sampled_state_presence",
    "presence_vs_samplesize",
    "samplesize_over_time",
    "smooth_by_state",
    "faceted_state_lines",
    "state_boxplot",
    "stacked_figure",
]

A_STATES: tuple[str, ...] = ("AZ", "AK", "AL", "AR")
COOL_BIRDS: tuple[str, ...] = ("Sora", "Virginia Rail", "Yellow Rail")
YEARS_TO_KEEP: tuple[int, ...] = (2008, 2009, 2010, 2011, 2012, 2015)
JOIN_KEYS: tuple[str, ...] = ("year", "species", "state")

JoinKind = Literal["inner", "left", "right", "full"]


# ----------------------------
# Lessons
# ----------------------------


def a_states_only(ebird: Table) -> Table:
    return filter(ebird, pl.col("state").is_in(list(A_STATES)))


def a_state_summary(ebird: Table) -> Table:
    """Mean and median sample size per state, states in first-seen order."""
    return summarize(
        group_by(ebird, "state"),
        {"mean": agg.mean("samplesize"), "median": agg.median("samplesize")},
    )


def state_year_presence(ebird: Table) -> Table:
    return summarize(group_by(ebird, ["state", "year"]), {"mean": agg.mean("presence")})


def median_samplesize_after(ebird: Table, year: int = 2014) -> Table:
    """Median sample size of the A states for years strictly after ``year``."""
    recent = filter(ebird, pl.col("state").is_in(list(A_STATES)) & (pl.col("year") > year))
    return summarize(group_by(recent, "state"), {"medianS": agg.median("samplesize")})


def mark_a_states(ebird: Table) -> Table:
    """Add ``a_state`` (1/0 membership flag) and ``state_year`` ("AK_2008")."""
    flagged = mutate(
        ebird,
        "a_state",
        pl.when(pl.col("state").is_in(list(A_STATES))).then(1).otherwise(0),
    )
    return mutate(flagged, "state_year", pl.concat_str([pl.col("state"), pl.col("year")], separator="_"))


def split_state_year(ebird: Table) -> Table:
    """Split ``state_year`` back into state/year, keeping the original column."""
    return separate(mark_a_states(ebird), "state_year", "_", ["state", "year"], keep_original=True)


def split_year_century(ebird: Table) -> Table:
    """Cut the year's digits after position 2: 2008 -> century "20", endpart "08"."""
    with_text = mutate(ebird, "year_text", pl.col("year").cast(pl.Utf8))
    return separate(with_text, "year_text", [2], ["century", "endpart"])


def cool_bird_tables(ebird: Table) -> tuple[Table, Table]:
    """
    The two join inputs: rails in the A states since 2014 (with samplesize) and in
    YEARS_TO_KEEP (with presence).
    """
    rails = filter(
        ebird,
        pl.col("state").is_in(list(A_STATES)) & pl.col("species").is_in(list(COOL_BIRDS)),
    )
    ebird1 = filter(select(rails, ["species", "state", "year", "samplesize"]), pl.col("year") >= 2014)
    ebird2 = filter(
        select(rails, ["species", "state", "year", "presence"]),
        pl.col("year").is_in(list(YEARS_TO_KEEP)),
    )
    return ebird1, ebird2


def joined_birds(ebird: Table, kind: JoinKind) -> Table:
    ebird1, ebird2 = cool_bird_tables(ebird)
    return join(ebird1, ebird2, JoinSpec(kind, JOIN_KEYS))


def join_years(ebird: Table, kind: JoinKind = "full") -> Table:
    """Distinct years present after joining the cool-bird tables with ``kind``."""
    return distinct(joined_birds(ebird, kind), "year")


def sampled_state_presence(ebird: Table, seed: int | None = None, n: int = 2, year: int = 2010) -> Table:
    """Mean presence in ``year`` of ``n`` randomly drawn rows per A state."""
    rows = filter(ebird, (pl.col("year") == year) & pl.col("state").is_in(list(A_STATES)))
    return summarize(sample_n(group_by(rows, "state"), n, seed=seed), {"mean": agg.mean("presence")})


LESSONS: dict[str, Callable[..., Any]] = {
    "a_state_summary": a_state_summary,
    "state_year_presence": state_year_presence,
    "median_samplesize_after": median_samplesize_after,
    "mark_a_states": mark_a_states,
    "split_state_year": split_state_year,
    "split_year_century": split_year_century,
    "cool_bird_tables": cool_bird_tables,
    "join_years": join_years,
    "sampled_state_presence": sampled_state_presence,
}


# ----------------------------
# Plot recipes
# ----------------------------


def presence_vs_samplesize(ebird: Table) -> PlotSpec:
    return (
        new_plot(a_states_only(ebird), {"x": "presence", "y": "samplesize", "color": "state"})
        + geom_point()
        + scale_x_log10()
    )


def samplesize_over_time(ebird: Table) -> PlotSpec:
    """Lines coloured per state with uncoloured points on top."""
    return (
        new_plot(a_states_only(ebird), {"x": "year", "y": "samplesize"})
        + geom_line({"color": "state"})
        + geom_point()
    )


def smooth_by_state(ebird: Table) -> PlotSpec:
    return (
        new_plot(a_states_only(ebird), {"x": "presence", "y": "samplesize"})
        + geom_point(alpha=0.5)
        + geom_smooth({"color": "state"}, size=2)
    )


def faceted_state_lines(ebird: Table, theme_name: str = "few") -> PlotSpec:
    return (
        new_plot(a_states_only(ebird), {"x": "year", "y": "samplesize", "group": "state", "color": "state"})
        + geom_line()
        + facet_wrap("state", ncol=2)
        + labs(x="Year", y="Sample Size", title="Figure 1")
        + scale_color_discrete(title="State")
        + theme(theme_name)
    )


def state_boxplot(ebird: Table, palette: str = "Set2", second_color: str | None = "#000000") -> PlotSpec:
    """Sample size per state with a manual Brewer fill; ``second_color`` replaces the palette's 2nd entry."""
    colors = list(brewer_palette(palette, len(A_STATES)))
    if second_color is not None:
        colors[1] = second_color
    return (
        new_plot(a_states_only(ebird), {"x": "state", "y": "samplesize", "fill": "state"})
        + geom_boxplot()
        + labs(x="text here", y="text here", title="TITLE HERE")
        + scale_fill_manual(colors)
    )


def stacked_figure(ebird: Table) -> alt.ConcatChart:
    """Lines per state above a presence/sample size scatter, axes aligned."""
    abird = a_states_only(ebird)
    one = (
        new_plot(abird, {"x": "year", "y": "samplesize", "group": "state"})
        + geom_line()
        + theme(axis_text_x={"angle": 90})
    )
    two = new_plot(abird, {"x": "samplesize", "y": "presence"}) + geom_point()
    return plot_grid([one, two], nrow=2, align="hv")


RECIPES: dict[str, Callable[[Table], PlotSpec | alt.TopLevelMixin]] = {
    "presence_vs_samplesize": presence_vs_samplesize,
    "samplesize_over_time": samplesize_over_time,
    "smooth_by_state": smooth_by_state,
    "faceted_state_lines": faceted_state_lines,
    "state_boxplot": state_boxplot,
    "stacked_figure": stacked_figure,
}
