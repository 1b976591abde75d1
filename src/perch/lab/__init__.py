"""
perch.lab — The eBird workshop as runnable lessons, plot recipes and a CLI.

## Public API
- workshop — LESSONS (Table -> Table) and RECIPES (Table -> PlotSpec or chart).
- cli — ``perch lesson <name>``, ``perch plot <recipe> --out FILE``, ``perch recipes``.

## Import DAG discipline
- Top layer: may import perch.core, perch.query, perch.viz and perch.io.
"""

from __future__ import annotations

from .workshop import A_STATES, COOL_BIRDS, LESSONS, RECIPES, YEARS_TO_KEEP

__all__ = [
    "A_STATES",
    "COOL_BIRDS",
    "YEARS_TO_KEEP",
    "LESSONS",
    "RECIPES",
]
