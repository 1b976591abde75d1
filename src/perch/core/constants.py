"""
perch core defaults shared by query, plotting and configuration layers.

This module is zero-IO and uses only the Python standard library.

Notes:
    - Values mirror the R workshop conventions (dplyr head(), ggplot2 smooth grid, facet_wrap).
"""

from __future__ import annotations

__all__ = [
    "HEAD_ROWS",
    "FIT_POINTS",
    "FACET_NCOL",
    "THEME_PRESETS",
]

# Rows shown by head()/tail() when no count is given.
HEAD_ROWS: int = 6

# Evaluation grid size for fitted smooth lines.
FIT_POINTS: int = 80

# Panels per row for facet_wrap when ncol is not given.
FACET_NCOL: int = 2

# Theme presets known to the renderer ("gray" is accepted as an alias of "grey").
THEME_PRESETS: tuple[str, ...] = ("grey", "minimal", "few", "economist", "gdocs", "excel")
