"""
perch — dplyr-style table queries and ggplot-style layered plots over Polars.

Subpackages
- perch.core — Table, errors, shared constants.
- perch.query — filter/select/group_by/summarize/mutate/separate/joins/sample_n.
- perch.viz — PlotSpec builder, resolution, Altair rendering, export, grids.
- perch.io — CSV reading and settings.
- perch.lab — the eBird workshop lessons, recipes and CLI.
"""

from __future__ import annotations

from perch.core import Table

__all__ = ["Table", "__version__"]

__version__ = "0.1.0"
