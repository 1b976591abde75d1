"""
perch.query — Pure, Polars-backed transformations over immutable Tables.

## Responsibilities
- filter/select/distinct/arrange over rows and columns.
- group_by → summarize with typed aggregations; per-group sampling with explicit seeds.
- mutate and separate for derived columns.
- inner/left/right/full joins with deterministic suffixing and row order.

## Failure policy
- Fail fast with typed errors from perch.core.errors; no partial application.
- No silent coercion: dtype problems raise TypeMismatch.

## Examples
```python
import polars as pl
from perch.query import filter, group_by, summarize
from perch.query import aggregations as agg

a_states = ["AZ", "AK", "AL", "AR"]
new_data = summarize(
    group_by(filter(ebird, pl.col("state").is_in(a_states) & (pl.col("year") > 2014)), "state"),
    {"median_samplesize": agg.median("samplesize")},
)
```
"""

from __future__ import annotations

from . import aggregations
from .aggregations import Aggregation
from .grouped import GroupedTable, group_by, sample_n, summarize
from .join import JoinSpec, full_join, inner_join, join, left_join, right_join
from .separate import separate
from .verbs import arrange, distinct, filter, head, mutate, select, tail

__all__ = [
    "aggregations",
    "Aggregation",
    "GroupedTable",
    "JoinSpec",
    "filter",
    "select",
    "distinct",
    "mutate",
    "arrange",
    "head",
    "tail",
    "group_by",
    "summarize",
    "sample_n",
    "separate",
    "join",
    "inner_join",
    "left_join",
    "right_join",
    "full_join",
]
