"""
Core package aggregator for perch contracts (table value type, errors, typing aliases).

## Contracts (single source of truth)
- Table — immutable, Polars-backed relation; Row — read-only row mapping.
- Errors — typed failures raised by perch.query and perch.viz.
- Typing — aliases for predicates and row functions.

## Notes
- Zero-IO policy: stdlib + polars only; no file/network IO.
- Every operation downstream returns a new Table; nothing mutates a Table in place.

## Downstream usage
- perch.query — filter/select/group/summarize/mutate/separate/join/sample over Table.
- perch.viz — consumes Table as plot data; raises ColumnNotFound on bad mappings.
- perch.io — produces Table from delimited files.

## Examples
```python
from perch.core import Table, ColumnNotFound
t = Table({"state": ["AK", "AZ"], "year": [2008, 2008]})
t.require("state")
try:
    t.require("species")
except ColumnNotFound as e:
    print(e)  # column 'species' not found (available=['state', 'year'])
```
"""

from __future__ import annotations

from .errors import (
    ColumnNotFound,
    InsufficientRows,
    JoinKeyMismatch,
    MalformedValue,
    PaletteTooSmall,
    TypeMismatch,
)
from .table import Row, Table

__all__ = [
    "Table",
    "Row",
    "ColumnNotFound",
    "TypeMismatch",
    "MalformedValue",
    "InsufficientRows",
    "PaletteTooSmall",
    "JoinKeyMismatch",
]
