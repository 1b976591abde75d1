"""
Lightweight typing aliases used across query and plotting modules.

Provides minimal aliases to improve readability and static checks.
This module contains no runtime logic and is zero-IO.

Notes:
    - Predicates and row functions accept either a Polars expression (evaluated
      column-wise) or a plain callable over a Row (evaluated row-wise).
    - Keep the surface small and stable to avoid churn in dependents.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeAlias

import polars as pl

from .table import Row

__all__ = [
    "RowPredicate",
    "RowFunction",
]

RowPredicate: TypeAlias = "pl.Expr | Callable[[Row], bool]"
RowFunction: TypeAlias = "pl.Expr | Callable[[Row], Any]"

