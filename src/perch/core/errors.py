"""
Core exception types raised by table queries and plot resolution.

Provides typed exceptions for core-domain failures:
- ColumnNotFound when an operation names a column the table does not have.
- TypeMismatch when a predicate, aggregation, or split meets a column of the wrong dtype.
- MalformedValue when a value cannot be split into the requested pieces.
- InsufficientRows when a group is too small to sample from.
- PaletteTooSmall when a manual palette has fewer colours than distinct values.
- JoinKeyMismatch when a join key is absent from one side.

Notes:
    - This module uses only the Python standard library and has no side effects.
    - Every core operation raises at the point of detection and never partially applies;
      tables bound before the failing step remain valid.
    - IO-layer failures (ReadError/WriteError) live in perch.io.errors.

Examples:
    Catch a missing column.

    >>> from perch.core.errors import ColumnNotFound
    >>> try:
    ...     raise ColumnNotFound("samplesize", available=["state", "year"])
    ... except LookupError as e:
    ...     msg = str(e)
    >>> "samplesize" in msg
    True
"""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "ColumnNotFound",
    "TypeMismatch",
    "MalformedValue",
    "InsufficientRows",
    "PaletteTooSmall",
    "JoinKeyMismatch",
]


class ColumnNotFound(LookupError):
    """A referenced column is absent from the table."""

    def __init__(self, column: str, available: Iterable[str] | None = None) -> None:
        self.column = column
        self.available = list(available) if available is not None else []
        msg = f"column {column!r} not found"
        if self.available:
            msg += f" (available={self.available!r})"
        super().__init__(msg)


class TypeMismatch(TypeError):
    """A value or column dtype does not fit the operation; nothing is coerced."""


class MalformedValue(ValueError):
    """A value could not be split or parsed into the requested shape."""


class InsufficientRows(ValueError):
    """A group holds fewer rows than a sampling request needs."""


class PaletteTooSmall(ValueError):
    """A discrete palette has fewer colours than the values it must encode."""


class JoinKeyMismatch(LookupError):
    """A join key column is missing from the left or right table."""
