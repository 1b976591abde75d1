from __future__ import annotations

from perch.core import errors


def test_error_hierarchy_matches_builtins() -> None:
    assert issubclass(errors.ColumnNotFound, LookupError)
    assert issubclass(errors.JoinKeyMismatch, LookupError)
    assert issubclass(errors.TypeMismatch, TypeError)
    for cls in (errors.MalformedValue, errors.InsufficientRows, errors.PaletteTooSmall):
        assert issubclass(cls, ValueError)


def test_column_not_found_carries_column_and_available() -> None:
    e = errors.ColumnNotFound("species", ["state", "year"])
    assert e.column == "species"
    assert "species" in str(e) and "state" in str(e)
