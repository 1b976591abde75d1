"""
Custom exceptions for the perch.io module.

Purpose
- Provide IO-layer error types for file reading, figure export and configuration.
- Keep perch.core.errors as the source of truth for data-shape errors raised by queries and
  plot resolution (ColumnNotFound, TypeMismatch, ...).

Boundaries
- perch.io raises Io* errors for filesystem/format concerns:
  - ReadError: a data file is missing, unparsable, or lacks descriptor columns.
  - WriteError: a figure could not be exported (format, converter, or OS failure).
  - ConfigError: configuration that cannot be honoured.

Notes
- The original cause is always chained (``raise ... from exc``).
"""

from __future__ import annotations

__all__ = [
    "IoError",
    "ReadError",
    "WriteError",
    "ConfigError",
]


class IoError(Exception):
    """
    Base class for IO-related errors in perch.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from perch.core errors.
    """


class ReadError(IoError):
    """
    Raised when a data file cannot be read into a Table.

    Examples:
        - File does not exist
        - CSV cannot be parsed
        - Required descriptor column missing, or a value fails a safe cast
    """


class WriteError(IoError):
    """
    Raised when a plot cannot be written.

    Examples:
        - Unsupported file suffix
        - PNG/SVG/PDF requested without vl-convert-python installed
        - Destination directory missing or not writable
    """


class ConfigError(IoError):
    """Raised when an explicitly requested configuration file cannot be loaded."""
