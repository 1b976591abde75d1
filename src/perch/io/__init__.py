"""
perch.io — Reading workshop data and loading configuration.

## Responsibilities
- Read delimited files into perch Tables, validated against a TableDescriptor with safe casts.
- Load Settings with precedence env (PERCH_*) > TOML > defaults.
- Define Io* errors for file, export and configuration failures.

## Public API
- read_table / TableDescriptor / EBIRD_DESCRIPTOR — CSV reading and validation.
- Settings — CLI defaults (data path, output size/units/dpi, theme, log level, seed).
- IoError, ReadError, WriteError, ConfigError.

## Import DAG discipline
- Depends only on stdlib, polars and perch.core.
- MUST NOT import perch.query, perch.viz or perch.lab.

## Examples
```python
from perch.io import Settings, read_table

settings = Settings.load()  # doctest: +SKIP
ebird = read_table(settings.data_path)  # doctest: +SKIP
```
"""

from __future__ import annotations

from .config import Settings
from .errors import ConfigError, IoError, ReadError, WriteError
from .read import EBIRD_DESCRIPTOR, TableDescriptor, read_table, validate_frame

__all__ = [
    "Settings",
    "IoError",
    "ReadError",
    "WriteError",
    "ConfigError",
    "TableDescriptor",
    "EBIRD_DESCRIPTOR",
    "read_table",
    "validate_frame",
]
