from __future__ import annotations

import logging
from pathlib import Path

import pytest

from perch._log import LOGGER_NAME
from perch.core.table import Table

# A slice of the eBird workshop layout: two rails in three states, a few years.
EBIRD_ROWS = [
    {"state": "AK", "year": 2008, "species": "Sora", "samplesize": 10.0, "presence": 0.1},
    {"state": "AK", "year": 2010, "species": "Sora", "samplesize": 20.0, "presence": 0.3},
    {"state": "AK", "year": 2015, "species": "Sora", "samplesize": 30.0, "presence": 0.2},
    {"state": "AZ", "year": 2008, "species": "Virginia Rail", "samplesize": 5.0, "presence": 0.0},
    {"state": "AZ", "year": 2010, "species": "Virginia Rail", "samplesize": 15.0, "presence": 0.5},
    {"state": "AZ", "year": 2016, "species": "Virginia Rail", "samplesize": 25.0, "presence": 0.4},
    {"state": "AZ", "year": 2010, "species": "Sora", "samplesize": 7.0, "presence": 0.6},
    {"state": "IL", "year": 2010, "species": "Sora", "samplesize": 50.0, "presence": 0.9},
    {"state": "IL", "year": 2015, "species": "Sora", "samplesize": 60.0, "presence": 0.8},
]


@pytest.fixture
def ebird() -> Table:
    return Table.from_rows(EBIRD_ROWS)


@pytest.fixture
def ebird_csv(tmp_path: Path) -> Path:
    lines = ["state,year,species,samplesize,presence"]
    for r in EBIRD_ROWS:
        lines.append(f"{r['state']},{r['year']},{r['species']},{r['samplesize']},{r['presence']}")
    p = tmp_path / "eBird_workshop.csv"
    p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return p


@pytest.fixture
def perch_logging():
    """Restore the perch and backend loggers after a test that calls setup_logging()."""
    names = (LOGGER_NAME, "altair", "vl_convert", "urllib3")
    saved = {name: (list(logging.getLogger(name).handlers), logging.getLogger(name).level) for name in names}
    yield logging.getLogger(LOGGER_NAME)
    for name, (handlers, level) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers[:] = handlers
        logger.setLevel(level)
