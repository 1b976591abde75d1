from __future__ import annotations

from pathlib import Path

import pytest

from perch.io import ConfigError, Settings

_ENV_KEYS = [
    "PERCH_DATA_PATH",
    "PERCH_OUT_DIR",
    "PERCH_WIDTH",
    "PERCH_HEIGHT",
    "PERCH_UNIT",
    "PERCH_DPI",
    "PERCH_THEME",
    "PERCH_LOG_LEVEL",
    "PERCH_SEED",
]


def _clear_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_perch_toml(tmp: Path, content: str) -> Path:
    p = tmp / "perch.toml"
    p.write_text(content)
    return p


def test_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    _write_perch_toml(
        tmp_path,
        """
        [perch]
        out_dir = "figs_toml"
        dpi = 150
        theme = "minimal"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("PERCH_OUT_DIR", "figs_env")
    monkeypatch.setenv("PERCH_DPI", "600")

    s = Settings.load()

    assert s.out_dir == "figs_env"
    assert s.dpi == 600
    assert s.theme == "minimal"  # from TOML, no env override


def test_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.perch]
        width = 10
        unit = "CM"
        theme = "gray"
        seed = 42
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = Settings.load()

    assert s.width == 10.0
    assert s.unit == "cm"
    assert s.theme == "grey"
    assert s.seed == 42


def test_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    s = Settings.load()

    assert s == Settings()
    assert s.data_path == "eBird_workshop.csv"
    assert (s.width, s.height, s.unit, s.dpi) == (4.0, 4.0, "in", 300)
    assert s.seed is None


def test_invalid_values_are_ignored(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("PERCH_WIDTH", "-3")
    monkeypatch.setenv("PERCH_DPI", "lots")
    monkeypatch.setenv("PERCH_THEME", "solarized")
    monkeypatch.setenv("PERCH_UNIT", "furlong")

    s = Settings.load()

    assert s.width == 4.0
    assert s.dpi == 300
    assert s.theme == "grey"
    assert s.unit == "in"


def test_explicit_config_path_errors(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        Settings.from_toml(tmp_path / "missing.toml")
    bad = tmp_path / "bad.toml"
    bad.write_text("[perch\nwidth = ")
    with pytest.raises(ConfigError):
        Settings.from_toml(bad)
