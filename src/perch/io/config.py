"""
Configuration for perch.

Defines Settings, a frozen dataclass carrying the defaults used by the workshop CLI: where the
eBird data lives, where figures go, and how they are sized and themed.

Precedence
- environment (PERCH_*) > TOML (./perch.toml or [tool.perch] in ./pyproject.toml) > defaults.

Notes
- Loose mappings are applied field by field; a value of the wrong shape is ignored and the
  previous layer's value is kept.
- An explicit TOML path that does not exist or does not parse raises ConfigError; the implicit
  search never does.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

from perch.core.constants import THEME_PRESETS

from .errors import ConfigError

__all__ = [
    "Settings",
]

logger = logging.getLogger(__name__)

Unit = Literal["in", "cm", "mm", "px"]

_UNITS = ("in", "cm", "mm", "px")
_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the perch CLI and workshop helpers.

    Attributes:
        data_path (str): CSV with the eBird workshop data.
        out_dir (str): Directory figures are written to.
        width (float): Default figure width in ``unit``.
        height (float): Default figure height in ``unit``.
        unit (Unit): "in" | "cm" | "mm" | "px".
        dpi (int): Raster resolution for PNG export.
        theme (str): Default theme preset.
        log_level (str): Log level name for setup_logging().
        seed (int | None): Seed for sampling lessons; None draws a fresh one.

    Examples:
        >>> Settings(width=4, height=4, unit="cm", dpi=600)  # doctest: +ELLIPSIS
        Settings(...)
    """

    data_path: str = "eBird_workshop.csv"
    out_dir: str = "out"
    width: float = 4.0
    height: float = 4.0
    unit: Unit = "in"
    dpi: int = 300
    theme: str = "grey"
    log_level: str = "info"
    seed: int | None = None

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: Settings, cfg: dict[str, Any] | None) -> Settings:
        """Apply a loose config mapping onto Settings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        for key in ("data_path", "out_dir"):
            if key in cfg and isinstance(cfg[key], str):
                s = replace(s, **{key: cfg[key]})

        for key in ("width", "height"):
            if key in cfg:
                try:
                    value = float(cfg[key])
                except (TypeError, ValueError):
                    logger.debug("ignoring invalid %s=%r", key, cfg[key])
                    continue
                if value > 0:
                    s = replace(s, **{key: value})

        if "unit" in cfg and isinstance(cfg["unit"], str):
            unit = cfg["unit"].strip().lower()
            if unit in _UNITS:
                s = replace(s, unit=unit)  # type: ignore[arg-type]

        if "dpi" in cfg:
            try:
                dpi = int(cfg["dpi"])
            except (TypeError, ValueError):
                dpi = 0
            if dpi > 0:
                s = replace(s, dpi=dpi)

        if "theme" in cfg and isinstance(cfg["theme"], str):
            name = cfg["theme"].strip().lower()
            name = "grey" if name == "gray" else name
            if name in THEME_PRESETS:
                s = replace(s, theme=name)

        if "log_level" in cfg and isinstance(cfg["log_level"], str):
            level = cfg["log_level"].strip().lower()
            if level in _LOG_LEVELS:
                s = replace(s, log_level=level)

        if "seed" in cfg:
            try:
                s = replace(s, seed=int(cfg["seed"]))
            except (TypeError, ValueError):
                logger.debug("ignoring invalid seed=%r", cfg["seed"])

        return s

    @classmethod
    def from_env(cls, base: Settings | None = None, prefix: str = "PERCH_") -> Settings:
        """
        Build Settings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - PERCH_DATA_PATH
            - PERCH_OUT_DIR
            - PERCH_WIDTH / PERCH_HEIGHT
            - PERCH_UNIT ("in" | "cm" | "mm" | "px")
            - PERCH_DPI
            - PERCH_THEME
            - PERCH_LOG_LEVEL
            - PERCH_SEED
        """
        s = base or cls()
        mapping: dict[str, Any] = {}
        for key in ("data_path", "out_dir", "width", "height", "unit", "dpi", "theme", "log_level", "seed"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v
        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Build Settings from a TOML file.

        Search order when `path` is None:
            1) ./perch.toml (with either a [perch] table or top-level keys)
            2) ./pyproject.toml under [tool.perch]

        Returns defaults if no file is present.

        Raises:
            ConfigError: If an explicit ``path`` is missing or is not valid TOML.
        """
        s = cls()

        cand: list[Path] = []
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise ConfigError(f"config file not found: {p}")
            cand.append(p)
        else:
            cand.append(Path.cwd() / "perch.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        cfg: dict[str, Any] | None = None
        for p in cand:
            if not p.exists():
                continue
            try:
                with p.open("rb") as fh:
                    data = tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError) as exc:
                if path is not None:
                    raise ConfigError(f"cannot parse config file {p}: {exc}") from exc
                logger.warning("skipping unreadable config file %s: %s", p, exc)
                continue
            if p.name == "pyproject.toml":
                tool = data.get("tool", {})
                cfg = tool.get("perch") if isinstance(tool, dict) else None
            elif isinstance(data.get("perch"), dict):
                cfg = data["perch"]
            else:
                cfg = data
            if cfg:
                logger.debug("loaded settings from %s", p)
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> Settings:
        """
        Load Settings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (perch.toml, pyproject.toml).

        Returns:
            Settings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
