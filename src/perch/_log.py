"""
Console logging for the perch command line.

Overview
- setup_logging() installs one coloured stream handler on the ``perch`` logger; the CLI calls it
  once with ``Settings.log_level``. Library modules only ever call ``logging.getLogger(__name__)``.
- The formatter follows the colorlog setup used by native-db: coloured level names and ISO-8601
  UTC timestamps with a trailing 'Z'.
- Loggers of the chart backends are held at WARNING unless perch itself runs at DEBUG.
"""

from __future__ import annotations

import logging
import time
from typing import TextIO

from colorlog import ColoredFormatter

__all__ = ["UTCColoredFormatter", "setup_logging"]

LOGGER_NAME = "perch"

_FORMAT = "%(asctime)s %(log_color)s%(levelname)s%(reset)s %(name)s: %(message)s"
_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}
_BACKENDS: tuple[str, ...] = ("altair", "vl_convert", "urllib3")


class UTCColoredFormatter(ColoredFormatter):
    """ColoredFormatter with ISO-8601 UTC timestamps ending in 'Z'."""

    converter = time.gmtime

    def formatTime(self, record, datefmt=None):
        if datefmt:
            return super().formatTime(record, datefmt)
        return time.strftime("%Y-%m-%dT%H:%M:%SZ", self.converter(record.created))


def setup_logging(loglevel: str | int = "info", stream: TextIO | None = None) -> logging.Logger:
    """
    Route perch's log records to ``stream`` (stderr by default) at ``loglevel``.

    Args:
        loglevel (str | int): Level name ("debug", "info", ...) or a logging constant.
        stream (TextIO | None): Destination; None writes to stderr.

    Returns:
        logging.Logger: The configured ``perch`` logger.

    Raises:
        ValueError: On an unknown level name.
    """
    level = loglevel.upper() if isinstance(loglevel, str) else loglevel

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    # calling twice must not duplicate output
    logger.handlers.clear()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(UTCColoredFormatter(_FORMAT, log_colors=_COLORS))
    logger.addHandler(handler)

    backend_level = logging.DEBUG if logger.level <= logging.DEBUG else logging.WARNING
    for name in _BACKENDS:
        logging.getLogger(name).setLevel(backend_level)
    return logger
