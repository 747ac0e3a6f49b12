"""Logging setup shared by the API process and the command line scripts."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 14


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Install console (and optionally rotating file) handlers on the root logger."""

    root = logging.getLogger()
    root.setLevel(level.upper())

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)
    for handler in list(root.handlers):
        if getattr(handler, "_license_manager", False):
            root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    console._license_manager = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler._license_manager = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)


__all__ = ["configure_logging"]
