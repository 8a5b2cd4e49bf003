# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Rotating file logs for store sessions.

``mzlite.log`` receives the package's own records and ``errors.log`` collects
ERROR records from every logger.  The per-statement and per-payload loggers
(transactions, peak codec, record tables) stay at INFO unless storage tracing
is requested, so a bulk import does not flood ``mzlite.log`` with one DEBUG
line per spectrum.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

__all__ = ["STORAGE_TRACE_LOGGERS", "setup_logging", "get_log_directory"]

PACKAGE_LOGGER = "mzlite"

# Loggers that emit one DEBUG record per statement, row or payload.
STORAGE_TRACE_LOGGERS = (
    "mzlite.storage.transaction",
    "mzlite.storage.sqlite.records",
    "mzlite.binary.codec",
)

_MB = 1024 * 1024

_FILE_FORMAT = logging.Formatter(
    "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
_CONSOLE_FORMAT = logging.Formatter("%(levelname)-8s | %(name)s | %(message)s")


def _rotating(path: Path, max_mb: int, backups: int, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path, maxBytes=max_mb * _MB, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(_FILE_FORMAT)
    return handler


def setup_logging(
    app_name: str = "MzLite",
    console_level: int = logging.INFO,
    log_dir: Path | None = None,
    trace_storage: bool = False,
) -> Path:
    """
    Install the store's log handlers and return the log directory.

    Args:
        app_name: Application name used for the default log directory
        console_level: Minimum level echoed to stdout
        log_dir: Explicit log directory; defaults to the platform location
        trace_storage: Keep DEBUG records from the transaction, record-table
            and codec loggers instead of capping them at INFO
    """
    log_dir = Path(log_dir) if log_dir is not None else _get_log_directory(app_name)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()
    root_logger.addHandler(_rotating(log_dir / "errors.log", 5, 3, logging.ERROR))

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(logging.DEBUG)
    pkg_logger.handlers.clear()
    pkg_logger.addHandler(_rotating(log_dir / "mzlite.log", 10, 5, logging.DEBUG))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(_CONSOLE_FORMAT)
    pkg_logger.addHandler(console_handler)

    trace_level = logging.DEBUG if trace_storage else logging.INFO
    for name in STORAGE_TRACE_LOGGERS:
        logging.getLogger(name).setLevel(trace_level)

    log = logging.getLogger(__name__)
    log.info("%s logging to %s (storage trace %s)", app_name, log_dir, trace_storage)
    return log_dir


def _get_log_directory(app_name: str) -> Path:
    """
    Platform log directory.

    - Windows: %LOCALAPPDATA%\\AppName\\logs
    - macOS: ~/Library/Logs/AppName
    - Linux: $XDG_DATA_HOME/AppName/logs
    """
    home = Path.home()

    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local"))
        return base / app_name / "logs"
    if sys.platform == "darwin":
        return home / "Library" / "Logs" / app_name
    xdg_data_home = os.environ.get("XDG_DATA_HOME", home / ".local" / "share")
    return Path(xdg_data_home) / app_name / "logs"


def get_log_directory(app_name: str = "MzLite") -> Path:
    return _get_log_directory(app_name)
