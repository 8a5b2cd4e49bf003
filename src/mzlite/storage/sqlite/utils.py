# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Connection helpers for MzLite stores: opening and pragmas.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

__all__ = ["open_db", "set_pragmas"]


# ---- Connections ------------------------------------------------------------


def open_db(
    path: str,
    *,
    mode: str = "rwc",
    timeout: float = 5.0,
    cached_statements: int = 128,
) -> sqlite3.Connection:
    """
    Open a SQLite database in autocommit mode.

    mode: "ro" (read-only), "rw", "rwc" (create if needed). Default: "rwc".
    Transactions are issued explicitly (``BEGIN``/``COMMIT``/``ROLLBACK``) by
    the caller, so the connection uses ``isolation_level=None``.
    """
    if path == ":memory:":
        conn = sqlite3.connect(
            ":memory:",
            timeout=timeout,
            isolation_level=None,
            cached_statements=cached_statements,
        )
    else:
        # as_uri percent-encodes "#", "?" and "%" so they stay part of the file name.
        uri = f"{Path(path).resolve().as_uri()}?mode={mode}"
        conn = sqlite3.connect(
            uri,
            uri=True,
            timeout=timeout,
            isolation_level=None,
            cached_statements=cached_statements,
        )
    conn.row_factory = sqlite3.Row
    return conn


def _to_int(value: object) -> int:
    return int(cast(Any, value))


def _on_off(value: object) -> str:
    if isinstance(value, str):
        return value.upper()
    return "ON" if value else "OFF"


def set_pragmas(conn: sqlite3.Connection, opts: Mapping[str, object]) -> None:
    """Apply selected pragmas.

    Only keys present in ``opts`` are applied. Supported keys include
    ``synchronous``, ``journal_mode``, ``temp_store``,
    ``ignore_check_constraints``, ``foreign_keys``, ``cache_size`` and
    ``busy_timeout_ms``.
    """

    norm = {str(key).lower(): value for key, value in opts.items()}
    for key, value in norm.items():
        if key == "synchronous":
            conn.execute(f"PRAGMA synchronous={value}")
        elif key == "journal_mode":
            conn.execute(f"PRAGMA journal_mode={value}")
        elif key == "temp_store":
            conn.execute(f"PRAGMA temp_store={value}")
        elif key == "ignore_check_constraints":
            conn.execute(f"PRAGMA ignore_check_constraints={_on_off(value)}")
        elif key == "foreign_keys":
            conn.execute(f"PRAGMA foreign_keys={_on_off(value)}")
        elif key == "cache_size":
            conn.execute(f"PRAGMA cache_size={_to_int(value)}")
        elif key == "busy_timeout_ms":
            conn.execute(f"PRAGMA busy_timeout={_to_int(value)}")
