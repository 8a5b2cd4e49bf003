# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Schema bootstrap and singleton model row for MzLite stores.
"""

from __future__ import annotations

import logging

from mzlite.json.serialization import model_from_json, model_to_json
from mzlite.model.entities import MzLiteModel
from mzlite.storage.transaction import TransactionScope

__all__ = [
    "SCHEMA_STATEMENTS",
    "ensure_schema",
    "load_model",
    "save_model",
]

log = logging.getLogger(__name__)

# The Model table holds at most one row: Lock is both the key and pinned to 0.
SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS Model (
        Lock INTEGER NOT NULL PRIMARY KEY DEFAULT(0) CHECK (Lock = 0),
        Content TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Spectrum (
        RunID TEXT NOT NULL,
        SpectrumID TEXT NOT NULL PRIMARY KEY,
        Description TEXT NOT NULL,
        PeakArray TEXT NOT NULL,
        PeakData BLOB NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS Chromatogram (
        RunID TEXT NOT NULL,
        ChromatogramID TEXT NOT NULL PRIMARY KEY,
        Description TEXT NOT NULL,
        PeakArray TEXT NOT NULL,
        PeakData BLOB NOT NULL
    )
    """,
)


def ensure_schema(scope: TransactionScope) -> None:
    """Create the store tables if they do not exist yet."""

    for statement in SCHEMA_STATEMENTS:
        with scope.create_command(statement) as cmd:
            cmd.execute()


def load_model(scope: TransactionScope) -> MzLiteModel | None:
    """Return the persisted root model, or ``None`` for a fresh store."""

    with scope.create_command("SELECT Content FROM Model") as cmd:
        content = cmd.execute_scalar()
    if content is None:
        return None
    model = model_from_json(content)
    log.debug("STORE: loaded model name=%s bytes=%d", model.name, len(content))
    return model


def save_model(scope: TransactionScope, model: MzLiteModel) -> None:
    """Replace the singleton model row with ``model``."""

    content = model_to_json(model)
    with scope.create_command("DELETE FROM Model") as cmd:
        cmd.execute()
    with scope.create_command("INSERT INTO Model VALUES(:lock, :content)") as cmd:
        cmd.execute({"lock": 0, "content": content})
    log.debug("STORE: saved model name=%s bytes=%d", model.name, len(content))
