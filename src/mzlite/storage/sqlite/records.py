# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Spectrum and chromatogram row persistence."""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

import pandas as pd

from mzlite.binary.codec import BinaryDataEncoder
from mzlite.json.serialization import (
    chromatogram_to_json,
    peaks_to_json,
    spectrum_to_json,
)
from mzlite.model.entities import Chromatogram, MassSpectrum
from mzlite.model.peaks import Peak1DArray, Peak2DArray, PeakArray
from mzlite.storage.transaction import TransactionScope

log = logging.getLogger(__name__)

__all__ = [
    "RecordTable",
    "SPECTRUM_TABLE",
    "CHROMATOGRAM_TABLE",
    "insert_spectrum",
    "insert_chromatogram",
    "fetch_description",
    "fetch_descriptions",
    "fetch_peak_row",
    "list_records",
    "count_records",
]


@dataclass(frozen=True)
class RecordTable:
    """Naming of one record table; ``name`` and ``id_column`` are trusted SQL identifiers."""

    name: str
    id_column: str
    insert_command: str
    peak_type: type[PeakArray]

    @property
    def insert_sql(self) -> str:
        return (
            f"INSERT INTO {self.name} VALUES"
            "(:run_id, :record_id, :description, :peak_array, :peak_data)"
        )


SPECTRUM_TABLE = RecordTable("Spectrum", "SpectrumID", "INSERT_SPECTRUM_CMD", Peak1DArray)
CHROMATOGRAM_TABLE = RecordTable(
    "Chromatogram", "ChromatogramID", "INSERT_CHROMATOGRAM_CMD", Peak2DArray
)


# ---- Inserts ----------------------------------------------------------------


def _insert_row(
    scope: TransactionScope,
    table: RecordTable,
    encoder: BinaryDataEncoder,
    run_id: str,
    record_id: str,
    description: str,
    peaks: PeakArray,
) -> None:
    cmd = scope.try_get_command(table.insert_command)
    if cmd is None:
        cmd = scope.prepare_command(table.insert_command, table.insert_sql)
    # Descriptor and payload come from the same array in one pass.
    peak_array = peaks_to_json(peaks)
    peak_data = encoder.encode(peaks)
    cmd.execute(
        {
            "run_id": run_id,
            "record_id": record_id,
            "description": description,
            "peak_array": peak_array,
            "peak_data": sqlite3.Binary(peak_data),
        }
    )
    log.debug(
        "INSERT: %s run=%s id=%s peaks=%d bytes=%d",
        table.name,
        run_id,
        record_id,
        len(peaks),
        len(peak_data),
    )


def insert_spectrum(
    scope: TransactionScope,
    encoder: BinaryDataEncoder,
    run_id: str,
    spectrum: MassSpectrum,
    peaks: Peak1DArray,
) -> None:
    """Append one Spectrum row; a duplicate ID raises ``sqlite3.IntegrityError``."""

    _insert_row(
        scope, SPECTRUM_TABLE, encoder, run_id, spectrum.id, spectrum_to_json(spectrum), peaks
    )


def insert_chromatogram(
    scope: TransactionScope,
    encoder: BinaryDataEncoder,
    run_id: str,
    chromatogram: Chromatogram,
    peaks: Peak2DArray,
) -> None:
    """Append one Chromatogram row; a duplicate ID raises ``sqlite3.IntegrityError``."""

    _insert_row(
        scope,
        CHROMATOGRAM_TABLE,
        encoder,
        run_id,
        chromatogram.id,
        chromatogram_to_json(chromatogram),
        peaks,
    )


# ---- Reads ------------------------------------------------------------------


def fetch_description(conn: sqlite3.Connection, table: RecordTable, record_id: str) -> str | None:
    """Return the Description JSON of ``record_id`` or ``None``."""

    row = conn.execute(
        f"SELECT Description FROM {table.name} WHERE {table.id_column} = ?",
        (record_id,),
    ).fetchone()
    return None if row is None else row[0]


def fetch_descriptions(conn: sqlite3.Connection, table: RecordTable, run_id: str) -> list[str]:
    """Return the Description JSON of every record in ``run_id``, in insertion order."""

    rows = conn.execute(
        f"SELECT Description FROM {table.name} WHERE RunID = ? ORDER BY rowid ASC",
        (run_id,),
    ).fetchall()
    log.debug("fetch_descriptions: table=%s run=%s rows=%d", table.name, run_id, len(rows))
    return [row[0] for row in rows]


def fetch_peak_row(
    conn: sqlite3.Connection, table: RecordTable, record_id: str
) -> tuple[str, bytes] | None:
    """Return ``(PeakArray JSON, PeakData bytes)`` for ``record_id`` or ``None``."""

    row = conn.execute(
        f"SELECT PeakArray, PeakData FROM {table.name} WHERE {table.id_column} = ?",
        (record_id,),
    ).fetchone()
    if row is None:
        return None
    return row[0], bytes(row[1])


def list_records(
    conn: sqlite3.Connection, table: RecordTable, run_id: str | None = None
) -> pd.DataFrame:
    """Return ``RunID`` and ID columns for ``table``, optionally limited to one run."""

    query = [f"SELECT RunID, {table.id_column} FROM {table.name}"]
    params: list[object] = []
    if run_id is not None:
        query.append("WHERE RunID = ?")
        params.append(run_id)
    query.append("ORDER BY rowid ASC")
    df = pd.read_sql_query(" ".join(query), conn, params=params)
    log.debug("list_records: table=%s run=%s rows=%d", table.name, run_id, len(df.index))
    return df


def count_records(conn: sqlite3.Connection, table: RecordTable, run_id: str | None = None) -> int:
    if run_id is None:
        row = conn.execute(f"SELECT COUNT(*) FROM {table.name}").fetchone()
    else:
        row = conn.execute(
            f"SELECT COUNT(*) FROM {table.name} WHERE RunID = ?", (run_id,)
        ).fetchone()
    return int(row[0])
