# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
SQLite-backed storage for mass-spectrometry runs.

A store is one SQLite file holding the root :class:`MzLiteModel` as a single
JSON row plus one row per spectrum and chromatogram.  Each spectrum and
chromatogram row carries its JSON description, a JSON descriptor of its peak
array and the binary peak payload.

Writes go through a :class:`TransactionScope`.  At most one scope is open per
store.  Mutating methods take an optional ``scope``: when given, the write joins
that scope and nothing is committed; when omitted, the store runs the write in
its own one-off transaction and commits it.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd

from mzlite.binary.codec import BinaryDataDecoder, BinaryDataEncoder
from mzlite.config import StoreConfig, load_config
from mzlite.errors import (
    MzLiteIOError,
    ObjectDisposedError,
    RecordNotFoundError,
    ReentrancyError,
    SerializationError,
)
from mzlite.json.serialization import (
    chromatogram_from_json,
    peaks_from_json,
    spectrum_from_json,
)
from mzlite.model.entities import Chromatogram, MassSpectrum, MzLiteModel
from mzlite.model.peaks import Peak1DArray, Peak2DArray, PeakArray
from mzlite.storage.sqlite import records as _records
from mzlite.storage.sqlite import schema as _schema
from mzlite.storage.sqlite.records import CHROMATOGRAM_TABLE, SPECTRUM_TABLE, RecordTable
from mzlite.storage.sqlite.utils import open_db, set_pragmas
from mzlite.storage.transaction import TransactionScope

log = logging.getLogger(__name__)

__all__ = ["MzLiteStore", "open_store"]

MEMORY_PATH = ":memory:"


class MzLiteStore:
    """An open MzLite SQLite file."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        config: StoreConfig | None = None,
        encoder: BinaryDataEncoder | None = None,
    ):
        if path is None:
            raise ValueError("path must not be None")

        self.path = str(path)
        self._encoder = encoder if encoder is not None else BinaryDataEncoder()
        self._decoder = BinaryDataDecoder()
        self._scope: TransactionScope | None = None
        self._model: MzLiteModel | None = None
        self._conn: sqlite3.Connection | None = None
        self._disposed = False

        try:
            self.config = config if config is not None else load_config()
            if self.path != MEMORY_PATH:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = open_db(
                self.path,
                timeout=self.config.timeout,
                cached_statements=self.config.cached_statements,
            )
            set_pragmas(self._conn, self.config.pragmas())
            log.info("STORE: opened %s (%s)", self.path, self.config.pragmas())
            self._bootstrap()
        except Exception as exc:
            log.error("STORE: failed to open %s", self.path, exc_info=True)
            self._abandon()
            raise MzLiteIOError("Error opening mzlite sql file.") from exc

    def _bootstrap(self) -> None:
        with self.begin_transaction() as scope:
            _schema.ensure_schema(scope)
            model = _schema.load_model(scope)
            if model is None:
                model = MzLiteModel(Path(self.path).stem)
                _schema.save_model(scope, model)
                log.info("STORE: created model %r in %s", model.name, self.path)
            scope.commit()
        self._model = model

    def _abandon(self) -> None:
        scope, self._scope = self._scope, None
        if scope is not None and not scope.disposed:
            try:
                scope.dispose()
            except sqlite3.Error:
                log.warning("STORE: rollback failed while abandoning %s", self.path, exc_info=True)
        if self._conn is not None:
            self._conn.close()
        self._conn = None
        self._disposed = True

    # ------------------------------------------------------------------ #
    # State                                                              #
    # ------------------------------------------------------------------ #
    @property
    def closed(self) -> bool:
        return self._disposed

    @property
    def connection(self) -> sqlite3.Connection:
        self._raise_disposed()
        assert self._conn is not None
        return self._conn

    @property
    def active_scope(self) -> TransactionScope | None:
        return self._scope

    def _raise_disposed(self) -> None:
        if self._disposed:
            raise ObjectDisposedError(type(self).__name__)

    # ------------------------------------------------------------------ #
    # Transactions                                                       #
    # ------------------------------------------------------------------ #
    def begin_transaction(self) -> TransactionScope:
        """Open the store's transaction scope; only one may be open at a time."""

        self._raise_disposed()
        if self._scope is not None:
            raise ReentrancyError("Illegal attempt transaction scope reentrancy.")
        try:
            self._scope = TransactionScope(self, self.connection)
        except sqlite3.Error as exc:
            log.error("STORE: could not begin transaction on %s", self.path, exc_info=True)
            raise MzLiteIOError(f"Could not begin transaction: {exc}") from exc
        return self._scope

    def _release_scope(self, scope: TransactionScope) -> None:
        if self._scope is scope:
            self._scope = None

    def _write(
        self, scope: TransactionScope | None, action: Callable[..., None], *args: Any
    ) -> None:
        self._raise_disposed()
        if scope is not None:
            if scope.owner is not self:
                raise ValueError("Transaction scope belongs to another store")
            if not scope.is_active:
                raise ObjectDisposedError(type(scope).__name__)
            if scope is not self._scope:
                raise ValueError("Transaction scope is not the store's open scope")
            action(scope, *args)
            return
        with self.begin_transaction() as own:
            action(own, *args)
            own.commit()

    # ------------------------------------------------------------------ #
    # Model                                                              #
    # ------------------------------------------------------------------ #
    def get_model(self) -> MzLiteModel:
        """Return the cached root model; edits are persisted by :meth:`save_model`."""

        self._raise_disposed()
        assert self._model is not None
        return self._model

    def save_model(self, *, scope: TransactionScope | None = None) -> None:
        self._write(scope, _schema.save_model, self.get_model())

    # ------------------------------------------------------------------ #
    # Inserts                                                            #
    # ------------------------------------------------------------------ #
    def insert_spectrum(
        self,
        run_id: str,
        spectrum: MassSpectrum,
        peaks: Peak1DArray,
        *,
        scope: TransactionScope | None = None,
    ) -> None:
        self._write(scope, _records.insert_spectrum, self._encoder, run_id, spectrum, peaks)

    def insert_chromatogram(
        self,
        run_id: str,
        chromatogram: Chromatogram,
        peaks: Peak2DArray,
        *,
        scope: TransactionScope | None = None,
    ) -> None:
        self._write(
            scope, _records.insert_chromatogram, self._encoder, run_id, chromatogram, peaks
        )

    def insert(
        self,
        run_id: str,
        item: MassSpectrum | Chromatogram,
        peaks: PeakArray,
        *,
        scope: TransactionScope | None = None,
    ) -> None:
        """Insert a spectrum or a chromatogram depending on the type of ``item``."""

        if isinstance(item, MassSpectrum):
            self.insert_spectrum(run_id, item, peaks, scope=scope)
        elif isinstance(item, Chromatogram):
            self.insert_chromatogram(run_id, item, peaks, scope=scope)
        else:
            raise TypeError(f"Cannot insert {type(item).__name__}")

    # ------------------------------------------------------------------ #
    # Reads                                                              #
    # ------------------------------------------------------------------ #
    def read_mass_spectra(self, run_id: str) -> list[MassSpectrum]:
        rows = _records.fetch_descriptions(self.connection, SPECTRUM_TABLE, run_id)
        return [spectrum_from_json(text) for text in rows]

    def read_mass_spectrum(self, spectrum_id: str) -> MassSpectrum:
        return spectrum_from_json(self._description(SPECTRUM_TABLE, spectrum_id))

    def read_spectrum_peaks(self, spectrum_id: str) -> Peak1DArray:
        return self._peaks(SPECTRUM_TABLE, spectrum_id)

    def read_chromatograms(self, run_id: str) -> list[Chromatogram]:
        rows = _records.fetch_descriptions(self.connection, CHROMATOGRAM_TABLE, run_id)
        return [chromatogram_from_json(text) for text in rows]

    def read_chromatogram(self, chromatogram_id: str) -> Chromatogram:
        return chromatogram_from_json(self._description(CHROMATOGRAM_TABLE, chromatogram_id))

    def read_chromatogram_peaks(self, chromatogram_id: str) -> Peak2DArray:
        return self._peaks(CHROMATOGRAM_TABLE, chromatogram_id)

    def list_spectra(self, run_id: str | None = None) -> pd.DataFrame:
        return _records.list_records(self.connection, SPECTRUM_TABLE, run_id)

    def list_chromatograms(self, run_id: str | None = None) -> pd.DataFrame:
        return _records.list_records(self.connection, CHROMATOGRAM_TABLE, run_id)

    def count_spectra(self, run_id: str | None = None) -> int:
        return _records.count_records(self.connection, SPECTRUM_TABLE, run_id)

    def count_chromatograms(self, run_id: str | None = None) -> int:
        return _records.count_records(self.connection, CHROMATOGRAM_TABLE, run_id)

    def _description(self, table: RecordTable, record_id: str) -> str:
        text = _records.fetch_description(self.connection, table, record_id)
        if text is None:
            raise RecordNotFoundError(table.name, record_id)
        return text

    def _peaks(self, table: RecordTable, record_id: str) -> Any:
        row = _records.fetch_peak_row(self.connection, table, record_id)
        if row is None:
            raise RecordNotFoundError(table.name, record_id)
        descriptor_json, data = row
        descriptor, count = peaks_from_json(descriptor_json, table.peak_type)
        peaks = self._decoder.decode(descriptor, data)
        if len(peaks) != count:
            raise SerializationError(
                f"{table.name} {record_id!r}: descriptor records {count} peaks, "
                f"payload holds {len(peaks)}"
            )
        return peaks

    # ------------------------------------------------------------------ #
    # Lifecycle                                                          #
    # ------------------------------------------------------------------ #
    def close(self) -> None:
        """Roll back any open scope and close the connection. Safe to call twice."""

        if self._disposed:
            return
        scope, conn = self._scope, self._conn
        try:
            if scope is not None:
                scope.dispose()
        finally:
            self._scope = None
            self._conn = None
            self._disposed = True
            if conn is not None:
                conn.close()
            log.info("STORE: closed %s", self.path)

    def __enter__(self) -> MzLiteStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._disposed else "open"
        return f"<MzLiteStore {self.path!r} {state}>"


def open_store(path: str | os.PathLike[str], *, config: StoreConfig | None = None) -> MzLiteStore:
    """Open or create the store at ``path``."""

    return MzLiteStore(path, config=config)
