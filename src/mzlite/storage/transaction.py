# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Transaction scopes and the commands bound to them.

A :class:`TransactionScope` owns one SQLite transaction and a name-keyed cache
of prepared :class:`Command` objects.  Bulk inserts look their statement up by
name and reuse it; a prepared command keeps one cursor and one SQL text, so
sqlite3's per-connection statement cache hands back the already compiled
statement on every execution.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Union

from mzlite.errors import ObjectDisposedError

if TYPE_CHECKING:
    from mzlite.storage.sqlite_store import MzLiteStore

__all__ = ["Command", "TransactionScope"]

log = logging.getLogger(__name__)

Parameters = Union[Sequence[Any], Mapping[str, Any]]


class Command:
    """One SQL statement executed inside a transaction scope."""

    def __init__(self, scope: TransactionScope, sql: str, *, name: str | None = None):
        self._scope = scope
        self.sql = sql
        self.name = name
        self._cursor: sqlite3.Cursor | None = scope.connection.cursor()

    @property
    def disposed(self) -> bool:
        return self._cursor is None

    def _active_cursor(self) -> sqlite3.Cursor:
        if self._cursor is None:
            raise ObjectDisposedError(type(self).__name__)
        self._scope._raise_inactive()
        return self._cursor

    def execute(self, params: Parameters = ()) -> int:
        """Run the statement and return the number of affected rows."""

        cursor = self._active_cursor()
        cursor.execute(self.sql, params)
        return cursor.rowcount

    def execute_scalar(self, params: Parameters = ()) -> Any:
        """Run the statement and return the first column of the first row, or ``None``."""

        cursor = self._active_cursor()
        row = cursor.execute(self.sql, params).fetchone()
        return None if row is None else row[0]

    def fetch_all(self, params: Parameters = ()) -> list[sqlite3.Row]:
        cursor = self._active_cursor()
        return cursor.execute(self.sql, params).fetchall()

    def dispose(self) -> None:
        if self._cursor is None:
            return
        try:
            self._cursor.close()
        finally:
            self._cursor = None

    def __enter__(self) -> Command:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        label = f" {self.name}" if self.name else ""
        return f"<Command{label} {self.sql!r}>"


class TransactionScope:
    """
    One open transaction on a store's connection.

    ``commit`` and ``rollback`` may be called once; afterwards, and after
    disposal, every call raises :class:`ObjectDisposedError`.  Disposing an
    unfinished scope rolls it back.  Disposal always hands the scope back to
    the owning store so that a new one can be started.
    """

    def __init__(self, owner: MzLiteStore, connection: sqlite3.Connection, *, begin: str = "BEGIN"):
        self._owner = owner
        self._connection = connection
        self._commands: dict[str, Command] = {}
        self._finalized = False
        self._disposed = False
        connection.execute(begin)
        log.debug("TXN: %s on %s", begin, owner)

    # ------------------------------------------------------------------ #
    # State                                                              #
    # ------------------------------------------------------------------ #
    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    @property
    def owner(self) -> MzLiteStore:
        return self._owner

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def is_active(self) -> bool:
        """True until the scope is committed, rolled back or disposed."""

        return not (self._disposed or self._finalized)

    def _raise_inactive(self) -> None:
        if not self.is_active:
            raise ObjectDisposedError(type(self).__name__)

    # ------------------------------------------------------------------ #
    # Commands                                                           #
    # ------------------------------------------------------------------ #
    def create_command(self, sql: str) -> Command:
        """Return a one-off command bound to this transaction."""

        self._raise_inactive()
        return Command(self, sql)

    def prepare_command(self, name: str, sql: str) -> Command:
        """Create a command and cache it under ``name`` for reuse."""

        self._raise_inactive()
        if not sqlite3.complete_statement(sql.rstrip().rstrip(";") + ";"):
            raise ValueError(f"Incomplete SQL statement for command {name!r}: {sql!r}")
        previous = self._commands.pop(name, None)
        if previous is not None:
            previous.dispose()
        command = Command(self, sql, name=name)
        self._commands[name] = command
        log.debug("TXN: prepared command %s", name)
        return command

    def try_get_command(self, name: str) -> Command | None:
        """Return the cached command called ``name`` or ``None``."""

        self._raise_inactive()
        return self._commands.get(name)

    # ------------------------------------------------------------------ #
    # Finalisation                                                       #
    # ------------------------------------------------------------------ #
    def commit(self) -> None:
        self._raise_inactive()
        self._connection.execute("COMMIT")
        self._finalized = True
        log.debug("TXN: COMMIT on %s", self._owner)

    def rollback(self) -> None:
        self._raise_inactive()
        self._connection.execute("ROLLBACK")
        self._finalized = True
        log.debug("TXN: ROLLBACK on %s", self._owner)

    def dispose(self) -> None:
        if self._disposed:
            return
        try:
            for command in self._commands.values():
                command.dispose()
            self._commands.clear()
            if not self._finalized and self._connection.in_transaction:
                self._connection.execute("ROLLBACK")
                log.info("TXN: rolled back unfinished transaction on %s", self._owner)
        finally:
            self._disposed = True
            self._owner._release_scope(self)

    close = dispose

    def __enter__(self) -> TransactionScope:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()
