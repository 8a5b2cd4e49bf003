import sqlite3

import pytest

from mzlite.errors import ObjectDisposedError
from mzlite.logging_config import get_log_directory
from mzlite.storage.sqlite.utils import open_db, set_pragmas
from mzlite.storage.sqlite_store import MzLiteStore


def _open(tmp_path) -> MzLiteStore:
    return MzLiteStore(tmp_path / "run1.db")


def test_commands_execute_and_fetch(tmp_path):
    with _open(tmp_path) as store:
        with store.begin_transaction() as scope:
            with scope.create_command("CREATE TABLE t (k TEXT PRIMARY KEY, v INTEGER)") as cmd:
                cmd.execute()
            insert = scope.prepare_command("INSERT_T", "INSERT INTO t VALUES (?, ?)")
            assert insert.execute(("a", 1)) == 1
            assert insert.execute(("b", 2)) == 1

            with scope.create_command("SELECT COUNT(*) FROM t") as cmd:
                assert cmd.execute_scalar() == 2
            with scope.create_command("SELECT k, v FROM t WHERE v > ? ORDER BY k") as cmd:
                rows = cmd.fetch_all((0,))
            assert [(row["k"], row["v"]) for row in rows] == [("a", 1), ("b", 2)]
            with scope.create_command("SELECT v FROM t WHERE k = 'zzz'") as cmd:
                assert cmd.execute_scalar() is None
            scope.commit()

        assert store.connection.execute("SELECT COUNT(*) FROM t").fetchone()[0] == 2


def test_disposed_command_cannot_execute(tmp_path):
    with _open(tmp_path) as store:
        with store.begin_transaction() as scope:
            cmd = scope.create_command("SELECT 1")
            cmd.dispose()
            cmd.dispose()
            assert cmd.disposed
            with pytest.raises(ObjectDisposedError):
                cmd.execute()


def test_prepared_command_is_unusable_after_commit(tmp_path):
    with _open(tmp_path) as store:
        scope = store.begin_transaction()
        cmd = scope.prepare_command("Q", "SELECT 1")
        scope.commit()

        with pytest.raises(ObjectDisposedError):
            cmd.execute_scalar()
        with pytest.raises(ObjectDisposedError):
            scope.try_get_command("Q")
        scope.dispose()


def test_prepare_command_replaces_previous_and_checks_sql(tmp_path):
    with _open(tmp_path) as store:
        with store.begin_transaction() as scope:
            first = scope.prepare_command("Q", "SELECT 1")
            second = scope.prepare_command("Q", "SELECT 2")

            assert first.disposed
            assert scope.try_get_command("Q") is second
            assert second.execute_scalar() == 2
            assert scope.try_get_command("missing") is None
            with pytest.raises(ValueError):
                scope.prepare_command("BAD", "SELECT 'unterminated")


def test_dispose_releases_scope_and_rolls_back(tmp_path):
    with _open(tmp_path) as store:
        scope = store.begin_transaction()
        assert store.active_scope is scope
        assert scope.is_active
        with scope.create_command("CREATE TABLE t (x)") as cmd:
            cmd.execute()

        scope.close()

        assert not scope.is_active
        assert store.active_scope is None
        assert not store.connection.in_transaction
        tables = store.connection.execute(
            "SELECT name FROM sqlite_master WHERE name = 't'"
        ).fetchall()
        assert tables == []


def test_set_pragmas_applies_known_keys(tmp_path):
    conn = open_db((tmp_path / "plain.db").as_posix())
    try:
        set_pragmas(
            conn,
            {
                "Foreign_Keys": True,
                "cache_size": "-4000",
                "busy_timeout_ms": 250,
                "unknown": "ignored",
            },
        )
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
        assert conn.execute("PRAGMA cache_size").fetchone()[0] == -4000
        assert conn.execute("PRAGMA busy_timeout").fetchone()[0] == 250
        assert conn.isolation_level is None
    finally:
        conn.close()


def test_open_db_read_only_mode_requires_existing_file(tmp_path):
    with pytest.raises(sqlite3.OperationalError):
        open_db((tmp_path / "missing.db").as_posix(), mode="ro").execute("SELECT 1")


def test_log_directory_is_app_specific():
    parts = get_log_directory("MzLiteTest").parts[-2:]
    assert parts in {("MzLiteTest", "logs"), ("Logs", "MzLiteTest")}
