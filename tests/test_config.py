import pytest
from pydantic import ValidationError

from mzlite import config
from mzlite.config import StoreConfig, load_config, parse_pragma_tokens
from mzlite.errors import MzLiteIOError
from mzlite.storage.sqlite_store import MzLiteStore


@pytest.fixture(autouse=True)
def _reset_config_cache(monkeypatch):
    monkeypatch.delenv("MZLITE_PRAGMAS", raising=False)
    config.reload()
    yield
    config.reload()


def test_defaults_favour_throughput():
    cfg = StoreConfig()
    assert cfg.pragmas() == {
        "synchronous": "OFF",
        "journal_mode": "MEMORY",
        "temp_store": "MEMORY",
        "ignore_check_constraints": False,
    }


def test_modes_are_normalised_and_validated():
    assert StoreConfig(journal_mode="wal").journal_mode == "WAL"
    with pytest.raises(ValidationError):
        StoreConfig(synchronous="sometimes")
    with pytest.raises(ValidationError):
        StoreConfig(cached_statements=-1)

    cfg = StoreConfig()
    with pytest.raises(ValidationError):
        cfg.temp_store = "disk"


def test_parse_pragma_tokens_ignores_noise():
    assert parse_pragma_tokens(" synchronous=normal , bogus, journal-mode=WAL,,") == {
        "synchronous": "normal",
        "journal_mode": "WAL",
    }


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("MZLITE_PRAGMAS", "synchronous=NORMAL,journal_mode=DELETE,unknown=1")
    config.reload()

    cfg = load_config()

    assert cfg.synchronous == "NORMAL"
    assert cfg.journal_mode == "DELETE"
    assert cfg.temp_store == "MEMORY"


def test_load_config_returns_independent_copies():
    first = load_config()
    first.synchronous = "FULL"
    assert load_config().synchronous == "OFF"


def test_store_applies_configured_pragmas(tmp_path):
    cfg = StoreConfig(synchronous="NORMAL", journal_mode="DELETE")
    with MzLiteStore(tmp_path / "run1.db", config=cfg) as store:
        conn = store.connection
        assert conn.execute("PRAGMA synchronous").fetchone()[0] == 1
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "delete"


def test_store_default_pragmas(tmp_path):
    with MzLiteStore(tmp_path / "run1.db") as store:
        conn = store.connection
        assert conn.execute("PRAGMA synchronous").fetchone()[0] == 0
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] == "memory"
        assert conn.execute("PRAGMA temp_store").fetchone()[0] == 2


def test_invalid_environment_pragmas_fail_as_io_error(monkeypatch, tmp_path):
    monkeypatch.setenv("MZLITE_PRAGMAS", "synchronous=sometimes")
    config.reload()

    with pytest.raises(MzLiteIOError) as excinfo:
        MzLiteStore(tmp_path / "run1.db")

    assert isinstance(excinfo.value.__cause__, ValidationError)
    assert not (tmp_path / "run1.db").exists()
