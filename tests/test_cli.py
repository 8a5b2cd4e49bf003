import json
import logging

import numpy as np
import pytest

from mzlite.cli import main
from mzlite.logging_config import STORAGE_TRACE_LOGGERS, setup_logging
from mzlite.model.entities import Chromatogram, MassSpectrum, Run
from mzlite.model.peaks import Peak1DArray, Peak2DArray
from mzlite.storage.sqlite_store import MzLiteStore


def _make_store(path):
    with MzLiteStore(path) as store:
        store.get_model().runs.add(Run("r1"))
        store.save_model()
        with store.begin_transaction() as scope:
            store.insert_spectrum(
                "r1", MassSpectrum("scan=1"), Peak1DArray(intensity=[5.0], mz=[100.5]), scope=scope
            )
            store.insert_spectrum("r2", MassSpectrum("scan=2"), Peak1DArray(), scope=scope)
            store.insert_chromatogram(
                "r1",
                Chromatogram("TIC"),
                Peak2DArray(intensity=[1.0, 2.0], mz=[0.0, 0.0], rt=[0.1, 0.2]),
                scope=scope,
            )
            scope.commit()


def test_init_creates_store(tmp_path, capsys):
    path = tmp_path / "fresh.db"

    assert main(["init", str(path)]) == 0

    assert path.exists()
    assert "'fresh'" in capsys.readouterr().out


def test_info_prints_model_summary(tmp_path, capsys):
    path = tmp_path / "run1.db"
    _make_store(path)

    assert main(["info", str(path)]) == 0

    info = json.loads(capsys.readouterr().out)
    assert info["name"] == "run1"
    assert info["runs"] == ["r1"]
    assert info["spectra"] == 2
    assert info["chromatograms"] == 1


def test_list_filters_by_run(tmp_path, capsys):
    path = tmp_path / "run1.db"
    _make_store(path)

    assert main(["list", str(path), "--run", "r1"]) == 0
    out = capsys.readouterr().out
    assert "scan=1" in out
    assert "scan=2" not in out

    assert main(["list", str(path), "--chromatograms"]) == 0
    assert "TIC" in capsys.readouterr().out

    assert main(["list", str(path), "--run", "nope"]) == 0
    assert "No records" in capsys.readouterr().out


def test_peaks_prints_csv(tmp_path, capsys):
    path = tmp_path / "run1.db"
    _make_store(path)

    assert main(["peaks", str(path), "TIC", "--chromatogram"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "intensity,mz,rt"
    assert len(lines) == 3
    assert np.isclose(float(lines[1].split(",")[2]), 0.1)


def test_missing_record_reports_error(tmp_path, capsys):
    path = tmp_path / "run1.db"
    _make_store(path)

    assert main(["peaks", str(path), "scan=404"]) == 1
    assert "scan=404" in capsys.readouterr().err


@pytest.fixture
def _restore_logging():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    for handler in logging.getLogger("mzlite").handlers + root.handlers:
        if handler not in saved_handlers:
            handler.close()
    logging.getLogger("mzlite").handlers.clear()
    logging.getLogger("mzlite").setLevel(logging.NOTSET)
    for name in STORAGE_TRACE_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.mark.usefixtures("_restore_logging")
def test_log_dir_enables_file_logging(tmp_path, capsys):
    log_dir = tmp_path / "logs"
    assert main(["--log-dir", str(log_dir), "init", str(tmp_path / "x.db")]) == 0

    assert (log_dir / "mzlite.log").exists()
    assert (log_dir / "errors.log").exists()


@pytest.mark.usefixtures("_restore_logging")
def test_storage_loggers_are_capped_unless_traced(tmp_path):
    setup_logging(log_dir=tmp_path / "quiet")
    for name in STORAGE_TRACE_LOGGERS:
        assert logging.getLogger(name).getEffectiveLevel() == logging.INFO
    assert logging.getLogger("mzlite.storage.sqlite_store").getEffectiveLevel() == logging.DEBUG

    argv = ["--log-dir", str(tmp_path / "loud"), "--trace-storage", "init", str(tmp_path / "x.db")]
    assert main(argv) == 0
    for name in STORAGE_TRACE_LOGGERS:
        assert logging.getLogger(name).getEffectiveLevel() == logging.DEBUG
    for handler in logging.getLogger("mzlite").handlers:
        handler.flush()
    assert "TXN: COMMIT" in (tmp_path / "loud" / "mzlite.log").read_text(encoding="utf-8")
