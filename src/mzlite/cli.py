# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .errors import MzLiteError
from .logging_config import setup_logging
from .storage.sqlite_store import MzLiteStore


def cmd_init(args: argparse.Namespace) -> None:
    with MzLiteStore(args.path) as store:
        print(f"Created {args.path} (model {store.get_model().name!r})")


def cmd_info(args: argparse.Namespace) -> None:
    with MzLiteStore(args.path) as store:
        model = store.get_model()
        info = {
            "path": str(args.path),
            "name": model.name,
            "runs": [run.id for run in model.runs],
            "samples": len(model.samples),
            "instruments": len(model.instruments),
            "spectra": store.count_spectra(),
            "chromatograms": store.count_chromatograms(),
        }
    print(json.dumps(info, indent=2))


def cmd_list(args: argparse.Namespace) -> None:
    with MzLiteStore(args.path) as store:
        if args.chromatograms:
            df = store.list_chromatograms(args.run)
        else:
            df = store.list_spectra(args.run)
    if df.empty:
        print("No records")
        return
    print(df.to_string(index=False))


def cmd_peaks(args: argparse.Namespace) -> None:
    with MzLiteStore(args.path) as store:
        if args.chromatogram:
            peaks = store.read_chromatogram_peaks(args.id)
        else:
            peaks = store.read_spectrum_peaks(args.id)
    print(peaks.to_dataframe().to_csv(index=False), end="")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("mzlite")
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="write mzlite.log and errors.log to this directory",
    )
    parser.add_argument(
        "--trace-storage",
        action="store_true",
        help="keep DEBUG records from transactions, record tables and the peak codec",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("init")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_init)

    sp = sub.add_parser("info")
    sp.add_argument("path")
    sp.set_defaults(func=cmd_info)

    sp = sub.add_parser("list")
    sp.add_argument("path")
    sp.add_argument("--run", default=None)
    sp.add_argument("--chromatograms", action="store_true")
    sp.set_defaults(func=cmd_list)

    sp = sub.add_parser("peaks")
    sp.add_argument("path")
    sp.add_argument("id")
    sp.add_argument("--chromatogram", action="store_true")
    sp.set_defaults(func=cmd_peaks)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.log_dir is not None:
        setup_logging(
            console_level=logging.WARNING,
            log_dir=args.log_dir,
            trace_storage=args.trace_storage,
        )
    try:
        args.func(args)
    except MzLiteError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
