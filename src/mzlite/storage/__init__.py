# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""SQLite persistence for MzLite models, spectra and chromatograms."""

from mzlite.storage.sqlite_store import MzLiteStore, open_store
from mzlite.storage.transaction import Command, TransactionScope

__all__ = ["Command", "MzLiteStore", "TransactionScope", "open_store"]
