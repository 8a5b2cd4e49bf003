# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""SQLite helpers backing :class:`mzlite.storage.sqlite_store.MzLiteStore`."""

__all__: list[str] = []
