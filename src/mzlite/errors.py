# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Exception types raised by the MzLite store and model layers."""

from __future__ import annotations

__all__ = [
    "MzLiteError",
    "MzLiteIOError",
    "ObjectDisposedError",
    "ReentrancyError",
    "SerializationError",
    "ConstraintViolationError",
    "DuplicateKeyError",
    "RecordNotFoundError",
]


class MzLiteError(Exception):
    """Base class for all MzLite errors."""


class MzLiteIOError(MzLiteError, IOError):
    """Raised when a store cannot be opened or bootstrapped."""


class ObjectDisposedError(MzLiteError, RuntimeError):
    """Raised when a closed store, scope or command is used."""

    def __init__(self, object_name: str):
        self.object_name = object_name
        super().__init__(f"Cannot access a disposed object: {object_name}")


class ReentrancyError(MzLiteIOError):
    """Raised when a second transaction scope is requested while one is open."""


class SerializationError(MzLiteError, ValueError):
    """Raised for malformed or unsupported JSON payloads."""


class ConstraintViolationError(MzLiteError, ValueError):
    """Raised when a model constraint (identity, uniqueness) is violated."""


class DuplicateKeyError(ConstraintViolationError, KeyError):
    """Raised when a keyed collection already holds an item with the same key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"An item with the same key has already been added: {key!r}")

    def __str__(self) -> str:
        return self.args[0]


class RecordNotFoundError(MzLiteError, KeyError):
    """Raised by the read path when no row matches the requested ID."""

    def __init__(self, table: str, record_id: str):
        self.table = table
        self.record_id = record_id
        super().__init__(f"No {table} with ID {record_id!r}")

    def __str__(self) -> str:
        return self.args[0]
