# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Type-preserving JSON encoding for scalar parameter values.

A scalar is written as ``{"$tc": <type code>, "$val": <value>}`` so that the
exact primitive kind survives a round trip: an Int32 ``2`` decodes to
``numpy.int32(2)``, never to a Python ``int``, a float or a string.  ``None``
is written as JSON ``null``.
"""

from __future__ import annotations

import json
import math
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Any, Callable

import numpy as np

from mzlite.errors import SerializationError

__all__ = [
    "TypeCode",
    "Char",
    "TYPE_KEY",
    "VALUE_KEY",
    "scalar_kind",
    "check_scalar",
    "encode_scalar",
    "decode_scalar",
    "dumps_scalar",
    "loads_scalar",
]

TYPE_KEY = "$tc"
VALUE_KEY = "$val"


class TypeCode(IntEnum):
    """Closed set of scalar kinds; numbering is part of the wire format."""

    EMPTY = 0
    OBJECT = 1
    DBNULL = 2
    BOOLEAN = 3
    CHAR = 4
    SBYTE = 5
    BYTE = 6
    INT16 = 7
    UINT16 = 8
    INT32 = 9
    UINT32 = 10
    INT64 = 11
    UINT64 = 12
    SINGLE = 13
    DOUBLE = 14
    DECIMAL = 15
    DATETIME = 16
    STRING = 18


class Char(str):
    """A single character, kept distinct from one-letter strings."""

    def __new__(cls, value: str) -> Char:
        if not isinstance(value, str) or len(value) != 1:
            raise ValueError(f"Char requires exactly one character, got {value!r}")
        return super().__new__(cls, value)

    def __repr__(self) -> str:
        return f"Char({str.__repr__(self)})"


_INTEGER_TYPES: dict[TypeCode, type[np.integer]] = {
    TypeCode.SBYTE: np.int8,
    TypeCode.BYTE: np.uint8,
    TypeCode.INT16: np.int16,
    TypeCode.UINT16: np.uint16,
    TypeCode.INT32: np.int32,
    TypeCode.UINT32: np.uint32,
    TypeCode.INT64: np.int64,
    TypeCode.UINT64: np.uint64,
}

_FLOAT_TYPES: dict[TypeCode, type[np.floating]] = {
    TypeCode.SINGLE: np.float32,
    TypeCode.DOUBLE: np.float64,
}

# numpy scalars are classified by (kind, itemsize) so platform aliases
# such as ``np.intc`` or ``np.longlong`` land on the right code.
_NUMPY_CODES: dict[tuple[str, int], TypeCode] = {
    ("b", 1): TypeCode.BOOLEAN,
    ("i", 1): TypeCode.SBYTE,
    ("u", 1): TypeCode.BYTE,
    ("i", 2): TypeCode.INT16,
    ("u", 2): TypeCode.UINT16,
    ("i", 4): TypeCode.INT32,
    ("u", 4): TypeCode.UINT32,
    ("i", 8): TypeCode.INT64,
    ("u", 8): TypeCode.UINT64,
    ("f", 4): TypeCode.SINGLE,
    ("f", 8): TypeCode.DOUBLE,
}

_NON_FINITE = {"NaN": math.nan, "Infinity": math.inf, "-Infinity": -math.inf}

_INT64_INFO = np.iinfo(np.int64)


def scalar_kind(value: Any) -> TypeCode:
    """Return the type code for ``value`` or raise :class:`SerializationError`."""

    if value is None:
        return TypeCode.EMPTY
    if isinstance(value, np.str_):
        return TypeCode.STRING
    if isinstance(value, np.generic):
        dtype = value.dtype
        code = _NUMPY_CODES.get((dtype.kind, dtype.itemsize))
        if code is None:
            raise SerializationError(f"Object type code not supported: numpy {dtype}")
        return code
    if isinstance(value, bool):
        return TypeCode.BOOLEAN
    if isinstance(value, Char):
        return TypeCode.CHAR
    if isinstance(value, str):
        return TypeCode.STRING
    if isinstance(value, int):
        if not _INT64_INFO.min <= value <= _INT64_INFO.max:
            raise SerializationError(f"Integer {value} does not fit any Int64 scalar")
        return TypeCode.INT64
    if isinstance(value, float):
        return TypeCode.DOUBLE
    if isinstance(value, Decimal):
        return TypeCode.DECIMAL
    if isinstance(value, datetime):
        return TypeCode.DATETIME
    raise SerializationError(f"Object type code not supported: {type(value).__name__}")


def check_scalar(value: Any) -> Any:
    """Validate that ``value`` is encodable and return it unchanged."""

    scalar_kind(value)
    return value


def _encode_float(value: float) -> float | str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


def _encode_value(code: TypeCode, value: Any) -> Any:
    if code == TypeCode.BOOLEAN:
        return bool(value)
    if code in (TypeCode.CHAR, TypeCode.STRING):
        # str subclasses (str enums among them) may override __str__.
        return str.__str__(value)
    if code in _INTEGER_TYPES:
        return int(value)
    if code in _FLOAT_TYPES:
        return _encode_float(float(value))
    if code == TypeCode.DECIMAL:
        return str(value)
    if code == TypeCode.DATETIME:
        return value.isoformat()
    raise SerializationError(f"Type not supported: {code.name}")


def encode_scalar(value: Any) -> dict[str, Any] | None:
    """Return the JSON-ready wire form of ``value``."""

    code = scalar_kind(value)
    if code == TypeCode.EMPTY:
        return None
    return {TYPE_KEY: int(code), VALUE_KEY: _encode_value(code, value)}


# ---- Decoding ---------------------------------------------------------------


def _is_json_int(token: Any) -> bool:
    return isinstance(token, int) and not isinstance(token, bool)


def _read_boolean(code: TypeCode, token: Any) -> bool:
    if not isinstance(token, bool):
        raise SerializationError(f"{code.name} value expected, got {token!r}")
    return token


def _read_char(code: TypeCode, token: Any) -> Char:
    if not isinstance(token, str) or len(token) != 1:
        raise SerializationError(f"{code.name} value expected, got {token!r}")
    return Char(token)


def _read_string(code: TypeCode, token: Any) -> str:
    if not isinstance(token, str):
        raise SerializationError(f"{code.name} value expected, got {token!r}")
    return token


def _read_integer(code: TypeCode, token: Any) -> np.integer:
    if not _is_json_int(token):
        raise SerializationError(f"{code.name} value expected, got {token!r}")
    target = _INTEGER_TYPES[code]
    info = np.iinfo(target)
    if not info.min <= token <= info.max:
        raise SerializationError(f"Value {token} is out of range for {code.name}")
    return target(token)


def _read_float(code: TypeCode, token: Any) -> np.floating:
    target = _FLOAT_TYPES[code]
    if isinstance(token, str) and token in _NON_FINITE:
        return target(_NON_FINITE[token])
    if isinstance(token, bool) or not isinstance(token, (int, float)):
        raise SerializationError(f"{code.name} value expected, got {token!r}")
    if abs(token) > np.finfo(target).max:
        raise SerializationError(f"Value {token} is out of range for {code.name}")
    return target(token)


def _read_decimal(code: TypeCode, token: Any) -> Decimal:
    if isinstance(token, bool) or not isinstance(token, (str, int, float)):
        raise SerializationError(f"{code.name} value expected, got {token!r}")
    try:
        return Decimal(str(token))
    except InvalidOperation as exc:
        raise SerializationError(f"Invalid {code.name} value {token!r}") from exc


def _read_datetime(code: TypeCode, token: Any) -> datetime:
    if not isinstance(token, str):
        raise SerializationError(f"{code.name} value expected, got {token!r}")
    try:
        return datetime.fromisoformat(token)
    except ValueError as exc:
        raise SerializationError(f"Invalid {code.name} value {token!r}") from exc


def _read_null(code: TypeCode, token: Any) -> None:
    return None


def _read_object(code: TypeCode, token: Any) -> Any:
    raise SerializationError("Object type not supported.")


_READERS: dict[TypeCode, Callable[[TypeCode, Any], Any]] = {
    TypeCode.EMPTY: _read_null,
    TypeCode.OBJECT: _read_object,
    TypeCode.DBNULL: _read_null,
    TypeCode.BOOLEAN: _read_boolean,
    TypeCode.CHAR: _read_char,
    TypeCode.DECIMAL: _read_decimal,
    TypeCode.DATETIME: _read_datetime,
    TypeCode.STRING: _read_string,
    **{code: _read_integer for code in _INTEGER_TYPES},
    **{code: _read_float for code in _FLOAT_TYPES},
}

_CODES_BY_NAME = {code.name.lower(): code for code in TypeCode}


def _read_type_code(token: Any) -> TypeCode:
    if _is_json_int(token):
        try:
            return TypeCode(token)
        except ValueError:
            raise SerializationError(f"Type not supported: {token}") from None
    if isinstance(token, str):
        code = _CODES_BY_NAME.get(token.lower())
        if code is not None:
            return code
    raise SerializationError(f"Type not supported: {token!r}")


def decode_scalar(token: Any) -> Any:
    """Decode a parsed JSON token produced by :func:`encode_scalar`."""

    if token is None:
        return None
    if not isinstance(token, dict):
        raise SerializationError("Object token expected.")
    if TYPE_KEY not in token:
        raise SerializationError(f"{TYPE_KEY} property expected.")
    code = _read_type_code(token[TYPE_KEY])
    if VALUE_KEY not in token:
        raise SerializationError(f"{VALUE_KEY} property expected.")
    return _READERS[code](code, token[VALUE_KEY])


def dumps_scalar(value: Any) -> str:
    """Encode ``value`` straight to JSON text."""

    return json.dumps(encode_scalar(value))


def loads_scalar(text: str) -> Any:
    """Decode JSON text produced by :func:`dumps_scalar`."""

    try:
        token = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SerializationError(f"Malformed scalar JSON: {exc}") from exc
    return decode_scalar(token)
