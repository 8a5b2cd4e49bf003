import json
import math
from datetime import datetime, timezone
from decimal import Decimal

import numpy as np
import pytest

from mzlite.errors import SerializationError
from mzlite.json.scalars import (
    Char,
    TypeCode,
    decode_scalar,
    dumps_scalar,
    encode_scalar,
    loads_scalar,
    scalar_kind,
)
from mzlite.model.peaks import BinaryDataType

SAMPLES = [
    (True, TypeCode.BOOLEAN),
    (Char("x"), TypeCode.CHAR),
    (np.int8(-5), TypeCode.SBYTE),
    (np.uint8(250), TypeCode.BYTE),
    (np.int16(-300), TypeCode.INT16),
    (np.uint16(60000), TypeCode.UINT16),
    (np.int32(2), TypeCode.INT32),
    (np.uint32(4_000_000_000), TypeCode.UINT32),
    (np.int64(-9_000_000_000), TypeCode.INT64),
    (np.uint64(18_000_000_000_000_000_000), TypeCode.UINT64),
    (np.float32(1.5), TypeCode.SINGLE),
    (np.float64(0.1), TypeCode.DOUBLE),
    (Decimal("12.340"), TypeCode.DECIMAL),
    (datetime(2024, 3, 1, 12, 30, 5, tzinfo=timezone.utc), TypeCode.DATETIME),
    ("hello", TypeCode.STRING),
]


def _round_trip(value):
    return loads_scalar(dumps_scalar(value))


@pytest.mark.parametrize("value, code", SAMPLES, ids=[c.name for _, c in SAMPLES])
def test_scalar_round_trip_keeps_value_and_kind(value, code):
    assert scalar_kind(value) == code
    decoded = _round_trip(value)
    assert scalar_kind(decoded) == code
    assert decoded == value


def test_int32_decodes_to_int32_not_python_int():
    decoded = _round_trip(np.int32(2))
    assert type(decoded) is np.int32
    assert decoded == 2


def test_wire_form_uses_integer_type_codes():
    assert encode_scalar(np.int32(2)) == {"$tc": 9, "$val": 2}
    assert encode_scalar("abc") == {"$tc": 18, "$val": "abc"}
    assert encode_scalar(None) is None
    assert dumps_scalar(None) == "null"


def test_plain_python_numbers_map_to_int64_and_double():
    assert scalar_kind(7) == TypeCode.INT64
    assert scalar_kind(7.5) == TypeCode.DOUBLE
    assert type(_round_trip(7)) is np.int64


def test_char_and_single_letter_string_stay_distinct():
    assert scalar_kind(Char("a")) == TypeCode.CHAR
    assert scalar_kind("a") == TypeCode.STRING
    assert isinstance(_round_trip(Char("a")), Char)
    assert not isinstance(_round_trip("a"), Char)


def test_non_finite_floats_are_written_as_strings():
    token = encode_scalar(float("nan"))
    assert token == {"$tc": 14, "$val": "NaN"}
    assert math.isnan(decode_scalar(token))
    assert _round_trip(np.float32("inf")) == np.float32("inf")
    assert _round_trip(-math.inf) == -math.inf


def test_decode_accepts_tag_names():
    assert decode_scalar({"$tc": "Int32", "$val": 3}) == np.int32(3)
    assert type(decode_scalar({"$tc": "int32", "$val": 3})) is np.int32


def test_empty_and_dbnull_decode_to_none():
    assert decode_scalar(None) is None
    assert decode_scalar({"$tc": 0, "$val": None}) is None
    assert decode_scalar({"$tc": 2, "$val": None}) is None


@pytest.mark.parametrize(
    "value",
    [object(), [1, 2], {"a": 1}, b"raw", 2**70, np.complex64(1j)],
    ids=["object", "list", "dict", "bytes", "huge-int", "complex"],
)
def test_unknown_kinds_fail_to_encode(value):
    with pytest.raises(SerializationError):
        encode_scalar(value)


@pytest.mark.parametrize(
    "token, message",
    [
        ({"$tc": 17, "$val": 1}, "Type not supported"),
        ({"$tc": 99, "$val": 1}, "Type not supported"),
        ({"$tc": "Int128", "$val": 1}, "Type not supported"),
        ({"$val": 1}, "$tc property expected."),
        ({"$tc": 9}, "$val property expected."),
        ([9, 1], "Object token expected."),
        ("plain", "Object token expected."),
        ({"$tc": 1, "$val": {}}, "Object type not supported."),
    ],
)
def test_malformed_tokens_fail_to_decode(token, message):
    with pytest.raises(SerializationError) as excinfo:
        decode_scalar(token)
    assert message in str(excinfo.value)


@pytest.mark.parametrize(
    "token",
    [
        {"$tc": 9, "$val": "2"},
        {"$tc": 9, "$val": 2.5},
        {"$tc": 9, "$val": True},
        {"$tc": 6, "$val": 256},
        {"$tc": 6, "$val": -1},
        {"$tc": 3, "$val": 1},
        {"$tc": 4, "$val": "ab"},
        {"$tc": 18, "$val": 5},
        {"$tc": 16, "$val": "not a date"},
        {"$tc": 15, "$val": "1.2.3"},
        {"$tc": 13, "$val": 1e300},
        {"$tc": 13, "$val": -(10**39)},
    ],
)
def test_wrong_token_kind_or_range_is_rejected(token):
    with pytest.raises(SerializationError):
        decode_scalar(token)


def test_loads_scalar_rejects_malformed_json():
    with pytest.raises(SerializationError):
        loads_scalar("{not json")


def test_encoded_form_is_json_serialisable():
    for value, _ in SAMPLES:
        json.dumps(encode_scalar(value), allow_nan=False)


def test_single_keeps_largest_finite_value():
    largest = float(np.finfo(np.float32).max)
    decoded = decode_scalar({"$tc": 13, "$val": largest})
    assert type(decoded) is np.float32
    assert math.isfinite(decoded)


def test_str_enum_members_encode_their_value():
    token = encode_scalar(BinaryDataType.INT32)
    assert token == {"$tc": 18, "$val": "Int32"}
    decoded = decode_scalar(token)
    assert type(decoded) is str
    assert decoded == "Int32"
