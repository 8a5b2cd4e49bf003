import struct
import zlib

import numpy as np
import pytest

from mzlite.binary.codec import BinaryDataDecoder, BinaryDataEncoder
from mzlite.errors import ConstraintViolationError, SerializationError
from mzlite.model.peaks import (
    BinaryDataCompressionType,
    BinaryDataType,
    Peak1DArray,
    Peak2DArray,
)


def _spectrum_peaks(compression=BinaryDataCompressionType.NO_COMPRESSION) -> Peak1DArray:
    return Peak1DArray(
        intensity=[10.0, 250.5, 3.25],
        mz=[100.1, 200.2, 300.3],
        compression_type=compression,
    )


def test_uncompressed_layout_is_count_then_columns():
    peaks = Peak1DArray(
        intensity=[1, 2],
        mz=[3, 4],
        intensity_data_type=BinaryDataType.INT32,
        mz_data_type=BinaryDataType.INT64,
    )

    payload = BinaryDataEncoder().encode(peaks)

    assert payload == struct.pack("<I2i2q", 2, 1, 2, 3, 4)


def test_zlib_payload_is_compressed_whole():
    peaks = _spectrum_peaks(BinaryDataCompressionType.ZLIB)
    plain = BinaryDataEncoder().encode(_spectrum_peaks())

    payload = BinaryDataEncoder().encode(peaks)

    assert zlib.decompress(payload) == plain


@pytest.mark.parametrize(
    "compression",
    [BinaryDataCompressionType.NO_COMPRESSION, BinaryDataCompressionType.ZLIB],
)
def test_decode_restores_columns_and_dtypes(compression):
    peaks = _spectrum_peaks(compression)
    descriptor = Peak1DArray(compression_type=compression)

    decoded = BinaryDataDecoder().decode(descriptor, BinaryDataEncoder().encode(peaks))

    assert len(decoded) == 3
    assert decoded.intensity.dtype == np.float32
    assert decoded.mz.dtype == np.float64
    np.testing.assert_array_equal(decoded.intensity, peaks.intensity)
    np.testing.assert_array_equal(decoded.mz, peaks.mz)


def test_decode_2d_with_mixed_types():
    peaks = Peak2DArray(
        intensity=[5, 6, 7],
        mz=[1.5, 2.5, 3.5],
        rt=[0.1, 0.2, 0.3],
        intensity_data_type=BinaryDataType.INT64,
        rt_data_type=BinaryDataType.FLOAT32,
    )
    descriptor = Peak2DArray(
        intensity_data_type=BinaryDataType.INT64,
        rt_data_type=BinaryDataType.FLOAT32,
    )

    decoded = BinaryDataDecoder().decode(descriptor, BinaryDataEncoder().encode(peaks))

    assert decoded.intensity.tolist() == [5, 6, 7]
    np.testing.assert_array_equal(decoded.rt, np.array([0.1, 0.2, 0.3], dtype=np.float32))
    assert decoded.to_dataframe().columns.tolist() == ["intensity", "mz", "rt"]


def test_empty_array_encodes_to_bare_count():
    payload = BinaryDataEncoder().encode(Peak1DArray())

    assert payload == b"\x00\x00\x00\x00"
    assert len(BinaryDataDecoder().decode(Peak1DArray(), payload)) == 0


def test_truncated_payload_is_rejected():
    payload = BinaryDataEncoder().encode(_spectrum_peaks())

    with pytest.raises(SerializationError):
        BinaryDataDecoder().decode(Peak1DArray(), payload[:-1])
    with pytest.raises(SerializationError):
        BinaryDataDecoder().decode(Peak1DArray(), b"\x01")


def test_corrupt_zlib_payload_is_rejected():
    descriptor = Peak1DArray(compression_type=BinaryDataCompressionType.ZLIB)
    with pytest.raises(SerializationError):
        BinaryDataDecoder().decode(descriptor, b"definitely not zlib")


def test_columns_must_have_equal_length():
    with pytest.raises(ConstraintViolationError):
        Peak1DArray(intensity=[1.0, 2.0], mz=[1.0])
    with pytest.raises(ConstraintViolationError):
        Peak1DArray(intensity=[[1.0]], mz=[[1.0]])


@pytest.mark.parametrize(
    "intensity, data_type",
    [
        ([1.7, 2.9], BinaryDataType.INT32),
        ([2**40, 1], BinaryDataType.INT32),
        ([1e300, 1.0], BinaryDataType.FLOAT32),
    ],
    ids=["fraction-to-int", "int-overflow", "float32-overflow"],
)
def test_columns_refuse_value_changing_casts(intensity, data_type):
    with pytest.raises(ConstraintViolationError):
        Peak1DArray(intensity=intensity, mz=[1.0, 2.0], intensity_data_type=data_type)


def test_columns_accept_widening_and_integral_values():
    peaks = Peak1DArray(
        intensity=np.array([3, 4], dtype=np.int64),
        mz=[1, 2],
        intensity_data_type=BinaryDataType.INT32,
        mz_data_type=BinaryDataType.FLOAT32,
    )

    assert peaks.intensity.dtype == np.int32
    assert peaks.intensity.tolist() == [3, 4]
    assert peaks.mz.dtype == np.float32
    assert len(Peak1DArray(intensity_data_type=BinaryDataType.INT64)) == 0
