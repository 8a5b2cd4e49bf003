# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
Peak array binary codec.

Layout: a little-endian ``uint32`` peak count followed by every column in
the array's storage order, each written little-endian in its declared data
type.  When the array's compression type is ``ZLib`` the whole payload is
zlib-compressed.
"""

from __future__ import annotations

import logging
import struct
import zlib
from dataclasses import replace
from typing import TypeVar

import numpy as np

from mzlite.errors import SerializationError
from mzlite.model.peaks import BinaryDataCompressionType, PeakArray

__all__ = ["BinaryDataEncoder", "BinaryDataDecoder"]

log = logging.getLogger(__name__)

_COUNT = struct.Struct("<I")

P = TypeVar("P", bound=PeakArray)


class BinaryDataEncoder:
    """Turn a peak array into the bytes stored in the ``PeakData`` column."""

    def __init__(self, compression_level: int = 6):
        self.compression_level = compression_level

    def encode(self, peaks: PeakArray) -> bytes:
        count = len(peaks)
        if count > 0xFFFFFFFF:
            raise SerializationError(f"Peak array too large to encode: {count} peaks")
        parts = [_COUNT.pack(count)]
        for _, data_type, values in peaks.columns():
            parts.append(np.ascontiguousarray(values, dtype=data_type.dtype).tobytes())
        payload = b"".join(parts)
        if peaks.compression_type == BinaryDataCompressionType.ZLIB:
            payload = zlib.compress(payload, self.compression_level)
        log.debug(
            "encode: %s peaks=%d bytes=%d compression=%s",
            type(peaks).__name__,
            count,
            len(payload),
            peaks.compression_type.value,
        )
        return payload


class BinaryDataDecoder:
    """Rebuild a peak array from its descriptor and ``PeakData`` bytes."""

    def decode(self, descriptor: P, data: bytes) -> P:
        """
        Return a copy of ``descriptor`` whose columns are filled from ``data``.

        ``descriptor`` supplies the column data types, compression type and
        params; its own column values are ignored.
        """

        payload = bytes(data)
        if descriptor.compression_type == BinaryDataCompressionType.ZLIB:
            try:
                payload = zlib.decompress(payload)
            except zlib.error as exc:
                raise SerializationError(f"Corrupt compressed peak data: {exc}") from exc

        if len(payload) < _COUNT.size:
            raise SerializationError("Peak data is truncated: missing peak count")
        (count,) = _COUNT.unpack_from(payload, 0)

        expected = _COUNT.size + count * sum(
            descriptor.data_type(name).dtype.itemsize for name in descriptor.COLUMNS
        )
        if len(payload) != expected:
            raise SerializationError(
                f"Peak data length {len(payload)} does not match {count} peaks ({expected} bytes)"
            )

        offset = _COUNT.size
        columns: dict[str, np.ndarray] = {}
        for name in descriptor.COLUMNS:
            dtype = descriptor.data_type(name).dtype
            values = np.frombuffer(payload, dtype=dtype, count=count, offset=offset)
            columns[name] = values.astype(dtype.newbyteorder("="))
            offset += count * dtype.itemsize
        return replace(descriptor, **columns)
