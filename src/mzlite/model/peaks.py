# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Numeric peak payloads for spectra (1D) and chromatograms (2D)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

import numpy as np
import pandas as pd

from mzlite.errors import ConstraintViolationError
from mzlite.model.params import ParamContainer

__all__ = [
    "BinaryDataType",
    "BinaryDataCompressionType",
    "PeakArray",
    "Peak1DArray",
    "Peak2DArray",
]


class BinaryDataType(str, Enum):
    INT32 = "Int32"
    INT64 = "Int64"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_DTYPES[self])


_DTYPES = {
    BinaryDataType.INT32: "<i4",
    BinaryDataType.INT64: "<i8",
    BinaryDataType.FLOAT32: "<f4",
    BinaryDataType.FLOAT64: "<f8",
}


class BinaryDataCompressionType(str, Enum):
    NO_COMPRESSION = "NoCompression"
    ZLIB = "ZLib"


def _empty() -> np.ndarray:
    return np.empty(0, dtype=np.float64)


def _cast_column(name: str, column, data_type: BinaryDataType) -> np.ndarray:
    """Convert ``column`` to ``data_type``, refusing casts that change values."""

    source = np.asarray(column)
    target = data_type.dtype.newbyteorder("=")
    if source.size == 0:
        return source.astype(target, copy=False)
    if not np.can_cast(source.dtype, target, casting="same_kind"):
        raise ConstraintViolationError(
            f"Column {name!r} holds {source.dtype} values that do not fit {data_type.value}"
        )
    with np.errstate(over="ignore"):
        values = source.astype(target, copy=False)
    if target.kind in "iu":
        lossy = not np.array_equal(values, source)
    else:
        lossy = bool(np.any(np.isinf(values) & np.isfinite(source)))
    if lossy:
        raise ConstraintViolationError(f"Column {name!r} overflows {data_type.value}")
    return values


class PeakArray:
    """
    Behaviour shared by the peak array dataclasses.

    ``COLUMNS`` lists the column attributes in storage order; each column
    ``<name>`` has a matching ``<name>_data_type`` attribute.
    """

    COLUMNS: ClassVar[tuple[str, ...]] = ()
    compression_type: BinaryDataCompressionType
    params: ParamContainer

    def _normalise_columns(self) -> None:
        self.compression_type = BinaryDataCompressionType(self.compression_type)
        length = None
        for name in self.COLUMNS:
            data_type = BinaryDataType(getattr(self, f"{name}_data_type"))
            setattr(self, f"{name}_data_type", data_type)
            values = _cast_column(name, getattr(self, name), data_type)
            if values.ndim != 1:
                raise ConstraintViolationError(f"Column {name!r} must be one-dimensional")
            if length is None:
                length = len(values)
            elif len(values) != length:
                raise ConstraintViolationError(
                    f"Column {name!r} has {len(values)} values, expected {length}"
                )
            setattr(self, name, values)

    def data_type(self, name: str) -> BinaryDataType:
        return getattr(self, f"{name}_data_type")

    def columns(self) -> list[tuple[str, BinaryDataType, np.ndarray]]:
        """Return ``(name, data type, values)`` for every column in storage order."""

        return [(name, self.data_type(name), getattr(self, name)) for name in self.COLUMNS]

    def __len__(self) -> int:
        return len(getattr(self, self.COLUMNS[0]))

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({name: values for name, _, values in self.columns()})


@dataclass(eq=False)
class Peak1DArray(PeakArray):
    """Intensity/m-z pairs of a mass spectrum."""

    COLUMNS: ClassVar[tuple[str, ...]] = ("intensity", "mz")

    intensity: np.ndarray = field(default_factory=_empty)
    mz: np.ndarray = field(default_factory=_empty)
    intensity_data_type: BinaryDataType = BinaryDataType.FLOAT32
    mz_data_type: BinaryDataType = BinaryDataType.FLOAT64
    compression_type: BinaryDataCompressionType = BinaryDataCompressionType.NO_COMPRESSION
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        self._normalise_columns()


@dataclass(eq=False)
class Peak2DArray(PeakArray):
    """Intensity/m-z/retention-time triples of a chromatogram."""

    COLUMNS: ClassVar[tuple[str, ...]] = ("intensity", "mz", "rt")

    intensity: np.ndarray = field(default_factory=_empty)
    mz: np.ndarray = field(default_factory=_empty)
    rt: np.ndarray = field(default_factory=_empty)
    intensity_data_type: BinaryDataType = BinaryDataType.FLOAT32
    mz_data_type: BinaryDataType = BinaryDataType.FLOAT64
    rt_data_type: BinaryDataType = BinaryDataType.FLOAT64
    compression_type: BinaryDataCompressionType = BinaryDataCompressionType.NO_COMPRESSION
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        self._normalise_columns()
