# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Public package interface for MzLite."""

from mzlite.errors import (
    ConstraintViolationError,
    DuplicateKeyError,
    MzLiteError,
    MzLiteIOError,
    ObjectDisposedError,
    RecordNotFoundError,
    ReentrancyError,
    SerializationError,
)
from mzlite.model import (
    Chromatogram,
    CvParam,
    MassSpectrum,
    MzLiteModel,
    ParamContainer,
    Peak1DArray,
    Peak2DArray,
    Run,
    UserParam,
)
from mzlite.storage import MzLiteStore, TransactionScope, open_store

__version__ = "0.1.0"

__all__ = [
    "Chromatogram",
    "ConstraintViolationError",
    "CvParam",
    "DuplicateKeyError",
    "MassSpectrum",
    "MzLiteError",
    "MzLiteIOError",
    "MzLiteModel",
    "MzLiteStore",
    "ObjectDisposedError",
    "ParamContainer",
    "Peak1DArray",
    "Peak2DArray",
    "RecordNotFoundError",
    "ReentrancyError",
    "Run",
    "SerializationError",
    "TransactionScope",
    "UserParam",
    "open_store",
]
