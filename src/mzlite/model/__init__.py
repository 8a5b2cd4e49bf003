# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""In-memory model: parameters, descriptive entities and peak arrays."""

from mzlite.model.entities import (
    Chromatogram,
    Contact,
    DataProcessing,
    FileDescription,
    Instrument,
    MassSpectrum,
    MzLiteModel,
    Precursor,
    Product,
    Run,
    Sample,
    Scan,
    Software,
    SourceFile,
)
from mzlite.model.params import (
    CvParam,
    CvParamCollection,
    ParamContainer,
    UserDescription,
    UserParam,
    UserParamCollection,
)
from mzlite.model.peaks import (
    BinaryDataCompressionType,
    BinaryDataType,
    Peak1DArray,
    Peak2DArray,
)

__all__ = [
    "BinaryDataCompressionType",
    "BinaryDataType",
    "Chromatogram",
    "Contact",
    "CvParam",
    "CvParamCollection",
    "DataProcessing",
    "FileDescription",
    "Instrument",
    "MassSpectrum",
    "MzLiteModel",
    "ParamContainer",
    "Peak1DArray",
    "Peak2DArray",
    "Precursor",
    "Product",
    "Run",
    "Sample",
    "Scan",
    "Software",
    "SourceFile",
    "UserDescription",
    "UserParam",
    "UserParamCollection",
]
