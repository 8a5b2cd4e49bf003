# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""
JSON documents for the root model, spectra, chromatograms and peak arrays.

Every param container is flattened into its owner's object as ``CvParams``,
``UserParams`` and ``UserDescriptions``; parameter values go through the
scalar codec.  Optional fields that are ``None`` are omitted.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

from mzlite.errors import SerializationError
from mzlite.json.scalars import decode_scalar, encode_scalar
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
from mzlite.model.params import CvParam, ParamBase, ParamContainer, UserParam
from mzlite.model.peaks import BinaryDataCompressionType, BinaryDataType, PeakArray

__all__ = [
    "params_to_dict",
    "params_from_dict",
    "model_to_dict",
    "model_from_dict",
    "spectrum_to_dict",
    "spectrum_from_dict",
    "chromatogram_to_dict",
    "chromatogram_from_dict",
    "peaks_to_dict",
    "peaks_from_dict",
    "to_json",
    "from_json",
    "model_to_json",
    "model_from_json",
    "spectrum_to_json",
    "spectrum_from_json",
    "chromatogram_to_json",
    "chromatogram_from_json",
    "peaks_to_json",
    "peaks_from_json",
]

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


# ---- Low-level readers ------------------------------------------------------


def _expect_dict(token: Any, what: str) -> dict[str, Any]:
    if not isinstance(token, dict):
        raise SerializationError(f"{what}: JSON object expected, got {type(token).__name__}")
    return token


def _expect_list(token: Any, what: str) -> list[Any]:
    if token is None:
        return []
    if not isinstance(token, list):
        raise SerializationError(f"{what}: JSON array expected, got {type(token).__name__}")
    return token


def _required(data: dict[str, Any], key: str, what: str) -> Any:
    if key not in data or data[key] is None:
        raise SerializationError(f"{what}: required property '{key}' not found")
    return data[key]


def _optional_str(data: dict[str, Any], key: str, what: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise SerializationError(f"{what}: '{key}' must be a string")
    return value


def _put(data: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        data[key] = value


# ---- Params -----------------------------------------------------------------


def _param_to_dict(param: ParamBase, identity_key: str) -> dict[str, Any]:
    data: dict[str, Any] = {identity_key: param.key}
    _put(data, "CvUnitAccession", param.unit_accession)
    _put(data, "Value", encode_scalar(param.value))
    return data


def _param_fields(data: dict[str, Any], what: str) -> dict[str, Any]:
    return {
        "unit_accession": _optional_str(data, "CvUnitAccession", what),
        "value": decode_scalar(data.get("Value")),
    }


def params_to_dict(container: ParamContainer) -> dict[str, Any]:
    return {
        "CvParams": [_param_to_dict(p, "CvAccession") for p in container.cv_params],
        "UserParams": [_param_to_dict(p, "Name") for p in container.user_params],
        "UserDescriptions": [
            {"Name": d.name, **params_to_dict(d.params)} for d in container.user_descriptions
        ],
    }


def params_from_dict(
    data: dict[str, Any], container: ParamContainer | None = None
) -> ParamContainer:
    """Fill ``container`` (or a new one) from the flattened param lists in ``data``."""

    container = container if container is not None else ParamContainer()
    for token in _expect_list(data.get("CvParams"), "CvParams"):
        entry = _expect_dict(token, "CvParam")
        accession = _required(entry, "CvAccession", "CvParam")
        container.cv_params.add(CvParam(accession, **_param_fields(entry, "CvParam")))
    for token in _expect_list(data.get("UserParams"), "UserParams"):
        entry = _expect_dict(token, "UserParam")
        name = _required(entry, "Name", "UserParam")
        container.user_params.add(UserParam(name, **_param_fields(entry, "UserParam")))
    for token in _expect_list(data.get("UserDescriptions"), "UserDescriptions"):
        entry = _expect_dict(token, "UserDescription")
        description = container.add_user_description(_required(entry, "Name", "UserDescription"))
        params_from_dict(entry, description.params)
    return container


def _nested_params(data: dict[str, Any], key: str) -> ParamContainer:
    return params_from_dict(_expect_dict(data.get(key) or {}, key))


def _container_list_from(data: dict[str, Any], key: str) -> list[ParamContainer]:
    return [params_from_dict(_expect_dict(t, key)) for t in _expect_list(data.get(key), key)]


# ---- Root model -------------------------------------------------------------


def _item_to_dict(item: Any, fields: dict[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for attr, key in fields.items():
        _put(data, key, getattr(item, attr))
    data.update(params_to_dict(item.params))
    return data


def _item_from_dict(token: Any, cls: Callable[..., T], fields: dict[str, str], what: str) -> T:
    data = _expect_dict(token, what)
    kwargs: dict[str, Any] = {"id": _required(data, "ID", what)}
    for attr, key in fields.items():
        if attr != "id" and key in data:
            kwargs[attr] = data[key]
    item = cls(**kwargs)
    params_from_dict(data, item.params)
    return item


_SOURCE_FILE_FIELDS = {"id": "ID", "name": "Name", "location": "Location"}
_SAMPLE_FIELDS = {"id": "ID", "name": "Name"}
_SOFTWARE_FIELDS = {"id": "ID"}
_INSTRUMENT_FIELDS = {"id": "ID", "software_id": "SoftwareID"}
_DATA_PROCESSING_FIELDS = {"id": "ID"}
_RUN_FIELDS = {
    "id": "ID",
    "sample_id": "SampleID",
    "default_instrument_id": "DefaultInstrumentID",
    "default_spectrum_processing_id": "DefaultSpectrumProcessingID",
    "default_chromatogram_processing_id": "DefaultChromatogramProcessingID",
}

_MODEL_COLLECTIONS: list[tuple[str, str, type, dict[str, str]]] = [
    ("samples", "Samples", Sample, _SAMPLE_FIELDS),
    ("software", "Software", Software, _SOFTWARE_FIELDS),
    ("instruments", "Instruments", Instrument, _INSTRUMENT_FIELDS),
    ("data_processings", "DataProcessings", DataProcessing, _DATA_PROCESSING_FIELDS),
    ("runs", "Runs", Run, _RUN_FIELDS),
]


def _file_description_to_dict(description: FileDescription) -> dict[str, Any]:
    return {
        **params_to_dict(description.params),
        "Contacts": [params_to_dict(c.params) for c in description.contacts],
        "SourceFiles": [
            _item_to_dict(f, _SOURCE_FILE_FIELDS) for f in description.source_files
        ],
    }


def _file_description_from_dict(token: Any) -> FileDescription:
    data = _expect_dict(token, "FileDescription")
    description = FileDescription()
    params_from_dict(data, description.params)
    for contact in _expect_list(data.get("Contacts"), "Contacts"):
        description.contacts.append(Contact(params_from_dict(_expect_dict(contact, "Contact"))))
    for entry in _expect_list(data.get("SourceFiles"), "SourceFiles"):
        description.source_files.add(
            _item_from_dict(entry, SourceFile, _SOURCE_FILE_FIELDS, "SourceFile")
        )
    return description


def model_to_dict(model: MzLiteModel) -> dict[str, Any]:
    data: dict[str, Any] = {
        "Name": model.name,
        "FileDescription": _file_description_to_dict(model.file_description),
    }
    for attr, key, _, fields in _MODEL_COLLECTIONS:
        data[key] = [_item_to_dict(item, fields) for item in getattr(model, attr)]
    return data


def model_from_dict(token: Any) -> MzLiteModel:
    data = _expect_dict(token, "MzLiteModel")
    name = _required(data, "Name", "MzLiteModel")
    if not isinstance(name, str):
        raise SerializationError("MzLiteModel: 'Name' must be a string")
    model = MzLiteModel(name)
    if data.get("FileDescription") is not None:
        model.file_description = _file_description_from_dict(data["FileDescription"])
    for attr, key, cls, fields in _MODEL_COLLECTIONS:
        collection = getattr(model, attr)
        for entry in _expect_list(data.get(key), key):
            collection.add(_item_from_dict(entry, cls, fields, cls.__name__))
    return model


# ---- Spectra and chromatograms ----------------------------------------------


def _precursor_to_dict(precursor: Precursor) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "SpectrumReference", precursor.spectrum_reference)
    data["IsolationWindow"] = params_to_dict(precursor.isolation_window)
    data["SelectedIons"] = [params_to_dict(ion) for ion in precursor.selected_ions]
    data["Activation"] = params_to_dict(precursor.activation)
    return data


def _precursor_from_dict(token: Any) -> Precursor:
    data = _expect_dict(token, "Precursor")
    return Precursor(
        spectrum_reference=_optional_str(data, "SpectrumReference", "Precursor"),
        isolation_window=_nested_params(data, "IsolationWindow"),
        selected_ions=_container_list_from(data, "SelectedIons"),
        activation=_nested_params(data, "Activation"),
    )


def _product_to_dict(product: Product) -> dict[str, Any]:
    return {"IsolationWindow": params_to_dict(product.isolation_window)}


def _product_from_dict(token: Any) -> Product:
    data = _expect_dict(token, "Product")
    return Product(
        isolation_window=_nested_params(data, "IsolationWindow")
    )


def _scan_to_dict(scan: Scan) -> dict[str, Any]:
    data: dict[str, Any] = {}
    _put(data, "SpectrumReference", scan.spectrum_reference)
    data.update(params_to_dict(scan.params))
    data["ScanWindows"] = [params_to_dict(window) for window in scan.scan_windows]
    return data


def _scan_from_dict(token: Any) -> Scan:
    data = _expect_dict(token, "Scan")
    scan = Scan(
        spectrum_reference=_optional_str(data, "SpectrumReference", "Scan"),
        scan_windows=_container_list_from(data, "ScanWindows"),
    )
    params_from_dict(data, scan.params)
    return scan


def spectrum_to_dict(spectrum: MassSpectrum) -> dict[str, Any]:
    data: dict[str, Any] = {"ID": spectrum.id}
    _put(data, "SourceFileReference", spectrum.source_file_reference)
    data.update(params_to_dict(spectrum.params))
    data["Precursors"] = [_precursor_to_dict(p) for p in spectrum.precursors]
    data["Scans"] = [_scan_to_dict(s) for s in spectrum.scans]
    data["Products"] = [_product_to_dict(p) for p in spectrum.products]
    return data


def spectrum_from_dict(token: Any) -> MassSpectrum:
    data = _expect_dict(token, "MassSpectrum")
    spectrum = MassSpectrum(
        _required(data, "ID", "MassSpectrum"),
        source_file_reference=_optional_str(data, "SourceFileReference", "MassSpectrum"),
        precursors=[_precursor_from_dict(p) for p in _expect_list(data.get("Precursors"), "Precursors")],
        scans=[_scan_from_dict(s) for s in _expect_list(data.get("Scans"), "Scans")],
        products=[_product_from_dict(p) for p in _expect_list(data.get("Products"), "Products")],
    )
    params_from_dict(data, spectrum.params)
    return spectrum


def chromatogram_to_dict(chromatogram: Chromatogram) -> dict[str, Any]:
    data: dict[str, Any] = {"ID": chromatogram.id}
    data.update(params_to_dict(chromatogram.params))
    if chromatogram.precursor is not None:
        data["Precursor"] = _precursor_to_dict(chromatogram.precursor)
    if chromatogram.product is not None:
        data["Product"] = _product_to_dict(chromatogram.product)
    return data


def chromatogram_from_dict(token: Any) -> Chromatogram:
    data = _expect_dict(token, "Chromatogram")
    precursor = data.get("Precursor")
    product = data.get("Product")
    chromatogram = Chromatogram(
        _required(data, "ID", "Chromatogram"),
        precursor=_precursor_from_dict(precursor) if precursor is not None else None,
        product=_product_from_dict(product) if product is not None else None,
    )
    params_from_dict(data, chromatogram.params)
    return chromatogram


# ---- Peak array descriptor --------------------------------------------------


def _data_type_key(column: str) -> str:
    return f"{column.capitalize()}DataType"


def _enum_value(enum_type: type[E], token: Any, what: str) -> E:
    try:
        return enum_type(token)
    except ValueError:
        raise SerializationError(f"{what}: unsupported {enum_type.__name__} {token!r}") from None


def peaks_to_dict(peaks: PeakArray) -> dict[str, Any]:
    data: dict[str, Any] = {"CompressionType": peaks.compression_type.value}
    for name, data_type, _ in peaks.columns():
        data[_data_type_key(name)] = data_type.value
    data["Count"] = len(peaks)
    data.update(params_to_dict(peaks.params))
    return data


def peaks_from_dict(token: Any, array_type: type[PeakArray]) -> tuple[PeakArray, int]:
    """
    Build an empty ``array_type`` carrying the descriptor's data types and params.

    Returns the array and the peak count recorded in the descriptor.
    """

    what = array_type.__name__
    data = _expect_dict(token, what)
    kwargs: dict[str, Any] = {
        "compression_type": _enum_value(
            BinaryDataCompressionType, _required(data, "CompressionType", what), what
        )
    }
    for name in array_type.COLUMNS:
        raw = _required(data, _data_type_key(name), what)
        kwargs[f"{name}_data_type"] = _enum_value(BinaryDataType, raw, what)
    count = _required(data, "Count", what)
    if not isinstance(count, int) or isinstance(count, bool) or count < 0:
        raise SerializationError(f"{what}: 'Count' must be a non-negative integer")
    peaks = array_type(**kwargs)
    params_from_dict(data, peaks.params)
    return peaks, count


# ---- Text entry points -------------------------------------------------------


def to_json(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, allow_nan=False)


def from_json(text: str | bytes, what: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as exc:
        raise SerializationError(f"{what}: malformed JSON ({exc})") from exc


def model_to_json(model: MzLiteModel) -> str:
    return to_json(model_to_dict(model))


def model_from_json(text: str | bytes) -> MzLiteModel:
    return model_from_dict(from_json(text, "MzLiteModel"))


def spectrum_to_json(spectrum: MassSpectrum) -> str:
    return to_json(spectrum_to_dict(spectrum))


def spectrum_from_json(text: str | bytes) -> MassSpectrum:
    return spectrum_from_dict(from_json(text, "MassSpectrum"))


def chromatogram_to_json(chromatogram: Chromatogram) -> str:
    return to_json(chromatogram_to_dict(chromatogram))


def chromatogram_from_json(text: str | bytes) -> Chromatogram:
    return chromatogram_from_dict(from_json(text, "Chromatogram"))


def peaks_to_json(peaks: PeakArray) -> str:
    return to_json(peaks_to_dict(peaks))


def peaks_from_json(text: str | bytes, array_type: type[PeakArray]) -> tuple[PeakArray, int]:
    return peaks_from_dict(from_json(text, array_type.__name__), array_type)
