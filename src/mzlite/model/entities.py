# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Descriptive metadata carried by the root model, spectra and chromatograms."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from mzlite.model.params import KeyedCollection, ParamContainer, require_identity

__all__ = [
    "ItemCollection",
    "SourceFile",
    "Contact",
    "FileDescription",
    "Sample",
    "Software",
    "Instrument",
    "DataProcessing",
    "Run",
    "MzLiteModel",
    "Precursor",
    "Product",
    "Scan",
    "MassSpectrum",
    "Chromatogram",
]


class ItemCollection(KeyedCollection[Any]):
    """Identified model items keyed by their exact-case ``id``."""

    def __init__(self, item_type: type, items: Iterable[Any] = ()):
        self.item_type = item_type
        super().__init__(items)

    def key_for(self, item: Any) -> str:
        return item.id


@dataclass(eq=False)
class SourceFile:
    id: str
    name: str = ""
    location: str = ""
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")


@dataclass(eq=False)
class Contact:
    params: ParamContainer = field(default_factory=ParamContainer)


@dataclass(eq=False)
class FileDescription:
    params: ParamContainer = field(default_factory=ParamContainer)
    contacts: list[Contact] = field(default_factory=list)
    source_files: ItemCollection = field(default_factory=lambda: ItemCollection(SourceFile))


@dataclass(eq=False)
class Sample:
    id: str
    name: str = ""
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")


@dataclass(eq=False)
class Software:
    id: str
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")


@dataclass(eq=False)
class Instrument:
    id: str
    software_id: str | None = None
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")


@dataclass(eq=False)
class DataProcessing:
    id: str
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")


@dataclass(eq=False)
class Run:
    """
    One acquisition run.

    The ``*_id`` fields name other items of the same model; they are plain
    strings and are not checked against the model's collections.
    """

    id: str
    sample_id: str | None = None
    default_instrument_id: str | None = None
    default_spectrum_processing_id: str | None = None
    default_chromatogram_processing_id: str | None = None
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")


@dataclass(eq=False)
class MzLiteModel:
    """Root document describing a whole dataset; one per store."""

    name: str
    file_description: FileDescription = field(default_factory=FileDescription)
    samples: ItemCollection = field(default_factory=lambda: ItemCollection(Sample))
    software: ItemCollection = field(default_factory=lambda: ItemCollection(Software))
    instruments: ItemCollection = field(default_factory=lambda: ItemCollection(Instrument))
    data_processings: ItemCollection = field(
        default_factory=lambda: ItemCollection(DataProcessing)
    )
    runs: ItemCollection = field(default_factory=lambda: ItemCollection(Run))


@dataclass(eq=False)
class Precursor:
    spectrum_reference: str | None = None
    isolation_window: ParamContainer = field(default_factory=ParamContainer)
    selected_ions: list[ParamContainer] = field(default_factory=list)
    activation: ParamContainer = field(default_factory=ParamContainer)


@dataclass(eq=False)
class Product:
    isolation_window: ParamContainer = field(default_factory=ParamContainer)


@dataclass(eq=False)
class Scan:
    spectrum_reference: str | None = None
    params: ParamContainer = field(default_factory=ParamContainer)
    scan_windows: list[ParamContainer] = field(default_factory=list)


@dataclass(eq=False)
class MassSpectrum:
    id: str
    source_file_reference: str | None = None
    precursors: list[Precursor] = field(default_factory=list)
    scans: list[Scan] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")


@dataclass(eq=False)
class Chromatogram:
    id: str
    precursor: Precursor | None = None
    product: Product | None = None
    params: ParamContainer = field(default_factory=ParamContainer)

    def __post_init__(self) -> None:
        require_identity(self.id, "id")
