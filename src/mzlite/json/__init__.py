# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""JSON codecs for scalar parameter values and model entities."""

from mzlite.json.scalars import (
    Char,
    TypeCode,
    decode_scalar,
    dumps_scalar,
    encode_scalar,
    loads_scalar,
    scalar_kind,
)

__all__ = [
    "Char",
    "TypeCode",
    "decode_scalar",
    "dumps_scalar",
    "encode_scalar",
    "loads_scalar",
    "scalar_kind",
]
