# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Binary encoding of peak arrays."""

from mzlite.binary.codec import BinaryDataDecoder, BinaryDataEncoder

__all__ = ["BinaryDataDecoder", "BinaryDataEncoder"]
