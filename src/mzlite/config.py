# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Store configuration.

Defaults favour ingestion throughput over crash safety: synchronous writes are
off and both the rollback journal and temp tables live in memory.  Individual
settings can be overridden with the ``MZLITE_PRAGMAS`` environment variable,
e.g. ``MZLITE_PRAGMAS="synchronous=NORMAL,journal_mode=WAL"``.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, field_validator

__all__ = ["StoreConfig", "load_config", "reload", "parse_pragma_tokens"]

_JOURNAL_MODES = {"DELETE", "TRUNCATE", "PERSIST", "MEMORY", "WAL", "OFF"}
_SYNCHRONOUS_MODES = {"OFF", "NORMAL", "FULL", "EXTRA"}
_TEMP_STORE_MODES = {"DEFAULT", "FILE", "MEMORY"}


class StoreConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    synchronous: str = "OFF"
    journal_mode: str = "MEMORY"
    temp_store: str = "MEMORY"
    ignore_check_constraints: bool = False
    cached_statements: int = 128
    timeout: float = 5.0

    @field_validator("synchronous")
    def _synchronous_mode(cls, value: str) -> str:
        return _check_mode("synchronous", value, _SYNCHRONOUS_MODES)

    @field_validator("journal_mode")
    def _journal_mode(cls, value: str) -> str:
        return _check_mode("journal_mode", value, _JOURNAL_MODES)

    @field_validator("temp_store")
    def _temp_store(cls, value: str) -> str:
        return _check_mode("temp_store", value, _TEMP_STORE_MODES)

    @field_validator("cached_statements")
    def _cache_positive(cls, value: int) -> int:
        if value < 0:
            raise ValueError("cached_statements must be >= 0")
        return value

    def pragmas(self) -> dict[str, object]:
        """Return the pragma mapping applied to every new connection."""

        return {
            "synchronous": self.synchronous,
            "journal_mode": self.journal_mode,
            "temp_store": self.temp_store,
            "ignore_check_constraints": self.ignore_check_constraints,
        }


def _check_mode(name: str, value: str, allowed: set[str]) -> str:
    normalised = str(value).strip().upper()
    if normalised not in allowed:
        raise ValueError(f"Unsupported {name}: {value!r}")
    return normalised


def _tokenise(raw: str) -> Iterable[str]:
    for token in raw.split(","):
        clean = token.strip()
        if clean:
            yield clean


def parse_pragma_tokens(raw: str) -> dict[str, str]:
    """Parse ``key=value`` tokens; tokens without ``=`` are ignored."""

    overrides: dict[str, str] = {}
    for token in _tokenise(raw):
        if "=" not in token:
            continue
        key, value = token.split("=", 1)
        key = key.strip().lower().replace("-", "_")
        if key:
            overrides[key] = value.strip()
    return overrides


@lru_cache(maxsize=1)
def _cached_config(env_value: str | None = None) -> StoreConfig:
    raw = env_value if env_value is not None else os.environ.get("MZLITE_PRAGMAS", "")
    overrides = parse_pragma_tokens(raw)
    known = {key: value for key, value in overrides.items() if key in StoreConfig.model_fields}
    return StoreConfig(**known)


def reload() -> None:
    """Clear the cached configuration (useful for tests)."""

    _cached_config.cache_clear()


def load_config(env_value: str | None = None) -> StoreConfig:
    """Return the default configuration with environment overrides applied."""

    return _cached_config(env_value).model_copy()
