# MzLite
# Copyright © 2025 Osvaldo J. Vega Rodríguez
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Controlled-vocabulary and user parameters plus their keyed containers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from mzlite.errors import ConstraintViolationError, DuplicateKeyError
from mzlite.json.scalars import check_scalar

__all__ = [
    "ParamObserver",
    "require_identity",
    "ParamBase",
    "CvParam",
    "UserParam",
    "KeyedCollection",
    "CvParamCollection",
    "UserParamCollection",
    "UserDescription",
    "ParamContainer",
]

# (param, field, old, new, phase) with phase "changing" or "changed"
ParamObserver = Callable[["ParamBase", str, Any, Any, str], None]

T = TypeVar("T")


def require_identity(value: object, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConstraintViolationError(f"{label} must be a non-empty string, got {value!r}")
    return value


def _same_value(old: Any, new: Any) -> bool:
    # Int32 2 -> Int64 2 is an edit even though the values compare equal.
    return type(old) is type(new) and old == new


class ParamBase(ABC):
    """Shared optional fields of :class:`CvParam` and :class:`UserParam`."""

    def __init__(self, unit_accession: str | None = None, value: Any = None):
        self._observers: list[ParamObserver] = []
        self._unit_accession = unit_accession
        self._value = check_scalar(value)

    @property
    @abstractmethod
    def key(self) -> str:
        """Accession for CV params, name for user params."""

    # ---- Observers ----------------------------------------------------------

    def subscribe(self, observer: ParamObserver) -> None:
        """Call ``observer`` before and after every edit of an optional field."""

        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: ParamObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def _notify(self, field_name: str, old: Any, new: Any, phase: str) -> None:
        for observer in list(self._observers):
            observer(self, field_name, old, new, phase)

    def _set_field(self, field_name: str, new: Any) -> None:
        attr = f"_{field_name}"
        old = getattr(self, attr)
        if _same_value(old, new):
            return
        self._notify(field_name, old, new, "changing")
        setattr(self, attr, new)
        self._notify(field_name, old, new, "changed")

    # ---- Optional fields ----------------------------------------------------

    @property
    def unit_accession(self) -> str | None:
        return self._unit_accession

    @unit_accession.setter
    def unit_accession(self, value: str | None) -> None:
        self._set_field("unit_accession", value)

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self._set_field("value", check_scalar(value))

    def __str__(self) -> str:
        value = "null" if self._value is None else str(self._value)
        if self._unit_accession is None:
            return f"'{self.key}','{value}'"
        return f"'{self.key}','{value}','{self._unit_accession}'"


class CvParam(ParamBase):
    """Parameter identified by a controlled-vocabulary accession."""

    def __init__(self, accession: str, *, unit_accession: str | None = None, value: Any = None):
        self._accession = require_identity(accession, "accession")
        super().__init__(unit_accession=unit_accession, value=value)

    @property
    def accession(self) -> str:
        return self._accession

    @property
    def key(self) -> str:
        return self._accession

    def __repr__(self) -> str:
        return (
            f"CvParam({self._accession!r}, unit_accession={self._unit_accession!r}, "
            f"value={self._value!r})"
        )


class UserParam(ParamBase):
    """Parameter identified by a free-text name."""

    def __init__(self, name: str, *, unit_accession: str | None = None, value: Any = None):
        self._name = require_identity(name, "name")
        super().__init__(unit_accession=unit_accession, value=value)

    @property
    def name(self) -> str:
        return self._name

    @property
    def key(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return (
            f"UserParam({self._name!r}, unit_accession={self._unit_accession!r}, "
            f"value={self._value!r})"
        )


class KeyedCollection(ABC, Generic[T]):
    """
    Insertion-ordered collection holding at most one item per key.

    Subclasses define how the key is read from an item and how keys are
    normalised for comparison.  Adding an item whose key is already present
    raises :class:`DuplicateKeyError` and leaves the collection untouched.
    """

    item_type: type = object

    def __init__(self, items: Iterable[T] = ()):
        self._items: dict[str, T] = {}
        for item in items:
            self.add(item)

    @abstractmethod
    def key_for(self, item: T) -> str:
        """Return the key ``item`` is stored under."""

    def normalize_key(self, key: str) -> str:
        return key

    def _check_item(self, item: T) -> None:
        if not isinstance(item, self.item_type):
            raise TypeError(
                f"{type(self).__name__} accepts {self.item_type.__name__}, "
                f"got {type(item).__name__}"
            )

    def add(self, item: T) -> T:
        self._check_item(item)
        key = self.key_for(item)
        normalised = self.normalize_key(key)
        if normalised in self._items:
            raise DuplicateKeyError(key)
        self._items[normalised] = item
        return item

    def extend(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    def remove(self, key: str) -> T:
        """Remove and return the item stored under ``key``."""

        return self._items.pop(self.normalize_key(key))

    def get(self, key: str, default: T | None = None) -> T | None:
        return self._items.get(self.normalize_key(key), default)

    def keys(self) -> list[str]:
        return [self.key_for(item) for item in self._items.values()]

    def clear(self) -> None:
        self._items.clear()

    def __getitem__(self, key: str) -> T:
        return self._items[self.normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.normalize_key(key) in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._items.values())!r})"


class CvParamCollection(KeyedCollection[CvParam]):
    """CvParams keyed by accession, compared case-insensitively."""

    item_type = CvParam

    def key_for(self, item: CvParam) -> str:
        return item.accession

    def normalize_key(self, key: str) -> str:
        return key.casefold()


class UserParamCollection(KeyedCollection[UserParam]):
    """UserParams keyed by exact-case name."""

    item_type = UserParam

    def key_for(self, item: UserParam) -> str:
        return item.name


class UserDescription:
    """Named free-form block of parameters."""

    def __init__(self, name: str):
        self._name = require_identity(name, "name")
        self.params = ParamContainer()

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"UserDescription({self._name!r})"


class ParamContainer:
    """CvParams, UserParams and descriptive blocks attached to one entity."""

    def __init__(self) -> None:
        self.cv_params = CvParamCollection()
        self.user_params = UserParamCollection()
        self.user_descriptions: list[UserDescription] = []

    def add_cv_param(
        self, accession: str, value: Any = None, *, unit_accession: str | None = None
    ) -> CvParam:
        return self.cv_params.add(CvParam(accession, unit_accession=unit_accession, value=value))

    def add_user_param(
        self, name: str, value: Any = None, *, unit_accession: str | None = None
    ) -> UserParam:
        return self.user_params.add(UserParam(name, unit_accession=unit_accession, value=value))

    def add_user_description(self, name: str) -> UserDescription:
        description = UserDescription(name)
        self.user_descriptions.append(description)
        return description

    def is_empty(self) -> bool:
        return not (self.cv_params or self.user_params or self.user_descriptions)

    def __repr__(self) -> str:
        return (
            f"ParamContainer(cv_params={len(self.cv_params)}, "
            f"user_params={len(self.user_params)}, "
            f"user_descriptions={len(self.user_descriptions)})"
        )
