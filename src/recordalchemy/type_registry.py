# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Type-name resolution for RecordAlchemy.

Maps declared type names (primitive keywords, boxed names, well-known value
types and fully-qualified model names) to their canonical runtime type. The
lookup is a partial function: unknown names are reported as not found and
never fall back to a default type.
"""

from __future__ import annotations

import datetime
import decimal
import logging
import threading
import types
import uuid
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Type, Union, get_args, get_origin

import numpy as np

from .constants import ErrorMessages, ScalarType, TypeNames

logger = logging.getLogger(__name__)

CanonicalType = Union[ScalarType, Type[Any]]

_MISSING = object()


class TypeNameNotFoundError(KeyError):
    """Raised when a type name is not registered with the resolver."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return ErrorMessages.TYPE_NAME_NOT_FOUND.format(self.name)


# -----------------------------------------------------------------------------
# Built-in table
# -----------------------------------------------------------------------------

def _build_builtin_table() -> Mapping[str, ScalarType]:
    families = {
        ScalarType.STRING: (TypeNames.JAVA_STRING,),
        ScalarType.BOOLEAN: (TypeNames.BOOLEAN, TypeNames.JAVA_BOOLEAN, TypeNames.SCALA_BOOLEAN),
        ScalarType.INT32: (TypeNames.INT, TypeNames.JAVA_INTEGER, TypeNames.SCALA_INT),
        ScalarType.INT64: (TypeNames.LONG, TypeNames.JAVA_LONG, TypeNames.SCALA_LONG),
        ScalarType.FLOAT32: (TypeNames.FLOAT, TypeNames.JAVA_FLOAT, TypeNames.SCALA_FLOAT),
        ScalarType.FLOAT64: (TypeNames.DOUBLE, TypeNames.JAVA_DOUBLE, TypeNames.SCALA_DOUBLE),
        ScalarType.DECIMAL: (TypeNames.SCALA_BIG_DECIMAL,),
        ScalarType.TIMESTAMP: (TypeNames.SQL_TIMESTAMP,),
        ScalarType.DATE: (TypeNames.UTIL_DATE,),
        ScalarType.UUID: (TypeNames.UTIL_UUID,),
    }
    table: Dict[str, ScalarType] = {}
    for scalar_type, spellings in families.items():
        for spelling in spellings:
            table[spelling.value] = scalar_type
    return types.MappingProxyType(table)


BUILTIN_TYPES: Mapping[str, ScalarType] = _build_builtin_table()


# -----------------------------------------------------------------------------
# Resolver
# -----------------------------------------------------------------------------

class TypeNameResolver:
    """
    Resolves type names to canonical types.

    Built-in names live in an immutable table. Model names live in a snapshot
    that is rebuilt and republished on every registration, so readers never
    take the lock and never observe a half-built table.

    :class: TypeNameResolver
    :synopsis: Partial function from type names to canonical types
    """

    def __init__(self, builtins: Optional[Mapping[str, ScalarType]] = None):
        self._builtins: Mapping[str, ScalarType] = (
            BUILTIN_TYPES if builtins is None else types.MappingProxyType(dict(builtins))
        )
        self._models: Mapping[str, Type[Any]] = types.MappingProxyType({})
        self._write_lock = threading.Lock()

    # ---- lookup ----

    def get(self, name: str, default: Any = None) -> Any:
        """Return the canonical type for ``name`` or ``default`` when it is not registered."""
        found = self._builtins.get(name, _MISSING)
        if found is not _MISSING:
            return found
        return self._models.get(name, default)

    def resolve(self, name: str) -> CanonicalType:
        """
        Return the canonical type for ``name``.

        Raises:
            TypeNameNotFoundError: If ``name`` is not registered
        """
        found = self.get(name, _MISSING)
        if found is _MISSING:
            raise TypeNameNotFoundError(name)
        return found

    def is_defined(self, name: str) -> bool:
        return name in self._builtins or name in self._models

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_defined(name)

    def __getitem__(self, name: str) -> CanonicalType:
        return self.resolve(name)

    def names(self) -> Iterator[str]:
        """Iterate every recognized name, built-ins first."""
        yield from self._builtins
        yield from self._models

    def model_types(self) -> Dict[str, Type[Any]]:
        """Copy of the registered model names and classes."""
        return dict(self._models)

    # ---- registration ----

    def register_model_type(self, cls: Type[Any], name: Optional[str] = None) -> str:
        """
        Register ``cls`` so that ``name`` resolves to the class itself.

        Args:
            cls: The model class
            name: Registered name, defaults to the fully-qualified class name

        Returns:
            The name the class was registered under

        Raises:
            ValueError: If ``name`` is a built-in spelling or ``cls`` is not a class
        """
        type_name = name if name is not None else qualified_name(cls)
        if not isinstance(cls, type):
            raise ValueError(ErrorMessages.NOT_A_CLASS.format(type_name, cls))
        if type_name in self._builtins:
            raise ValueError(ErrorMessages.SHADOWS_BUILTIN.format(type_name))

        with self._write_lock:
            previous = self._models.get(type_name)
            if previous is not None and previous is not cls:
                logger.warning(f"Type name {type_name} re-registered: {previous!r} replaced by {cls!r}")
            updated = dict(self._models)
            updated[type_name] = cls
            self._models = types.MappingProxyType(updated)

        logger.debug(f"Registered model type {type_name}")
        return type_name

    def unregister_model_type(self, name: str) -> None:
        """Remove a model name; unknown names raise ``TypeNameNotFoundError``."""
        with self._write_lock:
            if name not in self._models:
                raise TypeNameNotFoundError(name)
            updated = dict(self._models)
            del updated[name]
            self._models = types.MappingProxyType(updated)

    def clear_model_types(self) -> None:
        with self._write_lock:
            self._models = types.MappingProxyType({})

    def __repr__(self) -> str:
        return f"TypeNameResolver(builtins={len(self._builtins)}, models={len(self._models)})"


# -----------------------------------------------------------------------------
# Annotation to type name
# -----------------------------------------------------------------------------

_ANNOTATION_TYPE_NAMES: Mapping[Any, str] = types.MappingProxyType({
    str: TypeNames.JAVA_STRING.value,
    bool: TypeNames.BOOLEAN.value,
    int: TypeNames.LONG.value,
    float: TypeNames.DOUBLE.value,
    decimal.Decimal: TypeNames.SCALA_BIG_DECIMAL.value,
    datetime.datetime: TypeNames.SQL_TIMESTAMP.value,
    datetime.date: TypeNames.UTIL_DATE.value,
    uuid.UUID: TypeNames.UTIL_UUID.value,
    np.bool_: TypeNames.BOOLEAN.value,
    np.int32: TypeNames.INT.value,
    np.int64: TypeNames.LONG.value,
    np.float32: TypeNames.FLOAT.value,
    np.float64: TypeNames.DOUBLE.value,
})


def qualified_name(cls: Type[Any]) -> str:
    """Fully-qualified name a class is registered under by default."""
    return f"{cls.__module__}.{cls.__qualname__}"


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """
    Strip ``Optional[...]`` from an annotation.

    Returns:
        Tuple of (inner annotation, whether it was optional). Unions of more
        than one non-None member are returned unchanged.
    """
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        if type(None) in args:
            remaining = [arg for arg in args if arg is not type(None)]
            if len(remaining) == 1:
                return remaining[0], True
    return annotation, False


def type_name_of(annotation: Any) -> Optional[str]:
    """
    Derive the type name a field annotation is looked up under.

    Optional wrappers are removed first. Generic aliases such as ``list[int]``
    map to their textual form, which is never registered.
    """
    inner, _ = unwrap_optional(annotation)
    if inner is None or inner is type(None):
        return None
    if get_origin(inner) is not None:
        return repr(inner)
    try:
        known = _ANNOTATION_TYPE_NAMES.get(inner)
    except TypeError:
        known = None
    if known is not None:
        return known
    if isinstance(inner, type):
        return qualified_name(inner)
    if isinstance(inner, str):
        return inner
    return None


# -----------------------------------------------------------------------------
# Process-wide resolver
# -----------------------------------------------------------------------------

_default_resolver = TypeNameResolver()


def get_type_resolver() -> TypeNameResolver:
    return _default_resolver


def resolve_type(name: str) -> CanonicalType:
    return _default_resolver.resolve(name)


def get_type(name: str, default: Any = None) -> Any:
    return _default_resolver.get(name, default)


def is_type_defined(name: str) -> bool:
    return _default_resolver.is_defined(name)


def register_model_type(cls: Type[Any], name: Optional[str] = None) -> str:
    return _default_resolver.register_model_type(cls, name)


def unregister_model_type(name: str) -> None:
    _default_resolver.unregister_model_type(name)


def clear_model_types() -> None:
    """Drop every registered model type from the process-wide resolver."""
    _default_resolver.clear_model_types()
