# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Constants module for RecordAlchemy ORM.

This module centralizes the canonical scalar types, the recognized type-name
spellings, DDL keywords and message templates used throughout RecordAlchemy.

:module: constants
:synopsis: Centralized constants and configuration for RecordAlchemy ORM
"""

from __future__ import annotations

import datetime
import decimal
import uuid
from enum import Enum, StrEnum
from typing import Final

import numpy as np


# ============================================================================
# CANONICAL SCALAR TYPES
# ============================================================================

class ScalarType(Enum):
    """
    Canonical runtime types a type name can resolve to.

    The value is the column type keyword emitted in DDL.

    :class: ScalarType
    :synopsis: Enumeration of built-in canonical scalar types
    """

    STRING = "STRING"
    BOOLEAN = "BOOL"
    INT32 = "INT32"
    INT64 = "INT64"
    FLOAT32 = "FLOAT"
    FLOAT64 = "DOUBLE"
    DECIMAL = "DECIMAL"
    TIMESTAMP = "TIMESTAMP"
    DATE = "DATE"
    UUID = "UUID"

    @property
    def python_type(self) -> type:
        """Python class used to hold values of this type."""
        return _PYTHON_TYPES[self]

    @property
    def numpy_dtype(self) -> np.dtype:
        """Numpy dtype used when values of this type are laid out in record arrays."""
        return _NUMPY_DTYPES[self]

    def __str__(self) -> str:
        return self.value


_PYTHON_TYPES: Final[dict] = {
    ScalarType.STRING: str,
    ScalarType.BOOLEAN: bool,
    ScalarType.INT32: int,
    ScalarType.INT64: int,
    ScalarType.FLOAT32: float,
    ScalarType.FLOAT64: float,
    ScalarType.DECIMAL: decimal.Decimal,
    ScalarType.TIMESTAMP: datetime.datetime,
    ScalarType.DATE: datetime.date,
    ScalarType.UUID: uuid.UUID,
}

_NUMPY_DTYPES: Final[dict] = {
    ScalarType.STRING: np.dtype(object),
    ScalarType.BOOLEAN: np.dtype(np.bool_),
    ScalarType.INT32: np.dtype(np.int32),
    ScalarType.INT64: np.dtype(np.int64),
    ScalarType.FLOAT32: np.dtype(np.float32),
    ScalarType.FLOAT64: np.dtype(np.float64),
    ScalarType.DECIMAL: np.dtype(object),
    ScalarType.TIMESTAMP: np.dtype("datetime64[ms]"),
    ScalarType.DATE: np.dtype("datetime64[D]"),
    ScalarType.UUID: np.dtype(object),
}


# ============================================================================
# TYPE NAME SPELLINGS
# ============================================================================

class TypeNames(StrEnum):
    """Recognized type-name spellings of the built-in scalar types."""

    # @@ STEP 1: String (host-boxed only)
    JAVA_STRING: Final[str] = "java.lang.String"

    # @@ STEP 2: Primitive families (bare keyword, host-boxed, language-native)
    BOOLEAN: Final[str] = "boolean"
    JAVA_BOOLEAN: Final[str] = "java.lang.Boolean"
    SCALA_BOOLEAN: Final[str] = "scala.Boolean"

    INT: Final[str] = "int"
    JAVA_INTEGER: Final[str] = "java.lang.Integer"
    SCALA_INT: Final[str] = "scala.Int"

    LONG: Final[str] = "long"
    JAVA_LONG: Final[str] = "java.lang.Long"
    SCALA_LONG: Final[str] = "scala.Long"

    FLOAT: Final[str] = "float"
    JAVA_FLOAT: Final[str] = "java.lang.Float"
    SCALA_FLOAT: Final[str] = "scala.Float"

    DOUBLE: Final[str] = "double"
    JAVA_DOUBLE: Final[str] = "java.lang.Double"
    SCALA_DOUBLE: Final[str] = "scala.Double"

    # @@ STEP 3: Well-known value types
    SCALA_BIG_DECIMAL: Final[str] = "scala.math.BigDecimal"
    SQL_TIMESTAMP: Final[str] = "java.sql.Timestamp"
    UTIL_DATE: Final[str] = "java.util.Date"
    UTIL_UUID: Final[str] = "java.util.UUID"


# ============================================================================
# DDL GENERATION CONSTANTS
# ============================================================================

class DDLConstants(StrEnum):
    """DDL generation constants."""

    CREATE_TABLE: Final[str] = "CREATE TABLE"
    DROP_TABLE: Final[str] = "DROP TABLE IF EXISTS"
    PRIMARY_KEY: Final[str] = "PRIMARY KEY"
    UNIQUE: Final[str] = "UNIQUE"
    NOT_NULL: Final[str] = "NOT NULL"
    FIELD_SEPARATOR: Final[str] = ",\n  "
    JOIN_TABLE_SEPARATOR: Final[str] = "_"


class ModelMetadataConstants:
    """Attribute and field names stamped on record classes."""

    METADATA_KEY: Final[str] = "record_metadata"
    RECORD_NAME_ATTR: Final[str] = "__record_type_name__"
    TABLE_NAME_ATTR: Final[str] = "__record_table_name__"
    IS_RECORD_ATTR: Final[str] = "__is_active_record__"
    PRIMARY_KEY_FIELD: Final[str] = "id"
    VERSION_FIELD: Final[str] = "version"
    CONFIRMATION_SUFFIX: Final[str] = "_confirmation"
    FOREIGN_KEY_SUFFIX: Final[str] = "_id"


class ConfigConstants:
    """Environment variables and logger names read by the config layer."""

    ENV_SCHEMA: Final[str] = "RECORDALCHEMY_SCHEMA"
    ENV_DEBUG: Final[str] = "RECORDALCHEMY_DEBUG"
    ROOT_LOGGER: Final[str] = "recordalchemy"


# ============================================================================
# ERROR MESSAGES
# ============================================================================

class ErrorMessages:
    """Error message templates."""

    TYPE_NAME_NOT_FOUND: Final[str] = "Type name '{}' is not registered"
    SHADOWS_BUILTIN: Final[str] = "Model name '{}' shadows a built-in type name"
    NOT_A_CLASS: Final[str] = "Expected a class to register under '{}', got {!r}"
    MISSING_CONFIRMATION_FIELD: Final[str] = (
        "Field '{}' of {} requires confirmation field '{}' which is not declared"
    )
    CONFIRMATION_MISMATCH: Final[str] = "{} doesn't match its confirmation field '{}'"
    MISSING_FOREIGN_KEY_FIELD: Final[str] = (
        "belongs_to association '{}' of {} requires foreign key field '{}'"
    )
    UNKNOWN_THROUGH_ASSOCIATION: Final[str] = (
        "has_many_through association '{}' of {} goes through unknown association '{}'"
    )
    NOT_A_RECORD: Final[str] = "{} is not decorated with @active_record"
    NOT_A_MODEL_TYPE: Final[str] = "Type name '{}' resolves to {!r}, which is not a model"
    STALE_RECORD: Final[str] = (
        "{} with id {} is stale: expected version {}, current version is {}"
    )
    DUPLICATE_COLUMN: Final[str] = "{} maps fields '{}' and '{}' to the same column '{}'"
    DUPLICATE_JOIN_KEY: Final[str] = (
        "has_and_belongs_to_many association '{}' of {} uses '{}' for both join table keys"
    )
    AMBIGUOUS_THROUGH_SOURCE: Final[str] = (
        "has_many_through association '{}' of {} has several candidate sources on {}: {}; pass source="
    )
    UNKNOWN_THROUGH_SOURCE: Final[str] = (
        "has_many_through association '{}' of {} finds no source association to {} on {}"
    )
    TABLE_NOT_DECLARED: Final[str] = "No table declared for {} in {}"
    INVALID_SCHEMA_PATH: Final[str] = "'{}' is not a dotted path to an ActiveRecordTables"
    MISSING_SCHEMA_CONFIG: Final[str] = "Schema path not configured; set {}"
