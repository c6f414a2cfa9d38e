# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
RecordAlchemy: ActiveRecord-style models, schema declarations and type-name
resolution on top of pydantic.
"""

from .associations import (
    Association,
    AssociationKind,
    Relation,
    belongs_to,
    has_and_belongs_to_many,
    has_many,
    has_many_through,
)
from .config import SchemaConfig, load_schema
from .constants import ScalarType, TypeNames
from .fields import RecordFieldMetadata, record_field
from .record import (
    ActiveRecordBase,
    StaleRecordError,
    Version,
    Versionable,
    active_record,
)
from .schema import (
    ActiveRecordTables,
    ColumnSpec,
    JoinTable,
    Table,
    VersionTable,
    introspect_columns,
    table,
)
from .type_registry import (
    BUILTIN_TYPES,
    TypeNameNotFoundError,
    TypeNameResolver,
    clear_model_types,
    get_type,
    get_type_resolver,
    is_type_defined,
    register_model_type,
    resolve_type,
    type_name_of,
    unregister_model_type,
    unwrap_optional,
)

__all__ = [
    "Association",
    "AssociationKind",
    "Relation",
    "belongs_to",
    "has_and_belongs_to_many",
    "has_many",
    "has_many_through",
    "SchemaConfig",
    "load_schema",
    "ScalarType",
    "TypeNames",
    "RecordFieldMetadata",
    "record_field",
    "ActiveRecordBase",
    "StaleRecordError",
    "Version",
    "Versionable",
    "active_record",
    "ActiveRecordTables",
    "ColumnSpec",
    "JoinTable",
    "Table",
    "VersionTable",
    "introspect_columns",
    "table",
    "BUILTIN_TYPES",
    "TypeNameNotFoundError",
    "TypeNameResolver",
    "clear_model_types",
    "get_type",
    "get_type_resolver",
    "is_type_defined",
    "register_model_type",
    "resolve_type",
    "type_name_of",
    "unregister_model_type",
    "unwrap_optional",
]
