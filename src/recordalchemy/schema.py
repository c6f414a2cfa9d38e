# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Schema introspection and table declarations.

Columns are derived from pydantic fields by resolving each field's type name:
fields resolving to a built-in scalar type become columns, fields resolving
to a registered model are relationships, and anything else (collections,
unregistered classes) is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set, Type

import numpy as np

from .associations import HasAndBelongsToMany, join_tables_of
from .config import SchemaConfig, apply_debug_logging
from .constants import DDLConstants, ErrorMessages, ModelMetadataConstants, ScalarType
from .fields import get_field_metadata
from .naming import table_name_of
from .record import Version, is_versioned, require_record
from .type_registry import get_type_resolver, type_name_of, unwrap_optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSpec:
    """
    A persisted column.

    :class: ColumnSpec
    :synopsis: Column name, canonical type and constraints of one field
    """
    name: str
    field_name: str
    scalar_type: ScalarType
    nullable: bool = False
    unique: bool = False
    primary_key: bool = False

    @property
    def numpy_dtype(self) -> np.dtype:
        # Nullable values need object storage to hold None
        if self.nullable and not self.primary_key:
            return np.dtype(object)
        return self.scalar_type.numpy_dtype

    def to_ddl(self) -> str:
        parts: List[str] = [self.name, self.scalar_type.value]
        if self.primary_key:
            parts.append(DDLConstants.PRIMARY_KEY)
            return " ".join(parts)
        if not self.nullable:
            parts.append(DDLConstants.NOT_NULL)
        if self.unique:
            parts.append(DDLConstants.UNIQUE)
        return " ".join(parts)


def _column_order(col: ColumnSpec) -> int:
    if col.primary_key:
        return 0
    if col.field_name == ModelMetadataConstants.VERSION_FIELD:
        return 2
    return 1


def introspect_columns(model: Type[Any]) -> List[ColumnSpec]:
    """
    Columns persisted for a pydantic model class.

    Primary key first, the optimistic-lock version column last, the rest in
    field declaration order.
    """
    resolver = get_type_resolver()
    companions: Set[str] = set()
    for field_name, field_info in model.model_fields.items():
        companion = get_field_metadata(field_info).confirmation_field(field_name)
        if companion is not None:
            companions.add(companion)

    columns: List[ColumnSpec] = []
    claimed: Dict[str, str] = {}
    for field_name, field_info in model.model_fields.items():
        meta = get_field_metadata(field_info)
        if meta.transient or field_name in companions:
            continue

        inner, optional = unwrap_optional(field_info.annotation)
        type_name = meta.type_name or type_name_of(inner)
        resolved = resolver.get(type_name) if type_name is not None else None

        if resolved is None:
            logger.debug(f"{model.__name__}.{field_name}: unsupported type {type_name!r}, no column")
            continue
        if not isinstance(resolved, ScalarType):
            logger.debug(f"{model.__name__}.{field_name}: references model {type_name}, no column")
            continue

        column_name = meta.column_name(field_name)
        if column_name in claimed:
            raise ValueError(
                ErrorMessages.DUPLICATE_COLUMN.format(model.__name__, claimed[column_name], field_name, column_name)
            )
        claimed[column_name] = field_name

        is_pk = field_name == ModelMetadataConstants.PRIMARY_KEY_FIELD
        columns.append(ColumnSpec(
            name=column_name,
            field_name=field_name,
            scalar_type=resolved,
            nullable=optional and not is_pk,
            unique=meta.unique,
            primary_key=is_pk,
        ))

    return sorted(columns, key=_column_order)


# -----------------------------------------------------------------------------
# Tables
# -----------------------------------------------------------------------------

class Table:
    """Table handle for one record class."""

    def __init__(self, model: Type[Any], name: Optional[str] = None):
        self.model = model
        self._name = name
        self._columns: Optional[List[ColumnSpec]] = None

    @property
    def name(self) -> str:
        return self._name or table_name_of(self.model)

    @property
    def columns(self) -> List[ColumnSpec]:
        if self._columns is None:
            self._columns = introspect_columns(self.model)
        return list(self._columns)

    def column(self, name: str) -> ColumnSpec:
        for col in self.columns:
            if col.name == name:
                return col
        raise KeyError(f"Table {self.name} has no column {name}")

    def create_ddl(self) -> str:
        body = DDLConstants.FIELD_SEPARATOR.join(col.to_ddl() for col in self.columns)
        return f"{DDLConstants.CREATE_TABLE} {self.name} (\n  {body}\n);"

    def drop_ddl(self) -> str:
        return f"{DDLConstants.DROP_TABLE} {self.name};"

    def record_dtype(self, unsaved: bool = False) -> np.dtype:
        """
        Numpy structured dtype with one field per column.

        With ``unsaved`` the primary key is stored as objects so rows of new
        records can carry ``id=None``.
        """
        fields = []
        for col in self.columns:
            dtype = np.dtype(object) if unsaved and col.primary_key else col.numpy_dtype
            fields.append((col.name, dtype))
        return np.dtype(fields)

    def to_records(self, records: Iterable[Any]) -> np.ndarray:
        """Lay out record instances as a numpy structured array for bulk loading."""
        cols = self.columns
        rows = [tuple(getattr(record, col.field_name) for col in cols) for record in records]
        unsaved = any(
            row[i] is None for row in rows for i, col in enumerate(cols) if col.primary_key
        )
        return np.array(rows, dtype=self.record_dtype(unsaved=unsaved))

    def __repr__(self) -> str:
        return f"Table({self.name}, model={self.model.__name__})"


def table(model: Type[Any], name: Optional[str] = None) -> Table:
    return Table(model, name)


@dataclass(frozen=True)
class JoinTable:
    """Join table backing a has-and-belongs-to-many pair."""
    name: str
    left_key: str
    right_key: str

    def create_ddl(self) -> str:
        int_type = ScalarType.INT64.value
        body = DDLConstants.FIELD_SEPARATOR.join([
            f"{self.left_key} {int_type} {DDLConstants.NOT_NULL}",
            f"{self.right_key} {int_type} {DDLConstants.NOT_NULL}",
        ])
        return f"{DDLConstants.CREATE_TABLE} {self.name} (\n  {body}\n);"

    def drop_ddl(self) -> str:
        return f"{DDLConstants.DROP_TABLE} {self.name};"


class ActiveRecordTables:
    """
    Schema declaration: the set of tables an application persists.

    Subclasses declare tables as class attributes:

        class AppTables(ActiveRecordTables):
            users = table(User)
            groups = table(Group)
    """

    def __init__(self):
        self._config: Optional[SchemaConfig] = None
        self._initialized = False

    @classmethod
    def tables(cls) -> Dict[str, Table]:
        found: Dict[str, Table] = {}
        for klass in reversed(cls.__mro__):
            for attr_name, value in vars(klass).items():
                if isinstance(value, Table):
                    found[attr_name] = value
        return found

    @classmethod
    def models(cls) -> List[Type[Any]]:
        return [t.model for t in cls.tables().values()]

    @classmethod
    def table_for(cls, model: Type[Any]) -> Table:
        for t in cls.tables().values():
            if t.model is model:
                return t
        raise ValueError(ErrorMessages.TABLE_NOT_DECLARED.format(model.__name__, cls.__name__))

    @classmethod
    def join_tables(cls) -> List[JoinTable]:
        """Join tables of every has-and-belongs-to-many association, one per pair."""
        found: Dict[str, JoinTable] = {}
        for model in cls.models():
            for association in join_tables_of(model):
                found.setdefault(association.join_table, _join_table_for(association))
        return list(found.values())

    @classmethod
    def create_ddl(cls) -> str:
        statements = [t.create_ddl() for t in cls.tables().values()]
        statements.extend(j.create_ddl() for j in cls.join_tables())
        return "\n\n".join(statements)

    @classmethod
    def drop_ddl(cls) -> str:
        statements = [j.drop_ddl() for j in cls.join_tables()]
        statements.extend(t.drop_ddl() for t in reversed(list(cls.tables().values())))
        return "\n".join(statements)

    @classmethod
    def reset_ddl(cls) -> str:
        """Drop then recreate every table."""
        return f"{cls.drop_ddl()}\n\n{cls.create_ddl()}"

    def initialize(self, config: Optional[SchemaConfig] = None) -> "ActiveRecordTables":
        """
        Check every declared model is a record and apply the configuration.

        Raises:
            ValueError: If a declared model is not decorated with @active_record
        """
        for model in self.models():
            require_record(model)
        if config is not None:
            apply_debug_logging(config)
        self._config = config
        self._initialized = True
        logger.debug(f"Initialized schema {type(self).__name__} with {len(self.tables())} tables")
        return self

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def config(self) -> Optional[SchemaConfig]:
        return self._config


def _join_table_for(association: HasAndBelongsToMany) -> JoinTable:
    association.check_join_keys()
    return JoinTable(
        name=association.join_table,
        left_key=association.foreign_key,
        right_key=association.association_foreign_key,
    )


class VersionTable:
    """Schema mixin that stores versioned-record history in a ``versions`` table."""

    versions = table(Version)

    @classmethod
    def versioned_tables(cls) -> List[Table]:
        return [t for t in cls.tables().values() if is_versioned(t.model)]
