# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Record base classes and the ``@active_record`` decorator.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict

from .associations import Association, associations_of
from .constants import ErrorMessages, ModelMetadataConstants
from .fields import RecordFieldMetadata, get_field_metadata
from .naming import default_table_name, table_name_of
from .type_registry import register_model_type

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StaleRecordError(ValueError):
    """Raised when an optimistic-lock version check fails."""


class ActiveRecordBase(BaseModel):
    """
    Base model for persistent records.

    :class: ActiveRecordBase
    :synopsis: Pydantic model with an ``id`` primary key and record metadata helpers
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        ignored_types=(Association,),
    )

    id: Optional[int] = None

    @property
    def is_new_record(self) -> bool:
        return self.id is None

    @classmethod
    def is_active_record(cls) -> bool:
        return bool(cls.__dict__.get(ModelMetadataConstants.IS_RECORD_ATTR, False))

    @classmethod
    def get_table_name(cls) -> str:
        return table_name_of(cls)

    @classmethod
    def get_type_name(cls) -> Optional[str]:
        return cls.__dict__.get(ModelMetadataConstants.RECORD_NAME_ATTR)

    @classmethod
    def field_metadata(cls, field_name: str) -> RecordFieldMetadata:
        field_info = cls.model_fields.get(field_name)
        if field_info is None:
            raise AttributeError(f"Field '{field_name}' not found in {cls.__name__}")
        return get_field_metadata(field_info)

    @classmethod
    def confirmation_fields(cls) -> Dict[str, str]:
        """Map of confirmed field name to the name of its companion field."""
        pairs: Dict[str, str] = {}
        for field_name, field_info in cls.model_fields.items():
            companion = get_field_metadata(field_info).confirmation_field(field_name)
            if companion is not None:
                pairs[field_name] = companion
        return pairs

    @classmethod
    def associations(cls) -> Dict[str, Association]:
        return associations_of(cls)

    def validation_errors(self) -> Dict[str, List[str]]:
        """
        Record-level validation errors keyed by field name.

        Confirmation pairs are checked here instead of on assignment, so the
        two values can be set one after the other.
        """
        errors: Dict[str, List[str]] = {}
        for field_name, companion in self.confirmation_fields().items():
            if getattr(self, field_name) != getattr(self, companion):
                errors.setdefault(field_name, []).append(
                    ErrorMessages.CONFIRMATION_MISMATCH.format(field_name, companion)
                )
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def to_record_dict(self) -> Dict[str, Any]:
        """Persisted column values keyed by column name."""
        from .schema import introspect_columns

        return {col.name: getattr(self, col.field_name) for col in introspect_columns(type(self))}


class Versionable(BaseModel):
    """
    Optimistic-locking mixin.

    Adds a ``version`` counter that the persistence layer bumps on every
    update and compares before writing.
    """

    version: int = 0

    def bump_version(self) -> int:
        self.version += 1
        return self.version

    def check_version(self, expected: int) -> None:
        """
        Raises:
            StaleRecordError: If the record's version is not ``expected``
        """
        if self.version != expected:
            raise StaleRecordError(
                ErrorMessages.STALE_RECORD.format(
                    type(self).__name__, getattr(self, "id", None), expected, self.version
                )
            )

    def changes_from(self, previous: "Versionable") -> List["Version"]:
        """History rows for every persisted column that differs from ``previous``."""
        from .schema import introspect_columns

        skipped = {ModelMetadataConstants.PRIMARY_KEY_FIELD, ModelMetadataConstants.VERSION_FIELD}
        table_name = table_name_of(type(self))
        history: List[Version] = []
        for col in introspect_columns(type(self)):
            if col.field_name in skipped:
                continue
            old = getattr(previous, col.field_name)
            new = getattr(self, col.field_name)
            if old != new:
                history.append(Version(
                    target_table=table_name,
                    target_id=getattr(self, ModelMetadataConstants.PRIMARY_KEY_FIELD, None),
                    field=col.name,
                    old_value=_stringify(old),
                    new_value=_stringify(new),
                ))
        return history


def _stringify(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def is_versioned(cls: Type[Any]) -> bool:
    return isinstance(cls, type) and issubclass(cls, Versionable)


def _validate_record_class(cls: Type[Any]) -> None:
    # @@ STEP 1: Confirmation companions must be declared fields
    for field_name, field_info in cls.model_fields.items():
        companion = get_field_metadata(field_info).confirmation_field(field_name)
        if companion is not None and companion not in cls.model_fields:
            raise ValueError(
                ErrorMessages.MISSING_CONFIRMATION_FIELD.format(field_name, cls.__name__, companion)
            )

    # @@ STEP 2: Associations check what they can without resolving targets
    for association in associations_of(cls).values():
        association.validate(cls)


def active_record(
    name: Optional[str] = None,
    table: Optional[str] = None,
) -> Callable[[Type[T]], Type[T]]:
    """
    Decorator to mark a class as a persistent record.

    Registers the class in the type registry so its fully-qualified name (or
    ``name``) resolves to the class itself.

    :param name: Type name to register under. Defaults to ``module.QualName``.
    :param table: Table name. Defaults to the snake-case plural of the class name.
    """

    def decorator(cls: Type[T]) -> Type[T]:
        if not (isinstance(cls, type) and issubclass(cls, ActiveRecordBase)):
            raise TypeError(f"{cls!r} must inherit from ActiveRecordBase to be an active record")

        _validate_record_class(cls)

        setattr(cls, ModelMetadataConstants.TABLE_NAME_ATTR, table or default_table_name(cls))
        setattr(cls, ModelMetadataConstants.IS_RECORD_ATTR, True)
        type_name = register_model_type(cls, name)
        setattr(cls, ModelMetadataConstants.RECORD_NAME_ATTR, type_name)

        logger.debug(f"Declared record {cls.__name__} as {type_name} (table {table_name_of(cls)})")
        return cls

    return decorator


def require_record(cls: Type[Any]) -> None:
    if not (isinstance(cls, type) and issubclass(cls, ActiveRecordBase) and cls.is_active_record()):
        raise ValueError(ErrorMessages.NOT_A_RECORD.format(getattr(cls, "__name__", cls)))


@active_record()
class Version(ActiveRecordBase):
    """One changed column of a versioned record."""

    target_table: str
    target_id: Optional[int] = None
    field: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
