# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Per-field metadata for record models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from pydantic import Field
from pydantic.fields import FieldInfo

from .constants import ModelMetadataConstants


@dataclass(frozen=True)
class RecordFieldMetadata:
    """
    Persistence metadata attached to a pydantic field.

    :class: RecordFieldMetadata
    :synopsis: Transient, column rename, uniqueness and confirmation markers
    """
    transient: bool = False
    column: Optional[str] = None
    unique: bool = False
    confirmation: Union[bool, str] = False
    type_name: Optional[str] = None

    def column_name(self, field_name: str) -> str:
        return self.column if self.column else field_name

    def confirmation_field(self, field_name: str) -> Optional[str]:
        """Name of the companion field holding the confirmation value, if any."""
        if isinstance(self.confirmation, str):
            return self.confirmation
        if self.confirmation:
            return f"{field_name}{ModelMetadataConstants.CONFIRMATION_SUFFIX}"
        return None


_DEFAULT_METADATA = RecordFieldMetadata()


def record_field(
    default: Any = ...,
    *,
    transient: bool = False,
    column: Optional[str] = None,
    unique: bool = False,
    confirmation: Union[bool, str] = False,
    type_name: Optional[str] = None,
    default_factory: Optional[Callable[[], Any]] = None,
    alias: Optional[str] = None,
    description: Optional[str] = None,
    json_schema_extra: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Create a Pydantic Field with attached record metadata.

    Args:
        default: Default value for the field
        transient: Never persist this field
        column: Column name to persist under (defaults to the field name)
        unique: Emit a UNIQUE constraint for the column
        confirmation: ``True`` to pair with ``<field>_confirmation``, or the
            name of the companion field
        type_name: Type name to resolve instead of the one derived from the annotation
        default_factory: Python-side default factory function
    """
    if confirmation == "":
        raise ValueError("confirmation field name must not be empty")

    metadata = RecordFieldMetadata(
        transient=transient,
        column=column,
        unique=unique,
        confirmation=confirmation,
        type_name=None if type_name is None else str(type_name),
    )

    if type(json_schema_extra) is not dict:
        json_schema_extra = {}
    json_schema_extra[ModelMetadataConstants.METADATA_KEY] = metadata

    field_kwargs = {
        "json_schema_extra": json_schema_extra,
        "alias": alias,
        "description": description,
    }
    if default_factory is not None:
        return Field(default_factory=default_factory, **field_kwargs)
    return Field(default=default, **field_kwargs)


def get_field_metadata(field_info: FieldInfo) -> RecordFieldMetadata:
    """Metadata for a pydantic field; plain fields get the all-default metadata."""
    extra = field_info.json_schema_extra
    if isinstance(extra, dict):
        metadata = extra.get(ModelMetadataConstants.METADATA_KEY)
        if isinstance(metadata, RecordFieldMetadata):
            return metadata
    return _DEFAULT_METADATA
