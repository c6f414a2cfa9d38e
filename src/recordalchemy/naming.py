# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import re
from typing import Any, Type

from .constants import ModelMetadataConstants

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """``ProjectMembership`` -> ``project_membership``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def pluralize(word: str) -> str:
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """``friends`` -> ``friend``, ``companies`` -> ``company``."""
    if word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if word.endswith(("sses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def default_table_name(cls: Type[Any]) -> str:
    return pluralize(snake_case(cls.__name__))


def table_name_of(cls: Type[Any]) -> str:
    """Declared table name of a record class, or the default derived from its name."""
    declared = cls.__dict__.get(ModelMetadataConstants.TABLE_NAME_ATTR)
    return declared if declared else default_table_name(cls)


def foreign_key_for(cls: Type[Any]) -> str:
    """``User`` -> ``user_id``."""
    return f"{snake_case(cls.__name__)}{ModelMetadataConstants.FOREIGN_KEY_SUFFIX}"
