# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Schema configuration.

A configuration names the schema object to use (a dotted path to an
``ActiveRecordTables`` subclass or instance) and whether RecordAlchemy logs
at DEBUG level. It can be built from a mapping or from the environment:

    RECORDALCHEMY_SCHEMA=myapp.models.AppTables
    RECORDALCHEMY_DEBUG=true
"""

from __future__ import annotations

import importlib
import logging
import os
from typing import TYPE_CHECKING, Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .constants import ConfigConstants, ErrorMessages

if TYPE_CHECKING:
    from .schema import ActiveRecordTables

logger = logging.getLogger(__name__)


class SchemaConfig(BaseModel):
    """Settings for initializing a schema."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_path: str = Field(alias="schema")
    debug: bool = False

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "SchemaConfig":
        """Build from a plain mapping such as ``{"schema": "app.models.AppTables"}``."""
        return cls.model_validate(dict(mapping))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SchemaConfig":
        """
        Build from ``RECORDALCHEMY_SCHEMA`` and ``RECORDALCHEMY_DEBUG``.

        Raises:
            ValueError: If no schema path is set
        """
        env = os.environ if environ is None else environ
        schema_path = env.get(ConfigConstants.ENV_SCHEMA)
        if not schema_path:
            raise ValueError(ErrorMessages.MISSING_SCHEMA_CONFIG.format(ConfigConstants.ENV_SCHEMA))
        values: dict = {"schema": schema_path}
        debug = env.get(ConfigConstants.ENV_DEBUG)
        if debug:
            values["debug"] = debug
        return cls.model_validate(values)


def apply_debug_logging(config: SchemaConfig) -> None:
    """Lower the ``recordalchemy`` logger to DEBUG when the config asks for it."""
    if config.debug:
        logging.getLogger(ConfigConstants.ROOT_LOGGER).setLevel(logging.DEBUG)


def _import_dotted(path: str) -> Any:
    module_path, _, attr = path.rpartition(".")
    if not module_path or not attr:
        raise ValueError(ErrorMessages.INVALID_SCHEMA_PATH.format(path))
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ValueError(ErrorMessages.INVALID_SCHEMA_PATH.format(path)) from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ValueError(ErrorMessages.INVALID_SCHEMA_PATH.format(path)) from e


def load_schema(config: SchemaConfig) -> "ActiveRecordTables":
    """
    Import, instantiate and initialize the schema a config names.

    Raises:
        ValueError: If the path does not name an ActiveRecordTables subclass or instance
    """
    from .schema import ActiveRecordTables

    target = _import_dotted(config.schema_path)
    if isinstance(target, type) and issubclass(target, ActiveRecordTables):
        schema = target()
    elif isinstance(target, ActiveRecordTables):
        schema = target
    else:
        raise ValueError(ErrorMessages.INVALID_SCHEMA_PATH.format(config.schema_path))

    logger.debug(f"Loaded schema {type(schema).__name__} from {config.schema_path}")
    return schema.initialize(config)
