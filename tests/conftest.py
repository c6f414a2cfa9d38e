# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and shared fixtures for RecordAlchemy tests.
"""

from __future__ import annotations

from typing import Generator

import pytest

from recordalchemy import clear_model_types, get_type_resolver, register_model_type

from . import models


@pytest.fixture(autouse=True)
def restore_model_registry() -> Generator[None, None, None]:
    """
    Restore the process-wide model registry after every test.

    Tests declare throwaway records; the shared fixture models from
    ``tests.models`` must stay registered for the next test.
    """
    saved = get_type_resolver().model_types()
    yield
    clear_model_types()
    for name, cls in saved.items():
        register_model_type(cls, name)


@pytest.fixture(scope="function")
def schema() -> models.FixtureTables:
    return models.FixtureTables()


@pytest.fixture(scope="function")
def primitive_models() -> list:
    return [models.PrimitiveModel.new_model(i, none=i > 2) for i in range(1, 5)]
