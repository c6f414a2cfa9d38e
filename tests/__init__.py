# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Test suite for RecordAlchemy.

- Type-name resolution (built-in spellings, model types, unsupported names)
- Record declarations, field metadata and versioning
- Associations and relation handles
- Schema introspection, DDL and record arrays
- Configuration loading
"""
