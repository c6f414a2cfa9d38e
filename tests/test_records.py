# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for record declarations, field metadata and versioning.
"""

from __future__ import annotations

from typing import Optional

import pytest
from pydantic import BaseModel, ValidationError

from recordalchemy import (
    ActiveRecordBase,
    StaleRecordError,
    Version,
    active_record,
    is_type_defined,
    record_field,
    resolve_type,
)
from recordalchemy.fields import RecordFieldMetadata

from . import models


def make_annotation_model(**overrides) -> models.AnnotationModel:
    values = dict(
        transient_field="t",
        column_field="c",
        unique_field="u",
        confirmation_field="secret",
        confirmation_field2="other",
        confirmation_field_confirmation="secret",
        confirmation_name="other",
    )
    values.update(overrides)
    return models.AnnotationModel(**values)


class TestActiveRecordDecorator:
    """Declaring records registers them and stamps table names."""

    def test_default_table_names(self):
        assert models.User.get_table_name() == "users"
        assert models.ProjectMembership.get_table_name() == "project_memberships"
        assert models.PrimitiveModel.get_table_name() == "primitive_models"

    def test_explicit_name_and_table(self):
        @active_record(name="com.example.Account", table="accounts_v2")
        class Account(ActiveRecordBase):
            owner: str

        assert resolve_type("com.example.Account") is Account
        assert Account.get_table_name() == "accounts_v2"
        assert Account.get_type_name() == "com.example.Account"
        assert Account.is_active_record()

    def test_undecorated_subclass_is_not_a_record(self):
        class Draft(ActiveRecordBase):
            title: str

        assert not Draft.is_active_record()
        assert not is_type_defined(f"{Draft.__module__}.{Draft.__qualname__}")

    def test_decorating_a_plain_model_fails(self):
        with pytest.raises(TypeError):
            @active_record()
            class Plain(BaseModel):
                name: str

    def test_new_record(self):
        user = models.User(name="alice")
        assert user.is_new_record
        assert not models.User(id=7, name="bob").is_new_record

    def test_fields_are_validated_on_assignment(self):
        user = models.User(name="alice")
        with pytest.raises(ValidationError):
            user.group_id = "not a number"


class TestFieldMetadata:
    """record_field() markers."""

    def test_metadata_is_attached(self):
        meta = models.AnnotationModel.field_metadata("column_field")
        assert isinstance(meta, RecordFieldMetadata)
        assert meta.column_name("column_field") == "column_name"
        assert models.AnnotationModel.field_metadata("transient_field").transient
        assert models.AnnotationModel.field_metadata("unique_field").unique

    def test_plain_fields_get_default_metadata(self):
        meta = models.AnnotationModel.field_metadata("confirmation_name")
        assert meta == RecordFieldMetadata()
        assert meta.column_name("confirmation_name") == "confirmation_name"

    def test_unknown_field(self):
        with pytest.raises(AttributeError):
            models.AnnotationModel.field_metadata("nope")

    def test_confirmation_pairs(self):
        assert models.AnnotationModel.confirmation_fields() == {
            "confirmation_field": "confirmation_field_confirmation",
            "confirmation_field2": "confirmation_name",
        }

    def test_empty_confirmation_name_is_rejected(self):
        with pytest.raises(ValueError):
            record_field(confirmation="")

    def test_default_factory(self):
        @active_record()
        class Tagged(ActiveRecordBase):
            label: str = record_field(default_factory=lambda: "untitled")

        assert Tagged().label == "untitled"


class TestConfirmation:
    """Confirmation fields must match their companions."""

    def test_matching_values_are_valid(self):
        record = make_annotation_model()
        assert record.is_valid()
        assert record.validation_errors() == {}

    def test_mismatch_is_reported_per_field(self):
        record = make_annotation_model(confirmation_name="different")
        assert not record.is_valid()
        errors = record.validation_errors()
        assert list(errors) == ["confirmation_field2"]
        assert "confirmation_name" in errors["confirmation_field2"][0]

    def test_pair_can_be_updated_one_value_at_a_time(self):
        record = make_annotation_model()
        record.confirmation_field = "changed"
        assert not record.is_valid()
        record.confirmation_field_confirmation = "changed"
        assert record.is_valid()

    def test_missing_companion_field_is_rejected(self):
        with pytest.raises(ValueError, match="password_confirmation"):
            @active_record()
            class Account(ActiveRecordBase):
                password: str = record_field(confirmation=True)


class TestRecordDict:
    """to_record_dict() keeps persisted columns only."""

    def test_annotation_model(self):
        record = make_annotation_model(id=3)
        assert record.to_record_dict() == {
            "id": 3,
            "column_name": "c",
            "unique_field": "u",
            "confirmation_field": "secret",
            "confirmation_field2": "other",
        }

    def test_relationship_fields_are_left_out(self):
        @active_record()
        class Membership(ActiveRecordBase):
            user: Optional[models.User] = None
            note: str = ""

        record = Membership(user=models.User(name="alice"), note="hi")
        assert record.to_record_dict() == {"id": None, "note": "hi"}


class TestVersionable:
    """Optimistic-locking version counter and change history."""

    def make(self, **overrides) -> models.VersionModel:
        values = dict(id=5, string="a", boolean=True, int_value=1)
        values.update(overrides)
        return models.VersionModel(**values)

    def test_version_starts_at_zero(self):
        assert self.make().version == 0

    def test_bump_version(self):
        record = self.make()
        assert record.bump_version() == 1
        assert record.bump_version() == 2
        assert record.version == 2

    def test_check_version(self):
        record = self.make(version=3)
        record.check_version(3)
        with pytest.raises(StaleRecordError, match="expected version 2"):
            record.check_version(2)

    def test_stale_record_error_is_a_value_error(self):
        assert issubclass(StaleRecordError, ValueError)

    def test_changes_from_previous(self):
        before = self.make()
        after = self.make(string="b", option_string="x", version=1)

        history = after.changes_from(before)

        assert all(isinstance(v, Version) for v in history)
        assert [(v.field, v.old_value, v.new_value) for v in history] == [
            ("string", "a", "b"),
            ("option_string", None, "x"),
        ]
        assert {v.target_table for v in history} == {"version_models"}
        assert {v.target_id for v in history} == {5}

    def test_no_changes(self):
        assert self.make().changes_from(self.make()) == []
