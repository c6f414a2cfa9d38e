# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for association declarations and relation handles.
"""

from __future__ import annotations

import pytest

from recordalchemy import (
    ActiveRecordBase,
    ActiveRecordTables,
    AssociationKind,
    JoinTable,
    Relation,
    TypeNameNotFoundError,
    active_record,
    belongs_to,
    has_and_belongs_to_many,
    has_many,
    has_many_through,
    table,
)
from recordalchemy.associations import BelongsTo, HasAndBelongsToMany, HasMany, HasManyThrough

from . import models


class TestDeclarations:
    """Class access returns the declaration."""

    def test_descriptor_types(self):
        assert isinstance(models.User.group, BelongsTo)
        assert isinstance(models.User.memberships, HasMany)
        assert isinstance(models.User.projects, HasManyThrough)
        assert isinstance(models.Foo.bars, HasAndBelongsToMany)

    def test_descriptors_know_owner_and_name(self):
        assert models.User.group.owner is models.User
        assert models.User.group.name == "group"

    def test_associations_are_not_fields(self):
        assert "group" not in models.User.model_fields
        assert set(models.User.associations()) == {"group", "memberships", "projects"}

    def test_short_target_names_resolve_in_owner_module(self):
        assert models.User.group.target is models.Group
        assert models.Group.users.target is models.User

    def test_short_target_names_resolve_in_enclosing_scopes(self):
        @active_record()
        class Author(ActiveRecordBase):
            name: str = ""
            books = has_many("Book")

        @active_record()
        class Book(ActiveRecordBase):
            author_id: int = 0
            author = belongs_to("Author")

        assert Author.books.target is Book
        assert Book.author.target is Author
        assert Author(id=2).books.filters == {"author_id": 2}

    def test_inferred_foreign_keys(self):
        assert models.User.group.foreign_key == "group_id"
        assert models.Group.users.foreign_key == "group_id"
        assert models.Project.memberships.foreign_key == "project_id"
        assert models.ProjectMembership.role.foreign_key == "role_id"


class TestBelongsTo:

    def test_relation(self):
        user = models.User(id=1, name="alice", group_id=3)
        relation = user.group

        assert isinstance(relation, Relation)
        assert relation.kind is AssociationKind.BELONGS_TO
        assert relation.owner is user
        assert relation.target is models.Group
        assert relation.key_value == 3
        assert relation.filters == {"id": 3}
        assert not relation.is_collection

    def test_missing_foreign_key_field_is_rejected(self):
        with pytest.raises(ValueError, match="group_id"):
            @active_record()
            class Badge(ActiveRecordBase):
                group = belongs_to(models.Group)

    def test_explicit_foreign_key(self):
        @active_record()
        class Badge(ActiveRecordBase):
            team_id: int = 0
            team = belongs_to(models.Group, foreign_key="team_id")

        assert Badge(team_id=9).team.filters == {"id": 9}

    def test_unknown_target(self):
        @active_record()
        class Badge(ActiveRecordBase):
            missing_id: int = 0
            missing = belongs_to("Missing", foreign_key="missing_id")

        with pytest.raises(TypeNameNotFoundError):
            Badge().missing

    def test_scalar_target_is_rejected(self):
        @active_record()
        class Badge(ActiveRecordBase):
            count_id: int = 0
            count = belongs_to("int", foreign_key="count_id")

        with pytest.raises(ValueError, match="not a model"):
            Badge().count


class TestHasMany:

    def test_relation(self):
        relation = models.Group(id=2, name="admins").users

        assert relation.kind is AssociationKind.HAS_MANY
        assert relation.target is models.User
        assert relation.foreign_key == "group_id"
        assert relation.filters == {"group_id": 2}
        assert relation.is_collection

    def test_conditions_are_evaluated_per_access(self, monkeypatch):
        project = models.Project(id=4, name="p")
        assert project.manager_memberships.filters == {"project_id": 4, "role_id": 1}

        monkeypatch.setitem(models.ROLE_IDS, "manager", 10)
        assert project.manager_memberships.filters == {"project_id": 4, "role_id": 10}


class TestHasManyThrough:

    def test_user_projects(self):
        user = models.User(id=1, name="alice")
        relation = user.projects

        assert relation.kind is AssociationKind.HAS_MANY_THROUGH
        assert relation.target is models.Project
        assert relation.through.kind is AssociationKind.HAS_MANY
        assert relation.through.target is models.ProjectMembership
        assert relation.through.filters == {"user_id": 1}
        assert relation.source is models.ProjectMembership.project
        assert relation.foreign_key == "project_id"
        assert relation.filters == {}

    def test_conditions_follow_the_through_association(self):
        project = models.Project(id=4, name="p")
        managers = project.managers
        developers = project.developers

        assert managers.target is models.User
        assert managers.source is models.ProjectMembership.user
        assert managers.conditions == {"role_id": 1}
        assert developers.conditions == {"role_id": 2}

    def test_nested_through(self):
        relation = models.Project(id=4, name="p").groups

        assert relation.target is models.Group
        assert relation.through.kind is AssociationKind.HAS_MANY_THROUGH
        assert relation.through.target is models.User
        assert relation.through.through.target is models.ProjectMembership
        assert relation.source is models.User.group
        assert relation.foreign_key == "group_id"

    def test_unknown_through_name_is_rejected(self):
        with pytest.raises(ValueError, match="nothing"):
            @active_record()
            class Team(ActiveRecordBase):
                users = has_many_through(models.User, through="nothing")

    def test_through_by_name(self):
        @active_record()
        class Team(ActiveRecordBase):
            memberships = has_many(models.ProjectMembership, foreign_key="user_id")
            projects = has_many_through(models.Project, through="memberships")

        relation = Team(id=3).projects
        assert relation.through.filters == {"user_id": 3}
        assert relation.source is models.ProjectMembership.project

    def test_explicit_source(self):
        @active_record()
        class Approval(ActiveRecordBase):
            user_id: int = 0
            approver_id: int = 0
            document_id: int = 0
            user = belongs_to(models.User)
            approver = belongs_to(models.User, foreign_key="approver_id")
            document = belongs_to("Document")

        @active_record()
        class Document(ActiveRecordBase):
            approvals = has_many("Approval")
            approvers = has_many_through(models.User, through=approvals, source="approver")
            users = has_many_through(models.User, through=approvals)
            reviewers = has_many_through(models.User, through=approvals, source="reviewer")

        assert Document.approvers.source is Approval.approver
        assert Document(id=1).approvers.foreign_key == "approver_id"
        assert Document(id=1).approvers.through.filters == {"document_id": 1}

        with pytest.raises(ValueError, match="several candidate sources"):
            Document.users.source
        with pytest.raises(ValueError, match="reviewer"):
            Document.reviewers.source

    def test_unresolvable_associations_on_intermediate_are_skipped(self):
        @active_record()
        class Ticket(ActiveRecordBase):
            user_id: int = 0
            board_id: int = 0
            user = belongs_to(models.User)
            board = belongs_to("Board", foreign_key="board_id")

        @active_record()
        class Queue(ActiveRecordBase):
            tickets = has_many(Ticket, foreign_key="queue_id")
            users = has_many_through(models.User, through=tickets)

        assert Queue.users.source is Ticket.user
        with pytest.raises(TypeNameNotFoundError):
            Ticket.board.target


class TestHasAndBelongsToMany:

    def test_join_table_is_shared_by_both_sides(self):
        assert models.Foo.bars.join_table == "bars_foos"
        assert models.Bar.foos.join_table == "bars_foos"

    def test_relation(self):
        relation = models.Foo(id=6, name="f").bars

        assert relation.kind is AssociationKind.HAS_AND_BELONGS_TO_MANY
        assert relation.target is models.Bar
        assert relation.join_table == "bars_foos"
        assert relation.foreign_key == "foo_id"
        assert relation.key_value == 6
        assert models.Foo.bars.association_foreign_key == "bar_id"

    def test_self_join_names_target_key_after_association(self):
        @active_record()
        class Person(ActiveRecordBase):
            name: str = ""
            friends = has_and_belongs_to_many("Person")

        assert Person.friends.target is Person
        assert Person.friends.join_table == "persons_persons"
        assert Person.friends.foreign_key == "person_id"
        assert Person.friends.association_foreign_key == "friend_id"

        class PeopleTables(ActiveRecordTables):
            people = table(Person)

        assert PeopleTables.join_tables() == [JoinTable("persons_persons", "person_id", "friend_id")]
        assert PeopleTables.create_ddl().count("person_id INT64 NOT NULL") == 1

    def test_explicit_join_keys(self):
        @active_record()
        class Account(ActiveRecordBase):
            follows = has_and_belongs_to_many(
                "Account",
                join_table="follows",
                foreign_key="follower_id",
                association_foreign_key="followed_id",
            )

        class AccountTables(ActiveRecordTables):
            accounts = table(Account)

        assert AccountTables.join_tables() == [JoinTable("follows", "follower_id", "followed_id")]

    def test_duplicate_join_keys_are_rejected(self):
        with pytest.raises(ValueError, match="both join table keys"):
            @active_record()
            class Tag(ActiveRecordBase):
                foos = has_and_belongs_to_many(models.Foo, foreign_key="foo_id")

    def test_self_join_named_after_the_model_is_rejected(self):
        @active_record()
        class Person(ActiveRecordBase):
            persons = has_and_belongs_to_many("Person")

        class PeopleTables(ActiveRecordTables):
            people = table(Person)

        with pytest.raises(ValueError, match="person_id"):
            PeopleTables.join_tables()
