# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Association declarations for record models.

Associations are descriptors declared in the class body of a record:

    @active_record()
    class User(ActiveRecordBase):
        name: str
        group_id: Optional[int] = None

        group = belongs_to("Group")
        memberships = has_many("ProjectMembership")
        projects = has_many_through("Project", through=memberships)

Accessing an association on the class returns the declaration; accessing it
on an instance returns a ``Relation`` describing which rows belong to it.
Relations are descriptions only, loading them is up to the persistence layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from .constants import DDLConstants, ErrorMessages, ModelMetadataConstants
from .naming import foreign_key_for, singularize, table_name_of
from .type_registry import TypeNameNotFoundError, get_type_resolver

logger = logging.getLogger(__name__)

TargetSpec = Union[str, Type[Any]]


class AssociationKind(Enum):
    BELONGS_TO = "belongs_to"
    HAS_MANY = "has_many"
    HAS_MANY_THROUGH = "has_many_through"
    HAS_AND_BELONGS_TO_MANY = "has_and_belongs_to_many"


@dataclass(frozen=True)
class Relation:
    """
    The rows an association refers to for one owner instance.

    :class: Relation
    :synopsis: Immutable description of an association bound to an owner
    """
    kind: AssociationKind
    owner: Any
    target: Type[Any]
    foreign_key: Optional[str]
    key_value: Any
    conditions: Dict[str, Any] = field(default_factory=dict)
    through: Optional["Relation"] = None
    source: Optional["Association"] = None
    join_table: Optional[str] = None

    @property
    def is_collection(self) -> bool:
        return self.kind is not AssociationKind.BELONGS_TO

    @property
    def filters(self) -> Dict[str, Any]:
        """
        Equality filters on the target table.

        Only direct associations can be expressed this way. Relations that
        go through another association or a join table return an empty
        mapping; use ``through`` and ``join_table`` instead.
        """
        if self.kind is AssociationKind.BELONGS_TO:
            return {ModelMetadataConstants.PRIMARY_KEY_FIELD: self.key_value}
        if self.kind is AssociationKind.HAS_MANY:
            filters = {self.foreign_key: self.key_value}
            filters.update(self.conditions)
            return filters
        return {}


class Association:
    """Base descriptor for association declarations."""

    kind: AssociationKind

    def __init__(self, target: TargetSpec, *, foreign_key: Optional[str] = None):
        self._target_spec = target
        self._foreign_key = foreign_key
        self.owner: Optional[Type[Any]] = None
        self.name: Optional[str] = None

    def __set_name__(self, owner: Type[Any], name: str) -> None:
        self.owner = owner
        self.name = name

    def __get__(self, instance: Any, owner: Type[Any]) -> Any:
        if instance is None:
            return self
        return self.relation_for(instance)

    @property
    def target(self) -> Type[Any]:
        """
        The target record class, resolved through the type registry.

        Short names are looked up in the owner's enclosing classes and
        functions, then in its module, when they are not registered as given.

        Raises:
            TypeNameNotFoundError: If the target name is not registered
            ValueError: If the name resolves to a scalar type
        """
        spec = self._target_spec
        if isinstance(spec, type):
            return spec

        resolver = get_type_resolver()
        candidates = [spec]
        if "." not in spec and self.owner is not None:
            candidates.extend(_scoped_names(self.owner, spec))
        for candidate in candidates:
            resolved = resolver.get(candidate)
            if resolved is None:
                continue
            if not isinstance(resolved, type):
                raise ValueError(ErrorMessages.NOT_A_MODEL_TYPE.format(candidate, resolved))
            return resolved
        raise TypeNameNotFoundError(spec)

    @property
    def foreign_key(self) -> str:
        raise NotImplementedError

    def validate(self, owner: Type[Any]) -> None:
        """Check the declaration against its owner once the class is complete."""

    def relation_for(self, instance: Any) -> Relation:
        raise NotImplementedError

    def __repr__(self) -> str:
        owner = self.owner.__name__ if self.owner is not None else None
        return f"{type(self).__name__}(owner={owner}, name={self.name}, target={self._target_spec!r})"


def _scoped_names(owner: Type[Any], name: str) -> List[str]:
    """
    Names ``name`` may be registered under, innermost scope of ``owner`` first.

    ``app.models.Outer.User`` looks in ``app.models.Outer`` then ``app.models``.
    """
    scopes = owner.__qualname__.split(".")[:-1]
    names = []
    while scopes:
        names.append(f"{owner.__module__}.{'.'.join(scopes)}.{name}")
        scopes.pop()
    names.append(f"{owner.__module__}.{name}")
    return names


class BelongsTo(Association):
    """The owner holds a foreign key to one target row."""

    kind = AssociationKind.BELONGS_TO

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or foreign_key_for(self.target)

    def validate(self, owner: Type[Any]) -> None:
        # Only checkable up front when the key is explicit or the target is a class
        if self._foreign_key is None and not isinstance(self._target_spec, type):
            return
        if self.foreign_key not in owner.model_fields:
            raise ValueError(
                ErrorMessages.MISSING_FOREIGN_KEY_FIELD.format(self.name, owner.__name__, self.foreign_key)
            )

    def relation_for(self, instance: Any) -> Relation:
        key = self.foreign_key
        return Relation(
            kind=self.kind,
            owner=instance,
            target=self.target,
            foreign_key=key,
            key_value=getattr(instance, key),
        )


class HasMany(Association):
    """Target rows hold a foreign key to the owner."""

    kind = AssociationKind.HAS_MANY

    def __init__(
        self,
        target: TargetSpec,
        *,
        foreign_key: Optional[str] = None,
        conditions: Optional[Dict[str, Union[Any, Callable[[], Any]]]] = None,
    ):
        super().__init__(target, foreign_key=foreign_key)
        self.conditions = dict(conditions or {})

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or foreign_key_for(self.owner)

    def evaluated_conditions(self) -> Dict[str, Any]:
        """Conditions with callable values evaluated (for values only known at runtime)."""
        return {key: value() if callable(value) else value for key, value in self.conditions.items()}

    def relation_for(self, instance: Any) -> Relation:
        return Relation(
            kind=self.kind,
            owner=instance,
            target=self.target,
            foreign_key=self.foreign_key,
            key_value=getattr(instance, ModelMetadataConstants.PRIMARY_KEY_FIELD),
            conditions=self.evaluated_conditions(),
        )


class HasManyThrough(Association):
    """Target rows reached by way of another collection association of the owner."""

    kind = AssociationKind.HAS_MANY_THROUGH

    def __init__(
        self,
        target: TargetSpec,
        *,
        through: Union[str, Association],
        source: Optional[str] = None,
    ):
        super().__init__(target)
        self._through = through
        self._source = source

    @property
    def through(self) -> Association:
        if isinstance(self._through, Association):
            return self._through
        found = self.owner.__dict__.get(self._through) if self.owner is not None else None
        if not isinstance(found, Association):
            owner = self.owner.__name__ if self.owner is not None else None
            raise ValueError(ErrorMessages.UNKNOWN_THROUGH_ASSOCIATION.format(self.name, owner, self._through))
        return found

    @property
    def foreign_key(self) -> str:
        return self.source.foreign_key

    @property
    def source(self) -> Association:
        """
        The association on the intermediate model that leads to the target.

        Named by ``source=`` or, failing that, the only association on the
        intermediate model whose target is this association's target.

        Raises:
            ValueError: If no association or more than one qualifies
        """
        intermediate = self.through.target
        candidates = associations_of(intermediate)
        owner = self.owner.__name__ if self.owner is not None else None

        if self._source is not None:
            found = candidates.get(self._source)
            if found is None:
                raise ValueError(ErrorMessages.UNKNOWN_THROUGH_SOURCE.format(
                    self.name, owner, self._source, intermediate.__name__
                ))
            return found

        target = self.target
        matches: Dict[str, Association] = {}
        for name, candidate in candidates.items():
            try:
                candidate_target = candidate.target
            except TypeNameNotFoundError as e:
                logger.debug(f"{intermediate.__name__}.{name} skipped as source of {owner}.{self.name}: {e}")
                continue
            if candidate_target is target:
                matches[name] = candidate

        if not matches:
            raise ValueError(ErrorMessages.UNKNOWN_THROUGH_SOURCE.format(
                self.name, owner, target.__name__, intermediate.__name__
            ))
        if len(matches) > 1:
            raise ValueError(ErrorMessages.AMBIGUOUS_THROUGH_SOURCE.format(
                self.name, owner, intermediate.__name__, ", ".join(matches)
            ))
        return next(iter(matches.values()))

    def validate(self, owner: Type[Any]) -> None:
        through = self._through
        if isinstance(through, str) and not isinstance(owner.__dict__.get(through), Association):
            raise ValueError(ErrorMessages.UNKNOWN_THROUGH_ASSOCIATION.format(self.name, owner.__name__, through))

    def relation_for(self, instance: Any) -> Relation:
        through = self.through.relation_for(instance)
        source = self.source
        return Relation(
            kind=self.kind,
            owner=instance,
            target=self.target,
            foreign_key=source.foreign_key,
            key_value=through.key_value,
            conditions=through.conditions,
            through=through,
            source=source,
        )


class HasAndBelongsToMany(Association):
    """Owner and target rows linked by a join table."""

    kind = AssociationKind.HAS_AND_BELONGS_TO_MANY

    def __init__(
        self,
        target: TargetSpec,
        *,
        join_table: Optional[str] = None,
        foreign_key: Optional[str] = None,
        association_foreign_key: Optional[str] = None,
    ):
        super().__init__(target, foreign_key=foreign_key)
        self._join_table = join_table
        self._association_foreign_key = association_foreign_key

    @property
    def join_table(self) -> str:
        if self._join_table:
            return self._join_table
        names = sorted([table_name_of(self.owner), table_name_of(self.target)])
        return DDLConstants.JOIN_TABLE_SEPARATOR.join(names)

    @property
    def foreign_key(self) -> str:
        return self._foreign_key or foreign_key_for(self.owner)

    @property
    def association_foreign_key(self) -> str:
        """
        Join table column pointing at the target.

        A model joined to itself names this column after the association
        (``friends`` -> ``friend_id``) so it differs from ``foreign_key``.
        """
        if self._association_foreign_key:
            return self._association_foreign_key
        target = self.target
        if target is self.owner and self.name:
            return f"{singularize(self.name)}{ModelMetadataConstants.FOREIGN_KEY_SUFFIX}"
        return foreign_key_for(target)

    def validate(self, owner: Type[Any]) -> None:
        if self._association_foreign_key is None and not isinstance(self._target_spec, type):
            return
        self.check_join_keys()

    def check_join_keys(self) -> None:
        """
        Raises:
            ValueError: If both join table keys have the same name
        """
        if self.foreign_key == self.association_foreign_key:
            owner = self.owner.__name__ if self.owner is not None else None
            raise ValueError(ErrorMessages.DUPLICATE_JOIN_KEY.format(self.name, owner, self.foreign_key))

    def relation_for(self, instance: Any) -> Relation:
        return Relation(
            kind=self.kind,
            owner=instance,
            target=self.target,
            foreign_key=self.foreign_key,
            key_value=getattr(instance, ModelMetadataConstants.PRIMARY_KEY_FIELD),
            join_table=self.join_table,
        )


def belongs_to(target: TargetSpec, foreign_key: Optional[str] = None) -> BelongsTo:
    return BelongsTo(target, foreign_key=foreign_key)


def has_many(
    target: TargetSpec,
    foreign_key: Optional[str] = None,
    conditions: Optional[Dict[str, Any]] = None,
) -> HasMany:
    return HasMany(target, foreign_key=foreign_key, conditions=conditions)


def has_many_through(
    target: TargetSpec,
    through: Union[str, Association],
    source: Optional[str] = None,
) -> HasManyThrough:
    return HasManyThrough(target, through=through, source=source)


def has_and_belongs_to_many(
    target: TargetSpec,
    join_table: Optional[str] = None,
    foreign_key: Optional[str] = None,
    association_foreign_key: Optional[str] = None,
) -> HasAndBelongsToMany:
    return HasAndBelongsToMany(
        target,
        join_table=join_table,
        foreign_key=foreign_key,
        association_foreign_key=association_foreign_key,
    )


def associations_of(cls: Type[Any]) -> Dict[str, Association]:
    """Associations declared on ``cls`` and its bases, in declaration order."""
    found: Dict[str, Association] = {}
    for klass in reversed(cls.__mro__):
        for attr_name, value in vars(klass).items():
            if isinstance(value, Association):
                found[attr_name] = value
    return found


def join_tables_of(cls: Type[Any]) -> Tuple[HasAndBelongsToMany, ...]:
    return tuple(a for a in associations_of(cls).values() if isinstance(a, HasAndBelongsToMany))
