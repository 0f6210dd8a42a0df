"""Type descriptors: static metadata about the class under test.

A ``TypeDescriptor`` lists the state-bearing members of a class (dataclass
fields, ``NamedTuple`` fields, annotated attributes and ``__slots__``), their
declared types with generic parameters resolved, and the modifiers the
checkers need: whether a member is final (cannot be reassigned after
construction) and whether the caller excluded it from equality.

Whether a member is actually *read* by ``__eq__`` cannot be known statically;
it is discovered by probing synthesized instances, after which the driver
replaces the descriptor with one carrying ``is_significant`` flags.
"""

from __future__ import annotations

import dataclasses
import enum
import inspect
import typing
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, ClassVar, Final, get_args, get_origin

from eqverify.core.errors import IntrospectionError, type_name
from eqverify.core.typeshape import (
    admits_none,
    is_protocol,
    origin_class,
    substitute,
    typevar_map,
)

# ancestors from these modules carry no user state
FRAMEWORK_MODULES = frozenset({"builtins", "typing", "abc", "collections.abc", "enum"})


class StorageKind(Enum):
    """How instances store their members."""

    OBJECT = auto()
    NAMEDTUPLE = auto()


@dataclass(frozen=True)
class Member:
    """One state-bearing member of a class."""

    name: str
    declared_type: Any = Any
    is_final: bool = False
    is_excluded: bool = False
    is_significant: bool = False
    owner: type | None = None

    @property
    def is_nullable(self) -> bool:
        return admits_none(self.declared_type)


@dataclass(frozen=True)
class TypeDescriptor:
    """Queryable metadata about a class, built once per verification run."""

    type_id: Any
    cls: type
    members: tuple[Member, ...] = ()
    supertype_chain: tuple[TypeDescriptor, ...] = ()
    storage: StorageKind = StorageKind.OBJECT
    is_open: bool = True
    is_hashable: bool = True
    defines_eq: bool = False
    is_abstract: bool = False
    _index: dict[str, Member] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index = {m.name: m for m in self.members}
        if len(index) != len(self.members):
            raise IntrospectionError(self.type_id, "duplicate member names")
        object.__setattr__(self, "_index", index)

    @property
    def name(self) -> str:
        return type_name(self.type_id)

    @property
    def member_names(self) -> tuple[str, ...]:
        return tuple(m.name for m in self.members)

    def member(self, name: str) -> Member:
        return self._index[name]

    def has_member(self, name: str) -> bool:
        return name in self._index

    @property
    def comparable_members(self) -> tuple[Member, ...]:
        """Members expected to take part in equality."""
        return tuple(m for m in self.members if not m.is_excluded)

    @property
    def excluded_members(self) -> tuple[Member, ...]:
        return tuple(m for m in self.members if m.is_excluded)

    @property
    def significant_members(self) -> tuple[Member, ...]:
        return tuple(m for m in self.members if m.is_significant)

    def with_significance(self, names: Iterable[str]) -> TypeDescriptor:
        """Copy of this descriptor with ``is_significant`` set from ``names``."""
        chosen = set(names)
        members = tuple(
            dataclasses.replace(m, is_significant=m.name in chosen) for m in self.members
        )
        return dataclasses.replace(self, members=members)


def is_namedtuple(cls: type) -> bool:
    return issubclass(cls, tuple) and hasattr(cls, "_fields")


def overrides_setattr(cls: type) -> bool:
    """True when assignment is intercepted somewhere below ``object``."""
    return cls.__setattr__ is not object.__setattr__


def _unwrap_final(hint: Any) -> tuple[Any, bool]:
    if hint is Final:
        return Any, True
    if get_origin(hint) is Final:
        return get_args(hint)[0], True
    return hint, False


def _is_classvar(hint: Any) -> bool:
    return hint is ClassVar or get_origin(hint) is ClassVar


def _slot_names(cls: type) -> list[str]:
    slots = cls.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        slots = (slots,)
    return [s for s in slots if s not in ("__dict__", "__weakref__")]


def _resolve_hints(type_id: Any, cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except Exception as e:
        raise IntrospectionError(type_id, f"unresolvable annotation ({e})") from e


def _collect_members(
    cls: type,
    hints: dict[str, Any],
    bindings: dict[Any, Any],
    excluded: frozenset[str],
) -> list[Member]:
    class_final = overrides_setattr(cls)
    members: list[Member] = []
    seen: set[str] = set()

    def add(name: str, hint: Any, owner: type, final: bool = False, compare: bool = True) -> None:
        if name in seen:
            return
        seen.add(name)
        declared, final_hint = _unwrap_final(hint)
        members.append(
            Member(
                name=name,
                declared_type=substitute(declared, bindings),
                is_final=class_final or final or final_hint,
                is_excluded=name in excluded or not compare,
                owner=owner,
            )
        )

    if is_namedtuple(cls):
        for name in cls._fields:
            add(name, hints.get(name, Any), cls, final=True)
        return members
    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            add(f.name, hints.get(f.name, Any), cls, compare=f.compare)
        return members
    for klass in reversed(cls.__mro__):
        if klass.__module__ in FRAMEWORK_MODULES:
            continue
        for name in inspect.get_annotations(klass):
            hint = hints.get(name, Any)
            if not _is_classvar(hint):
                add(name, hint, klass)
        for name in _slot_names(klass):
            add(name, hints.get(name, Any), klass)
    return members


def describe(
    type_id: Any,
    excluded: Iterable[str] = (),
    *,
    include_chain: bool = True,
    allow_empty: bool = False,
) -> TypeDescriptor:
    """Build the ``TypeDescriptor`` for a class or parameterised alias.
    Args:
        type_id: The class under test, or e.g. ``Box[int]``.
        excluded: Member names the caller declares irrelevant to equality.
        include_chain: Also describe user-defined ancestors.
        allow_empty: Accept a class with an ``__eq__`` but no discoverable
            members (ancestors such as mixins).
    Returns:
        The descriptor, with no member yet marked significant.
    Raises:
        IntrospectionError: If the type has no accessible member metadata, or
            defines ``__eq__`` over state that is never declared.
    """
    cls = origin_class(type_id)
    if not isinstance(cls, type):
        raise IntrospectionError(type_id, "not a class")
    if cls.__module__ in FRAMEWORK_MODULES:
        raise IntrospectionError(type_id, "built-in types expose no member metadata")
    if issubclass(cls, enum.Enum):
        raise IntrospectionError(type_id, "enum members are fixed singletons")
    excluded = frozenset(excluded)
    hints = _resolve_hints(type_id, cls)
    members = _collect_members(cls, hints, typevar_map(type_id), excluded)
    defines_eq = cls.__eq__ is not object.__eq__
    if defines_eq and not members and not allow_empty:
        raise IntrospectionError(
            type_id,
            "no declared members; annotate the attributes __eq__ reads "
            "or declare them in __slots__",
        )
    unknown = excluded - {m.name for m in members}
    if unknown and include_chain:
        raise IntrospectionError(
            type_id, f"excluded member(s) {', '.join(sorted(unknown))} do not exist"
        )
    chain: tuple[TypeDescriptor, ...] = ()
    if include_chain:
        chain = tuple(
            describe(base, excluded, include_chain=False, allow_empty=True)
            for base in cls.__mro__[1:]
            if base.__module__ not in FRAMEWORK_MODULES and base is not object
        )
    return TypeDescriptor(
        type_id=type_id,
        cls=cls,
        members=tuple(members),
        supertype_chain=chain,
        storage=StorageKind.NAMEDTUPLE if is_namedtuple(cls) else StorageKind.OBJECT,
        is_open=not getattr(cls, "__final__", False),
        is_hashable=cls.__hash__ is not None,
        defines_eq=defines_eq,
        is_abstract=inspect.isabstract(cls) or is_protocol(cls),
    )


__all__ = [
    "Member",
    "TypeDescriptor",
    "StorageKind",
    "describe",
    "is_namedtuple",
    "overrides_setattr",
]
