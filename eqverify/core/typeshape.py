"""Structural classification of annotations.

The value generator picks a strategy from the *shape* of a declared member
type: a scalar, an enumeration, a container, a record-like class and so on.
This module turns arbitrary annotations (classes, ``typing`` constructs,
PEP 585 aliases, ``X | Y`` unions) into a ``Shape`` plus the pieces each
strategy needs, and resolves generic type parameters.
"""

from __future__ import annotations

import collections
import collections.abc as abc
import datetime
import decimal
import enum
import fractions
import inspect
import pathlib
import types
import typing
import uuid
from enum import Enum, auto
from typing import Annotated, Any, Literal, TypeVar, Union, get_args, get_origin

NoneType = type(None)


class Shape(Enum):
    """Categories of member types understood by the value generator."""

    ANY = auto()
    NONE = auto()
    SCALAR = auto()
    ENUM = auto()
    LITERAL = auto()
    UNION = auto()
    ANNOTATED = auto()
    SEQUENCE = auto()
    FIXED_TUPLE = auto()
    SET = auto()
    MAPPING = auto()
    TYPE = auto()
    CALLABLE = auto()
    NEWTYPE = auto()
    TYPEVAR = auto()
    ABSTRACT = auto()
    COMPOSITE = auto()
    OPAQUE = auto()


SCALAR_PAIRS: dict[type, tuple[Any, Any]] = {
    bool: (False, True),
    int: (1, 2),
    float: (0.5, 1.0),
    complex: (1j, 2j),
    str: ("one", "two"),
    bytes: (b"one", b"two"),
    decimal.Decimal: (decimal.Decimal("1"), decimal.Decimal("2")),
    fractions.Fraction: (fractions.Fraction(1, 2), fractions.Fraction(1, 3)),
    datetime.date: (datetime.date(2000, 1, 1), datetime.date(2000, 1, 2)),
    datetime.datetime: (
        datetime.datetime(2000, 1, 1, 0, 0),
        datetime.datetime(2000, 1, 2, 0, 0),
    ),
    datetime.time: (datetime.time(0, 0), datetime.time(1, 0)),
    datetime.timedelta: (datetime.timedelta(days=1), datetime.timedelta(days=2)),
    uuid.UUID: (uuid.UUID(int=1), uuid.UUID(int=2)),
    pathlib.PurePath: (pathlib.PurePath("one"), pathlib.PurePath("two")),
    pathlib.Path: (pathlib.Path("one"), pathlib.Path("two")),
    bytearray: (bytearray(b"one"), bytearray(b"two")),
}

SEQUENCE_FACTORIES: dict[Any, type] = {
    list: list,
    tuple: tuple,
    collections.deque: collections.deque,
    abc.Sequence: list,
    abc.MutableSequence: list,
    abc.Collection: list,
    abc.Iterable: list,
    abc.Reversible: list,
}

SET_FACTORIES: dict[Any, type] = {
    set: set,
    frozenset: frozenset,
    abc.Set: frozenset,
    abc.MutableSet: set,
}

MAPPING_FACTORIES: dict[Any, type] = {
    dict: dict,
    collections.OrderedDict: collections.OrderedDict,
    abc.Mapping: dict,
    abc.MutableMapping: dict,
}


def type_key(tp: Any) -> Any:
    """Cache key for an annotation; unhashable ones are keyed by ``repr``."""
    try:
        hash(tp)
    except TypeError:
        return ("unhashable", repr(tp))
    return tp


def is_protocol(cls: type) -> bool:
    return bool(getattr(cls, "_is_protocol", False))


def is_abstract_class(cls: type) -> bool:
    """Abstract base classes, protocols and ``collections.abc`` interfaces."""
    return inspect.isabstract(cls) or is_protocol(cls) or cls.__module__ == "collections.abc"


def classify(tp: Any) -> Shape:
    """Return the ``Shape`` of an annotation."""
    if tp is Any or tp is object:
        return Shape.ANY
    if tp is None or tp is NoneType:
        return Shape.NONE
    if isinstance(tp, TypeVar):
        return Shape.TYPEVAR
    if hasattr(tp, "__supertype__"):
        return Shape.NEWTYPE
    origin = get_origin(tp)
    if origin is not None:
        return _classify_alias(tp, origin)
    if not isinstance(tp, type):
        return Shape.OPAQUE
    if tp in SCALAR_PAIRS:
        return Shape.SCALAR
    if issubclass(tp, enum.Enum):
        return Shape.ENUM
    if tp in SEQUENCE_FACTORIES:
        return Shape.SEQUENCE
    if tp in SET_FACTORIES:
        return Shape.SET
    if tp in MAPPING_FACTORIES:
        return Shape.MAPPING
    if tp is type:
        return Shape.TYPE
    if tp is abc.Callable:
        return Shape.CALLABLE
    if is_abstract_class(tp):
        return Shape.ABSTRACT
    if tp.__module__ == "builtins":
        return Shape.OPAQUE
    return Shape.COMPOSITE


def _classify_alias(tp: Any, origin: Any) -> Shape:
    if origin is Annotated:
        return Shape.ANNOTATED
    if origin is Literal:
        return Shape.LITERAL
    if origin is Union or origin is types.UnionType:
        return Shape.UNION
    if origin is tuple:
        args = get_args(tp)
        if len(args) == 2 and args[1] is Ellipsis:
            return Shape.SEQUENCE
        return Shape.FIXED_TUPLE
    if origin in SEQUENCE_FACTORIES:
        return Shape.SEQUENCE
    if origin in SET_FACTORIES:
        return Shape.SET
    if origin in MAPPING_FACTORIES:
        return Shape.MAPPING
    if origin is type:
        return Shape.TYPE
    if origin is abc.Callable:
        return Shape.CALLABLE
    if isinstance(origin, type):
        if is_abstract_class(origin):
            return Shape.ABSTRACT
        return Shape.COMPOSITE
    return Shape.OPAQUE


def origin_class(tp: Any) -> Any:
    """The runtime class behind an annotation (``Box[int]`` -> ``Box``)."""
    origin = get_origin(tp)
    return origin if origin is not None else tp


def element_types(tp: Any) -> tuple[Any, ...]:
    """Type arguments of a container annotation, defaulting to ``object``."""
    args = get_args(tp)
    if origin_class(tp) is tuple and len(args) == 2 and args[1] is Ellipsis:
        return (args[0],)
    return args


def container_factory(tp: Any) -> type:
    origin = origin_class(tp)
    for table in (SEQUENCE_FACTORIES, SET_FACTORIES, MAPPING_FACTORIES):
        if origin in table:
            return table[origin]
    raise KeyError(origin)


def admits_none(tp: Any) -> bool:
    """True when ``None`` is a legal value for the annotation."""
    if tp is Any or tp is object or tp is None or tp is NoneType:
        return True
    shape = classify(tp)
    if shape is Shape.ANNOTATED:
        return admits_none(get_args(tp)[0])
    if shape is Shape.UNION:
        return NoneType in get_args(tp)
    return False


def substitute(tp: Any, mapping: dict[Any, Any]) -> Any:
    """Replace type variables in ``tp`` according to ``mapping``."""
    if not mapping:
        return tp
    if isinstance(tp, TypeVar):
        return mapping.get(tp, tp)
    args = get_args(tp)
    if not args:
        return tp
    origin = get_origin(tp)
    if origin is Annotated:
        base = substitute(args[0], mapping)
        if base is args[0]:
            return tp
        return Annotated[(base, *tp.__metadata__)]
    if origin is Literal:
        return tp
    new_args = tuple(substitute(a, mapping) for a in args)
    if all(n is a for n, a in zip(new_args, args)):
        return tp
    if origin is Union or origin is types.UnionType:
        return Union[new_args]
    if isinstance(tp, types.GenericAlias):
        return types.GenericAlias(origin, new_args)
    if hasattr(tp, "copy_with"):
        return tp.copy_with(new_args)
    return tp


def typevar_map(tp: Any) -> dict[Any, Any]:
    """Bindings of type variables for a (possibly parameterised) class.

    ``Box[int]`` binds ``Box``'s own parameters; bindings made by generic base
    classes (``class IntBox(Box[int])``) are collected through
    ``__orig_bases__``.
    """
    mapping: dict[Any, Any] = {}
    cls = origin_class(tp)
    if cls is not tp:
        params = getattr(cls, "__parameters__", ())
        mapping.update(zip(params, get_args(tp)))
    _collect_base_bindings(cls, mapping, set())
    return mapping


def _collect_base_bindings(cls: Any, mapping: dict[Any, Any], seen: set[int]) -> None:
    if id(cls) in seen:
        return
    seen.add(id(cls))
    for base in getattr(cls, "__orig_bases__", ()):
        base_origin = get_origin(base)
        if base_origin is None or base_origin is typing.Generic:
            continue
        params = getattr(base_origin, "__parameters__", ())
        for param, arg in zip(params, get_args(base)):
            mapping.setdefault(param, substitute(arg, mapping))
        _collect_base_bindings(base_origin, mapping, seen)


__all__ = [
    "Shape",
    "SCALAR_PAIRS",
    "classify",
    "type_key",
    "origin_class",
    "element_types",
    "container_factory",
    "admits_none",
    "substitute",
    "typevar_map",
    "is_abstract_class",
]
