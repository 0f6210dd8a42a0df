"""Red/black value generation.

``ValueGenerator.generate`` returns a ``Pair`` of two non-equal values for
any member type, choosing a strategy from the type's ``Shape``:

- scalars use fixed canonical literals
- ``Annotated`` scalars with bounds are solved with z3
- enums and ``Literal`` use their first two variants
- containers use an empty container and a one-element container
- record-like classes are synthesized with all-red and all-black members
- abstract types, ``Any`` and callables get identity-equal tokens

A record whose only difference between colours is its recursive edge gets a
black value that holds the red one, e.g. ``children=(red,)``.

Generation is guarded against recursion. A type requested again while it is
still being generated is a cycle: through ``Optional`` or a container the
cycle is broken with a placeholder (``None`` / empty for both colours) that
is never cached, anywhere else it is fatal.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, get_args

from eqverify.core.cache import Pair, ValueCache
from eqverify.core.descriptor import TypeDescriptor, describe
from eqverify.core.errors import (
    InsufficientVariantsError,
    SynthesisError,
    UnresolvableCycleError,
    ValueGenerationError,
    type_name,
)
from eqverify.core.solver import ConstraintSolver, collect_bounds
from eqverify.core.synthesizer import InstanceSynthesizer, concrete_subclass, minimal_subclass
from eqverify.core.typeshape import (
    SCALAR_PAIRS,
    NoneType,
    Shape,
    classify,
    container_factory,
    element_types,
    origin_class,
    type_key,
)
from eqverify.logging import get_logger


# re-entering these is fine: they stub out their in-progress element instead
BREAKABLE_SHAPES = frozenset({Shape.UNION, Shape.SEQUENCE, Shape.SET, Shape.MAPPING})


class Token:
    """Opaque sample value whose equality is identity."""

    __slots__ = ("label",)

    def __init__(self, label: str):
        self.label = label

    def __repr__(self) -> str:
        return f"<{self.label}>"


class CallableToken(Token):
    """Opaque sample callable."""

    __slots__ = ()

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        return None


def _distinct(values: list[Any]) -> list[Any]:
    out: list[Any] = []
    for value in values:
        if not any(value is seen or value == seen for seen in out):
            out.append(value)
    return out


def _differs(red: Any, black: Any) -> bool:
    try:
        return not bool(red == black)
    except Exception:
        return True


def _nest(tp: Any, own: Any, red: Any) -> Any:
    """A value of annotation ``tp`` that holds ``red``, or None."""
    shape = classify(tp)
    if shape is Shape.UNION:
        arms = get_args(tp)
        if any(type_key(arm) == own for arm in arms):
            return red
        for arm in arms:
            value = _nest(arm, own, red)
            if value is not None:
                return value
    elif shape in (Shape.SEQUENCE, Shape.SET):
        try:
            return container_factory(tp)([red])
        except Exception:
            return None
    return None


def identity_implementation(cls: type) -> type:
    """Concrete subclass of an interface with identity equality."""
    name = cls.__qualname__
    impl = concrete_subclass(cls)
    impl.__eq__ = object.__eq__
    impl.__ne__ = object.__ne__
    impl.__hash__ = object.__hash__
    impl.__repr__ = lambda self: f"<{self.__dict__.get('_eqverify_label', '?')} {name}>"
    return impl


class ValueGenerator:
    """Produces red/black pairs for member types, backed by a ``ValueCache``."""

    def __init__(self, cache: ValueCache | None = None, solver: ConstraintSolver | None = None):
        self.cache = cache if cache is not None else ValueCache()
        self.solver = solver or ConstraintSolver()
        self.synthesizer = InstanceSynthesizer(self)
        self._logger = get_logger()
        self._strategies: dict[Shape, Callable[[Any], Pair]] = {
            Shape.ANY: self._token_pair,
            Shape.NONE: self._none_pair,
            Shape.SCALAR: self._scalar_pair,
            Shape.ENUM: self._enum_pair,
            Shape.LITERAL: self._literal_pair,
            Shape.UNION: self._union_pair,
            Shape.ANNOTATED: self._annotated_pair,
            Shape.SEQUENCE: self._container_pair,
            Shape.SET: self._container_pair,
            Shape.MAPPING: self._mapping_pair,
            Shape.FIXED_TUPLE: self._fixed_tuple_pair,
            Shape.TYPE: self._type_pair,
            Shape.CALLABLE: self._callable_pair,
            Shape.NEWTYPE: self._newtype_pair,
            Shape.TYPEVAR: self._typevar_pair,
            Shape.ABSTRACT: self._abstract_pair,
            Shape.COMPOSITE: self._composite_pair,
            Shape.OPAQUE: self._opaque_pair,
        }

    def generate(self, tp: Any) -> Pair:
        """Return the red/black pair for ``tp``, generating it on first use.
        Raises:
            InsufficientVariantsError: Fewer than two values exist.
            UnresolvableCycleError: ``tp`` refers to itself unbreakably.
            SynthesisError: A composite or constrained value cannot be built.
        """
        pair = self.cache.lookup(tp)
        if pair is not None:
            return pair
        shape = classify(tp)
        if self.cache.is_generating(tp) and shape not in BREAKABLE_SHAPES:
            raise UnresolvableCycleError(tp)
        with self.cache.generating(tp):
            pair = self._strategies[shape](tp)
        pair = pair.settle(type_key(tp))
        if pair.placeholder:
            self._logger.trace(f"Placeholder pair for {type_name(tp)}", category="values")
        return self.cache.store(tp, pair)

    def _breaks_cycle(self, tp: Any) -> bool:
        """True when ``tp`` is mid-generation and nothing is cached for it yet."""
        return self.cache.is_generating(tp) and tp not in self.cache

    def _placeholder(self, tp: Any, empty: Any) -> Pair:
        self._logger.debug(f"Breaking cycle at {type_name(tp)}", category="values")
        return Pair(empty, empty, frozenset({type_key(tp)}))

    def _token_pair(self, tp: Any) -> Pair:
        return Pair(Token("red object"), Token("black object"))

    def _none_pair(self, tp: Any) -> Pair:
        raise InsufficientVariantsError(NoneType, 1)

    def _scalar_pair(self, tp: Any) -> Pair:
        red, black = SCALAR_PAIRS[tp]
        return Pair(red, black)

    def _enum_pair(self, tp: Any) -> Pair:
        variants = _distinct(list(tp))
        if len(variants) < 2:
            raise InsufficientVariantsError(tp, len(variants))
        return Pair(variants[0], variants[1])

    def _literal_pair(self, tp: Any) -> Pair:
        variants = _distinct(list(get_args(tp)))
        if len(variants) < 2:
            raise InsufficientVariantsError(tp, len(variants))
        return Pair(variants[0], variants[1])

    def _union_pair(self, tp: Any) -> Pair:
        args = get_args(tp)
        arms = [a for a in args if a is not NoneType]
        for arm in arms:
            if not self._breaks_cycle(arm):
                return self.generate(arm)
        if NoneType in args:
            return self._placeholder(arms[0], None)
        raise UnresolvableCycleError(arms[0])

    def _annotated_pair(self, tp: Any) -> Pair:
        base, *metadata = get_args(tp)
        bounds = collect_bounds(tuple(metadata))
        if bounds.is_empty():
            return self.generate(base)
        anchor = self.generate(base).red
        result = self.solver.solve(origin_class(base), bounds, anchor)
        if not result.found:
            raise SynthesisError(f"{type_name(tp)}: {result.reason}", tp)
        return Pair(result.red, result.black)

    def _container_pair(self, tp: Any) -> Pair:
        factory = container_factory(tp)
        args = element_types(tp)
        element_type = args[0] if args else object
        if self._breaks_cycle(element_type):
            return self._placeholder(element_type, factory())
        element = self.generate(element_type)
        try:
            black = factory([element.red])
        except Exception as e:
            raise SynthesisError(f"Cannot build {type_name(tp)}: {e}", tp) from e
        return Pair(factory(), black, element.pending)

    def _mapping_pair(self, tp: Any) -> Pair:
        factory = container_factory(tp)
        args = get_args(tp)
        key_type, value_type = args if len(args) == 2 else (object, object)
        for part in (key_type, value_type):
            if self._breaks_cycle(part):
                return self._placeholder(part, factory())
        key = self.generate(key_type)
        value = self.generate(value_type)
        try:
            black = factory({key.red: value.red})
        except Exception as e:
            raise SynthesisError(f"Cannot build {type_name(tp)}: {e}", tp) from e
        return Pair(factory(), black, key.pending | value.pending)

    def _fixed_tuple_pair(self, tp: Any) -> Pair:
        args = get_args(tp)
        if not args or args == ((),):
            raise InsufficientVariantsError(tp, 1)
        pairs = [self.generate(a) for a in args]
        return Pair(
            tuple(p.red for p in pairs),
            tuple(p.black for p in pairs),
            frozenset().union(*(p.pending for p in pairs)),
        )

    def _type_pair(self, tp: Any) -> Pair:
        args = get_args(tp)
        base = origin_class(args[0]) if args else object
        if not isinstance(base, type):
            base = object
        try:
            return Pair(base, minimal_subclass(base))
        except Exception as e:
            raise SynthesisError(f"Cannot subclass {type_name(base)}: {e}", tp) from e

    def _callable_pair(self, tp: Any) -> Pair:
        return Pair(CallableToken("red callable"), CallableToken("black callable"))

    def _newtype_pair(self, tp: Any) -> Pair:
        return self.generate(tp.__supertype__)

    def _typevar_pair(self, tp: Any) -> Pair:
        if tp.__bound__ is not None:
            return self.generate(tp.__bound__)
        if tp.__constraints__:
            return self.generate(tp.__constraints__[0])
        return self._token_pair(tp)

    def _abstract_pair(self, tp: Any) -> Pair:
        try:
            impl = identity_implementation(origin_class(tp))
            red, black = object.__new__(impl), object.__new__(impl)
            object.__setattr__(red, "_eqverify_label", "red")
            object.__setattr__(black, "_eqverify_label", "black")
        except Exception as e:
            raise SynthesisError(f"No implementation of {type_name(tp)}: {e}", tp) from e
        return Pair(red, black)

    def _composite_pair(self, tp: Any) -> Pair:
        descriptor = describe(tp, include_chain=False)
        synth = self.synthesizer
        pairs = {m.name: synth.member_pair(m) for m in descriptor.members}
        red = synth.synthesize(descriptor, {name: p.red for name, p in pairs.items()}).value
        black = synth.synthesize(descriptor, {name: p.black for name, p in pairs.items()}).value
        pending = frozenset().union(*(p.pending for p in pairs.values()))
        if type_key(tp) in pending and not _differs(red, black):
            black = self._nest_red(tp, descriptor, pairs, red)
        elif not pending and not _differs(red, black):
            self._logger.warning(
                f"Sample values for {type_name(tp)} compare equal", category="values"
            )
        return Pair(red, black, pending)

    def _nest_red(
        self, tp: Any, descriptor: TypeDescriptor, pairs: dict[str, Pair], red: Any
    ) -> Any:
        """Black instance whose self-referencing members hold ``red``.

        Used when a type differs from its stubbed-out self only through its
        recursive edge, e.g. ``children=()`` for red and ``children=(red,)``
        for black.
        Raises:
            UnresolvableCycleError: No self-referencing member can hold ``red``.
        """
        own = type_key(tp)
        values = {name: p.black for name, p in pairs.items()}
        nested = False
        for m in descriptor.members:
            if own not in pairs[m.name].pending:
                continue
            value = _nest(m.declared_type, own, red)
            if value is not None:
                values[m.name] = value
                nested = True
        if nested:
            black = self.synthesizer.synthesize(descriptor, values).value
            if _differs(red, black):
                self._logger.debug(f"Nested red {type_name(tp)} inside black", category="values")
                return black
        raise UnresolvableCycleError(tp)

    def _opaque_pair(self, tp: Any) -> Pair:
        raise ValueGenerationError(
            f"No generation strategy for {type_name(tp)}; register an override pair", tp
        )


__all__ = ["ValueGenerator", "Token", "CallableToken", "identity_implementation"]
