"""Instance synthesis without calling constructors.

``__init__`` may validate or normalise its arguments in ways that forbid the
arbitrary member combinations the checkers need, so instances are allocated
directly and their members assigned one by one. Each storage kind has an
adapter exposing the same small capability interface.
"""

from __future__ import annotations

import types
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from eqverify.core.cache import Pair
from eqverify.core.descriptor import Member, StorageKind, TypeDescriptor
from eqverify.core.errors import EqVerifyError, SynthesisError
from eqverify.logging import get_logger

if TYPE_CHECKING:
    from eqverify.core.generator import ValueGenerator


@dataclass
class SynthesizedInstance:
    """A built object plus the member values it was built from."""

    value: Any
    member_values: dict[str, Any] = field(default_factory=dict)
    descriptor: TypeDescriptor | None = field(default=None, repr=False)

    def __getitem__(self, name: str) -> Any:
        return self.member_values[name]


def _abstract_stub(name: str):
    def stub(self, *args, **kwargs):
        raise NotImplementedError(name)

    stub.__name__ = name
    return stub


def concrete_subclass(cls: type) -> type:
    """A subclass of ``cls`` whose abstract methods are stubs."""
    stubs = {name: _abstract_stub(name) for name in getattr(cls, "__abstractmethods__", ())}
    stubs["__module__"] = cls.__module__
    stubs["__qualname__"] = cls.__qualname__
    return types.new_class(cls.__name__, (cls,), exec_body=lambda ns: ns.update(stubs))


def minimal_subclass(cls: type) -> type:
    """A subclass of ``cls`` that adds and overrides nothing."""
    name = f"{cls.__name__}Subclass"

    def body(ns: dict[str, Any]) -> None:
        ns["__module__"] = cls.__module__
        ns["__qualname__"] = f"{cls.__qualname__}Subclass"

    return types.new_class(name, (cls,), exec_body=body)


class Adapter(ABC):
    """Capability interface for building instances of one class."""

    def __init__(self, cls: type):
        self.cls = cls

    @abstractmethod
    def build(self, values: Mapping[str, Any]) -> Any:
        """Create an instance whose members hold ``values``."""

    def read(self, obj: Any, name: str) -> Any:
        return getattr(obj, name)


class ObjectAdapter(Adapter):
    """Regular classes, dataclasses (frozen or not) and slotted classes."""

    def blank(self) -> Any:
        try:
            return object.__new__(self.cls)
        except TypeError:
            pass
        for base in self.cls.__mro__[1:]:
            if base.__module__ == "builtins" and base is not object:
                try:
                    return base.__new__(self.cls)
                except Exception as e:
                    raise SynthesisError(
                        f"Cannot allocate {self.cls.__qualname__}: {e}", self.cls
                    ) from e
        raise SynthesisError(f"Cannot allocate {self.cls.__qualname__}", self.cls)

    def build(self, values: Mapping[str, Any]) -> Any:
        obj = self.blank()
        for name, value in values.items():
            try:
                object.__setattr__(obj, name, value)
            except Exception as e:
                raise SynthesisError(
                    f"Cannot assign member of {self.cls.__qualname__}: {e}", self.cls, name
                ) from e
        return obj


class NamedTupleAdapter(Adapter):
    """``typing.NamedTuple`` and ``collections.namedtuple`` classes."""

    def build(self, values: Mapping[str, Any]) -> Any:
        try:
            return tuple.__new__(self.cls, [values[name] for name in self.cls._fields])
        except Exception as e:
            raise SynthesisError(
                f"Cannot build {self.cls.__qualname__}: {e}", self.cls
            ) from e


class InstanceSynthesizer:
    """Builds instances of described classes from cached sample values."""

    def __init__(self, generator: ValueGenerator):
        self.generator = generator
        self._adapters: dict[type, Adapter] = {}
        self._logger = get_logger()

    def adapter_for(self, descriptor: TypeDescriptor) -> Adapter:
        cls = descriptor.cls
        if cls not in self._adapters:
            target = cls
            if descriptor.is_abstract:
                try:
                    target = concrete_subclass(cls)
                except Exception as e:
                    raise SynthesisError(
                        f"Abstract class {cls.__qualname__} has no viable subclass: {e}", cls
                    ) from e
                self._logger.debug(f"Using concrete subclass for abstract {cls.__qualname__}")
            if descriptor.storage is StorageKind.NAMEDTUPLE:
                self._adapters[cls] = NamedTupleAdapter(target)
            else:
                self._adapters[cls] = ObjectAdapter(target)
        return self._adapters[cls]

    def member_pair(self, member: Member) -> Pair:
        """Red/black pair for a member, with the member named on failure."""
        try:
            return self.generator.generate(member.declared_type)
        except EqVerifyError as e:
            if e.member is None:
                e.member = member.name
            raise

    def red_values(self, descriptor: TypeDescriptor) -> dict[str, Any]:
        return {m.name: self.member_pair(m).red for m in descriptor.members}

    def black_values(self, descriptor: TypeDescriptor) -> dict[str, Any]:
        return {m.name: self.member_pair(m).black for m in descriptor.members}

    def synthesize(
        self,
        descriptor: TypeDescriptor,
        member_values: Mapping[str, Any] | None = None,
    ) -> SynthesizedInstance:
        """Build an instance; unspecified members take their red value.
        Raises:
            SynthesisError: If a member name is unknown or allocation fails.
        """
        given = dict(member_values or {})
        unknown = set(given) - set(descriptor.member_names)
        if unknown:
            raise SynthesisError(
                f"{descriptor.name} has no member(s) {', '.join(sorted(unknown))}",
                descriptor.type_id,
            )
        values = {
            m.name: given[m.name] if m.name in given else self.member_pair(m).red
            for m in descriptor.members
        }
        return self._build(descriptor, values, self.adapter_for(descriptor))

    def _build(
        self,
        descriptor: TypeDescriptor,
        values: dict[str, Any],
        adapter: Adapter,
    ) -> SynthesizedInstance:
        return SynthesizedInstance(adapter.build(values), values, descriptor)

    def clone_with_override(
        self,
        instance: SynthesizedInstance,
        member_name: str,
        new_value: Any,
    ) -> SynthesizedInstance:
        """Mutation twin: same members except ``member_name``."""
        if member_name not in instance.member_values:
            raise SynthesisError(f"No member named {member_name}", member=member_name)
        values = dict(instance.member_values)
        values[member_name] = new_value
        return self._build(instance.descriptor, values, self.adapter_for(instance.descriptor))

    def clone_identical(self, instance: SynthesizedInstance) -> SynthesizedInstance:
        """A distinct object holding the same member values."""
        return self._build(
            instance.descriptor,
            dict(instance.member_values),
            self.adapter_for(instance.descriptor),
        )

    def twin(self, instance: SynthesizedInstance, member: Member) -> SynthesizedInstance:
        """Flip ``member`` to the other colour of its pair."""
        pair = self.member_pair(member)
        current = instance.member_values[member.name]
        flipped = pair.red if current is pair.black else pair.black
        return self.clone_with_override(instance, member.name, flipped)

    def subclass_instance(self, instance: SynthesizedInstance) -> SynthesizedInstance:
        """Same member values, built as an instance of a minimal subclass."""
        descriptor = instance.descriptor
        base = self.adapter_for(descriptor).cls
        try:
            sub = minimal_subclass(base)
        except Exception as e:
            raise SynthesisError(
                f"Cannot subclass {descriptor.name}: {e}", descriptor.type_id
            ) from e
        adapter_cls = type(self.adapter_for(descriptor))
        return self._build(descriptor, dict(instance.member_values), adapter_cls(sub))


__all__ = [
    "Adapter",
    "ObjectAdapter",
    "NamedTupleAdapter",
    "InstanceSynthesizer",
    "SynthesizedInstance",
    "concrete_subclass",
    "minimal_subclass",
]
