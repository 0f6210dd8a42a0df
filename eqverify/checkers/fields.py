"""Checks on how individual members take part in equality."""

from __future__ import annotations

import copy
from typing import Any

from eqverify.checkers.base import (
    Checker,
    CheckContext,
    CheckerId,
    CheckerResult,
    compare,
    guarded,
)
from eqverify.logging import get_logger


class SignificantFieldsChecker(Checker):
    """Members used by equality are exactly the non-excluded ones.

    Each member is flipped red to black against an all-red reference: a
    comparable member must change the outcome, an excluded one must not, and
    no member may change the hash without changing equality.
    """

    checker_id = CheckerId.SIGNIFICANT_FIELDS
    description = "Equality reads every non-excluded member and no excluded one"

    def check(self, context: CheckContext) -> CheckerResult:
        synth = context.synthesizer
        hashable = context.descriptor.is_hashable
        for member in context.descriptor.members:
            reference = synth.synthesize(context.descriptor)
            twin = synth.twin(reference, member)
            equal, error = guarded(lambda: compare(reference.value, twin.value))
            if error is not None:
                return self.raised("Comparison", error, member.name)
            if hashable and equal:
                hashes, error = guarded(lambda: (hash(reference.value), hash(twin.value)))
                if error is not None:
                    return self.raised("hash()", error, member.name)
                if hashes[0] != hashes[1]:
                    return self.fail(
                        "__hash__ uses a member that __eq__ does not", member=member.name
                    )
            if member.is_excluded and not equal:
                return self.fail("__eq__ uses a member that is excluded", member=member.name)
            if not member.is_excluded and equal:
                return self.fail(
                    "__eq__ does not use a member; exclude it if this is intentional",
                    member=member.name,
                )
        return self.ok()


class NullFieldsChecker(Checker):
    """``==``, ``hash`` and ``repr`` cope with ``None`` in optional members."""

    checker_id = CheckerId.NULL_FIELDS
    description = "Optional members set to None do not break the dunder methods"

    def check(self, context: CheckContext) -> CheckerResult:
        nullable = [m for m in context.descriptor.members if m.is_nullable]
        if not nullable:
            return self.ok()
        variants = [(m.name, {m.name: None}) for m in nullable]
        if len(nullable) > 1:
            variants.append((None, {m.name: None for m in nullable}))
        synth = context.synthesizer
        for member, values in variants:
            reference = synth.synthesize(context.descriptor)
            instance = synth.synthesize(context.descriptor, values)
            copy_ = synth.clone_identical(instance)
            operations = [
                ("Comparison", lambda: compare(instance.value, reference.value)),
                ("Comparison", lambda: compare(reference.value, instance.value)),
                ("Comparison", lambda: compare(instance.value, copy_.value)),
                ("repr()", lambda: repr(instance.value)),
                ("str()", lambda: str(instance.value)),
            ]
            if context.descriptor.is_hashable:
                operations.append(("hash()", lambda: hash(instance.value)))
            for operation, call in operations:
                _, error = guarded(call)
                if error is not None:
                    return self.raised(f"{operation} with a None member", error, member)
        return self.ok()


def equal_copy(value: Any) -> Any | None:
    """A distinct object equal to ``value``, or None when none can be made."""
    if isinstance(value, (str, bytes)) and len(value) > 1:
        candidate = value[:1] + value[1:]
    else:
        try:
            candidate = copy.deepcopy(value)
        except Exception:
            return None
    if candidate is value:
        return None
    equal, error = guarded(lambda: compare(candidate, value))
    if error is not None or not equal:
        return None
    return candidate


class ReferenceEqualityChecker(Checker):
    """Members must be compared with ``==``, not ``is``."""

    checker_id = CheckerId.REFERENCE_EQUALITY
    description = "Equal but distinct member values keep instances equal"

    def check(self, context: CheckContext) -> CheckerResult:
        synth = context.synthesizer
        for member in context.descriptor.significant_members:
            reference = synth.synthesize(context.descriptor)
            duplicate = equal_copy(reference[member.name])
            if duplicate is None:
                get_logger().trace(
                    f"No distinct equal copy for {context.name}.{member.name}",
                    category="reference",
                )
                continue
            twin = synth.clone_with_override(reference, member.name, duplicate)
            equal, error = guarded(lambda: compare(reference.value, twin.value))
            if error is not None:
                return self.raised("Comparison", error, member.name)
            if not equal:
                return self.fail(
                    "member is compared by identity; use == instead of is",
                    member=member.name,
                )
        return self.ok()


class MutabilityChecker(Checker):
    """Hashable classes must not derive equality from reassignable members."""

    checker_id = CheckerId.MUTABILITY
    description = "Significant members of hashable classes are final"

    def check(self, context: CheckContext) -> CheckerResult:
        if not context.descriptor.is_hashable:
            return self.ok()
        for member in context.descriptor.significant_members:
            if not member.is_final:
                return self.fail(
                    "__eq__ and __hash__ depend on a reassignable member; "
                    "freeze the class or mark the member Final",
                    member=member.name,
                )
        return self.ok()


__all__ = [
    "SignificantFieldsChecker",
    "NullFieldsChecker",
    "ReferenceEqualityChecker",
    "MutabilityChecker",
    "equal_copy",
]
