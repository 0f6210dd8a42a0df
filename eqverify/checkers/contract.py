"""The basic equivalence-relation clauses of ``__eq__``."""

from __future__ import annotations

from itertools import permutations

from eqverify.checkers.base import (
    Checker,
    CheckContext,
    CheckerId,
    CheckerResult,
    Exemption,
    FailureKind,
    Unrelated,
    compare,
    guarded,
)
from eqverify.logging import get_logger


class NonNullityChecker(Checker):
    """``x == None`` must be False and must not raise."""

    checker_id = CheckerId.NON_NULLITY
    description = "Instances never equal None"

    def check(self, context: CheckContext) -> CheckerResult:
        instance = context.synthesizer.synthesize(context.descriptor)
        equal, error = guarded(lambda: compare(instance.value, None))
        if error is not None:
            return self.fail(
                f"{type(error).__name__} raised when comparing with None",
                kind=FailureKind.NULL_REJECTION,
                error=error,
            )
        if equal:
            return self.fail("True returned for None")
        return self.ok()


class TypeDiscriminationChecker(Checker):
    """``x == <unrelated object>`` must be False and must not raise."""

    checker_id = CheckerId.TYPE_DISCRIMINATION
    description = "Instances never equal objects of unrelated types"

    def check(self, context: CheckContext) -> CheckerResult:
        instance = context.synthesizer.synthesize(context.descriptor)
        other = Unrelated()
        equal, error = guarded(lambda: compare(instance.value, other))
        if error is not None:
            return self.fail(
                f"__eq__ raises {type(error).__name__} for an unrelated type",
                kind=FailureKind.TYPE_MISMATCH_REJECTION,
                error=error,
            )
        if equal:
            return self.fail("True returned for an object of an unrelated type")
        return self.ok()


class ReflexivityChecker(Checker):
    """``x == x``, and ``x`` equals an identical copy of itself."""

    checker_id = CheckerId.REFLEXIVITY
    description = "Instances equal themselves and identical copies"

    def check(self, context: CheckContext) -> CheckerResult:
        synth = context.synthesizer
        for values in (None, synth.black_values(context.descriptor)):
            instance = synth.synthesize(context.descriptor, values)
            same, error = guarded(lambda: compare(instance.value, instance.value))
            if error is not None:
                return self.raised("x == x", error)
            if not same:
                return self.fail("object does not equal itself")

            copy = synth.clone_identical(instance)
            equal, error = guarded(lambda: compare(instance.value, copy.value))
            if error is not None:
                return self.raised("Comparison with an identical copy", error)
            exemptions = context.config.exemptions
            if Exemption.IDENTICAL_COPY in exemptions:
                if equal:
                    return self.fail(
                        "unnecessary exemption IDENTICAL_COPY: two identical copies are equal"
                    )
            elif not equal:
                if Exemption.IDENTICAL_COPY_FOR_VERSIONED_ENTITY in exemptions:
                    get_logger().warning(
                        f"{context.name} does not equal an identical copy; "
                        "tolerated for a versioned entity",
                        category="reflexivity",
                    )
                    return self.ok()
                return self.fail(
                    "object does not equal an identical copy of itself; "
                    "if this is intentional, exempt IDENTICAL_COPY"
                )
        return self.ok()


class SymmetryChecker(Checker):
    """``(a == b) == (b == a)`` for copies and single-member twins."""

    checker_id = CheckerId.SYMMETRY
    description = "Equality gives the same answer in both directions"

    def check(self, context: CheckContext) -> CheckerResult:
        synth = context.synthesizer
        reference = synth.synthesize(context.descriptor)
        candidates = [(None, synth.clone_identical(reference))]
        candidates += [(m.name, synth.twin(reference, m)) for m in context.descriptor.members]
        for member, other in candidates:
            forward, error = guarded(lambda: compare(reference.value, other.value))
            if error is None:
                backward, error = guarded(lambda: compare(other.value, reference.value))
            if error is not None:
                return self.raised("Comparison", error, member)
            if forward != backward:
                return self.fail(
                    f"a == b is {forward} but b == a is {backward}", member=member
                )
        return self.ok()


class TransitivityChecker(Checker):
    """``a == b`` and ``b == c`` imply ``a == c``.

    Triples are built from the reference instance by flipping one significant
    member and then another, for every ordered pair of distinct significant
    members.
    """

    checker_id = CheckerId.TRANSITIVITY
    description = "Equality is transitive"

    def check(self, context: CheckContext) -> CheckerResult:
        synth = context.synthesizer
        members = context.descriptor.significant_members
        for first, second in permutations(members, 2):
            a = synth.synthesize(context.descriptor)
            b = synth.twin(a, first)
            c = synth.twin(b, second)
            results = []
            for left, right in ((a, b), (b, c), (a, c)):
                equal, error = guarded(lambda: compare(left.value, right.value))
                if error is not None:
                    return self.raised("Comparison", error, first.name)
                results.append(equal)
            ab, bc, ac = results
            if ab and bc and not ac:
                return self.fail(
                    f"a == b and b == c but a != c when flipping "
                    f"'{first.name}' then '{second.name}'",
                    member=first.name,
                )
        return self.ok()


__all__ = [
    "NonNullityChecker",
    "TypeDiscriminationChecker",
    "ReflexivityChecker",
    "SymmetryChecker",
    "TransitivityChecker",
]
