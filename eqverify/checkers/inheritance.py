"""Equality across the inheritance boundary."""

from __future__ import annotations

from eqverify.checkers.base import Checker, CheckContext, CheckerId, CheckerResult, compare, guarded
from eqverify.logging import get_logger


def equality_is_final(cls: type) -> bool:
    """True when ``__eq__`` and ``__hash__`` are marked ``typing.final``."""
    eq_final = getattr(cls.__eq__, "__final__", False)
    hash_final = cls.__hash__ is None or getattr(cls.__hash__, "__final__", False)
    return bool(eq_final and hash_final)


class InheritanceChecker(Checker):
    """Instances of a trivial subclass must not equal base instances.

    A subclass adding state can only keep ``__eq__`` symmetric if the base
    refuses to equal anything that is not exactly its own class. Classes
    decorated with ``typing.final``, or whose ``__eq__`` and ``__hash__`` are
    final, cannot be subclassed in this way and are skipped.
    """

    checker_id = CheckerId.INHERITANCE
    description = "Base instances never equal subclass instances"

    def check(self, context: CheckContext) -> CheckerResult:
        descriptor = context.descriptor
        logger = get_logger()
        if context.config.relaxed_inheritance:
            logger.debug(f"Inheritance check relaxed for {context.name}", category="inheritance")
            return self.ok()
        if not descriptor.is_open or equality_is_final(descriptor.cls):
            return self.ok()
        synth = context.synthesizer
        base = synth.synthesize(descriptor)
        sub = synth.subclass_instance(base)
        for left, right, direction in ((base, sub, "base == subclass"), (sub, base, "subclass == base")):
            equal, error = guarded(lambda: compare(left.value, right.value))
            if error is not None:
                return self.raised(f"Comparison {direction}", error)
            if equal:
                return self.fail(
                    f"{direction} for a trivial subclass with equal members; "
                    "decorate the class with typing.final, compare exact types, "
                    "or relax inheritance checking"
                )
        return self.ok()


__all__ = ["InheritanceChecker", "equality_is_final"]
