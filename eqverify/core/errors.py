"""Error taxonomy for the verification engine.

Engine errors (``EqVerifyError`` and subclasses) mean verification of a type
could not proceed at all. They are distinct from contract violations, which
are the normal product of a run and travel as ``CheckerResult`` values. The
``ContractViolation`` family below only exists so that a failed result can be
turned into an ``AssertionError`` for test frameworks.
"""

from __future__ import annotations

from typing import Any


def type_name(tp: Any) -> str:
    """Readable name for a class or typing construct."""
    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


class EqVerifyError(Exception):
    """Base class for errors that abort a verification run."""

    def __init__(self, message: str, type_id: Any = None, member: str | None = None):
        self.message = message
        self.type_id = type_id
        self.member = member
        super().__init__(message)

    @property
    def type_name(self) -> str | None:
        if self.type_id is None:
            return None
        return type_name(self.type_id)

    def __str__(self) -> str:
        if self.member:
            return f"{self.message} (member '{self.member}')"
        return self.message


class IntrospectionError(EqVerifyError):
    """The type's members cannot be discovered."""

    def __init__(self, type_id: Any, reason: str):
        self.reason = reason
        super().__init__(f"Cannot introspect {type_name(type_id)}: {reason}", type_id)


class ValueGenerationError(EqVerifyError):
    """No red/black pair can be produced for a type."""


class InsufficientVariantsError(ValueGenerationError):
    """An enumeration-like type has fewer than two distinct values."""

    def __init__(self, type_id: Any, count: int):
        self.count = count
        super().__init__(
            f"{type_name(type_id)} has {count} distinct value(s); "
            "at least two are needed, register an override pair",
            type_id,
        )


class UnresolvableCycleError(ValueGenerationError):
    """A type refers back to itself without an optional or container edge."""

    def __init__(self, type_id: Any):
        super().__init__(
            f"Recursive data structure: {type_name(type_id)} refers to itself "
            "through a non-optional member; register an override pair",
            type_id,
        )


class SynthesisError(EqVerifyError):
    """An instance of the type cannot be built."""


class InvalidOverrideError(EqVerifyError):
    """A user-supplied red/black pair is unusable."""

    def __init__(self, type_id: Any, reason: str):
        super().__init__(f"Invalid override for {type_name(type_id)}: {reason}", type_id)


class ContractViolation(AssertionError):
    """Raised by ``VerificationResult.raise_for_failure`` for a failed clause."""

    def __init__(self, message: str, checker_id: Any = None, member: str | None = None):
        self.checker_id = checker_id
        self.member = member
        super().__init__(message)


class NullRejectionError(ContractViolation):
    """``__eq__`` raised when compared with ``None``."""


class TypeMismatchRejectionError(ContractViolation):
    """``__eq__`` raised when compared with an unrelated type."""


__all__ = [
    "EqVerifyError",
    "IntrospectionError",
    "ValueGenerationError",
    "InsufficientVariantsError",
    "UnresolvableCycleError",
    "SynthesisError",
    "InvalidOverrideError",
    "ContractViolation",
    "NullRejectionError",
    "TypeMismatchRejectionError",
    "type_name",
]
