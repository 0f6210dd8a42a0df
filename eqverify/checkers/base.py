"""Checker results and the checker base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any

from eqverify.core.errors import type_name

if TYPE_CHECKING:
    from eqverify.config import VerifierConfig
    from eqverify.core.cache import ValueCache
    from eqverify.core.descriptor import TypeDescriptor
    from eqverify.core.synthesizer import InstanceSynthesizer


class CheckerId(Enum):
    """The contract clauses, in the order the driver runs them."""

    NON_NULLITY = auto()
    TYPE_DISCRIMINATION = auto()
    REFLEXIVITY = auto()
    SYMMETRY = auto()
    TRANSITIVITY = auto()
    HASH_COHERENCE = auto()
    SIGNIFICANT_FIELDS = auto()
    NULL_FIELDS = auto()
    REFERENCE_EQUALITY = auto()
    MUTABILITY = auto()
    STRING_REPRESENTATION = auto()
    INHERITANCE = auto()

    @property
    def label(self) -> str:
        return _LABELS.get(self, self.name.replace("_", " ").capitalize())


_LABELS = {
    CheckerId.NON_NULLITY: "Non-nullity",
    CheckerId.TYPE_DISCRIMINATION: "Type-check",
    CheckerId.HASH_COHERENCE: "Hash",
    CheckerId.SIGNIFICANT_FIELDS: "Significant fields",
    CheckerId.STRING_REPRESENTATION: "String representation",
    CheckerId.INHERITANCE: "Subclass",
}


class Exemption(Enum):
    """Deliberate departures from the identical-copy rule.

    IDENTICAL_COPY: instances must NOT equal an identical copy (singletons,
    null objects). IDENTICAL_COPY_FOR_VERSIONED_ENTITY: a copy may or may not
    be equal, as with entities whose identity is assigned on persistence.
    """

    IDENTICAL_COPY = auto()
    IDENTICAL_COPY_FOR_VERSIONED_ENTITY = auto()


class FailureKind(Enum):
    """Severity of a failed clause."""

    VIOLATION = auto()
    NULL_REJECTION = auto()
    TYPE_MISMATCH_REJECTION = auto()


@dataclass(frozen=True)
class CheckerResult:
    """Outcome of one checker: a pass, or a failure naming the clause."""

    checker_id: CheckerId
    passed: bool = True
    kind: FailureKind | None = None
    member: str | None = None
    message: str = ""
    error: BaseException | None = None

    @classmethod
    def ok(cls, checker_id: CheckerId) -> CheckerResult:
        return cls(checker_id=checker_id)

    @classmethod
    def fail(
        cls,
        checker_id: CheckerId,
        message: str,
        *,
        member: str | None = None,
        kind: FailureKind = FailureKind.VIOLATION,
        error: BaseException | None = None,
    ) -> CheckerResult:
        return cls(
            checker_id=checker_id,
            passed=False,
            kind=kind,
            member=member,
            message=message,
            error=error,
        )

    def format(self) -> str:
        """Format for display, e.g. ``Symmetry: ... (member 'x')``."""
        if self.passed:
            return f"{self.checker_id.label}: passed"
        text = f"{self.checker_id.label}: {self.message}"
        if self.member:
            text += f" (member '{self.member}')"
        if self.error is not None:
            text += f" [{type(self.error).__name__}: {self.error}]"
        return text


@dataclass
class CheckContext:
    """Everything a checker may consult; one per verification run."""

    descriptor: TypeDescriptor
    synthesizer: InstanceSynthesizer
    cache: ValueCache
    config: VerifierConfig

    @property
    def name(self) -> str:
        return type_name(self.descriptor.type_id)


class Unrelated:
    """An object of a type no class under test can legitimately equal."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<unrelated>"


def compare(a: Any, b: Any) -> bool:
    """``a == b`` coerced to bool; exceptions propagate."""
    return bool(a == b)


def guarded(call: Callable[[], Any]) -> tuple[Any, BaseException | None]:
    """Run ``call``, returning ``(result, None)`` or ``(None, exception)``."""
    try:
        return call(), None
    except Exception as e:
        return None, e


class Checker(ABC):
    """Base class for contract checkers."""

    checker_id: CheckerId
    description: str = ""

    @abstractmethod
    def check(self, context: CheckContext) -> CheckerResult:
        """Verify one clause of the contract."""

    def ok(self) -> CheckerResult:
        return CheckerResult.ok(self.checker_id)

    def fail(self, message: str, **details: Any) -> CheckerResult:
        return CheckerResult.fail(self.checker_id, message, **details)

    def raised(self, operation: str, error: BaseException, member: str | None = None) -> CheckerResult:
        return self.fail(
            f"{operation} raised {type(error).__name__}", member=member, error=error
        )


__all__ = [
    "CheckerId",
    "FailureKind",
    "Exemption",
    "CheckerResult",
    "CheckContext",
    "Checker",
    "Unrelated",
    "compare",
    "guarded",
]
