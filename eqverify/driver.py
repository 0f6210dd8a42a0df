"""Verification driver: runs the checker suite against one class.

The run loop is ``Pending -> Running(checker_i) -> Pass -> Running(checker_i+1)``
and terminates on the first failure or after the last checker. Every run owns
its registry, cache, generator and descriptor; nothing is shared between runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from eqverify.checkers.base import CheckContext, CheckerId, CheckerResult, FailureKind
from eqverify.checkers.registry import CheckerRegistry
from eqverify.config import VerifierConfig
from eqverify.core.cache import ValueCache
from eqverify.core.descriptor import TypeDescriptor, describe
from eqverify.core.errors import (
    ContractViolation,
    EqVerifyError,
    NullRejectionError,
    TypeMismatchRejectionError,
    type_name,
)
from eqverify.core.generator import ValueGenerator
from eqverify.core.solver import ConstraintSolver
from eqverify.core.synthesizer import InstanceSynthesizer
from eqverify.logging import EqVerifyLogger, LogLevel, get_logger


class VerificationStatus(Enum):
    """Outcome of a verification run."""

    PASSED = auto()
    FAILED = auto()
    ABORTED = auto()


_VIOLATION_TYPES: dict[FailureKind, type[ContractViolation]] = {
    FailureKind.VIOLATION: ContractViolation,
    FailureKind.NULL_REJECTION: NullRejectionError,
    FailureKind.TYPE_MISMATCH_REJECTION: TypeMismatchRejectionError,
}


@dataclass(frozen=True, eq=False)
class VerificationResult:
    """Result of verifying one class.

    ``failure`` is set for FAILED runs and ``error`` for ABORTED ones. Two
    results compare equal when they describe the same outcome; exceptions
    are compared by type and message, not identity.
    """

    type_name: str
    status: VerificationStatus
    failure: CheckerResult | None = None
    error: EqVerifyError | None = None
    checks_run: tuple[CheckerId, ...] = ()
    significant_members: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.status is VerificationStatus.PASSED

    @property
    def checker_id(self) -> CheckerId | None:
        return self.failure.checker_id if self.failure else None

    @property
    def failure_kind(self) -> FailureKind | None:
        return self.failure.kind if self.failure else None

    @property
    def offending_member(self) -> str | None:
        if self.failure is not None:
            return self.failure.member
        if self.error is not None:
            return self.error.member
        return None

    @property
    def underlying_error(self) -> BaseException | None:
        if self.failure is not None:
            return self.failure.error
        return self.error

    def _key(self) -> tuple[Any, ...]:
        error = self.underlying_error
        return (
            self.type_name,
            self.status,
            self.checker_id,
            self.failure_kind,
            self.offending_member,
            self.failure.message if self.failure else None,
            type(error).__name__ if error is not None else None,
            str(error) if isinstance(error, EqVerifyError) else None,
            self.checks_run,
            self.significant_members,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VerificationResult):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def format(self) -> str:
        """Format result for display."""
        if self.status is VerificationStatus.PASSED:
            return f"{self.type_name}: all {len(self.checks_run)} checks passed"
        if self.status is VerificationStatus.ABORTED:
            return f"{self.type_name}: verification aborted: {self.error}"
        return f"{self.type_name}: {self.failure.format()}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        error = self.underlying_error
        return {
            "type": self.type_name,
            "status": self.status.name,
            "checker": self.checker_id.name if self.checker_id else None,
            "kind": self.failure_kind.name if self.failure_kind else None,
            "member": self.offending_member,
            "message": self.failure.message if self.failure else (str(error) if error else None),
            "error": type(error).__name__ if error is not None else None,
            "checks_run": [c.name for c in self.checks_run],
            "significant_members": list(self.significant_members),
        }

    def raise_for_failure(self) -> None:
        """Raise if the run did not pass.
        Raises:
            ContractViolation: For FAILED runs (or the sharper subclass
                matching the failure kind).
            EqVerifyError: The engine error of an ABORTED run.
        """
        if self.status is VerificationStatus.ABORTED:
            raise self.error
        if self.status is VerificationStatus.FAILED:
            exc_type = _VIOLATION_TYPES[self.failure.kind or FailureKind.VIOLATION]
            raise exc_type(
                self.format(), self.failure.checker_id, self.failure.member
            ) from self.failure.error


def detect_significance(
    descriptor: TypeDescriptor, synthesizer: InstanceSynthesizer
) -> TypeDescriptor:
    """Mark the members whose red/black flip changes ``==`` or ``hash``.

    A member whose flipped comparison raises is treated as read.
    """
    reference = synthesizer.synthesize(descriptor)
    significant = []
    for member in descriptor.members:
        twin = synthesizer.twin(reference, member)
        if _changes_outcome(reference.value, twin.value, descriptor.is_hashable):
            significant.append(member.name)
    get_logger().debug(
        f"Significant members of {descriptor.name}: {', '.join(significant) or '(none)'}",
        category="driver",
    )
    return descriptor.with_significance(significant)


def _changes_outcome(a: Any, b: Any, hashable: bool) -> bool:
    try:
        if not bool(a == b):
            return True
        return hashable and hash(a) != hash(b)
    except Exception:
        return True


class VerificationDriver:
    """Runs the active checkers for one configuration.

    ``config.log_level`` applies for the duration of each run only.
    """

    def __init__(self, config: VerifierConfig | None = None):
        self.config = config or VerifierConfig()

    def run(self, type_id: Any) -> VerificationResult:
        """Verify ``type_id``; never raises for engine errors."""
        level = self.config.log_level
        with get_logger().at_level(LogLevel[level.upper()] if level else None) as logger:
            return self._run(type_id, logger)

    def _run(self, type_id: Any, logger: EqVerifyLogger) -> VerificationResult:
        name = type_name(type_id)
        registry = CheckerRegistry(self.config.suppressed)
        checks_run: list[CheckerId] = []
        significant: tuple[str, ...] = ()
        logger.verbose(f"Verifying {name} ({len(registry)} checkers)", category="driver")
        try:
            cache = ValueCache(self.config.overrides)
            generator = ValueGenerator(cache, ConstraintSolver(self.config.solver_timeout_ms))
            descriptor = describe(type_id, self.config.excluded_members)
            descriptor = detect_significance(descriptor, generator.synthesizer)
            significant = tuple(m.name for m in descriptor.significant_members)
            context = CheckContext(descriptor, generator.synthesizer, cache, self.config)
            for checker in registry:
                with logger.timer(checker.checker_id.name, category="driver"):
                    result = checker.check(context)
                checks_run.append(checker.checker_id)
                if not result.passed:
                    logger.verbose(f"{name}: {result.format()}", category="driver")
                    return VerificationResult(
                        name,
                        VerificationStatus.FAILED,
                        failure=result,
                        checks_run=tuple(checks_run),
                        significant_members=significant,
                    )
        except EqVerifyError as e:
            logger.verbose(f"{name}: aborted: {e}", category="driver")
            return VerificationResult(
                name,
                VerificationStatus.ABORTED,
                error=e,
                checks_run=tuple(checks_run),
                significant_members=significant,
            )
        logger.debug(f"Cache statistics: {cache.stats()}", category="driver")
        return VerificationResult(
            name,
            VerificationStatus.PASSED,
            checks_run=tuple(checks_run),
            significant_members=significant,
        )


__all__ = [
    "VerificationDriver",
    "VerificationResult",
    "VerificationStatus",
    "detect_significance",
]
