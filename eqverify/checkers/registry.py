"""Registry of contract checkers.

A registry is built for every verification run; there is no shared default
instance. Iteration order is the fixed run order of ``CheckerId``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from eqverify.checkers.base import Checker, CheckerId
from eqverify.checkers.contract import (
    NonNullityChecker,
    ReflexivityChecker,
    SymmetryChecker,
    TransitivityChecker,
    TypeDiscriminationChecker,
)
from eqverify.checkers.fields import (
    MutabilityChecker,
    NullFieldsChecker,
    ReferenceEqualityChecker,
    SignificantFieldsChecker,
)
from eqverify.checkers.hashing import HashCoherenceChecker
from eqverify.checkers.inheritance import InheritanceChecker
from eqverify.checkers.representation import StringRepresentationChecker

BUILTIN_CHECKERS: tuple[type[Checker], ...] = (
    NonNullityChecker,
    TypeDiscriminationChecker,
    ReflexivityChecker,
    SymmetryChecker,
    TransitivityChecker,
    HashCoherenceChecker,
    SignificantFieldsChecker,
    NullFieldsChecker,
    ReferenceEqualityChecker,
    MutabilityChecker,
    StringRepresentationChecker,
    InheritanceChecker,
)


class CheckerRegistry:
    """The checkers of one run, minus the suppressed ones."""

    def __init__(self, suppressed: Iterable[CheckerId] = ()):
        self._checkers: dict[CheckerId, type[Checker]] = {}
        self._instances: dict[CheckerId, Checker] = {}
        for checker_class in BUILTIN_CHECKERS:
            self.register(checker_class)
        self.suppressed = frozenset(suppressed)

    def register(self, checker_class: type[Checker]) -> None:
        """Register a checker class under its id."""
        self._checkers[checker_class.checker_id] = checker_class

    def get(self, checker_id: CheckerId) -> Checker | None:
        """Get a checker instance by id."""
        if checker_id not in self._checkers:
            return None
        if checker_id not in self._instances:
            self._instances[checker_id] = self._checkers[checker_id]()
        return self._instances[checker_id]

    @property
    def active_ids(self) -> list[CheckerId]:
        """Registered ids minus suppressed ones, in run order."""
        active = set(self._checkers) - self.suppressed
        return [checker_id for checker_id in CheckerId if checker_id in active]

    def active(self) -> list[Checker]:
        return [self.get(checker_id) for checker_id in self.active_ids]

    def __iter__(self) -> Iterator[Checker]:
        return iter(self.active())

    def __len__(self) -> int:
        return len(self.active_ids)

    def list_available(self) -> list[str]:
        """List registered checker names."""
        return [checker_id.name for checker_id in CheckerId if checker_id in self._checkers]


__all__ = ["CheckerRegistry", "BUILTIN_CHECKERS"]
