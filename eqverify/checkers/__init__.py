"""Contract checkers, one per clause of the equality contract."""

from eqverify.checkers.base import (
    Checker,
    CheckContext,
    CheckerId,
    CheckerResult,
    Exemption,
    FailureKind,
)
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
from eqverify.checkers.registry import BUILTIN_CHECKERS, CheckerRegistry
from eqverify.checkers.representation import StringRepresentationChecker

__all__ = [
    "Checker",
    "CheckContext",
    "CheckerId",
    "CheckerResult",
    "Exemption",
    "FailureKind",
    "CheckerRegistry",
    "BUILTIN_CHECKERS",
    "NonNullityChecker",
    "TypeDiscriminationChecker",
    "ReflexivityChecker",
    "SymmetryChecker",
    "TransitivityChecker",
    "HashCoherenceChecker",
    "SignificantFieldsChecker",
    "NullFieldsChecker",
    "ReferenceEqualityChecker",
    "MutabilityChecker",
    "StringRepresentationChecker",
    "InheritanceChecker",
]
