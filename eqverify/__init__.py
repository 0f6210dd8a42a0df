"""eqverify: automatic verification of the equality contract.

eqverify checks that a class's ``__eq__``, ``__hash__`` and ``__repr__``
honour the contract: reflexivity, symmetry, transitivity, non-nullity,
type discrimination, hash coherence, field significance and inheritance
safety. Instances are synthesized directly from the class's declared
members, so no constructor arguments or fixtures are needed.
Example:
    >>> from dataclasses import dataclass
    >>> from eqverify import verify
    >>> @dataclass(frozen=True)
    ... class Point:
    ...     x: int
    ...     y: int
    >>> result = verify(Point)
    >>> print(result.format())
    Point: all 12 checks passed
"""

from eqverify.api import verify, verify_or_raise
from eqverify.checkers import CheckerId, CheckerResult, Exemption, FailureKind
from eqverify.config import VerifierConfig, load_config
from eqverify.core.errors import (
    ContractViolation,
    EqVerifyError,
    InsufficientVariantsError,
    IntrospectionError,
    InvalidOverrideError,
    NullRejectionError,
    SynthesisError,
    TypeMismatchRejectionError,
    UnresolvableCycleError,
    ValueGenerationError,
)
from eqverify.driver import VerificationDriver, VerificationResult, VerificationStatus
from eqverify.logging import LogLevel, configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    "verify",
    "verify_or_raise",
    "VerifierConfig",
    "load_config",
    "VerificationDriver",
    "VerificationResult",
    "VerificationStatus",
    "CheckerId",
    "CheckerResult",
    "Exemption",
    "FailureKind",
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
    "LogLevel",
    "configure_logging",
    "get_logger",
]
