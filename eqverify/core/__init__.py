"""Core module for eqverify.
Provides:
- Type descriptors of the class under test
- Red/black value generation and the run-scoped value cache
- Z3 solving of constrained scalar members
- Instance synthesis without constructors
- The engine error taxonomy
"""

from eqverify.core.cache import Pair, ValueCache
from eqverify.core.descriptor import Member, StorageKind, TypeDescriptor, describe
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
from eqverify.core.generator import ValueGenerator
from eqverify.core.solver import Bounds, ConstraintSolver, collect_bounds
from eqverify.core.synthesizer import InstanceSynthesizer, SynthesizedInstance
from eqverify.core.typeshape import Shape, classify

__all__ = [
    "Pair",
    "ValueCache",
    "Member",
    "StorageKind",
    "TypeDescriptor",
    "describe",
    "ValueGenerator",
    "Bounds",
    "ConstraintSolver",
    "collect_bounds",
    "InstanceSynthesizer",
    "SynthesizedInstance",
    "Shape",
    "classify",
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
]
