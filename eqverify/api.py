"""Public API for eqverify."""

from __future__ import annotations

from typing import Any

from eqverify.config import VerifierConfig, load_config
from eqverify.driver import VerificationDriver, VerificationResult


def verify(
    type_id: Any,
    config: VerifierConfig | None = None,
    **options: Any,
) -> VerificationResult:
    """
    Verify the equality contract of a class.

    Instances are synthesized without calling ``__init__``, examined for the
    members ``__eq__`` actually reads, and run through the checker suite in
    a fixed order. The first violated clause is reported.

    Args:
        type_id: The class to verify, or a parameterised alias (``Box[int]``)
        config: Run configuration; when omitted, defaults are loaded from
                ``eqverify.toml``, ``.eqverify.toml`` or ``pyproject.toml``
        **options: Field overrides applied on top of ``config``:
                   suppressed, overrides, excluded_members,
                   relaxed_inheritance, exemptions, log_level,
                   solver_timeout_ms
    Returns:
        VerificationResult with status PASSED, FAILED or ABORTED. Engine
        errors are returned as ABORTED results, not raised.
    Example:
        >>> @dataclass(frozen=True)
        ... class Point:
        ...     x: int
        ...     y: int
        >>> verify(Point).passed
        True
        >>> verify(Point, suppressed={"inheritance"}).checks_run[-1]
        <CheckerId.STRING_REPRESENTATION: 11>
    """
    if config is None:
        config = load_config()
    if options:
        config = config.with_options(**options)
    return VerificationDriver(config).run(type_id)


def verify_or_raise(
    type_id: Any,
    config: VerifierConfig | None = None,
    **options: Any,
) -> VerificationResult:
    """
    Verify a class and raise on any failure; convenient inside tests.

    Raises:
        ContractViolation: A clause was violated (``AssertionError`` subclass)
        EqVerifyError: Verification could not run at all
    """
    result = verify(type_id, config, **options)
    result.raise_for_failure()
    return result


__all__ = ["verify", "verify_or_raise"]
