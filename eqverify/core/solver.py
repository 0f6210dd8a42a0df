"""Z3-backed solving of constrained scalar members.

Members annotated as ``Annotated[int, Ge(10)]`` (or any metadata exposing the
``annotated-types`` attribute names) cannot use the canonical red/black
literals. The solver finds the two admissible values closest to the
canonical red value, breaking ties toward the smaller value so that the
result is reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from fractions import Fraction
from typing import Any

import z3

BOUND_ATTRIBUTES = ("gt", "ge", "lt", "le", "multiple_of", "min_length", "max_length")

# floats are searched on a grid of quarter steps so strict bounds are attainable
FLOAT_GRID = 4


@dataclass(frozen=True)
class Bounds:
    """Numeric and length constraints gathered from ``Annotated`` metadata."""

    gt: Any = None
    ge: Any = None
    lt: Any = None
    le: Any = None
    multiple_of: Any = None
    min_length: int | None = None
    max_length: int | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def has_numeric(self) -> bool:
        return any(v is not None for v in (self.gt, self.ge, self.lt, self.le, self.multiple_of))

    def has_length(self) -> bool:
        return self.min_length is not None or self.max_length is not None


def collect_bounds(metadata: tuple[Any, ...]) -> Bounds:
    """Merge constraint attributes found on ``Annotated`` metadata objects."""
    found: dict[str, Any] = {}
    for item in metadata:
        for name in BOUND_ATTRIBUTES:
            value = getattr(item, name, None)
            if value is not None:
                found[name] = value
    return Bounds(**found)


@dataclass
class SolvedPair:
    """Two distinct admissible values, or the reason there are none."""

    red: Any = None
    black: Any = None
    reason: str = ""

    @property
    def found(self) -> bool:
        return not self.reason


class SolverTimeout(Exception):
    """z3 gave up before deciding the constraints."""


class ConstraintSolver:
    """Finds two distinct admissible values for a constrained scalar."""

    def __init__(self, timeout_ms: int = 5000) -> None:
        self.timeout_ms = timeout_ms
        self._query_count = 0

    @property
    def query_count(self) -> int:
        return self._query_count

    def solve(self, base: type, bounds: Bounds, anchor: Any) -> SolvedPair:
        """Solve for ``base`` values satisfying ``bounds`` nearest ``anchor``.
        Args:
            base: ``int``, ``float``, ``str`` or ``bytes``.
            bounds: Constraints collected from the annotation.
            anchor: The canonical red value for ``base``.
        Returns:
            A ``SolvedPair``; ``found`` is False when fewer than two values exist.
        """
        if base is bool:
            return SolvedPair(reason="constraints on bool are not supported")
        try:
            if base is int:
                return self._solve_numeric(bounds, anchor, scale=1, cast=int)
            if base is float:
                return self._solve_numeric(bounds, anchor, scale=FLOAT_GRID, cast=float)
            if base in (str, bytes):
                return self._solve_length(base, bounds, len(anchor))
        except SolverTimeout as e:
            detail = str(e) or "unknown"
            return SolvedPair(reason=f"solver gave up after {self.timeout_ms} ms ({detail})")
        return SolvedPair(reason=f"constraints on {base.__name__} are not supported")

    def _optimizer(self) -> z3.Optimize:
        opt = z3.Optimize()
        opt.set("timeout", self.timeout_ms)
        return opt

    def _nearest(
        self,
        var: z3.ArithRef,
        constraints: list[z3.BoolRef],
        target: z3.ArithRef,
        excluded: list[Any],
    ) -> Any | None:
        """Admissible value nearest ``target``, or None when there is none.
        Raises:
            SolverTimeout: If z3 answers ``unknown``.
        """
        opt = self._optimizer()
        opt.add(*constraints)
        for value in excluded:
            opt.add(var != value)
        opt.minimize(z3.If(var >= target, var - target, target - var))
        opt.minimize(var)
        self._query_count += 1
        status = opt.check()
        if status == z3.unknown:
            raise SolverTimeout(opt.reason_unknown())
        if status != z3.sat:
            return None
        return opt.model().eval(var, model_completion=True).as_long()

    def _solve_numeric(self, bounds: Bounds, anchor: Any, scale: int, cast: type) -> SolvedPair:
        k = z3.Int("k")
        scaled = z3.ToReal(k) / scale

        def real(value: Any) -> z3.ArithRef:
            return z3.RealVal(str(Fraction(value)))

        constraints: list[z3.BoolRef] = []
        if bounds.gt is not None:
            constraints.append(scaled > real(bounds.gt))
        if bounds.ge is not None:
            constraints.append(scaled >= real(bounds.ge))
        if bounds.lt is not None:
            constraints.append(scaled < real(bounds.lt))
        if bounds.le is not None:
            constraints.append(scaled <= real(bounds.le))
        if bounds.multiple_of is not None:
            n = z3.Int("n")
            constraints.append(scaled == real(bounds.multiple_of) * z3.ToReal(n))
        target = z3.IntVal(int(Fraction(anchor) * scale))
        first = self._nearest(k, constraints, target, [])
        if first is None:
            return SolvedPair(reason="no value satisfies the constraints")
        second = self._nearest(k, constraints, target, [first])
        if second is None:
            return SolvedPair(reason="only one value satisfies the constraints")
        return SolvedPair(red=cast(Fraction(first, scale)), black=cast(Fraction(second, scale)))

    def _solve_length(self, base: type, bounds: Bounds, anchor_len: int) -> SolvedPair:
        n = z3.Int("n")
        constraints = [n >= 0]
        if bounds.min_length is not None:
            constraints.append(n >= bounds.min_length)
        if bounds.max_length is not None:
            constraints.append(n <= bounds.max_length)
        target = z3.IntVal(anchor_len)
        first = self._nearest(n, constraints, target, [])
        if first is None:
            return SolvedPair(reason="no length satisfies the constraints")
        second = self._nearest(n, constraints, target, [first])
        if second is None:
            if first == 0:
                return SolvedPair(reason="only the empty value satisfies the constraints")
            second = first
        red, black = "a" * first, "b" * second
        if base is bytes:
            return SolvedPair(red=red.encode(), black=black.encode())
        return SolvedPair(red=red, black=black)


__all__ = [
    "Bounds",
    "ConstraintSolver",
    "SolvedPair",
    "SolverTimeout",
    "collect_bounds",
    "BOUND_ATTRIBUTES",
]
