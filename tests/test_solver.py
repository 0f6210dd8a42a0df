from typing import Annotated

import pytest
import z3
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from eqverify.core.errors import SynthesisError
from eqverify.core.solver import Bounds, ConstraintSolver, collect_bounds
from tests.samples import Ge, Interval, MinLen, MultipleOf


class TestCollectBounds:
    def test_merges_metadata(self):
        bounds = collect_bounds((Ge(3), MinLen(2), "unrelated"))
        assert bounds.ge == 3
        assert bounds.min_length == 2
        assert bounds.has_numeric()
        assert bounds.has_length()

    def test_no_constraints(self):
        assert collect_bounds(("doc string",)).is_empty()


class TestNumeric:
    def test_nearest_to_anchor(self):
        result = ConstraintSolver().solve(int, Bounds(ge=10), anchor=1)
        assert (result.red, result.black) == (10, 11)

    def test_anchor_inside_bounds_is_kept(self):
        result = ConstraintSolver().solve(int, Bounds(ge=0, le=5), anchor=1)
        assert result.red == 1
        assert result.black in (0, 2)

    def test_multiple_of(self):
        result = ConstraintSolver().solve(int, Bounds(multiple_of=7, gt=0), anchor=1)
        assert result.found
        assert result.red % 7 == 0 and result.black % 7 == 0
        assert result.red != result.black

    def test_strict_float_bounds(self):
        result = ConstraintSolver().solve(float, Bounds(gt=0, lt=1), anchor=0.5)
        assert 0 < result.red < 1
        assert 0 < result.black < 1
        assert result.red != result.black
        assert isinstance(result.red, float)

    def test_unsatisfiable(self):
        result = ConstraintSolver().solve(int, Bounds(gt=5, lt=6), anchor=1)
        assert not result.found
        assert "no value" in result.reason

    def test_single_value(self):
        result = ConstraintSolver().solve(int, Bounds(ge=5, le=5), anchor=1)
        assert not result.found
        assert "only one" in result.reason

    def test_bool_not_supported(self):
        assert not ConstraintSolver().solve(bool, Bounds(ge=0), anchor=False).found

    def test_query_count(self):
        solver = ConstraintSolver()
        solver.solve(int, Bounds(ge=10), anchor=1)
        assert solver.query_count == 2

    @settings(max_examples=25, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(lo=st.integers(-1000, 1000), width=st.integers(1, 50))
    def test_solutions_stay_within_bounds(self, lo, width):
        hi = lo + width
        result = ConstraintSolver().solve(int, collect_bounds((Interval(ge=lo, le=hi),)), anchor=1)
        assert result.found
        assert lo <= result.red <= hi
        assert lo <= result.black <= hi
        assert result.red != result.black

    def test_multiple_of_metadata(self):
        bounds = collect_bounds((MultipleOf(5), Interval(ge=1)))
        result = ConstraintSolver().solve(int, bounds, anchor=1)
        assert (result.red, result.black) == (5, 10)


class TestLength:
    def test_min_length(self):
        result = ConstraintSolver().solve(str, Bounds(min_length=5), anchor="one")
        assert len(result.red) == 5
        assert len(result.black) == 6

    def test_fixed_length_differs_by_content(self):
        result = ConstraintSolver().solve(str, Bounds(min_length=2, max_length=2), anchor="one")
        assert len(result.red) == len(result.black) == 2
        assert result.red != result.black

    def test_bytes(self):
        result = ConstraintSolver().solve(bytes, Bounds(max_length=1), anchor=b"one")
        assert isinstance(result.red, bytes)
        assert result.red != result.black

    def test_only_empty(self):
        result = ConstraintSolver().solve(str, Bounds(max_length=0), anchor="one")
        assert not result.found


class TestTimeout:
    def test_unknown_is_not_reported_as_unsatisfiable(self, monkeypatch):
        monkeypatch.setattr(z3.Optimize, "check", lambda self, *args: z3.unknown)
        monkeypatch.setattr(z3.Optimize, "reason_unknown", lambda self: "timeout")
        result = ConstraintSolver(timeout_ms=7).solve(int, Bounds(ge=10), anchor=1)
        assert not result.found
        assert result.reason == "solver gave up after 7 ms (timeout)"

    def test_length_timeout(self, monkeypatch):
        monkeypatch.setattr(z3.Optimize, "check", lambda self, *args: z3.unknown)
        monkeypatch.setattr(z3.Optimize, "reason_unknown", lambda self: "")
        result = ConstraintSolver().solve(str, Bounds(min_length=3), anchor="one")
        assert result.reason.endswith("(unknown)")

    def test_generator_surfaces_timeout(self, monkeypatch, generator):
        monkeypatch.setattr(z3.Optimize, "check", lambda self, *args: z3.unknown)
        monkeypatch.setattr(z3.Optimize, "reason_unknown", lambda self: "timeout")
        with pytest.raises(SynthesisError, match="gave up"):
            generator.generate(Annotated[int, Ge(10)])
