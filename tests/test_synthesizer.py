import pytest

from eqverify.core.descriptor import describe
from eqverify.core.errors import SynthesisError, UnresolvableCycleError
from eqverify.core.synthesizer import concrete_subclass, minimal_subclass
from tests.samples import (
    Chicken,
    Coordinates,
    NoSubclasses,
    Point,
    RejectsAssignment,
    Shape,
    Slotted,
    Validated,
)


class TestSynthesize:
    def test_unspecified_members_take_red(self, synthesizer):
        instance = synthesizer.synthesize(describe(Point), {"y": 5})
        assert instance.value == Point(1, 5)
        assert instance.member_values == {"x": 1, "y": 5}
        assert instance["y"] == 5

    def test_constructor_is_bypassed(self, synthesizer):
        instance = synthesizer.synthesize(describe(Validated))
        assert isinstance(instance.value, Validated)
        assert instance.value.x == 1

    def test_slotted_class(self, synthesizer):
        instance = synthesizer.synthesize(describe(Slotted))
        assert instance.value.a is instance["a"]

    def test_namedtuple(self, synthesizer):
        instance = synthesizer.synthesize(describe(Coordinates))
        assert instance.value == Coordinates(0.5, 0.5)

    def test_abstract_class_through_concrete_subclass(self, synthesizer):
        instance = synthesizer.synthesize(describe(Shape))
        assert isinstance(instance.value, Shape)
        with pytest.raises(NotImplementedError):
            instance.value.area()

    def test_unknown_member(self, synthesizer):
        with pytest.raises(SynthesisError, match="z"):
            synthesizer.synthesize(describe(Point), {"z": 1})

    def test_generator_error_names_member(self, synthesizer):
        with pytest.raises(UnresolvableCycleError) as exc_info:
            synthesizer.synthesize(describe(Chicken))
        assert exc_info.value.member is not None

    def test_setter_error_becomes_synthesis_error(self, synthesizer):
        with pytest.raises(SynthesisError, match="RejectsAssignment") as exc_info:
            synthesizer.synthesize(describe(RejectsAssignment))
        assert isinstance(exc_info.value.__cause__, ValueError)


class TestClones:
    def test_clone_with_override(self, synthesizer):
        base = synthesizer.synthesize(describe(Point))
        twin = synthesizer.clone_with_override(base, "x", 9)
        assert twin.value == Point(9, 1)
        assert base.value == Point(1, 1)

    def test_clone_with_unknown_member(self, synthesizer):
        base = synthesizer.synthesize(describe(Point))
        with pytest.raises(SynthesisError):
            synthesizer.clone_with_override(base, "z", 9)

    def test_clone_identical_is_distinct(self, synthesizer):
        base = synthesizer.synthesize(describe(Point))
        copy = synthesizer.clone_identical(base)
        assert copy.value is not base.value
        assert copy.value == base.value

    def test_twin_flips_back_and_forth(self, synthesizer):
        descriptor = describe(Point)
        base = synthesizer.synthesize(descriptor)
        flipped = synthesizer.twin(base, descriptor.member("x"))
        assert flipped["x"] == 2
        assert synthesizer.twin(flipped, descriptor.member("x"))["x"] == 1

    def test_subclass_instance(self, synthesizer):
        base = synthesizer.synthesize(describe(Point))
        sub = synthesizer.subclass_instance(base)
        assert type(sub.value) is not Point
        assert isinstance(sub.value, Point)
        assert type(sub.value).__name__ == "PointSubclass"
        assert sub.member_values == base.member_values

    def test_subclass_hook_error_becomes_synthesis_error(self, synthesizer):
        base = synthesizer.synthesize(describe(NoSubclasses))
        with pytest.raises(SynthesisError, match="NoSubclasses") as exc_info:
            synthesizer.subclass_instance(base)
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestSubclassFactories:
    def test_concrete_subclass_is_instantiable(self):
        impl = concrete_subclass(Shape)
        assert not getattr(impl, "__abstractmethods__", None)

    def test_minimal_subclass_keeps_module(self):
        assert minimal_subclass(Point).__module__ == Point.__module__
