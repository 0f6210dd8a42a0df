from eqverify.checkers import (
    BUILTIN_CHECKERS,
    CheckerId,
    CheckerRegistry,
    CheckerResult,
    Exemption,
    FailureKind,
    HashCoherenceChecker,
    InheritanceChecker,
    MutabilityChecker,
    NonNullityChecker,
    NullFieldsChecker,
    ReferenceEqualityChecker,
    ReflexivityChecker,
    SignificantFieldsChecker,
    StringRepresentationChecker,
    SymmetryChecker,
    TransitivityChecker,
    TypeDiscriminationChecker,
)
from eqverify.checkers.fields import equal_copy
from eqverify.logging import LogLevel
from tests.samples import (
    Asymmetric,
    BrokenRepr,
    CachedArea,
    ComparesByIdentity,
    ConstantHash,
    Coordinates,
    EitherField,
    HashesY,
    IdentityHash,
    IdentityOnly,
    IgnoresY,
    LooseInstanceCheck,
    MutablePoint,
    Node,
    NoTypeCheck,
    NullEqualsTrue,
    NullRaises,
    Point,
    Sealed,
    ShoutingName,
    Slotted,
    VersionedEntity,
)


class TestCheckerResult:
    def test_ok(self):
        result = CheckerResult.ok(CheckerId.SYMMETRY)
        assert result.passed
        assert result.format() == "Symmetry: passed"

    def test_fail_format_names_member(self):
        result = CheckerResult.fail(CheckerId.SIGNIFICANT_FIELDS, "unused", member="y")
        assert not result.passed
        assert result.kind is FailureKind.VIOLATION
        assert result.format() == "Significant fields: unused (member 'y')"


class TestNonNullity:
    def test_passes(self, make_context):
        assert NonNullityChecker().check(make_context(Point)).passed

    def test_true_for_none(self, make_context):
        result = NonNullityChecker().check(make_context(NullEqualsTrue))
        assert not result.passed
        assert result.kind is FailureKind.VIOLATION

    def test_raising_is_null_rejection(self, make_context):
        result = NonNullityChecker().check(make_context(NullRaises))
        assert result.kind is FailureKind.NULL_REJECTION
        assert isinstance(result.error, AttributeError)


class TestTypeDiscrimination:
    def test_passes(self, make_context):
        assert TypeDiscriminationChecker().check(make_context(Point)).passed

    def test_unchecked_attribute_access(self, make_context):
        result = TypeDiscriminationChecker().check(make_context(NoTypeCheck))
        assert result.kind is FailureKind.TYPE_MISMATCH_REJECTION
        assert isinstance(result.error, AttributeError)
        assert "AttributeError" in result.message


class TestReflexivity:
    def test_passes(self, make_context):
        assert ReflexivityChecker().check(make_context(Point)).passed

    def test_identity_equality_fails(self, make_context):
        result = ReflexivityChecker().check(make_context(IdentityOnly))
        assert not result.passed
        assert "identical copy" in result.message

    def test_identical_copy_exemption(self, make_context):
        context = make_context(IdentityOnly, exemptions={Exemption.IDENTICAL_COPY})
        assert ReflexivityChecker().check(context).passed

    def test_unnecessary_identical_copy_exemption(self, make_context):
        context = make_context(Point, exemptions={"identical_copy"})
        result = ReflexivityChecker().check(context)
        assert not result.passed
        assert "unnecessary" in result.message

    def test_versioned_entity_tolerated_with_warning(self, make_context, logger):
        context = make_context(
            VersionedEntity, exemptions={Exemption.IDENTICAL_COPY_FOR_VERSIONED_ENTITY}
        )
        assert ReflexivityChecker().check(context).passed
        warnings = logger.get_entries(category="reflexivity", warnings_only=True)
        assert len(warnings) == 1
        assert "VersionedEntity" in warnings[0].message

    def test_versioned_entity_exemption_allows_equal_copies(self, make_context):
        context = make_context(Point, exemptions={Exemption.IDENTICAL_COPY_FOR_VERSIONED_ENTITY})
        assert ReflexivityChecker().check(context).passed


class TestSymmetry:
    def test_passes(self, make_context):
        assert SymmetryChecker().check(make_context(Point)).passed

    def test_ordering_based_equality(self, make_context):
        result = SymmetryChecker().check(make_context(Asymmetric))
        assert not result.passed
        assert result.member == "x"


class TestTransitivity:
    def test_passes(self, make_context):
        assert TransitivityChecker().check(make_context(Point)).passed

    def test_either_field_equality(self, make_context):
        result = TransitivityChecker().check(make_context(EitherField))
        assert not result.passed
        assert "a != c" in result.message


class TestHashCoherence:
    def test_passes(self, make_context):
        assert HashCoherenceChecker().check(make_context(Point)).passed

    def test_unhashable_passes(self, make_context):
        assert HashCoherenceChecker().check(make_context(Slotted)).passed

    def test_identity_hash(self, make_context):
        result = HashCoherenceChecker().check(make_context(IdentityHash))
        assert not result.passed
        assert "different hashes" in result.message

    def test_constant_hash_warns(self, make_context, logger):
        assert HashCoherenceChecker().check(make_context(ConstantHash)).passed
        assert logger.get_entries(category="hash", warnings_only=True)

    def test_spread_hash_does_not_warn(self, make_context, logger):
        HashCoherenceChecker().check(make_context(Point))
        assert not logger.get_entries(category="hash", warnings_only=True)


class TestSignificantFields:
    def test_passes(self, make_context):
        assert SignificantFieldsChecker().check(make_context(Point)).passed

    def test_compare_false_field(self, make_context):
        assert SignificantFieldsChecker().check(make_context(CachedArea)).passed

    def test_unused_member(self, make_context):
        result = SignificantFieldsChecker().check(make_context(IgnoresY))
        assert result.member == "y"
        assert "does not use" in result.message

    def test_unused_member_excluded(self, make_context):
        context = make_context(IgnoresY, excluded_members={"y"})
        assert SignificantFieldsChecker().check(context).passed

    def test_excluded_member_used(self, make_context):
        result = SignificantFieldsChecker().check(make_context(Point, excluded_members={"y"}))
        assert result.member == "y"
        assert "excluded" in result.message

    def test_hash_uses_member_equality_ignores(self, make_context):
        result = SignificantFieldsChecker().check(make_context(HashesY))
        assert result.member == "y"
        assert "__hash__" in result.message


class TestNullFields:
    def test_no_optional_members(self, make_context):
        assert NullFieldsChecker().check(make_context(Point)).passed

    def test_optional_member_handled(self, make_context):
        assert NullFieldsChecker().check(make_context(Node)).passed

    def test_repr_dereferences_none(self, make_context):
        result = NullFieldsChecker().check(make_context(ShoutingName))
        assert result.member == "name"
        assert isinstance(result.error, AttributeError)


class TestReferenceEquality:
    def test_passes(self, make_context):
        assert ReferenceEqualityChecker().check(make_context(ShoutingName)).passed

    def test_identity_comparison(self, make_context):
        result = ReferenceEqualityChecker().check(make_context(ComparesByIdentity))
        assert result.member == "name"

    def test_equal_copy(self):
        value = "one"
        assert equal_copy(value) == value
        assert equal_copy(value) is not value
        assert equal_copy([1]) == [1]
        assert equal_copy(1) is None
        assert equal_copy(None) is None


class TestMutability:
    def test_frozen_passes(self, make_context):
        assert MutabilityChecker().check(make_context(Point)).passed

    def test_unhashable_passes(self, make_context):
        assert MutabilityChecker().check(make_context(Slotted)).passed

    def test_reassignable_member(self, make_context):
        result = MutabilityChecker().check(make_context(MutablePoint))
        assert result.member == "x"


class TestStringRepresentation:
    def test_passes(self, make_context):
        assert StringRepresentationChecker().check(make_context(Point)).passed

    def test_repr_raises(self, make_context):
        result = StringRepresentationChecker().check(make_context(BrokenRepr))
        assert isinstance(result.error, RuntimeError)
        assert "repr()" in result.message


class TestInheritance:
    def test_exact_type_check_passes(self, make_context):
        assert InheritanceChecker().check(make_context(Point)).passed

    def test_isinstance_check_fails(self, make_context):
        result = InheritanceChecker().check(make_context(LooseInstanceCheck))
        assert not result.passed
        assert "subclass" in result.message

    def test_relaxed(self, make_context):
        context = make_context(LooseInstanceCheck, relaxed_inheritance=True)
        assert InheritanceChecker().check(context).passed

    def test_final_class_skipped(self, make_context):
        assert InheritanceChecker().check(make_context(Sealed)).passed

    def test_namedtuple_equals_subclass(self, make_context):
        assert not InheritanceChecker().check(make_context(Coordinates)).passed


class TestRegistry:
    def test_run_order(self):
        registry = CheckerRegistry()
        assert registry.active_ids == list(CheckerId)
        assert [type(c) for c in registry] == list(BUILTIN_CHECKERS)

    def test_suppression_is_set_subtraction(self):
        registry = CheckerRegistry({CheckerId.MUTABILITY, CheckerId.INHERITANCE})
        assert len(registry) == len(CheckerId) - 2
        assert CheckerId.MUTABILITY not in registry.active_ids

    def test_instances_are_reused_within_a_registry(self):
        registry = CheckerRegistry()
        assert registry.get(CheckerId.SYMMETRY) is registry.get(CheckerId.SYMMETRY)

    def test_registries_are_independent(self):
        assert CheckerRegistry().get(CheckerId.SYMMETRY) is not CheckerRegistry().get(
            CheckerId.SYMMETRY
        )

    def test_list_available(self):
        assert CheckerRegistry().list_available()[0] == "NON_NULLITY"


def test_logger_fixture_is_quiet(logger):
    assert logger.level is LogLevel.QUIET
