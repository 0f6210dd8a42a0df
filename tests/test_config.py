import pytest

from eqverify import verify
from eqverify.checkers import CheckerId, Exemption
from eqverify.config import (
    VerifierConfig,
    find_config_file,
    load_config,
)
from tests.samples import MutablePoint, Point


class TestVerifierConfig:
    def test_defaults(self):
        config = VerifierConfig()
        assert config.suppressed == frozenset()
        assert config.overrides == {}
        assert not config.relaxed_inheritance
        assert config.solver_timeout_ms == 5000

    def test_names_are_coerced(self):
        config = VerifierConfig(
            suppressed=["mutability", "Hash-Coherence"],
            exemptions=["identical_copy"],
        )
        assert config.suppressed == {CheckerId.MUTABILITY, CheckerId.HASH_COHERENCE}
        assert config.exemptions == {Exemption.IDENTICAL_COPY}

    def test_unknown_checker(self):
        with pytest.raises(ValueError, match="non_nullity"):
            VerifierConfig(suppressed=["nullness"])

    def test_unknown_log_level(self):
        with pytest.raises(ValueError):
            VerifierConfig(log_level="loud")

    def test_with_options_copies(self):
        config = VerifierConfig()
        relaxed = config.with_options(relaxed_inheritance=True, suppressed={"inheritance"})
        assert relaxed.relaxed_inheritance
        assert relaxed.suppressed == {CheckerId.INHERITANCE}
        assert not config.relaxed_inheritance

    def test_with_unknown_option(self):
        with pytest.raises(TypeError, match="colour"):
            VerifierConfig().with_options(colour="red")

    def test_to_dict(self):
        config = VerifierConfig(suppressed={"symmetry"}, overrides={int: (3, 4)})
        data = config.to_dict()
        assert data["suppressed"] == ["symmetry"]
        assert data["overrides"] == ["int"]
        assert data["log_level"] is None


class TestConfigFiles:
    def test_no_file_gives_defaults(self, tmp_path):
        config = load_config(start_dir=tmp_path)
        assert config == VerifierConfig()
        assert config.config_file is None

    def test_eqverify_toml(self, tmp_path):
        path = tmp_path / "eqverify.toml"
        path.write_text('suppressed = ["mutability"]\nrelaxed_inheritance = true\n')
        config = load_config(start_dir=tmp_path)
        assert config.suppressed == {CheckerId.MUTABILITY}
        assert config.relaxed_inheritance
        assert config.config_file == path

    def test_pyproject_table(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "demo"\n\n[tool.eqverify]\nexemptions = ["identical_copy"]\n'
        )
        assert load_config(start_dir=tmp_path).exemptions == {Exemption.IDENTICAL_COPY}

    def test_pyproject_without_table_is_skipped(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')
        assert find_config_file(tmp_path) is None

    def test_dedicated_file_wins_over_pyproject(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.eqverify]\nsolver_timeout_ms = 10\n")
        (tmp_path / ".eqverify.toml").write_text("solver_timeout_ms = 20\n")
        assert load_config(start_dir=tmp_path).solver_timeout_ms == 20

    def test_found_in_parent_directory(self, tmp_path):
        (tmp_path / "eqverify.toml").write_text("solver_timeout_ms = 30\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == tmp_path / "eqverify.toml"

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text('log_level = "trace"\n')
        assert load_config(path).log_level == "trace"

    def test_unparseable_file_warns(self, tmp_path, logger):
        (tmp_path / "eqverify.toml").write_text("suppressed = [\n")
        config = load_config(start_dir=tmp_path)
        assert config == VerifierConfig()
        assert logger.get_entries(category="config", warnings_only=True)

    def test_unknown_key_warns(self, tmp_path, logger):
        (tmp_path / "eqverify.toml").write_text("colour = true\n")
        load_config(start_dir=tmp_path)
        warnings = logger.get_entries(category="config", warnings_only=True)
        assert "colour" in warnings[0].message

    def test_unknown_checker_in_file(self, tmp_path):
        (tmp_path / "eqverify.toml").write_text('suppressed = ["everything"]\n')
        with pytest.raises(ValueError):
            load_config(start_dir=tmp_path)


class TestVerifyUsesProjectConfig:
    def test_file_defaults_apply(self, tmp_path):
        (tmp_path / "eqverify.toml").write_text('suppressed = ["mutability"]\n')
        assert verify(MutablePoint).passed

    def test_call_options_take_precedence(self, tmp_path):
        (tmp_path / "eqverify.toml").write_text('suppressed = ["mutability"]\n')
        result = verify(MutablePoint, suppressed=())
        assert result.checker_id is CheckerId.MUTABILITY

    def test_explicit_config_ignores_file(self, tmp_path):
        (tmp_path / "eqverify.toml").write_text('suppressed = ["mutability"]\n')
        assert not verify(MutablePoint, VerifierConfig()).passed
        assert verify(Point, VerifierConfig()).passed
