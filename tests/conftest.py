import io

import pytest

from eqverify.checkers import CheckContext
from eqverify.config import VerifierConfig
from eqverify.core.cache import ValueCache
from eqverify.core.descriptor import describe
from eqverify.core.generator import ValueGenerator
from eqverify.driver import detect_significance
from eqverify.logging import LogLevel, configure_logging


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Run every test away from any eqverify.toml, with a fresh quiet logger."""
    monkeypatch.chdir(tmp_path)
    return configure_logging(level=LogLevel.QUIET, color=False, stream=io.StringIO())


@pytest.fixture
def logger(isolated):
    return isolated


@pytest.fixture
def generator() -> ValueGenerator:
    return ValueGenerator(ValueCache())


@pytest.fixture
def synthesizer(generator):
    return generator.synthesizer


@pytest.fixture
def make_context():
    """Build the context a checker sees for ``cls``, significance detected."""

    def make(cls, **options) -> CheckContext:
        config = VerifierConfig(**options)
        cache = ValueCache(config.overrides)
        generator = ValueGenerator(cache)
        descriptor = describe(cls, config.excluded_members)
        descriptor = detect_significance(descriptor, generator.synthesizer)
        return CheckContext(descriptor, generator.synthesizer, cache, config)

    return make
