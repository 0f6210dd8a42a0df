"""Configuration system for eqverify.

A ``VerifierConfig`` describes one verification run: suppressed checkers,
red/black overrides, excluded members, exemptions and inheritance policy.
Project-wide defaults (everything except overrides, which are Python
objects) can be placed in a TOML file; options passed at call time take
precedence over the file.
"""

from __future__ import annotations

import dataclasses
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from eqverify.checkers.base import CheckerId, Exemption
from eqverify.core.errors import type_name
from eqverify.logging import get_logger

CONFIG_FILES = [
    "eqverify.toml",
    ".eqverify.toml",
    "pyproject.toml",
]

LOG_LEVELS = ("quiet", "normal", "verbose", "debug", "trace")


def _coerce_enum(enum_cls: type, value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return enum_cls[key]
        except KeyError:
            pass
    choices = ", ".join(member.name.lower() for member in enum_cls)
    raise ValueError(f"Unknown {enum_cls.__name__} {value!r}; expected one of: {choices}")


def parse_checker_ids(values: Iterable[Any]) -> frozenset[CheckerId]:
    """Checker ids from enum members or names such as ``"mutability"``."""
    return frozenset(_coerce_enum(CheckerId, v) for v in values)


def parse_exemptions(values: Iterable[Any]) -> frozenset[Exemption]:
    return frozenset(_coerce_enum(Exemption, v) for v in values)


@dataclass
class VerifierConfig:
    """Configuration for one verification run."""

    suppressed: frozenset[CheckerId] = frozenset()
    overrides: dict[Any, tuple[Any, Any]] = field(default_factory=dict)
    excluded_members: frozenset[str] = frozenset()
    relaxed_inheritance: bool = False
    exemptions: frozenset[Exemption] = frozenset()
    log_level: str | None = None
    solver_timeout_ms: int = 5000
    config_file: Path | None = None

    def __post_init__(self) -> None:
        self.suppressed = parse_checker_ids(self.suppressed)
        self.exemptions = parse_exemptions(self.exemptions)
        self.excluded_members = frozenset(self.excluded_members)
        self.overrides = dict(self.overrides)
        if self.log_level is not None and self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {self.log_level!r}")

    def with_options(self, **options: Any) -> VerifierConfig:
        """Copy with call-time options applied on top.
        Raises:
            TypeError: If an option name is not a configuration field.
        """
        names = {f.name for f in dataclasses.fields(self)}
        unknown = set(options) - names
        if unknown:
            raise TypeError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **options)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "suppressed": sorted(c.name.lower() for c in self.suppressed),
            "overrides": sorted(type_name(t) for t in self.overrides),
            "excluded_members": sorted(self.excluded_members),
            "relaxed_inheritance": self.relaxed_inheritance,
            "exemptions": sorted(e.name.lower() for e in self.exemptions),
            "log_level": self.log_level,
            "solver_timeout_ms": self.solver_timeout_ms,
        }


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find configuration file by walking up directory tree.

    A ``pyproject.toml`` only counts when it has a ``[tool.eqverify]`` table.
    """
    if start_dir is None:
        start_dir = Path.cwd()
    current = start_dir.resolve()
    while True:
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.is_file():
                if config_name != "pyproject.toml" or _has_tool_table(config_path):
                    return config_path
        if current == current.parent:
            return None
        current = current.parent


def _has_tool_table(path: Path) -> bool:
    try:
        with open(path, "rb") as f:
            return "eqverify" in tomllib.load(f).get("tool", {})
    except (OSError, tomllib.TOMLDecodeError):
        return False


def load_config(
    config_path: Path | None = None,
    start_dir: Path | None = None,
) -> VerifierConfig:
    """Load configuration from file or use defaults.
    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching for config
    Returns:
        Loaded configuration
    Raises:
        ValueError: If the file names an unknown checker, exemption or level.
    """
    config = VerifierConfig()
    if config_path is None:
        config_path = find_config_file(start_dir)
    if config_path is None or not config_path.exists():
        return config
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        get_logger().warning(f"Failed to parse config file {config_path}: {e}", category="config")
        return config
    if config_path.name == "pyproject.toml":
        section = data.get("tool", {}).get("eqverify", {})
    else:
        section = data.get("tool", {}).get("eqverify", data)
    config = _apply_config(config, section)
    config.config_file = config_path
    get_logger().debug(f"Loaded configuration from {config_path}", category="config")
    return config


def _apply_config(config: VerifierConfig, data: Mapping[str, Any]) -> VerifierConfig:
    """Apply configuration data to a config object."""
    changes: dict[str, Any] = {}
    if "suppressed" in data:
        changes["suppressed"] = parse_checker_ids(data["suppressed"])
    if "exemptions" in data:
        changes["exemptions"] = parse_exemptions(data["exemptions"])
    for key in ("relaxed_inheritance", "log_level", "solver_timeout_ms"):
        if key in data:
            changes[key] = data[key]
    unknown = set(data) - set(changes)
    if unknown:
        get_logger().warning(
            f"Ignoring unknown configuration key(s): {', '.join(sorted(unknown))}",
            category="config",
        )
    return dataclasses.replace(config, **changes)


__all__ = [
    "VerifierConfig",
    "Exemption",
    "CONFIG_FILES",
    "load_config",
    "find_config_file",
    "parse_checker_ids",
    "parse_exemptions",
]
