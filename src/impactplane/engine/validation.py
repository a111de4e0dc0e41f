"""Validation of the test framework and engine selection for impacted runs."""

from __future__ import annotations

from collections.abc import Collection

from impactplane.config.models import IMPACTED_TEST_ENGINE, ImpactedConfig
from impactplane.core.errors import ConfigError

SUPPORTED_FRAMEWORK = "junit-platform"

_FRAMEWORK_NAMES = {
    "junit-platform": "JUnit Platform",
    "junit4": "JUnit 4",
    "testng": "TestNG",
}


def validate_test_framework(framework: str) -> None:
    if framework != SUPPORTED_FRAMEWORK:
        raise ConfigError.unsupported_framework(
            _FRAMEWORK_NAMES.get(framework, framework), _FRAMEWORK_NAMES[SUPPORTED_FRAMEWORK]
        )


def validate_engines(include_engines: Collection[str], exclude_engines: Collection[str]) -> None:
    """Reject configurations that would keep the impact engine from running."""
    if IMPACTED_TEST_ENGINE in exclude_engines:
        raise ConfigError.excluded_engine(IMPACTED_TEST_ENGINE)
    overlap = set(include_engines) & set(exclude_engines)
    if overlap:
        raise ConfigError.invalid_value(
            "impacted.include_engines",
            sorted(overlap),
            "engines can't be both included and excluded",
        )


def validate_impacted_config(config: ImpactedConfig) -> None:
    validate_test_framework(config.test_framework)
    validate_engines(config.include_engines, config.exclude_engines)
