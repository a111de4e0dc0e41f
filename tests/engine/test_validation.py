"""Tests for engine/validation.py."""

from __future__ import annotations

import pytest

from impactplane.config.models import IMPACTED_TEST_ENGINE, ImpactedConfig
from impactplane.core.errors import ConfigError, ErrorCode
from impactplane.engine.validation import (
    validate_engines,
    validate_impacted_config,
    validate_test_framework,
)


class TestValidateTestFramework:
    def test_junit_platform_is_supported(self) -> None:
        validate_test_framework("junit-platform")

    @pytest.mark.parametrize(("framework", "name"), [("junit4", "JUnit 4"), ("testng", "TestNG")])
    def test_other_frameworks_are_rejected(self, framework: str, name: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            validate_test_framework(framework)

        assert exc_info.value.code is ErrorCode.CONFIG_UNSUPPORTED_FRAMEWORK
        assert exc_info.value.message == f"{name} is not supported! Use JUnit Platform instead!"


class TestValidateEngines:
    def test_accepts_plain_selection(self) -> None:
        validate_engines(["junit-jupiter"], ["junit-vintage"])

    def test_rejects_excluding_impact_engine(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            validate_engines([], [IMPACTED_TEST_ENGINE])

        assert exc_info.value.code is ErrorCode.CONFIG_ENGINE_EXCLUDED

    def test_rejects_engine_both_included_and_excluded(self) -> None:
        with pytest.raises(ConfigError):
            validate_engines(["junit-jupiter"], ["junit-jupiter"])


class TestValidateImpactedConfig:
    def test_default_config_is_valid(self) -> None:
        validate_impacted_config(ImpactedConfig())

    def test_checks_framework_and_engines(self) -> None:
        with pytest.raises(ConfigError):
            validate_impacted_config(ImpactedConfig(exclude_engines=[IMPACTED_TEST_ENGINE]))
        with pytest.raises(ConfigError):
            validate_impacted_config(ImpactedConfig(test_framework="testng"))
