"""Tests for config/models.py."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from impactplane.config.models import (
    DEFAULT_AGENT_EXCLUDES,
    AgentConfig,
    CommitConfig,
    ImpactPlaneConfig,
    LogOutputConfig,
    ServerConfig,
    UploadConfig,
)
from impactplane.core.errors import ConfigError


class TestServerConfig:
    def test_complete_config_validates(self, server_config: ServerConfig) -> None:
        server_config.validate_required()

    @pytest.mark.parametrize("missing", ["url", "project", "user_name", "user_access_token"])
    def test_missing_field(self, server_config: ServerConfig, missing: str) -> None:
        server = server_config.model_copy(update={missing: None})

        with pytest.raises(ConfigError) as exc_info:
            server.validate_required()

        assert exc_info.value.details == {"field": f"server.{missing}"}

    def test_empty_string_counts_as_missing(self, server_config: ServerConfig) -> None:
        with pytest.raises(ConfigError):
            server_config.model_copy(update={"user_access_token": ""}).validate_required()

    def test_token_not_in_repr_or_str(self, server_config: ServerConfig) -> None:
        assert "s3cret" not in repr(server_config)
        assert "s3cret" not in str(server_config)

    def test_trailing_slash_stripped(self) -> None:
        assert ServerConfig(url="https://x.example/").url == "https://x.example"

    def test_is_immutable(self, server_config: ServerConfig) -> None:
        with pytest.raises(ValidationError):
            server_config.url = "https://other"  # type: ignore[misc]


class TestCommitConfig:
    def test_defaults_resolve_from_git(self) -> None:
        assert CommitConfig().is_explicit is False

    def test_explicit(self) -> None:
        assert CommitConfig(branch="main", timestamp=1).is_explicit

    @pytest.mark.parametrize("kwargs", [{"branch": "main"}, {"timestamp": 1}])
    def test_branch_and_timestamp_required_together(self, kwargs: dict[str, object]) -> None:
        with pytest.raises(ValidationError):
            CommitConfig(**kwargs)  # type: ignore[arg-type]


class TestUploadConfig:
    def test_defaults(self) -> None:
        config = UploadConfig()

        assert config.retries == 3
        assert config.ignore_failures is False

    def test_retries_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            UploadConfig(retries=0)


class TestAgentConfig:
    def test_no_agents(self) -> None:
        assert AgentConfig().all_urls == []

    def test_local_agent_first(self) -> None:
        config = AgentConfig(local_port=8123, remote_urls=["http://sut:8000/"])

        assert config.all_urls == ["http://127.0.0.1:8123/", "http://sut:8000/"]

    def test_default_excludes_always_applied(self) -> None:
        config = AgentConfig(excludes=["com.example.generated.*", "org.junit.*"])

        excludes = config.effective_excludes
        assert excludes[: len(DEFAULT_AGENT_EXCLUDES)] == list(DEFAULT_AGENT_EXCLUDES)
        assert excludes.count("org.junit.*") == 1
        assert excludes[-1] == "com.example.generated.*"

    def test_jvm_args_require_jar_and_port(self) -> None:
        assert AgentConfig(local_port=8123).jvm_args(Path("/out")) == []

    def test_jvm_args(self) -> None:
        config = AgentConfig(jar="/agent.jar", local_port=8123, includes=["com.example.*"])

        (arg,) = config.jvm_args(Path("/out"))

        assert arg.startswith("-javaagent:/agent.jar=out=/out,mode=testwise,http-server-port=8123,")
        assert "includes=com.example.*" in arg
        assert "excludes=org.junit.*:" in arg

    def test_invalid_port(self) -> None:
        with pytest.raises(ValidationError):
            AgentConfig(local_port=70000)


class TestLogOutputConfig:
    def test_relative_file_destination_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/impactplane.log")

    def test_absolute_file_destination(self, tmp_path: Path) -> None:
        path = tmp_path / "impactplane.log"

        assert LogOutputConfig(destination=str(path)).destination == str(path)


class TestImpactPlaneConfig:
    def test_defaults(self) -> None:
        config = ImpactPlaneConfig()

        assert config.baseline is None
        assert config.reports.testwise_coverage.upload is True
        assert config.reports.junit.upload is False
        assert config.impacted.test_framework == "junit-platform"
        assert config.build_dir == "build"
