"""Flat property set handed to the external impacted-test engine.

The engine reads its configuration only from these properties, namespaced
under ``teamscale.test.impacted.``. They are delivered as environment
variables. The JVM system property rendering leaves out secrets, since JVMs
echo ``JAVA_TOOL_OPTIONS`` to stderr.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from impactplane.config.models import ServerConfig
from impactplane.core.logging import get_logger
from impactplane.git.commit import CommitResolver

log = get_logger(__name__)

PROPERTY_PREFIX = "teamscale.test.impacted."

SECRET_KEYS = frozenset({"server.userAccessToken"})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def env_var_name(key: str) -> str:
    """``server.userName`` -> ``TEAMSCALE_TEST_IMPACTED_SERVER_USER_NAME``."""
    full = PROPERTY_PREFIX + key
    return _CAMEL_BOUNDARY.sub("_", full).replace(".", "_").upper()


@dataclass(frozen=True, slots=True)
class EngineProperties:
    """Unprefixed key -> value. Absent source values have no key at all."""

    values: Mapping[str, str]

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __contains__(self, key: object) -> bool:
        return key in self.values

    def to_system_properties(self) -> dict[str, str]:
        return {PROPERTY_PREFIX + key: value for key, value in self.values.items()}

    def to_jvm_args(self) -> list[str]:
        """``-D`` arguments for every non-secret property."""
        public = {key: value for key, value in self.values.items() if key not in SECRET_KEYS}
        return [f"-D{PROPERTY_PREFIX}{key}={value}" for key, value in sorted(public.items())]

    def to_environment(self) -> dict[str, str]:
        return {env_var_name(key): value for key, value in self.values.items()}


@dataclass(frozen=True, slots=True)
class EngineSettings:
    """Everything the engine configuration is derived from."""

    server: ServerConfig
    commit: CommitResolver
    partition: str
    report_directory: Path
    baseline: int | None = None
    agent_urls: Sequence[str] = ()
    run_impacted: bool = False
    run_all_tests: bool = False
    include_engines: Sequence[str] = ()


def emit_engine_properties(settings: EngineSettings) -> EngineProperties:
    """Resolve settings into engine properties.

    Raises:
        ConfigError: A required server field is missing. Raised before the
            commit is resolved or any property is produced.
    """
    server = settings.server
    server.validate_required()
    commit = settings.commit.resolve()

    values: dict[str, str] = {}

    def put(name: str, value: str | None) -> None:
        if value is not None:
            values[name] = value

    put("server.url", server.url)
    put("server.project", server.project)
    put("server.userName", server.user_name)
    put("server.userAccessToken", server.user_access_token)
    put("partition", settings.partition)
    put("endCommit", str(commit))
    put("baseline", str(settings.baseline) if settings.baseline is not None else None)
    put("reportDirectory", str(settings.report_directory.absolute()))
    put("agentsUrls", ",".join(settings.agent_urls))
    put("runImpacted", _bool(settings.run_impacted))
    put("runAllTests", _bool(settings.run_all_tests))
    put("engines", ",".join(settings.include_engines))

    log.debug(
        "engine_properties_emitted",
        keys=sorted(values),
        partition=settings.partition,
        end_commit=values["endCommit"],
    )
    return EngineProperties(values)


def _bool(value: bool) -> str:
    return "true" if value else "false"
