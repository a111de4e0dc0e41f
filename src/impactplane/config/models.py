"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (IMPACTPLANE__SECTION__KEY)
3. Repo YAML (.impactplane/config.yaml)
4. Global YAML (~/.config/impactplane/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    IMPACTPLANE__<SECTION>__<KEY>=<VALUE>

Examples:
    IMPACTPLANE__SERVER__URL=https://teamscale.example.com
    IMPACTPLANE__SERVER__USER_ACCESS_TOKEN=...
    IMPACTPLANE__UPLOAD__IGNORE_FAILURES=true
    IMPACTPLANE__BASELINE=1700000000000
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from impactplane.core.errors import ConfigError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
TestFramework = Literal["junit-platform", "junit4", "testng"]

IMPACTED_TEST_ENGINE = "teamscale-test-impacted"
"""JUnit Platform engine id of the impacted-test selection engine."""

DEFAULT_AGENT_EXCLUDES: tuple[str, ...] = (
    "org.junit.*",
    "org.gradle.*",
    "com.esotericsoftware.*",
    "com.teamscale.jacoco.agent.*",
    "com.teamscale.test_impacted.*",
    "com.teamscale.report.*",
    "com.teamscale.client.*",
    "org.jacoco.core.*",
    "shadow.*",
    "okhttp3.*",
    "okio.*",
    "retrofit2.*",
    "*.MockitoMock.*",
    "*.FastClassByGuice.*",
    "*.ConstructorAccess",
)
"""Classes never instrumented: test framework, build tool and agent internals."""


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class LogOutputConfig(_Frozen):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(_Frozen):
    """Logging configuration.

    Env vars:
        IMPACTPLANE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(default="INFO", description="Root log level.")
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ServerConfig(_Frozen):
    """Analysis server the reports are uploaded to.

    All fields are required before any network operation, but may be absent
    at load time (e.g. token injected later via environment).

    Env vars:
        IMPACTPLANE__SERVER__URL
        IMPACTPLANE__SERVER__PROJECT
        IMPACTPLANE__SERVER__USER_NAME
        IMPACTPLANE__SERVER__USER_ACCESS_TOKEN
    """

    url: str | None = Field(default=None, description="Server base URL.")
    project: str | None = Field(default=None, description="Project identifier on the server.")
    user_name: str | None = Field(default=None, description="User to authenticate as.")
    user_access_token: str | None = Field(
        default=None,
        description="Access token of the user. Never logged.",
        repr=False,
    )

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        return v.rstrip("/") if v else v

    def validate_required(self) -> None:
        """Raise ConfigError for the first missing required field."""
        for name in ("url", "project", "user_name", "user_access_token"):
            if not getattr(self, name):
                raise ConfigError.missing_required(f"server.{name}")

    def __str__(self) -> str:
        return f"{self.url} (project {self.project}, user {self.user_name})"


class CommitConfig(_Frozen):
    """Explicit commit to upload to. Leave both unset to resolve from git.

    Env vars:
        IMPACTPLANE__COMMIT__BRANCH
        IMPACTPLANE__COMMIT__TIMESTAMP: Commit time in epoch milliseconds
    """

    branch: str | None = None
    timestamp: int | None = None

    @model_validator(mode="after")
    def branch_and_timestamp_together(self) -> "CommitConfig":
        if (self.branch is None) != (self.timestamp is None):
            raise ValueError("commit.branch and commit.timestamp must be set together")
        return self

    @property
    def is_explicit(self) -> bool:
        return self.branch is not None and self.timestamp is not None


class UploadConfig(_Frozen):
    """Report upload behaviour.

    Env vars:
        IMPACTPLANE__UPLOAD__IGNORE_FAILURES: Log upload failures instead of failing the build
        IMPACTPLANE__UPLOAD__RETRIES: Attempts per upload group
        IMPACTPLANE__UPLOAD__TIMEOUT_SEC: HTTP timeout per attempt
    """

    ignore_failures: bool = Field(
        default=False,
        description="Log upload failures at warning level and let the build succeed.",
    )
    retries: int = Field(
        default=3,
        ge=1,
        description="Attempts per upload group. Every error is retried.",
    )
    timeout_sec: float = Field(
        default=60.0,
        gt=0,
        description="HTTP timeout per attempt. A timeout counts as a network failure.",
    )


class AgentConfig(_Frozen):
    """Coverage agent settings.

    The local agent runs inside the test process. Remote agents instrument
    other processes (e.g. a system under test) and are reached by URL.
    """

    destination: str | None = Field(
        default=None,
        description="Directory raw coverage is written to. "
        "Default: <build_dir>/jacoco/<project>-<task>.",
    )
    jar: str | None = Field(default=None, description="Path to the local agent jar.")
    local_port: int | None = Field(
        default=None,
        description="HTTP port of the local agent. Unset disables the local agent.",
    )
    inject_java_tool_options: bool = Field(
        default=False,
        description="Also attach the local agent through JAVA_TOOL_OPTIONS. "
        "Every JVM the test command starts then loads it, so only enable this "
        "for commands that start a single JVM.",
    )
    remote_urls: list[str] = Field(default_factory=list)
    includes: list[str] = Field(default_factory=list)
    excludes: list[str] = Field(default_factory=list)

    @field_validator("local_port")
    @classmethod
    def validate_port(cls, v: int | None) -> int | None:
        if v is not None and not (0 < v <= 65535):
            raise ValueError(f"Port must be 1-65535, got {v}")
        return v

    @property
    def local_url(self) -> str | None:
        if self.local_port is None:
            return None
        return f"http://127.0.0.1:{self.local_port}/"

    @property
    def all_urls(self) -> list[str]:
        """URLs of every configured agent, local agent first."""
        urls = [self.local_url] if self.local_url else []
        return urls + list(self.remote_urls)

    @property
    def effective_excludes(self) -> list[str]:
        return list(DEFAULT_AGENT_EXCLUDES) + [e for e in self.excludes if e not in DEFAULT_AGENT_EXCLUDES]

    def jvm_args(self, destination: Path) -> list[str]:
        """JVM arguments attaching the local agent, or [] if none is configured."""
        if self.jar is None or self.local_port is None:
            return []
        options = [f"out={destination}", "mode=testwise", f"http-server-port={self.local_port}"]
        if self.includes:
            options.append("includes=" + ":".join(self.includes))
        options.append("excludes=" + ":".join(self.effective_excludes))
        return [f"-javaagent:{self.jar}={','.join(options)}"]


class ReportConfig(_Frozen):
    """Settings for one kind of report."""

    upload: bool = Field(default=False, description="Register the report for upload.")
    partition: str = Field(default="Unit Tests", description="Server partition.")
    message: str = Field(default="External report upload", description="Upload message.")
    destination: str | None = Field(default=None, description="Report file or directory.")


class ReportsConfig(_Frozen):
    testwise_coverage: ReportConfig = Field(
        default_factory=lambda: ReportConfig(upload=True, message="Testwise coverage upload")
    )
    junit: ReportConfig = Field(default_factory=lambda: ReportConfig(message="JUnit upload"))
    jacoco: ReportConfig = Field(default_factory=lambda: ReportConfig(message="JaCoCo upload"))
    closure_coverage: ReportConfig = Field(
        default_factory=lambda: ReportConfig(message="Closure coverage upload")
    )


class ImpactedConfig(_Frozen):
    """Impacted test execution.

    Env vars:
        IMPACTPLANE__IMPACTED__RUN_IMPACTED: Only execute impacted tests
        IMPACTPLANE__IMPACTED__RUN_ALL_TESTS: Execute all tests, still collecting testwise coverage
    """

    run_impacted: bool = False
    run_all_tests: bool = False
    test_framework: TestFramework = "junit-platform"
    include_engines: list[str] = Field(default_factory=list)
    exclude_engines: list[str] = Field(default_factory=list)
    timeout_sec: float | None = Field(
        default=None,
        description="Kill the test process after this many seconds. None waits forever.",
    )


class ImpactPlaneConfig(_Frozen):
    """Root configuration for ImpactPlane."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    commit: CommitConfig = Field(default_factory=CommitConfig)
    baseline: int | None = Field(
        default=None,
        description="Epoch millis. Only changes after the baseline count for impact analysis.",
    )
    upload: UploadConfig = Field(default_factory=UploadConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    reports: ReportsConfig = Field(default_factory=ReportsConfig)
    impacted: ImpactedConfig = Field(default_factory=ImpactedConfig)
    build_dir: str = Field(default="build", description="Build output directory.")
