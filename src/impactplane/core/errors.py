"""ImpactPlane error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Upload
- 4xxx: Test execution
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004
    CONFIG_COMMIT_UNRESOLVED = 2005
    CONFIG_ENGINE_EXCLUDED = 2006
    CONFIG_UNSUPPORTED_FRAMEWORK = 2007

    # Upload (3xxx)
    UPLOAD_NETWORK_FAILURE = 3001
    UPLOAD_REJECTED = 3002

    # Test execution (4xxx)
    TEST_PROCESS_FAILED = 4001
    TEST_PROCESS_TIMEOUT = 4002


@dataclass(frozen=True, slots=True)
class ImpactPlaneError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ImpactPlaneError):
    """Configuration-related errors. Always fatal, never retried."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details={"field": field},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def excluded_engine(cls, engine: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_ENGINE_EXCLUDED,
            message=f"Engine '{engine}' can't be excluded from impacted test execution",
            details={"engine": engine},
        )

    @classmethod
    def unsupported_framework(cls, framework: str, supported: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_UNSUPPORTED_FRAMEWORK,
            message=f"{framework} is not supported! Use {supported} instead!",
            details={"framework": framework, "supported": supported},
        )


class CommitResolutionError(ConfigError):
    """The commit to anchor reports at could not be determined."""

    @classmethod
    def unresolvable(cls, path: str, reason: str) -> "CommitResolutionError":
        return cls(
            code=ErrorCode.CONFIG_COMMIT_UNRESOLVED,
            message=f"Could not resolve commit from {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class UploadError(ImpactPlaneError):
    """Report upload errors."""

    @classmethod
    def network_failure(cls, reason: str) -> "UploadError":
        return cls(
            code=ErrorCode.UPLOAD_NETWORK_FAILURE,
            message=f"Upload failed ({reason})",
            details={"reason": reason},
        )

    @classmethod
    def rejected(cls, status_code: int, body: str) -> "UploadError":
        return cls(
            code=ErrorCode.UPLOAD_REJECTED,
            message=f"Server rejected upload with HTTP {status_code}: {body}",
            details={"status_code": status_code, "body": body},
        )


class TestExecutionError(ImpactPlaneError):
    """Failures of the externally launched test process. Never retried."""

    __test__ = False

    @classmethod
    def process_failed(cls, command: list[str], exit_code: int) -> "TestExecutionError":
        return cls(
            code=ErrorCode.TEST_PROCESS_FAILED,
            message=f"Test process exited with code {exit_code}: {' '.join(command)}",
            details={"command": command, "exit_code": exit_code},
        )

    @classmethod
    def timed_out(cls, command: list[str], timeout_sec: float) -> "TestExecutionError":
        return cls(
            code=ErrorCode.TEST_PROCESS_TIMEOUT,
            message=f"Test process timed out after {timeout_sec}s: {' '.join(command)}",
            details={"command": command, "timeout_sec": timeout_sec},
        )
