"""Core module exports."""

from impactplane.core.errors import (
    CommitResolutionError,
    ConfigError,
    ErrorCode,
    ImpactPlaneError,
    TestExecutionError,
    UploadError,
)
from impactplane.core.logging import (
    clear_build_id,
    configure_logging,
    get_build_id,
    get_logger,
    set_build_id,
)

__all__ = [
    # Errors
    "ImpactPlaneError",
    "ConfigError",
    "CommitResolutionError",
    "ErrorCode",
    "TestExecutionError",
    "UploadError",
    # Logging
    "clear_build_id",
    "configure_logging",
    "get_build_id",
    "get_logger",
    "set_build_id",
]
