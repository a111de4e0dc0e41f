"""Config module exports."""

from impactplane.config.loader import load_config
from impactplane.config.models import (
    IMPACTED_TEST_ENGINE,
    AgentConfig,
    CommitConfig,
    ImpactedConfig,
    ImpactPlaneConfig,
    LoggingConfig,
    ReportConfig,
    ReportsConfig,
    ServerConfig,
    UploadConfig,
)

__all__ = [
    "load_config",
    "IMPACTED_TEST_ENGINE",
    "AgentConfig",
    "CommitConfig",
    "ImpactedConfig",
    "ImpactPlaneConfig",
    "LoggingConfig",
    "ReportConfig",
    "ReportsConfig",
    "ServerConfig",
    "UploadConfig",
]
