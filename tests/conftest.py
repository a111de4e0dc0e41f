"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from impactplane.config.models import CommitConfig, ServerConfig  # noqa: E402
from impactplane.git.commit import CommitDescriptor, CommitResolver  # noqa: E402
from impactplane.reports.models import ReportFormat  # noqa: E402


@dataclass
class UploadCall:
    format: ReportFormat
    files: list[Path]
    commit: CommitDescriptor
    partition: str
    message: str


@dataclass
class RecordingUploadClient:
    """Upload client double that records calls and can fail on demand.

    ``failures`` holds errors raised by the next calls, in order.
    """

    calls: list[UploadCall] = field(default_factory=list)
    failures: list[Exception] = field(default_factory=list)
    attempts: int = 0

    def upload_reports(
        self,
        format: ReportFormat,
        files: Sequence[Path],
        commit: CommitDescriptor,
        partition: str,
        message: str,
    ) -> None:
        self.attempts += 1
        if self.failures:
            raise self.failures.pop(0)
        self.calls.append(UploadCall(format, list(files), commit, partition, message))

    def factory(self, server: ServerConfig) -> RecordingUploadClient:  # noqa: ARG002
        return self


@pytest.fixture
def server_config() -> ServerConfig:
    return ServerConfig(
        url="https://analysis.example.com/",
        project="shop",
        user_name="build-bot",
        user_access_token="s3cret",
    )


@pytest.fixture
def commit() -> CommitDescriptor:
    return CommitDescriptor("main", 1700000000000)


@pytest.fixture
def commit_resolver(commit: CommitDescriptor) -> CommitResolver:
    return CommitResolver(CommitConfig(branch=commit.branch, timestamp=commit.timestamp), Path("."))


@pytest.fixture
def upload_client() -> RecordingUploadClient:
    return RecordingUploadClient()
