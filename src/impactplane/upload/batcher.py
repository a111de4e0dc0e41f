"""Batches registered reports into as few uploads as possible.

Reports sharing (format, partition, message) go to the server in a single
upload, so e.g. all JUnit results of one partition form one server commit.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from impactplane.config.models import ServerConfig
from impactplane.core.errors import UploadError
from impactplane.core.logging import get_logger
from impactplane.git.commit import CommitDescriptor
from impactplane.reports.models import Report, ReportFormat
from impactplane.upload.client import NETWORK_ERRORS, UploadClientFactory
from impactplane.upload.retry import retry

log = get_logger(__name__)

DEFAULT_RETRIES = 3


@dataclass(frozen=True, slots=True)
class UploadGroup:
    """Distinct report files that are uploaded in one call."""

    format: ReportFormat
    partition: str
    message: str
    files: tuple[Path, ...]

    @property
    def upload_message(self) -> str:
        return f"{self.message} ({self.partition})"


@dataclass(slots=True)
class UploadResult:
    uploaded: list[UploadGroup] = field(default_factory=list)
    skipped: list[UploadGroup] = field(default_factory=list)


def group_reports(reports: Iterable[Report]) -> list[UploadGroup]:
    """Group reports by (format, partition, message), deduplicating files.

    Groups and the files within them are sorted for deterministic order.
    """
    files_by_key: dict[tuple[ReportFormat, str, str], set[Path]] = defaultdict(set)
    for report in reports:
        files_by_key[report.group_key].add(report.report_file)

    return [
        UploadGroup(format=fmt, partition=partition, message=message, files=tuple(sorted(files)))
        for (fmt, partition, message), files in sorted(
            files_by_key.items(), key=lambda item: (item[0][0].value, item[0][1], item[0][2])
        )
    ]


def upload_reports(
    reports: Iterable[Report],
    commit: CommitDescriptor,
    server: ServerConfig,
    client_factory: UploadClientFactory,
    *,
    retries: int = DEFAULT_RETRIES,
) -> UploadResult:
    """Upload every group, retrying each up to ``retries`` times.

    The server config must already be validated. A failing group does not
    stop the remaining groups; once all were attempted, the first failure is
    raised. Network failures surface as UploadError, anything else unchanged.
    """
    result = UploadResult()
    failures: list[tuple[UploadGroup, Exception]] = []

    for group in group_reports(reports):
        log.info(
            "upload_group_started",
            count=len(group.files),
            format=group.format.value,
            partition=group.partition,
        )
        if not group.files:
            log.info("upload_group_skipped_empty", format=group.format.value, partition=group.partition)
            result.skipped.append(group)
            continue

        try:
            retry(retries, lambda group=group: _upload_group(group, commit, server, client_factory))
        except Exception as e:
            log.error(
                "upload_group_failed",
                format=group.format.value,
                partition=group.partition,
                error=str(e),
            )
            failures.append((group, e))
            continue

        result.uploaded.append(group)

    if failures:
        _, first_error = failures[0]
        if isinstance(first_error, NETWORK_ERRORS):
            raise UploadError.network_failure(str(first_error)) from first_error
        raise first_error

    return result


def _upload_group(
    group: UploadGroup,
    commit: CommitDescriptor,
    server: ServerConfig,
    client_factory: UploadClientFactory,
) -> None:
    client = client_factory(server)
    try:
        client.upload_reports(
            group.format,
            list(group.files),
            commit,
            group.partition,
            group.upload_message,
        )
    finally:
        close = getattr(client, "close", None)
        if callable(close):
            close()
