"""Report records and the per-build report registry."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from impactplane.core.logging import get_logger

log = get_logger(__name__)


class ReportFormat(str, Enum):
    """Report kinds understood by the server. Values are the wire names."""

    JUNIT = "JUNIT"
    JACOCO = "JACOCO"
    TESTWISE_COVERAGE = "TESTWISE_COVERAGE"
    CLOSURE = "CLOSURE"


@dataclass(frozen=True, slots=True)
class Report:
    """One generated report awaiting upload.

    Reports sharing (format, partition, message) are uploaded together.
    """

    report_file: Path
    format: ReportFormat
    partition: str
    message: str

    @property
    def group_key(self) -> tuple[ReportFormat, str, str]:
        return (self.format, self.partition, self.message)


class ReportRegistry:
    """Insert-only set of reports registered during one build.

    Owned by the upload controller and handed to report producers. Duplicate
    reports (by value) collapse into one entry.
    """

    def __init__(self) -> None:
        self._reports: set[Report] = set()
        self._lock = threading.Lock()

    def register(self, report: Report) -> None:
        with self._lock:
            if report in self._reports:
                return
            self._reports.add(report)
        log.debug(
            "report_registered",
            format=report.format.value,
            partition=report.partition,
            file=str(report.report_file),
        )

    def snapshot(self) -> frozenset[Report]:
        with self._lock:
            return frozenset(self._reports)

    def __len__(self) -> int:
        with self._lock:
            return len(self._reports)

    def __iter__(self) -> Iterator[Report]:
        return iter(self.snapshot())

    def __bool__(self) -> bool:
        return len(self) > 0
