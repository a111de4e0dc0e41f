"""Report producers: register finished report outputs for upload."""

from __future__ import annotations

from pathlib import Path

from impactplane.config.models import ReportConfig
from impactplane.core.logging import get_logger
from impactplane.reports.models import Report, ReportFormat, ReportRegistry

log = get_logger(__name__)

_FILE_PATTERNS = {
    ReportFormat.JUNIT: "TEST-*.xml",
    ReportFormat.JACOCO: "*.xml",
    ReportFormat.TESTWISE_COVERAGE: "*.json",
    ReportFormat.CLOSURE: "*.json",
}


def find_report_files(destination: Path, format: ReportFormat) -> list[Path]:
    """The report file itself, or the matching files of a report directory."""
    if destination.is_file():
        return [destination]
    if destination.is_dir():
        return sorted(p for p in destination.glob(_FILE_PATTERNS[format]) if p.is_file())
    return []


def register_reports(
    registry: ReportRegistry,
    config: ReportConfig,
    format: ReportFormat,
    default_destination: Path | None = None,
) -> list[Report]:
    """Register the reports found at the configured destination.

    Nothing is registered unless the report kind is enabled for upload and
    its output exists.
    """
    if not config.upload:
        return []
    destination = Path(config.destination) if config.destination else default_destination
    if destination is None:
        log.debug("report_destination_unset", format=format.value)
        return []

    files = find_report_files(destination, format)
    if not files:
        log.info("report_missing", format=format.value, destination=str(destination))
        return []

    reports = [
        Report(report_file=path.absolute(), format=format, partition=config.partition, message=config.message)
        for path in files
    ]
    for report in reports:
        registry.register(report)
    return reports


def register_junit_reports(registry: ReportRegistry, config: ReportConfig, results_dir: Path) -> list[Report]:
    """Hook for plain test tasks: their JUnit XML results."""
    return register_reports(registry, config, ReportFormat.JUNIT, results_dir)


def register_jacoco_report(registry: ReportRegistry, config: ReportConfig, xml_report: Path) -> list[Report]:
    """Hook for coverage report tasks: their JaCoCo XML report."""
    return register_reports(registry, config, ReportFormat.JACOCO, xml_report)
