"""Task controllers invoked by the build."""

from impactplane.tasks.impacted import (
    ImpactedRunResult,
    ImpactedTestTaskController,
    PreparedRun,
    ReportArtifacts,
    TestProcessRequest,
    run_test_process,
    write_artifact_manifest,
)
from impactplane.tasks.reports import (
    find_report_files,
    register_jacoco_report,
    register_junit_reports,
    register_reports,
)
from impactplane.tasks.session import BuildSession
from impactplane.tasks.upload import UploadState, UploadTaskController

__all__ = [
    "BuildSession",
    "ImpactedRunResult",
    "ImpactedTestTaskController",
    "PreparedRun",
    "ReportArtifacts",
    "TestProcessRequest",
    "UploadState",
    "UploadTaskController",
    "find_report_files",
    "register_jacoco_report",
    "register_junit_reports",
    "register_reports",
    "run_test_process",
    "write_artifact_manifest",
]
