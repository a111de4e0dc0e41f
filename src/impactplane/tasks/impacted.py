"""Impacted test task: configures and launches the external test engine.

Per test task, in order:
1. validate the test framework and engine selection
2. aggregate class-output and artifact directories across dependent projects
3. emit the engine properties and launch the test process with them
4. hand the report artifacts to the conversion step and register the
   produced testwise (and optional closure) coverage reports

The local coverage agent is exported in ``IMPACTPLANE_AGENT_JVM_ARGS`` for the
build to pass to its test JVM. Putting it into ``JAVA_TOOL_OPTIONS`` attaches
it to every JVM the command starts (build tool daemons included), so that is
opt-in via ``agent.inject_java_tool_options``.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from impactplane.config.models import ImpactPlaneConfig
from impactplane.core.errors import TestExecutionError
from impactplane.core.logging import get_logger
from impactplane.engine.properties import EngineProperties, EngineSettings, emit_engine_properties
from impactplane.engine.validation import validate_impacted_config
from impactplane.git.commit import CommitResolver
from impactplane.projects.walker import (
    ProjectGraph,
    ProjectNode,
    collect_class_dirs,
    collect_dependent_projects,
)
from impactplane.reports.models import Report, ReportFormat, ReportRegistry
from impactplane.tasks.reports import register_reports

log = get_logger(__name__)

JAVA_TOOL_OPTIONS = "JAVA_TOOL_OPTIONS"
AGENT_JVM_ARGS = "IMPACTPLANE_AGENT_JVM_ARGS"
REPORT_ARTIFACTS = "IMPACTPLANE_REPORT_ARTIFACTS"
MANIFEST_NAME = "report-artifacts.yaml"


@dataclass(frozen=True, slots=True)
class TestProcessRequest:
    """How to launch the external test process."""

    __test__ = False

    command: tuple[str, ...]
    env: Mapping[str, str]
    cwd: Path
    timeout_sec: float | None = None


TestProcessRunner = Callable[[TestProcessRequest], int]


def run_test_process(request: TestProcessRequest) -> int:
    """Run the test process to completion and return its exit code."""
    command = list(request.command)
    log.info("test_process_started", command=command, cwd=str(request.cwd))
    try:
        completed = subprocess.run(
            command,
            cwd=request.cwd,
            env=dict(request.env),
            timeout=request.timeout_sec,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise TestExecutionError.timed_out(command, request.timeout_sec or 0) from e
    except FileNotFoundError as e:
        raise TestExecutionError.process_failed(command, 127) from e
    log.info("test_process_finished", exit_code=completed.returncode)
    return completed.returncode



@dataclass(frozen=True, slots=True)
class ReportArtifacts:
    """Inputs of the testwise coverage report of one test task.

    ``artifact_dirs`` holds the engine's report directory and the optional
    closure coverage destination; ``class_dirs`` the class output of every
    dependent project. The conversion step reads them from the manifest.
    """

    report_directory: Path
    artifact_dirs: tuple[Path, ...]
    class_dirs: tuple[Path, ...]
    projects: tuple[str, ...]
    partition: str

    @property
    def manifest_path(self) -> Path:
        return self.report_directory / MANIFEST_NAME

    def to_dict(self) -> dict[str, Any]:
        return {
            "partition": self.partition,
            "report_directory": str(self.report_directory),
            "artifact_dirs": [str(d) for d in self.artifact_dirs],
            "class_dirs": [str(d) for d in self.class_dirs],
            "projects": list(self.projects),
        }


def write_artifact_manifest(artifacts: ReportArtifacts) -> Path:
    path = artifacts.manifest_path
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        yaml.safe_dump(artifacts.to_dict(), f, sort_keys=False)
    return path


@dataclass(frozen=True, slots=True)
class PreparedRun:
    artifacts: ReportArtifacts
    properties: EngineProperties
    request: TestProcessRequest


@dataclass(slots=True)
class ImpactedRunResult:
    artifacts: ReportArtifacts
    properties: EngineProperties
    exit_code: int
    manifest: Path
    reports: list[Report] = field(default_factory=list)


class ImpactedTestTaskController:
    """Coordinates one impacted test task of one project."""

    def __init__(
        self,
        config: ImpactPlaneConfig,
        *,
        project: ProjectNode,
        graph: ProjectGraph,
        task_name: str,
        commit: CommitResolver,
        registry: ReportRegistry,
        build_dir: Path,
        runner: TestProcessRunner = run_test_process,
    ) -> None:
        self._config = config
        self._project = project
        self._graph = graph
        self._task_name = task_name
        self._commit = commit
        self._registry = registry
        self._build_dir = build_dir
        self._runner = runner

    @property
    def report_directory(self) -> Path:
        """Where the engine writes. Fixed for the whole build."""
        if self._config.agent.destination:
            return Path(self._config.agent.destination).absolute()
        return (self._build_dir / "jacoco" / f"{self._project.identifier}-{self._task_name}").absolute()

    def collect_artifacts(self) -> ReportArtifacts:
        projects = collect_dependent_projects(self._project, self._graph)
        artifact_dirs = [self.report_directory]
        closure_destination = self._config.reports.closure_coverage.destination
        if closure_destination:
            artifact_dirs.append(Path(closure_destination).absolute())
        artifacts = ReportArtifacts(
            report_directory=self.report_directory,
            artifact_dirs=tuple(artifact_dirs),
            class_dirs=collect_class_dirs(projects),
            projects=tuple(sorted(p.identifier for p in projects)),
            partition=self._config.reports.testwise_coverage.partition,
        )
        log.info(
            "report_artifacts_collected",
            task=self._task_name,
            projects=list(artifacts.projects),
            class_dirs=len(artifacts.class_dirs),
        )
        return artifacts

    def prepare(self, command: Sequence[str], cwd: Path | None = None) -> PreparedRun:
        """Validate, aggregate and configure without launching anything.

        Raises:
            ConfigError: Unsupported framework, excluded impact engine or
                incomplete server configuration.
        """
        impacted = self._config.impacted
        validate_impacted_config(impacted)

        artifacts = self.collect_artifacts()

        properties = emit_engine_properties(
            EngineSettings(
                server=self._config.server,
                commit=self._commit,
                partition=artifacts.partition,
                report_directory=artifacts.report_directory,
                baseline=self._config.baseline,
                agent_urls=tuple(self._config.agent.all_urls),
                run_impacted=impacted.run_impacted,
                run_all_tests=impacted.run_all_tests,
                include_engines=tuple(impacted.include_engines),
            )
        )

        env = {**os.environ, **properties.to_environment()}
        env[REPORT_ARTIFACTS] = str(artifacts.manifest_path)
        agent_args = self._config.agent.jvm_args(artifacts.report_directory)
        if agent_args:
            env[AGENT_JVM_ARGS] = _join_jvm_options(None, agent_args)

        jvm_args = properties.to_jvm_args()
        if self._config.agent.inject_java_tool_options:
            jvm_args = agent_args + jvm_args
        env[JAVA_TOOL_OPTIONS] = _join_jvm_options(os.environ.get(JAVA_TOOL_OPTIONS), jvm_args)

        request = TestProcessRequest(
            command=tuple(command),
            env=env,
            cwd=cwd or Path.cwd(),
            timeout_sec=impacted.timeout_sec,
        )
        return PreparedRun(artifacts=artifacts, properties=properties, request=request)

    def execute(self, command: Sequence[str], cwd: Path | None = None) -> ImpactedRunResult:
        """Run the impacted tests and register the resulting reports.

        Reports are registered even when the test process fails, so that
        coverage of a run with failing tests still reaches the server.

        Raises:
            TestExecutionError: The test process failed or timed out.
        """
        prepared = self.prepare(command, cwd)
        _reset_directory(prepared.artifacts.report_directory)
        manifest = write_artifact_manifest(prepared.artifacts)

        exit_code = self._runner(prepared.request)
        reports = self.register_reports(prepared.artifacts)

        if exit_code != 0:
            raise TestExecutionError.process_failed(list(prepared.request.command), exit_code)
        return ImpactedRunResult(
            artifacts=prepared.artifacts,
            properties=prepared.properties,
            exit_code=exit_code,
            manifest=manifest,
            reports=reports,
        )

    def register_reports(self, artifacts: ReportArtifacts) -> list[Report]:
        """Register the testwise report and the optional closure report.

        The testwise report is read from the engine's report directory unless
        ``reports.testwise_coverage.destination`` names the conversion output.
        """
        reports = self._config.reports
        registered = register_reports(
            self._registry,
            reports.testwise_coverage,
            ReportFormat.TESTWISE_COVERAGE,
            artifacts.report_directory,
        )
        registered += register_reports(self._registry, reports.closure_coverage, ReportFormat.CLOSURE)
        return registered


def _reset_directory(path: Path) -> None:
    """Empty the raw coverage directory so stale results are not reported."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)


def _join_jvm_options(existing: str | None, args: Sequence[str]) -> str:
    quoted = [f'"{arg}"' if " " in arg else arg for arg in args]
    return " ".join([existing, *quoted] if existing else quoted)
