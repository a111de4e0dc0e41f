"""One build invocation: shared commit, report registry and upload task."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from impactplane.config.models import ImpactPlaneConfig
from impactplane.core.logging import get_logger, set_build_id
from impactplane.git.commit import CommitDescriptor, CommitResolver, read_commit_from_git
from impactplane.projects.walker import ProjectGraph, ProjectNode
from impactplane.reports.models import ReportRegistry
from impactplane.tasks.impacted import ImpactedTestTaskController, TestProcessRunner, run_test_process
from impactplane.tasks.upload import UploadTaskController
from impactplane.upload.client import UploadClientFactory

log = get_logger(__name__)


class BuildSession:
    """Objects that live exactly as long as one build.

    Every task controller created here shares the session's commit resolver
    and report registry.
    """

    def __init__(
        self,
        config: ImpactPlaneConfig,
        repo_root: Path,
        *,
        client_factory: UploadClientFactory | None = None,
        commit_source: Callable[[Path], CommitDescriptor] = read_commit_from_git,
        build_id: str | None = None,
    ) -> None:
        self.config = config
        self.repo_root = repo_root
        self.build_id = set_build_id(build_id)
        self.commit = CommitResolver(config.commit, repo_root, commit_source)
        self.registry = ReportRegistry()
        self.upload_task = UploadTaskController(
            config.server,
            self.commit,
            config.upload,
            registry=self.registry,
            client_factory=client_factory,
        )

    @property
    def build_dir(self) -> Path:
        build_dir = Path(self.config.build_dir)
        return build_dir if build_dir.is_absolute() else self.repo_root / build_dir

    def impacted_task(
        self,
        project: ProjectNode,
        graph: ProjectGraph,
        task_name: str = "testImpacted",
        *,
        runner: TestProcessRunner = run_test_process,
    ) -> ImpactedTestTaskController:
        log.debug("impacted_task_configured", project=project.identifier, task=task_name)
        return ImpactedTestTaskController(
            self.config,
            project=project,
            graph=graph,
            task_name=task_name,
            commit=self.commit,
            registry=self.registry,
            build_dir=self.build_dir,
            runner=runner,
        )
