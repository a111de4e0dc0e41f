"""Upload task: ships every registered report once all producers finished."""

from __future__ import annotations

from enum import Enum

from impactplane.config.models import ServerConfig, UploadConfig
from impactplane.core.errors import ErrorCode, UploadError
from impactplane.core.logging import get_logger
from impactplane.git.commit import CommitResolver
from impactplane.reports.models import ReportRegistry
from impactplane.upload.batcher import UploadResult, upload_reports
from impactplane.upload.client import UploadClientFactory, http_client_factory

log = get_logger(__name__)


class UploadState(str, Enum):
    IDLE = "idle"
    VALIDATED = "validated"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


class UploadTaskController:
    """Runs once per build, after every task that can register a report.

    Owns the build's ReportRegistry; producers receive it by reference and
    call ``register``.
    """

    def __init__(
        self,
        server: ServerConfig,
        commit: CommitResolver,
        upload: UploadConfig,
        *,
        registry: ReportRegistry | None = None,
        client_factory: UploadClientFactory | None = None,
    ) -> None:
        self._server = server
        self._commit = commit
        self._upload = upload
        self._registry = registry if registry is not None else ReportRegistry()
        self._client_factory = client_factory or http_client_factory(upload.timeout_sec)
        self._state = UploadState.IDLE

    @property
    def registry(self) -> ReportRegistry:
        return self._registry

    @property
    def state(self) -> UploadState:
        return self._state

    def run(self) -> UploadResult | None:
        """Upload all registered reports.

        Returns None when there was nothing to upload or a failure was
        ignored.

        Raises:
            ConfigError: Server configuration incomplete (before any request).
            UploadError: Network failure after retries, unless ignored.
        """
        reports = self._registry.snapshot()
        if not reports:
            log.info("upload_skipped", reason="no reports to upload")
            return None

        self._server.validate_required()
        self._state = UploadState.VALIDATED

        try:
            commit = self._commit.resolve()
            log.info("upload_started", server=str(self._server), commit=str(commit), reports=len(reports))
            self._state = UploadState.UPLOADING
            result = upload_reports(
                reports,
                commit,
                self._server,
                self._client_factory,
                retries=self._upload.retries,
            )
        except Exception as e:
            if self._upload.ignore_failures:
                log.warning("upload_failure_ignored", error=str(e), exc_info=True)
                self._state = UploadState.DONE
                return None
            if isinstance(e, UploadError) and e.code is ErrorCode.UPLOAD_NETWORK_FAILURE:
                self._state = UploadState.FAILED
            raise

        self._state = UploadState.DONE
        log.info("upload_finished", uploaded=len(result.uploaded), skipped=len(result.skipped))
        return result
