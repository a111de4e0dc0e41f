"""Upload client for the analysis server's external report API."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import ExitStack
from pathlib import Path
from typing import Protocol, cast

import httpx

from impactplane.config.models import ServerConfig
from impactplane.core.errors import UploadError
from impactplane.core.logging import get_logger
from impactplane.git.commit import CommitDescriptor
from impactplane.reports.models import ReportFormat

log = get_logger(__name__)

NETWORK_ERRORS: tuple[type[Exception], ...] = (httpx.ConnectError, httpx.TimeoutException)
"""Connectivity failures: connection refused/reset and timeouts."""


class UploadClient(Protocol):
    """Uploads a batch of report files of one format as a single server commit."""

    def upload_reports(
        self,
        format: ReportFormat,
        files: Sequence[Path],
        commit: CommitDescriptor,
        partition: str,
        message: str,
    ) -> None: ...


UploadClientFactory = Callable[[ServerConfig], UploadClient]


class HttpUploadClient:
    """Multipart upload via httpx with basic auth (user name + access token)."""

    def __init__(
        self,
        server: ServerConfig,
        *,
        timeout_sec: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        server.validate_required()
        self._server = server
        self._client = httpx.Client(
            base_url=str(server.url),
            auth=httpx.BasicAuth(cast(str, server.user_name), cast(str, server.user_access_token)),
            timeout=timeout_sec,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return f"/api/projects/{self._server.project}/external-analysis/session/auto-create/report"

    def upload_reports(
        self,
        format: ReportFormat,
        files: Sequence[Path],
        commit: CommitDescriptor,
        partition: str,
        message: str,
    ) -> None:
        params = {
            "format": format.value,
            "t": str(commit),
            "partition": partition,
            "message": message,
        }
        with ExitStack() as stack:
            parts = [
                ("report", (path.name, stack.enter_context(path.open("rb")), "application/octet-stream"))
                for path in files
            ]
            log.debug("upload_request", endpoint=self.endpoint, files=len(parts), **params)
            response = self._client.post(self.endpoint, params=params, files=parts)

        if response.is_error:
            raise UploadError.rejected(response.status_code, response.text[:500])

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpUploadClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def http_client_factory(timeout_sec: float = 60.0) -> UploadClientFactory:
    """Factory producing a fresh HttpUploadClient per upload attempt."""

    def factory(server: ServerConfig) -> UploadClient:
        return HttpUploadClient(server, timeout_sec=timeout_sec)

    return factory
