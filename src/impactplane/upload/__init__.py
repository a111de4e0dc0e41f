"""Report upload: retry, HTTP client and batching."""

from impactplane.upload.batcher import UploadGroup, UploadResult, group_reports, upload_reports
from impactplane.upload.client import (
    NETWORK_ERRORS,
    HttpUploadClient,
    UploadClient,
    UploadClientFactory,
    http_client_factory,
)
from impactplane.upload.retry import retry

__all__ = [
    "NETWORK_ERRORS",
    "HttpUploadClient",
    "UploadClient",
    "UploadClientFactory",
    "UploadGroup",
    "UploadResult",
    "group_reports",
    "http_client_factory",
    "retry",
    "upload_reports",
]
