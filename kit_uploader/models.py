"""Data models for the Katalon test-project uploader."""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class UploadStage(Enum):
    """Stage of a single upload run."""

    AUTHENTICATING = "authenticating"
    FETCHING_UPLOAD_INFO = "fetching_upload_info"
    UPLOADING = "uploading"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


@dataclass
class UploaderConfig:
    """Connection settings for the analytics server."""

    server_url: Optional[str] = None
    email: Optional[str] = None
    apikey: Optional[str] = None
    project_id: Optional[str] = None


@dataclass
class HttpResponse:
    """Status and decoded body of a completed HTTP request."""

    status: int
    body: Any = None
    request_url: Optional[str] = None


@dataclass
class UploadInfo:
    """Signed upload URL and destination path issued by the server."""

    upload_url: str
    path: str

    @classmethod
    def from_body(cls, body: Any) -> "UploadInfo":
        """Build from the JSON body of the upload-url endpoint.

        Raises:
            KeyError: If the body lacks ``uploadUrl`` or ``path``.
        """
        if not isinstance(body, dict):
            raise KeyError("uploadUrl")
        return cls(upload_url=body["uploadUrl"], path=body["path"])


@dataclass
class UploadSession:
    """Mutable state of one upload run, passed through every stage."""

    config: UploaderConfig
    file_path: str
    project_id: Optional[str] = None
    stage: UploadStage = UploadStage.AUTHENTICATING
    token: Optional[str] = None
    upload_info: Optional[UploadInfo] = None
    batch: Optional[str] = None
    file_name: Optional[str] = None


@dataclass
class UploadResult:
    """Outcome of an upload run."""

    file_path: str
    project_id: Optional[str]
    stage: UploadStage
    batch: Optional[str] = None
    uploaded_path: Optional[str] = None
    notify_status: Optional[int] = None
    duration_seconds: float = 0.0
    error_message: Optional[str] = None
    failed_stage: Optional[UploadStage] = None
    timestamp: str = field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()))

    @property
    def succeeded(self) -> bool:
        """Check if every stage completed."""
        return self.stage == UploadStage.DONE


def generate_batch_id() -> str:
    """Generate a batch identifier: epoch milliseconds plus a random UUID."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4()}"
