"""Upload orchestrator.

Runs the four dependent calls of an upload in order:

    AUTHENTICATING -> FETCHING_UPLOAD_INFO -> UPLOADING -> NOTIFYING -> DONE

The first failure moves the run to FAILED and skips every later stage.
Failures are caught once, logged, and returned on the UploadResult; they
are never raised out of ``upload_test_project``.
"""

import os
import time
from typing import Optional

from kit_uploader.api import KatalonClient
from kit_uploader.http_client import HttpAdapter
from kit_uploader.log import get_logger
from kit_uploader.models import (
    UploadInfo,
    UploaderConfig,
    UploadResult,
    UploadSession,
    UploadStage,
    generate_batch_id,
)
from kit_uploader.reporters.base import Reporter

logger = get_logger(__name__)


class UploadError(Exception):
    """Raised when a server response lacks the data the next stage needs."""

    def __init__(self, message: str, stage: UploadStage, status: Optional[int] = None):
        super().__init__(message)
        self.stage = stage
        self.status = status


class Uploader:
    """Uploads a test-project archive and registers it with a project.

    Each call to ``upload_test_project`` is a single attempt with its own
    UploadSession; nothing is retried.
    """

    def __init__(
        self,
        config: UploaderConfig,
        adapter: HttpAdapter,
        reporter: Optional[Reporter] = None,
    ):
        """Initialize the uploader.

        Args:
            config: Server URL and credentials
            adapter: HTTP adapter shared by every stage
            reporter: Optional progress reporter
        """
        self.config = config
        self.client = KatalonClient(adapter, config.server_url)
        self.reporter = reporter

    async def upload_test_project(
        self,
        file_path: str,
        project_id: Optional[str] = None,
    ) -> UploadResult:
        """Upload a file and notify the server.

        Args:
            file_path: Local archive to upload
            project_id: Target project (defaults to config.project_id)

        Returns:
            UploadResult with stage DONE or FAILED.
        """
        session = UploadSession(
            config=self.config,
            file_path=file_path,
            project_id=project_id if project_id is not None else self.config.project_id,
        )
        start_time = time.time()
        error_message = None
        failed_stage = None
        notify_status = None

        try:
            await self._authenticate(session)
            await self._fetch_upload_info(session)
            await self._upload(session)
            notify_status = await self._notify(session)
            session.stage = UploadStage.DONE
            logger.info("Uploaded file: %s", file_path)
        except Exception as e:
            failed_stage = session.stage
            session.stage = UploadStage.FAILED
            error_message = str(e) or type(e).__name__
            logger.error("Upload of %s failed while %s: %s",
                         file_path, failed_stage.value.replace("_", " "), error_message)

        result = UploadResult(
            file_path=file_path,
            project_id=session.project_id,
            stage=session.stage,
            batch=session.batch,
            uploaded_path=session.upload_info.path if session.upload_info else None,
            notify_status=notify_status,
            duration_seconds=time.time() - start_time,
            error_message=error_message,
            failed_stage=failed_stage,
        )

        if self.reporter:
            self.reporter.on_upload_complete(result)

        return result

    def _enter(self, session: UploadSession, stage: UploadStage) -> None:
        session.stage = stage
        if self.reporter:
            self.reporter.on_stage_start(stage)

    def _complete(self, session: UploadSession) -> None:
        if self.reporter:
            self.reporter.on_stage_complete(session.stage)

    async def _authenticate(self, session: UploadSession) -> None:
        self._enter(session, UploadStage.AUTHENTICATING)

        response = await self.client.request_token(self.config.email, self.config.apikey)
        body = response.body if isinstance(response.body, dict) else {}
        token = body.get("access_token")
        if not token:
            raise UploadError(
                f"No access token in response (HTTP {response.status})",
                stage=UploadStage.AUTHENTICATING,
                status=response.status,
            )

        session.token = token
        self._complete(session)

    async def _fetch_upload_info(self, session: UploadSession) -> None:
        self._enter(session, UploadStage.FETCHING_UPLOAD_INFO)

        response = await self.client.get_upload_info(session.token, session.project_id)
        try:
            session.upload_info = UploadInfo.from_body(response.body)
        except KeyError as e:
            raise UploadError(
                f"Missing {e} in upload info response (HTTP {response.status})",
                stage=UploadStage.FETCHING_UPLOAD_INFO,
                status=response.status,
            ) from e

        self._complete(session)

    async def _upload(self, session: UploadSession) -> None:
        self._enter(session, UploadStage.UPLOADING)

        await self.client.upload_file(session.upload_info.upload_url, session.file_path)
        session.batch = generate_batch_id()
        session.file_name = os.path.basename(session.file_path)

        self._complete(session)

    async def _notify(self, session: UploadSession) -> int:
        self._enter(session, UploadStage.NOTIFYING)

        response = await self.client.upload_test_project(
            session.token,
            session.project_id,
            session.batch,
            session.file_name,
            session.upload_info.path,
        )

        self._complete(session)
        return response.status
