"""Katalon Analytics API client.

Thin wrappers over HttpAdapter for the three server endpoints the
uploader talks to. Each method is a single round trip: nothing is
retried or cached, and the status code is left for the caller to judge.
"""

from typing import Any, Optional

from kit_uploader.http_client import BearerAuth, HttpAdapter
from kit_uploader.models import HttpResponse

TOKEN_URI = "/oauth/token"
UPLOAD_URL_URI = "/api/v1/files/upload-url"
TEST_PROJECT_URI = "/api/v1/test-projects"

# OAuth2 client registered for the uploader
OAUTH2_CLIENT_ID = "kit_uploader"
OAUTH2_CLIENT_SECRET = "kit_uploader"
OAUTH2_GRANT_TYPE = "password"


class KatalonClient:
    """Client for the Katalon Analytics upload endpoints."""

    def __init__(self, adapter: HttpAdapter, server_url: Optional[str]):
        """Initialize the client.

        Args:
            adapter: HTTP adapter used for every request
            server_url: Base URL of the analytics server
        """
        self.adapter = adapter
        self.server_url = server_url

    async def request_token(self, email: Optional[str], password: Optional[str]) -> HttpResponse:
        """Request an access token with the OAuth2 password grant.

        The response body is expected to carry ``access_token``.
        """
        options = {
            "auth": (OAUTH2_CLIENT_ID, OAUTH2_CLIENT_SECRET),
            "headers": {"content-type": "application/x-www-form-urlencoded"},
            "data": {
                "username": email,
                "password": password,
                "grant_type": OAUTH2_GRANT_TYPE,
            },
        }
        return await self.adapter.request(self.server_url, TOKEN_URI, options, "POST")

    async def get_upload_info(self, token: str, project_id: Optional[str]) -> HttpResponse:
        """Ask the server for a presigned upload URL.

        The response body is expected to carry ``uploadUrl`` and ``path``.
        """
        options = {
            "auth": BearerAuth(token),
            "params": {"projectId": project_id},
        }
        return await self.adapter.request(self.server_url, UPLOAD_URL_URI, options, "GET")

    async def upload_file(self, upload_url: str, file_path: str) -> HttpResponse:
        """Upload the file body to the presigned URL."""
        return await self.adapter.upload_to_s3(upload_url, file_path)

    async def upload_test_project(
        self,
        token: str,
        project_id: Optional[str],
        batch: str,
        file_name: str,
        uploaded_path: str,
        extra_params: Optional[dict[str, Any]] = None,
    ) -> HttpResponse:
        """Tell the server an uploaded package is ready for the project.

        Args:
            token: Access token
            project_id: Target project
            batch: Batch identifier for this upload
            file_name: Base name of the uploaded file
            uploaded_path: Destination path returned with the upload URL
            extra_params: Additional query parameters, applied last

        Returns:
            HttpResponse of the update-package call.
        """
        params = {
            "projectId": project_id,
            "batch": batch,
            "folderPath": "",
            "fileName": file_name,
            "uploadedPath": uploaded_path,
        }
        params.update(extra_params or {})

        options = {
            "auth": BearerAuth(token),
            "params": params,
        }
        # An unset project is sent empty, never as "None"
        project_segment = "" if project_id is None else project_id
        path = f"{TEST_PROJECT_URI}/{project_segment}/update-package"
        return await self.adapter.request(self.server_url, path, options, "POST")
