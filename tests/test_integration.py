"""Integration tests against a local HTTP server.

These tests send real requests over a socket so the streaming upload,
form encoding and query strings are checked as the server sees them.
They do NOT require Katalon credentials.
"""

import asyncio
import json
import threading
from http.server import HTTPServer, BaseHTTPRequestHandler
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from kit_uploader.http_client import HttpAdapter
from kit_uploader.models import UploaderConfig, UploadStage
from kit_uploader.uploader import Uploader


class MockKatalonHandler(BaseHTTPRequestHandler):
    """Mock handler for the token, upload-url, storage and notify routes."""

    # Shared across requests; reset by the fixture
    received: list[dict] = []

    def log_message(self, format, *args):
        """Suppress logging."""
        pass

    def _record(self) -> dict:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length else b""
        url = urlparse(self.path)
        entry = {
            "method": self.command,
            "path": url.path,
            "query": {k: v[0] for k, v in parse_qs(url.query, keep_blank_values=True).items()},
            "headers": dict(self.headers),
            "body": body,
        }
        self.received.append(entry)
        return entry

    def _send_json(self, status: int, payload: dict) -> None:
        data = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def do_POST(self):
        entry = self._record()
        if entry["path"] == "/oauth/token":
            self._send_json(200, {"access_token": "t1", "token_type": "bearer"})
        else:
            self._send_json(200, {"status": "queued"})

    def do_GET(self):
        self._record()
        host, port = self.server.server_address
        self._send_json(200, {
            "uploadUrl": f"http://{host}:{port}/storage/project.zip?signature=abc",
            "path": "uploads/project.zip",
        })

    def do_PUT(self):
        """Accept the upload only when Content-Length is set."""
        entry = self._record()
        if "Content-Length" not in entry["headers"]:
            self.send_response(411)
            self.end_headers()
            return
        self.send_response(200)
        self.send_header("ETag", '"mock-etag-12345"')
        self.send_header("Content-Length", "0")
        self.end_headers()


@pytest.fixture(scope="module")
def mock_server():
    """Start a mock HTTP server for integration tests."""
    server = HTTPServer(("127.0.0.1", 0), MockKatalonHandler)
    port = server.server_address[1]
    thread = threading.Thread(target=server.serve_forever)
    thread.daemon = True
    thread.start()
    yield f"http://127.0.0.1:{port}"
    server.shutdown()


@pytest.fixture
def received():
    MockKatalonHandler.received = []
    return MockKatalonHandler.received


class TestStreamingUpload:
    """Tests for upload_to_s3 over a real connection."""

    def test_content_length_sent_and_body_intact(self, mock_server, received, tmp_path):
        data = bytes(range(256)) * 8192  # 2 MiB, several read chunks
        path = tmp_path / "project.zip"
        path.write_bytes(data)

        async def go():
            async with HttpAdapter() as adapter:
                return await adapter.upload_to_s3(f"{mock_server}/storage/project.zip", str(path))

        response = asyncio.run(go())

        assert response.status == 200
        put = received[0]
        assert put["headers"]["Content-Length"] == str(len(data))
        assert "Transfer-Encoding" not in put["headers"]
        assert put["body"] == data

    def test_connection_refused_raises_connect_error(self, tmp_path):
        path = tmp_path / "project.zip"
        path.write_bytes(b"data")

        async def go():
            async with HttpAdapter() as adapter:
                return await adapter.upload_to_s3("http://127.0.0.1:1/storage", str(path))

        with pytest.raises(httpx.ConnectError):
            asyncio.run(go())


class TestFullUpload:
    """Tests for the complete upload chain over a real connection."""

    def test_upload_chain(self, mock_server, received, project_file):
        config = UploaderConfig(server_url=mock_server, email="a@b.com", apikey="k", project_id="42")

        async def go():
            async with HttpAdapter() as adapter:
                return await Uploader(config, adapter).upload_test_project(project_file)

        result = asyncio.run(go())

        assert result.stage == UploadStage.DONE
        assert [(r["method"], r["path"]) for r in received] == [
            ("POST", "/oauth/token"),
            ("GET", "/api/v1/files/upload-url"),
            ("PUT", "/storage/project.zip"),
            ("POST", "/api/v1/test-projects/42/update-package"),
        ]

        token, info, put, notify = received
        assert parse_qs(token["body"].decode()) == {
            "username": ["a@b.com"],
            "password": ["k"],
            "grant_type": ["password"],
        }
        assert info["query"] == {"projectId": "42"}
        assert put["query"] == {"signature": "abc"}
        assert notify["query"]["fileName"] == "project.zip"
        assert notify["query"]["uploadedPath"] == "uploads/project.zip"
        assert notify["query"]["folderPath"] == ""
        assert notify["query"]["batch"] == result.batch

    def test_unreachable_server_fails_at_authentication(self, project_file):
        config = UploaderConfig(server_url="http://127.0.0.1:1", email="a@b.com", apikey="k")

        async def go():
            async with HttpAdapter() as adapter:
                return await Uploader(config, adapter).upload_test_project(project_file, "42")

        result = asyncio.run(go())

        assert result.stage == UploadStage.FAILED
        assert result.failed_stage == UploadStage.AUTHENTICATING

    def test_missing_server_url_fails_at_authentication(self, project_file):
        """An unconfigured server surfaces as a request failure."""
        config = UploaderConfig(server_url=None, email="a@b.com", apikey="k")

        async def go():
            async with HttpAdapter() as adapter:
                return await Uploader(config, adapter).upload_test_project(project_file, "42")

        result = asyncio.run(go())

        assert result.failed_stage == UploadStage.AUTHENTICATING
        assert result.error_message
