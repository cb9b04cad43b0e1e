"""Shared fixtures: an in-process fake of the Katalon server and S3."""

import logging
from typing import Optional

import httpx
import pytest

from kit_uploader.http_client import HttpAdapter
from kit_uploader.log import LOGGER_NAME
from kit_uploader.models import UploaderConfig

SERVER_URL = "https://x.test"
SIGNED_URL = "https://s3.test/sign"


class FakeKatalonServer:
    """Routes requests to canned responses and records every call.

    Routes are named ``token``, ``upload_info``, ``s3`` and ``notify``.
    A route listed in ``fail_on`` raises httpx.ConnectError instead of
    answering.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.fail_on: set[str] = set()
        self.token_body: dict = {"access_token": "t1"}
        self.upload_info_body: dict = {"uploadUrl": SIGNED_URL, "path": "uploads/project.zip"}
        self.token_status = 200
        self.s3_status = 200
        self.notify_status = 200

    def route(self, request: httpx.Request) -> Optional[str]:
        path = request.url.path
        if request.method == "POST" and path == "/oauth/token":
            return "token"
        if request.method == "GET" and path == "/api/v1/files/upload-url":
            return "upload_info"
        if request.method == "PUT" and request.url.host == "s3.test":
            return "s3"
        if request.method == "POST" and path.endswith("/update-package"):
            return "notify"
        return None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        name = self.route(request)

        if name in self.fail_on:
            raise httpx.ConnectError(f"{name} unreachable", request=request)

        if name == "token":
            return httpx.Response(self.token_status, json=self.token_body)
        if name == "upload_info":
            return httpx.Response(200, json=self.upload_info_body)
        if name == "s3":
            return httpx.Response(self.s3_status)
        if name == "notify":
            return httpx.Response(self.notify_status, json={"status": "queued"})
        return httpx.Response(404, text="not found")

    def calls(self, name: str) -> list[httpx.Request]:
        """Return recorded requests for one route."""
        return [r for r in self.requests if self.route(r) == name]

    def adapter(self) -> HttpAdapter:
        """Build an HttpAdapter wired to this fake."""
        return HttpAdapter(transport=httpx.MockTransport(self.handler))


def form_body(request: httpx.Request) -> dict[str, str]:
    """Decode a form-encoded request body."""
    return dict(httpx.QueryParams(request.content.decode()))


@pytest.fixture
def fake_server() -> FakeKatalonServer:
    return FakeKatalonServer()


@pytest.fixture
def config() -> UploaderConfig:
    return UploaderConfig(
        server_url=SERVER_URL,
        email="a@b.com",
        apikey="k",
        project_id="42",
    )


@pytest.fixture
def project_file(tmp_path) -> str:
    """A small archive on disk."""
    path = tmp_path / "project.zip"
    path.write_bytes(b"PK\x03\x04" + bytes(range(256)) * 10)
    return str(path)


@pytest.fixture(autouse=True)
def reset_uploader_logger():
    """Undo setup_logging so each test starts with a propagating logger."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
