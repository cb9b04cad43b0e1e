"""HTTP client adapter built on httpx.

Wraps a single ``httpx.AsyncClient`` and exposes the two request shapes
the uploader needs:
- JSON API requests against the analytics server
- Raw binary PUT of a local file to a presigned object-storage URL

Every response is returned as an HttpResponse regardless of its status
code. Only transport-level failures raise, and they are re-raised
unchanged after being logged.
"""

import asyncio
import os
from typing import Any, AsyncGenerator, Optional

import httpx

from kit_uploader.log import TRACE, get_logger
from kit_uploader.models import HttpResponse

logger = get_logger(__name__)

DEFAULT_HEADERS = {
    "content-type": "application/json",
    "accept": "application/json",
}

# Read size for streaming uploads: 1 MiB
UPLOAD_CHUNK_SIZE = 1024 * 1024

# Caller options forwarded to httpx
REQUEST_OPTIONS = ("auth", "params", "data", "json")


class BearerAuth(httpx.Auth):
    """Present an access token in the Authorization header."""

    def __init__(self, token: str):
        self.token = token

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = f"Bearer {self.token}"
        yield request


def join_url(base_url: Optional[str], relative_path: str) -> str:
    """Join a base URL and a relative path with exactly one slash.

    Args:
        base_url: Server URL, may be None when unconfigured
        relative_path: Path relative to the server root

    Returns:
        The combined URL.
    """
    base = (base_url or "").rstrip("/")
    path = relative_path.lstrip("/")
    if not base:
        return f"/{path}"
    return f"{base}/{path}"


async def iter_file(file_path: str, chunk_size: int = UPLOAD_CHUNK_SIZE) -> AsyncGenerator[bytes, None]:
    """Yield a file's bytes in chunks without blocking the event loop."""
    f = await asyncio.to_thread(open, file_path, "rb")
    try:
        while True:
            chunk = await asyncio.to_thread(f.read, chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        await asyncio.to_thread(f.close)


def decode_body(response: httpx.Response) -> Any:
    """Decode a response body as JSON, falling back to text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpAdapter:
    """Async HTTP adapter with TLS verification disabled.

    Use as an async context manager so the underlying connection pool is
    closed when the run finishes:

        >>> async with HttpAdapter() as adapter:
        ...     response = await adapter.request(url, "/oauth/token", options, "POST")
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the adapter.

        Args:
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._client = httpx.AsyncClient(verify=False, transport=transport)

    async def __aenter__(self) -> "HttpAdapter":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.aclose()
        return False

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def request(
        self,
        base_url: Optional[str],
        relative_path: str,
        options: Optional[dict[str, Any]] = None,
        method: str = "GET",
    ) -> HttpResponse:
        """Send a JSON request to the server.

        Args:
            base_url: Server URL
            relative_path: Path joined onto the server URL
            options: Caller options (headers, auth, params, data, json)
                merged over the default JSON headers
            method: HTTP method

        Returns:
            HttpResponse for any status code the server answers with.

        Raises:
            httpx.HTTPError: If the transport fails.
        """
        options = options or {}
        method = method.upper()
        url = join_url(base_url, relative_path)

        headers = httpx.Headers(DEFAULT_HEADERS)
        headers.update(options.get("headers") or {})
        kwargs = {key: options[key] for key in REQUEST_OPTIONS if key in options}

        logger.log(TRACE, "REQUEST: %s %s headers=%s params=%s", method, url,
                   dict(headers), kwargs.get("params"))

        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise

        logger.info("%s %s %s.", method, response.request.url, response.status_code)

        result = HttpResponse(
            status=response.status_code,
            body=decode_body(response),
            request_url=url,
        )
        logger.log(TRACE, "RESPONSE: %s", result)
        return result

    async def upload_to_s3(self, signed_url: str, file_path: str) -> HttpResponse:
        """Stream a local file to a presigned URL with PUT.

        The Content-Length header is set to the file's size on disk so
        the body is not sent chunked.

        Args:
            signed_url: Presigned object-storage URL
            file_path: Local file to upload

        Returns:
            HttpResponse once the whole body has been sent.

        Raises:
            OSError: If the file cannot be read.
            httpx.HTTPError: If the transport fails.
        """
        size = os.stat(file_path).st_size
        method = "PUT"
        headers = {
            "content-type": "application/octet-stream",
            "accept": "application/json",
            "Content-Length": str(size),
        }

        logger.log(TRACE, "REQUEST: %s %s headers=%s", method, signed_url, headers)

        try:
            response = await self._client.request(
                method,
                signed_url,
                headers=headers,
                content=iter_file(file_path),
            )
        except httpx.HTTPError as e:
            logger.error("%s %s failed: %s", method, signed_url, e)
            raise

        logger.info("%s %s %s.", method, response.request.url, response.status_code)

        result = HttpResponse(
            status=response.status_code,
            body=decode_body(response),
            request_url=signed_url,
        )
        logger.log(TRACE, "RESPONSE: %s", result)
        return result
