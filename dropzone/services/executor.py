"""HTTP executor: one network call per invocation, uniform error mapping."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..auth import Access, AuthStrategy, AnonymousAuth
from ..errors import ConfigurationError, HttpError, TransportError

logger = logging.getLogger(__name__)


def path_param(value: Any, name: str) -> str:
    """Validate a required path parameter and quote it as one URL segment."""
    if value is None or not str(value).strip():
        raise ConfigurationError(f"{name} is required")
    return quote(str(value), safe="")


def _error_from_response(response: httpx.Response, method: str) -> HttpError:
    message = None
    data = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        data = body.get("data")
        if message is not None and not isinstance(message, str):
            message = str(message)

    return HttpError(
        status_code=response.status_code,
        status_text=response.reason_phrase,
        message=message,
        data=data,
        method=method,
        url=str(response.request.url) if response.request else "",
    )


class RequestExecutor:
    """
    HTTP executor for Dropzone API calls.

    Implements IRequestExecutor protocol. Each request() performs exactly
    one call: no retries, no caching. Must be used as an async context
    manager so the underlying httpx.AsyncClient is opened and closed.
    """

    def __init__(
        self,
        base_url: str,
        auth: Optional[AuthStrategy] = None,
        timeout: float = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._auth = auth or AnonymousAuth()
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def auth(self) -> AuthStrategy:
        return self._auth

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("RequestExecutor not initialized. Use 'async with' context.")
        return self._client

    def require(self, access: Access, operation: str) -> None:
        self._auth.require(access, operation)

    async def request(
        self,
        method: str,
        path: str,
        *,
        access: Access = Access.PUBLIC,
        json: Optional[Any] = None,
        content: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        binary: bool = False,
        unwrap: bool = True,
        operation: Optional[str] = None,
    ) -> Any:
        """
        Issue one request relative to base_url.

        Args:
            method: HTTP method
            path: Path relative to base_url (already quoted)
            access: Credential level required; checked before any I/O
            json: JSON body (exclusive with content)
            content: Raw body (exclusive with json)
            headers: Extra headers, applied over the auth headers
            params: Query parameters
            binary: Return raw bytes instead of decoding JSON
            unwrap: Return the envelope's `data` field when present
            operation: Name used in error messages

        Returns:
            Decoded payload, raw bytes when binary, None on empty body

        Raises:
            ConfigurationError: credentials missing for `access`
            HttpError: non-2xx response
            TransportError: no HTTP response received
        """
        if json is not None and content is not None:
            raise ValueError("json and content bodies are mutually exclusive")

        self.require(access, operation or f"{method} {path}")
        client = self._ensure_client()

        request_headers = dict(self._auth.headers())
        if headers:
            request_headers.update(headers)

        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            response = await client.request(
                method,
                path,
                json=json,
                content=content,
                headers=request_headers,
                params=params,
            )
        except httpx.RequestError as exc:
            raise TransportError(
                f"{method} {path} failed: {exc}", method=method, url=f"{self.base_url}{path}"
            ) from exc

        if not response.is_success:
            error = _error_from_response(response, method)
            logger.debug("%s %s -> %s", method, path, error)
            raise error

        if binary:
            return response.content
        return self._decode(response, unwrap)

    @staticmethod
    def _decode(response: httpx.Response, unwrap: bool) -> Any:
        if not response.content:
            return None
        try:
            body = response.json()
        except ValueError:
            return response.text
        if unwrap and isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    async def put_signed(self, url: str, content: bytes, content_type: str) -> None:
        """PUT bytes to a presigned URL; no base URL, no auth headers."""
        client = self._ensure_client()
        logger.debug("PUT <signed url> (%d bytes, %s)", len(content), content_type)
        try:
            response = await client.put(
                url,
                content=content,
                headers={"Content-Type": content_type},
            )
        except httpx.RequestError as exc:
            raise TransportError(f"PUT to signed URL failed: {exc}", method="PUT", url=url) from exc

        if not response.is_success:
            raise _error_from_response(response, "PUT")
