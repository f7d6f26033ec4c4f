"""
Error taxonomy for the Dropzone client.

Every failure surfaced by the client is a DropzoneError subclass:
- ConfigurationError: raised before any network call (missing key, empty id)
- HttpError: the server answered with a non-2xx status
- ProtocolError: the server answered 2xx but the body has the wrong shape
- TransportError: the request never got an HTTP answer
"""
from typing import Any, Optional


class DropzoneError(Exception):
    """Base class for all client errors."""


class ConfigurationError(DropzoneError):
    """Required credential, identifier or argument missing or invalid."""


class ProtocolError(DropzoneError):
    """Successful response whose payload violates the API contract."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class TransportError(DropzoneError):
    """Network-level failure (connection refused, timeout, DNS...)."""

    def __init__(self, message: str, method: str = "", url: str = ""):
        super().__init__(message)
        self.method = method
        self.url = url


class HttpError(DropzoneError):
    """
    Non-2xx HTTP response.

    Carries the status code and reason phrase, plus the server message and
    auxiliary data when the body was a JSON envelope.
    """

    def __init__(
        self,
        status_code: int,
        status_text: str,
        message: Optional[str] = None,
        data: Any = None,
        method: str = "",
        url: str = "",
    ):
        self.status_code = status_code
        self.status_text = status_text
        self.message = message
        self.data = data
        self.method = method
        self.url = url
        super().__init__(self._render())

    def _render(self) -> str:
        text = f"{self.status_code} {self.status_text}".strip()
        if self.message:
            text = f"{text}: {self.message}"
        return text

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500
