"""
Protocols (Interfaces) for Dependency Inversion.

Services and use cases depend on these, so tests can swap the HTTP layer.
"""
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from .auth import Access


@runtime_checkable
class IRequestExecutor(Protocol):
    """Interface for the single-call HTTP executor."""

    base_url: str

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
        """Issue one call relative to the base URL and return its payload."""
        ...

    async def put_signed(self, url: str, content: bytes, content_type: str) -> None:
        """PUT raw bytes to a self-authorizing absolute URL."""
        ...

    def require(self, access: Access, operation: str) -> None:
        """Fail fast if the configured credentials cannot satisfy `access`."""
        ...
