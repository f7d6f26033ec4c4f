"""Grant, revoke and read API-key permissions on dropzones and files."""
import logging
from typing import Iterable, List, Optional

from ..auth import Access
from ..errors import ConfigurationError
from ..models import PermissionSet
from ..protocols import IRequestExecutor
from .executor import path_param

logger = logging.getLogger(__name__)

RESOURCE_KINDS = ("dropzones", "files")


def _validate_tokens(permissions: Iterable[str]) -> List[str]:
    # semantic validation is the server's job
    if isinstance(permissions, str):
        permissions = [permissions]
    tokens = list(permissions or [])
    if not tokens:
        raise ConfigurationError("at least one permission is required")
    for token in tokens:
        if not isinstance(token, str) or not token.strip():
            raise ConfigurationError(f"invalid permission token: {token!r}")
    return tokens


class PermissionService:
    """Permission grants on dropzones and files. Server is the authority."""

    def __init__(self, executor: IRequestExecutor):
        self._api = executor

    def _path(self, kind: str, resource_id: str) -> str:
        if kind not in RESOURCE_KINDS:
            raise ValueError(f"unknown resource kind: {kind}")
        label = "dropzone id" if kind == "dropzones" else "file id"
        return f"/{kind}/{path_param(resource_id, label)}/permissions"

    async def grant(
        self, kind: str, resource_id: str, public_id: str, permissions: Iterable[str]
    ) -> PermissionSet:
        return await self._mutate("POST", kind, resource_id, public_id, permissions)

    async def revoke(
        self, kind: str, resource_id: str, public_id: str, permissions: Iterable[str]
    ) -> PermissionSet:
        return await self._mutate("DELETE", kind, resource_id, public_id, permissions)

    async def _mutate(
        self, method: str, kind: str, resource_id: str, public_id: str, permissions: Iterable[str]
    ) -> PermissionSet:
        operation = "grant permissions" if method == "POST" else "revoke permissions"
        self._api.require(Access.API_KEY, operation)
        path = self._path(kind, resource_id)
        path_param(public_id, "grantee id")
        tokens = _validate_tokens(permissions)

        payload = await self._api.request(
            method,
            path,
            access=Access.API_KEY,
            json={"publicId": public_id, "permissions": tokens},
            operation=operation,
        )
        logger.info("%s on %s/%s for %s: %s", operation, kind, resource_id, public_id, tokens)
        return PermissionSet.from_payload(payload)

    async def get(self, kind: str, resource_id: str, public_id: Optional[str] = None) -> PermissionSet:
        self._api.require(Access.API_KEY, "get permissions")
        path = self._path(kind, resource_id)
        params = {"publicId": public_id} if public_id else None
        payload = await self._api.request(
            "GET", path, access=Access.API_KEY, params=params, operation="get permissions"
        )
        return PermissionSet.from_payload(payload)
