"""
Dropzone Repository - Single Responsibility: CRUD over dropzones, files
and API keys.

Every method is one executor call; nothing is cached, every read goes to
the server.
"""
import logging
from typing import Any, Dict, List, Optional

from ..auth import Access
from ..errors import ConfigurationError, ProtocolError
from ..models import Dropzone, FileItem
from ..protocols import IRequestExecutor
from .executor import path_param

logger = logging.getLogger(__name__)


def _expect_dict(payload: Any, what: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise ProtocolError(f"invalid response from {what}", payload)
    return payload


class DropzoneRepository:
    """Repository for dropzone, file and API key resources."""

    def __init__(self, executor: IRequestExecutor):
        """
        Initialize repository.

        Args:
            executor: Request executor carrying base URL and auth strategy
        """
        self._api = executor

    # =========================================================================
    # Dropzones
    # =========================================================================

    async def create_dropzone(self, gb: float, days: int, name: Optional[str] = None) -> Dropzone:
        """
        Create a dropzone. Consumes gb * days / 30 GB-months from the API key.

        Args:
            gb: Capacity in GB
            days: Lifetime in days
            name: Optional display name
        """
        self._api.require(Access.API_KEY, "create dropzone")
        if not gb or gb <= 0:
            raise ConfigurationError("gb must be a positive number")
        if not days or days <= 0:
            raise ConfigurationError("days must be a positive number")

        body: Dict[str, Any] = {"gb": gb, "days": days}
        if name:
            body["name"] = name

        payload = await self._api.request(
            "POST", "/dropzones", access=Access.API_KEY, json=body, operation="create dropzone"
        )
        dropzone = Dropzone.from_payload(_expect_dict(payload, "create dropzone"))
        logger.info("Created dropzone %s (%s GB, %s days)", dropzone.id, gb, days)
        return dropzone

    async def get_dropzone(self, dropzone_id: str) -> Dropzone:
        path = f"/dropzones/{path_param(dropzone_id, 'dropzone id')}"
        payload = await self._api.request("GET", path, operation="get dropzone")
        return Dropzone.from_payload(_expect_dict(payload, "get dropzone"))

    async def list_files(self, dropzone_id: str) -> List[FileItem]:
        path = f"/dropzones/{path_param(dropzone_id, 'dropzone id')}/files"
        payload = await self._api.request("GET", path, operation="list files")
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ProtocolError("invalid response from list files", payload)
        if not all(isinstance(item, dict) for item in payload):
            raise ProtocolError("invalid file entry in list files response", payload)
        return [FileItem.from_payload(item) for item in payload]

    # =========================================================================
    # Files
    # =========================================================================

    async def get_file(self, file_id: str) -> FileItem:
        path = f"/files/{path_param(file_id, 'file id')}"
        payload = await self._api.request("GET", path, operation="get file")
        return FileItem.from_payload(_expect_dict(payload, "get file"), default_id=file_id)

    async def download_file(self, file_id: str) -> bytes:
        path = f"/files/{path_param(file_id, 'file id')}/download"
        return await self._api.request(
            "GET", path, access=Access.SCOPED, binary=True, operation="download file"
        )

    async def delete_file(self, file_id: str) -> Any:
        """Delete a file; returns the server acknowledgement as sent."""
        path = f"/files/{path_param(file_id, 'file id')}"
        ack = await self._api.request(
            "DELETE", path, access=Access.SCOPED, unwrap=False, operation="delete file"
        )
        logger.info("Deleted file %s", file_id)
        return ack

    def file_url(self, file_id: str) -> str:
        """Public URL of a file. Pure string operation, no I/O."""
        return f"{self._api.base_url}/files/{path_param(file_id, 'file id')}"

    # =========================================================================
    # API keys
    # =========================================================================

    async def get_api_key_info(self) -> Dict[str, Any]:
        payload = await self._api.request(
            "GET", "/apikeys/me", access=Access.API_KEY, operation="get API key info"
        )
        return _expect_dict(payload, "get API key info")

    async def create_api_key(self) -> Dict[str, Any]:
        payload = await self._api.request(
            "POST", "/apikeys", access=Access.API_KEY, operation="create API key"
        )
        return _expect_dict(payload, "create API key")

    async def transfer_gb_months(self, to_api_key: str, gb_months: float) -> Any:
        """
        Transfer GB-months to another API key.

        Requires a key with the `apikey.create` role; server-side only.
        """
        self._api.require(Access.API_KEY, "transfer GB-months")
        path = f"/apikeys/{path_param(to_api_key, 'target API key')}/transfer-gbmonths"
        if not gb_months or gb_months <= 0:
            raise ConfigurationError("gb_months must be a positive number")
        result = await self._api.request(
            "POST",
            path,
            access=Access.API_KEY,
            json={"gbMonths": gb_months},
            operation="transfer GB-months",
        )
        logger.info("Transferred %s GB-months", gb_months)
        return result
