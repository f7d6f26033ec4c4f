"""Client facade - wires executor, repository, permissions and upload use cases."""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import httpx

from .auth import AuthStrategy
from .models import (
    ClientConfig,
    Dropzone,
    FileItem,
    PermissionSet,
    RuntimeContext,
    UploadSource,
)
from .services.executor import RequestExecutor
from .services.permissions import PermissionService
from .services.repository import DropzoneRepository
from .use_cases.upload import STATE_EVENT, UploadFileUseCase, UploadManyUseCase
from .utils.events import EventEmitter

logger = logging.getLogger(__name__)

SourceLike = Union[UploadSource, str, Path]


def _as_source(source: SourceLike) -> UploadSource:
    if isinstance(source, UploadSource):
        return source
    return UploadSource.from_path(Path(source))


class DropzoneClient:
    """
    Client for the Dropzone file-storage API.

    The auth variant (API key, dropzone scope or anonymous) is chosen once
    at construction and consulted on every call.

    Usage:
        async with DropzoneClient(api_key="...") as client:
            dropzone = await client.create_dropzone(gb=1, days=30)
            item = await client.upload_file(Path("report.pdf"), dropzone.id)
            assert await client.is_uploaded(item.id)

        # Client bound to one dropzone (uses /upload/* endpoints)
        async with DropzoneClient(dropzone_id="dz1") as client:
            await client.upload_file(UploadSource("a.txt", b"hi", "text/plain"))
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        dropzone_id: Optional[str] = None,
        *,
        config: Optional[ClientConfig] = None,
        auth: Optional[AuthStrategy] = None,
        context: Optional[RuntimeContext] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        upload_file: Optional[UploadFileUseCase] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: API base URL (default https://www.collect-files.com/api/v1)
            api_key: API key sent as x-api-key
            dropzone_id: Bind the client to one dropzone
            config: Full ClientConfig; overrides the three arguments above
            auth: Explicit strategy; default derived from config
            context: Host environment; default RuntimeContext()
            timeout: httpx timeout in seconds
            transport: httpx transport (tests inject httpx.MockTransport)
            upload_file: Upload orchestration use case
        """
        if config is None:
            kwargs: Dict[str, Any] = {"api_key": api_key, "dropzone_id": dropzone_id}
            if base_url:
                kwargs["base_url"] = base_url
            if timeout is not None:
                kwargs["timeout"] = timeout
            config = ClientConfig(**kwargs)

        self._config = config
        self._context = context or RuntimeContext()
        self._auth = auth or AuthStrategy.from_config(config)

        self._executor = RequestExecutor(
            config.base_url,
            auth=self._auth,
            timeout=config.timeout,
            transport=transport,
        )
        self._repository = DropzoneRepository(self._executor)
        self._permissions = PermissionService(self._executor)
        self._upload_file = upload_file or UploadFileUseCase()
        self._upload_many = UploadManyUseCase(self._upload_file)
        self._events = EventEmitter()

        if self._auth.api_key and not self._context.is_server:
            logger.warning(
                "You are not in a server env. Only use your API key on your own devices "
                "or server-side code."
            )
        if self._context.is_development:
            logger.debug(
                "DropzoneClient configured [base_url=%s auth=%s]",
                config.base_url,
                type(self._auth).__name__,
            )

    @classmethod
    def from_env(cls, **kwargs) -> "DropzoneClient":
        """Build a client from DROPZONE_* environment variables."""
        kwargs.setdefault("context", RuntimeContext.detect())
        return cls(config=ClientConfig.from_env(), **kwargs)

    async def __aenter__(self):
        await self._executor.__aenter__()
        return self

    async def __aexit__(self, *args):
        await self._executor.__aexit__(*args)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def auth(self) -> AuthStrategy:
        return self._auth

    def on_upload_state(self, callback: Callable) -> None:
        """Subscribe to upload state changes: callback(source, state, session)."""
        self._events.on(STATE_EVENT, callback)

    def off_upload_state(self, callback: Callable) -> None:
        self._events.off(STATE_EVENT, callback)

    # Dropzones

    async def create_dropzone(self, gb: float, days: int, name: Optional[str] = None) -> Dropzone:
        """Create a dropzone (requires API key; consumes GB-months)."""
        return await self._repository.create_dropzone(gb, days, name)

    async def get_dropzone(self, dropzone_id: str) -> Dropzone:
        return await self._repository.get_dropzone(dropzone_id)

    async def list_files(self, dropzone_id: str) -> List[FileItem]:
        return await self._repository.list_files(dropzone_id)

    # Files

    async def upload_file(
        self, source: SourceLike, dropzone_id: Optional[str] = None
    ) -> FileItem:
        """
        Upload a file: request a signed URL, PUT the bytes, confirm.

        Args:
            source: UploadSource or a local path
            dropzone_id: Target dropzone; optional for dropzone-scoped clients

        Returns:
            The FileItem returned by the confirm step
        """
        return await self._upload_file.execute(
            self._executor, self._auth, _as_source(source), dropzone_id, self._events
        )

    async def upload_files(
        self, sources: Iterable[SourceLike], dropzone_id: Optional[str] = None
    ) -> List[FileItem]:
        """Upload several files sequentially; the first failure aborts the rest."""
        return await self._upload_many.execute(
            self._executor,
            self._auth,
            (_as_source(source) for source in sources),
            dropzone_id,
            self._events,
        )

    async def get_file(self, file_id: str) -> FileItem:
        return await self._repository.get_file(file_id)

    async def is_uploaded(self, file_id: str) -> bool:
        """True iff the server reports meta.s3Status == "uploaded"."""
        return (await self._repository.get_file(file_id)).is_uploaded

    async def download_file(self, file_id: str) -> bytes:
        return await self._repository.download_file(file_id)

    async def delete_file(self, file_id: str) -> Any:
        return await self._repository.delete_file(file_id)

    def get_file_url(self, file_id: str) -> str:
        """URL of a file. Pure string construction, no network call."""
        return self._repository.file_url(file_id)

    # Permissions

    async def grant_dropzone_permissions(
        self, dropzone_id: str, public_id: str, permissions: Iterable[str]
    ) -> PermissionSet:
        return await self._permissions.grant("dropzones", dropzone_id, public_id, permissions)

    async def revoke_dropzone_permissions(
        self, dropzone_id: str, public_id: str, permissions: Iterable[str]
    ) -> PermissionSet:
        return await self._permissions.revoke("dropzones", dropzone_id, public_id, permissions)

    async def get_dropzone_permissions(
        self, dropzone_id: str, public_id: Optional[str] = None
    ) -> PermissionSet:
        return await self._permissions.get("dropzones", dropzone_id, public_id)

    async def grant_file_permissions(
        self, file_id: str, public_id: str, permissions: Iterable[str]
    ) -> PermissionSet:
        return await self._permissions.grant("files", file_id, public_id, permissions)

    async def revoke_file_permissions(
        self, file_id: str, public_id: str, permissions: Iterable[str]
    ) -> PermissionSet:
        return await self._permissions.revoke("files", file_id, public_id, permissions)

    async def get_file_permissions(
        self, file_id: str, public_id: Optional[str] = None
    ) -> PermissionSet:
        return await self._permissions.get("files", file_id, public_id)

    # API keys

    async def get_api_key_info(self) -> Dict[str, Any]:
        return await self._repository.get_api_key_info()

    async def create_api_key(self) -> Dict[str, Any]:
        return await self._repository.create_api_key()

    async def transfer_gb_months(self, to_api_key: str, gb_months: float) -> Any:
        """Transfer GB-months to another API key (server-side use only)."""
        return await self._repository.transfer_gb_months(to_api_key, gb_months)
