"""Use cases for the three-step upload handshake (request, transfer, confirm)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from dropzone.auth import Access, AuthStrategy, DropzoneScopeAuth
from dropzone.errors import ConfigurationError, ProtocolError
from dropzone.models import FileItem, UploadSession, UploadSource, UploadState
from dropzone.protocols import IRequestExecutor
from dropzone.services.executor import path_param
from dropzone.utils.events import EventEmitter

logger = logging.getLogger(__name__)

STATE_EVENT = "state"


@dataclass(frozen=True)
class UploadRoutes:
    """Endpoints used by one upload; differ between auth variants."""

    request_path: str
    scoped: bool = False

    def confirm_path(self, file_id: str) -> str:
        if self.scoped:
            return "/upload/confirm"
        return f"/files/{path_param(file_id, 'file id')}/confirm"

    def confirm_body(self, file_id: str) -> Optional[Dict[str, Any]]:
        return {"fileId": file_id} if self.scoped else None


class ResolveUploadRoutesUseCase:
    """Pick request/confirm endpoints from the auth variant and dropzone id."""

    @staticmethod
    def execute(auth: AuthStrategy, dropzone_id: Optional[str]) -> UploadRoutes:
        if isinstance(auth, DropzoneScopeAuth):
            if dropzone_id and dropzone_id != auth.dropzone_id:
                raise ConfigurationError(
                    f"client is scoped to dropzone {auth.dropzone_id}, not {dropzone_id}"
                )
            return UploadRoutes(request_path="/upload/request", scoped=True)

        return UploadRoutes(
            request_path=f"/dropzones/{path_param(dropzone_id, 'dropzone id')}/files"
        )


class RequestUploadUseCase:
    """Step 1: announce the file and obtain an id plus a signed URL."""

    async def execute(
        self, executor: IRequestExecutor, routes: UploadRoutes, source: UploadSource
    ) -> UploadSession:
        logger.info("Requesting upload URL for %s (%d bytes)", source.name, source.size)
        payload = await executor.request(
            "POST",
            routes.request_path,
            access=Access.SCOPED,
            json={"name": source.name, "type": source.type, "size": source.size},
            operation="request upload",
        )

        file_id = payload.get("fileId") if isinstance(payload, dict) else None
        signed_url = payload.get("signedUrl") if isinstance(payload, dict) else None
        if not file_id or not signed_url:
            raise ProtocolError("invalid response from upload request", payload)

        return UploadSession(file_id=str(file_id), signed_url=str(signed_url))


class TransferBytesUseCase:
    """Step 2: PUT the bytes to the signed URL."""

    async def execute(
        self, executor: IRequestExecutor, session: UploadSession, source: UploadSource
    ) -> None:
        logger.debug("Uploading %s to signed URL for file %s", source.name, session.file_id)
        await executor.put_signed(session.signed_url, source.content, source.type)


class ConfirmUploadUseCase:
    """Step 3: tell the service the transfer finished."""

    async def execute(
        self, executor: IRequestExecutor, routes: UploadRoutes, session: UploadSession
    ) -> FileItem:
        logger.debug("Confirming upload for file %s", session.file_id)
        payload = await executor.request(
            "POST",
            routes.confirm_path(session.file_id),
            access=Access.SCOPED,
            json=routes.confirm_body(session.file_id),
            operation="confirm upload",
        )
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ProtocolError("invalid response from upload confirm", payload)

        item = FileItem.from_payload(payload, default_id=session.file_id)
        if item.id != session.file_id:
            raise ProtocolError(
                f"confirm returned file {item.id}, expected {session.file_id}", payload
            )
        return item


class UploadFileUseCase:
    """
    Run request -> transfer -> confirm strictly in sequence.

    Any failing step aborts the upload with that step's error. Nothing is
    retried or rolled back: a confirm failure leaves the bytes uploaded but
    unconfirmed.
    """

    def __init__(
        self,
        resolve_routes: Optional[ResolveUploadRoutesUseCase] = None,
        request_upload: Optional[RequestUploadUseCase] = None,
        transfer_bytes: Optional[TransferBytesUseCase] = None,
        confirm_upload: Optional[ConfirmUploadUseCase] = None,
    ):
        self._resolve_routes = resolve_routes or ResolveUploadRoutesUseCase()
        self._request_upload = request_upload or RequestUploadUseCase()
        self._transfer_bytes = transfer_bytes or TransferBytesUseCase()
        self._confirm_upload = confirm_upload or ConfirmUploadUseCase()

    async def execute(
        self,
        executor: IRequestExecutor,
        auth: AuthStrategy,
        source: UploadSource,
        dropzone_id: Optional[str] = None,
        events: Optional[EventEmitter] = None,
    ) -> FileItem:
        executor.require(Access.SCOPED, "upload file")
        if not source.name:
            raise ConfigurationError("file name is required")
        routes = self._resolve_routes.execute(auth, dropzone_id)

        async def advance(state: UploadState, session: Optional[UploadSession] = None):
            if events:
                await events.emit(STATE_EVENT, source, state, session)

        await advance(UploadState.REQUESTED)
        session = await self._request_upload.execute(executor, routes, source)
        await advance(UploadState.URL_ISSUED, session)

        await self._transfer_bytes.execute(executor, session, source)
        await advance(UploadState.BYTES_SENT, session)

        item = await self._confirm_upload.execute(executor, routes, session)
        await advance(UploadState.CONFIRMED, session)

        logger.info("File uploaded successfully: %s (%s)", source.name, item.id)
        return item


class UploadManyUseCase:
    """Upload several sources one after another, stopping at the first error."""

    def __init__(self, upload_file: Optional[UploadFileUseCase] = None):
        self._upload_file = upload_file or UploadFileUseCase()

    async def execute(
        self,
        executor: IRequestExecutor,
        auth: AuthStrategy,
        sources: Iterable[UploadSource],
        dropzone_id: Optional[str] = None,
        events: Optional[EventEmitter] = None,
    ) -> List[FileItem]:
        items = []
        for source in sources:
            items.append(
                await self._upload_file.execute(executor, auth, source, dropzone_id, events)
            )
        return items
