"""
Dropzone - async client for the Dropzone hosted file-storage API.

Usage:
    from dropzone import DropzoneClient, UploadSource

    async with DropzoneClient(api_key="your-api-key") as client:
        dropzone = await client.create_dropzone(gb=1, days=30)

        # Upload: request signed URL -> PUT bytes -> confirm
        item = await client.upload_file(Path("report.pdf"), dropzone.id)

        files = await client.list_files(dropzone.id)
        data = await client.download_file(item.id)
        url = client.get_file_url(item.id)  # no network call
"""
from .auth import Access, AnonymousAuth, ApiKeyAuth, AuthStrategy, DropzoneScopeAuth
from .client import DropzoneClient
from .errors import (
    ConfigurationError,
    DropzoneError,
    HttpError,
    ProtocolError,
    TransportError,
)
from .models import (
    ClientConfig,
    Dropzone,
    FileItem,
    FileMeta,
    PermissionSet,
    RuntimeContext,
    S3Status,
    UploadSession,
    UploadSource,
    UploadState,
)

__version__ = "0.3.0"
__all__ = [
    # Main
    "DropzoneClient",
    # Auth
    "Access",
    "AuthStrategy",
    "ApiKeyAuth",
    "DropzoneScopeAuth",
    "AnonymousAuth",
    # Errors
    "DropzoneError",
    "ConfigurationError",
    "HttpError",
    "ProtocolError",
    "TransportError",
    # Models
    "ClientConfig",
    "RuntimeContext",
    "Dropzone",
    "FileItem",
    "FileMeta",
    "S3Status",
    "UploadSource",
    "UploadSession",
    "UploadState",
    "PermissionSet",
]
