"""
Models for the Dropzone client.

Immutable dataclasses; server payloads are parsed with from_payload() and
the original dict is kept in `raw` so no field the API sends is lost.
"""
import mimetypes
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple


DEFAULT_BASE_URL = "https://www.collect-files.com/api/v1"
DEFAULT_TIMEOUT = 60.0
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class S3Status(Enum):
    """Storage-side upload status reported in file meta."""
    PENDING = "pending"
    UPLOADED = "uploaded"
    UNKNOWN = "unknown"  # absent or unrecognised

    @classmethod
    def parse(cls, value: Any) -> "S3Status":
        if value == cls.PENDING.value:
            return cls.PENDING
        if value == cls.UPLOADED.value:
            return cls.UPLOADED
        return cls.UNKNOWN


class UploadState(Enum):
    """Steps of the three-step upload handshake."""
    REQUESTED = "requested"
    URL_ISSUED = "url_issued"
    BYTES_SENT = "bytes_sent"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client configuration."""
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    dropzone_id: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "base_url", (self.base_url or DEFAULT_BASE_URL).rstrip("/"))

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ClientConfig":
        """Build config from DROPZONE_* environment variables."""
        env = os.environ if environ is None else environ
        timeout = env.get("DROPZONE_TIMEOUT")
        return cls(
            base_url=env.get("DROPZONE_BASE_URL") or DEFAULT_BASE_URL,
            api_key=env.get("DROPZONE_API_KEY") or None,
            dropzone_id=env.get("DROPZONE_ID") or None,
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
        )


@dataclass(frozen=True)
class RuntimeContext:
    """Explicit description of the host environment."""
    is_server: bool = True
    is_development: bool = False

    @classmethod
    def detect(cls, environ: Optional[Dict[str, str]] = None) -> "RuntimeContext":
        env = os.environ if environ is None else environ
        return cls(
            is_server=True,
            is_development=(env.get("DROPZONE_ENV", "").lower() == "development"),
        )


@dataclass(frozen=True)
class Dropzone:
    """Server-side storage bucket."""
    id: str
    gb: Optional[float] = None
    days: Optional[int] = None
    name: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Dropzone":
        return cls(
            id=str(payload.get("id") or payload.get("_id") or ""),
            gb=payload.get("gb"),
            days=payload.get("days"),
            name=payload.get("name"),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class FileMeta:
    """File meta record; s3_status is the only upload-progress signal."""
    s3_status: S3Status = S3Status.UNKNOWN
    dropzone_id: Optional[str] = None
    dropzone_code: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> "FileMeta":
        payload = payload or {}
        return cls(
            s3_status=S3Status.parse(payload.get("s3Status")),
            dropzone_id=payload.get("dropZoneId"),
            dropzone_code=payload.get("dropZoneCode"),
            created_at=payload.get("createdAt"),
        )


@dataclass(frozen=True)
class FileItem:
    """File stored inside a dropzone."""
    id: str
    name: Optional[str] = None
    size: Optional[int] = None
    type: Optional[str] = None
    meta: FileMeta = field(default_factory=FileMeta)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_uploaded(self) -> bool:
        return self.meta.s3_status is S3Status.UPLOADED

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], default_id: Optional[str] = None) -> "FileItem":
        file_id = payload.get("_id") or payload.get("id") or payload.get("fileId") or default_id
        meta = payload.get("meta")
        return cls(
            id=str(file_id or ""),
            name=payload.get("name"),
            size=payload.get("size"),
            type=payload.get("type"),
            meta=FileMeta.from_payload(meta if isinstance(meta, dict) else None),
            raw=dict(payload),
        )


@dataclass(frozen=True)
class UploadSource:
    """Bytes to upload plus the metadata announced in step 1."""
    name: str
    content: bytes
    type: str = DEFAULT_CONTENT_TYPE

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Path, content_type: Optional[str] = None) -> "UploadSource":
        """Read a local file, guessing its MIME type from the extension."""
        file_path = Path(path)
        if not content_type:
            content_type, _ = mimetypes.guess_type(str(file_path))
        return cls(
            name=file_path.name,
            content=file_path.read_bytes(),
            type=content_type or DEFAULT_CONTENT_TYPE,
        )


@dataclass(frozen=True)
class UploadSession:
    """State carried from the request step to the transfer and confirm steps."""
    file_id: str
    signed_url: str


@dataclass(frozen=True)
class PermissionSet:
    """Permission tokens held by a grantee on a dropzone or file."""
    permissions: Tuple[str, ...] = ()

    def __contains__(self, token: object) -> bool:
        return token in self.permissions

    def __iter__(self):
        return iter(self.permissions)

    def __len__(self) -> int:
        return len(self.permissions)

    @classmethod
    def of(cls, tokens: Iterable[str]) -> "PermissionSet":
        """Keep first occurrence order, drop duplicates."""
        seen = []
        for token in tokens:
            if token not in seen:
                seen.append(token)
        return cls(tuple(seen))

    @classmethod
    def from_payload(cls, payload: Any) -> "PermissionSet":
        if isinstance(payload, dict):
            payload = payload.get("permissions", [])
        if not payload:
            return cls()
        return cls.of(str(token) for token in payload)
