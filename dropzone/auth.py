"""Authentication strategies consulted by the request executor on every call."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from .errors import ConfigurationError
from .models import ClientConfig


API_KEY_HEADER = "x-api-key"
DROPZONE_HEADER = "x-dropzone-id"


class Access(Enum):
    """Credential level an operation needs."""
    PUBLIC = "public"    # send what we have, require nothing
    SCOPED = "scoped"    # API key or dropzone scope
    API_KEY = "api_key"  # API key only


class AuthStrategy:
    """Base strategy: decides headers and whether an access level is satisfied."""

    api_key: Optional[str] = None
    dropzone_id: Optional[str] = None

    def headers(self) -> Dict[str, str]:
        return {}

    def require(self, access: Access, operation: str = "this operation") -> None:
        """Raise ConfigurationError if the strategy cannot satisfy `access`."""
        if access is Access.API_KEY and not self.api_key:
            raise ConfigurationError(f"API key is required for {operation}")
        if access is Access.SCOPED and not (self.api_key or self.dropzone_id):
            raise ConfigurationError(
                f"API key or dropzone scope is required for {operation}"
            )

    @staticmethod
    def from_config(config: ClientConfig) -> "AuthStrategy":
        if config.dropzone_id:
            return DropzoneScopeAuth(config.dropzone_id, api_key=config.api_key)
        if config.api_key:
            return ApiKeyAuth(config.api_key)
        return AnonymousAuth()


@dataclass(frozen=True)
class ApiKeyAuth(AuthStrategy):
    api_key: str

    def __post_init__(self):
        if not self.api_key:
            raise ConfigurationError("ApiKeyAuth requires a non-empty API key")

    def headers(self) -> Dict[str, str]:
        return {API_KEY_HEADER: self.api_key}


@dataclass(frozen=True)
class DropzoneScopeAuth(AuthStrategy):
    """Client bound to one dropzone; the API key, if any, travels alongside."""
    dropzone_id: str
    api_key: Optional[str] = None

    def __post_init__(self):
        if not self.dropzone_id:
            raise ConfigurationError("DropzoneScopeAuth requires a dropzone id")

    def headers(self) -> Dict[str, str]:
        headers = {DROPZONE_HEADER: self.dropzone_id}
        if self.api_key:
            headers[API_KEY_HEADER] = self.api_key
        return headers


@dataclass(frozen=True)
class AnonymousAuth(AuthStrategy):
    pass
