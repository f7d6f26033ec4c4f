"""Services for dropzone module."""
from .executor import RequestExecutor, path_param
from .permissions import PermissionService
from .repository import DropzoneRepository

__all__ = [
    "RequestExecutor",
    "path_param",
    "PermissionService",
    "DropzoneRepository",
]
