"""Application use cases for upload workflows."""

from .upload import (
    STATE_EVENT,
    ConfirmUploadUseCase,
    RequestUploadUseCase,
    ResolveUploadRoutesUseCase,
    TransferBytesUseCase,
    UploadFileUseCase,
    UploadManyUseCase,
    UploadRoutes,
)

__all__ = [
    "STATE_EVENT",
    "ConfirmUploadUseCase",
    "RequestUploadUseCase",
    "ResolveUploadRoutesUseCase",
    "TransferBytesUseCase",
    "UploadFileUseCase",
    "UploadManyUseCase",
    "UploadRoutes",
]
