"""Object storage gateway for S3-compatible stores.

Quick Start:
    # In routes using dependency injection
    from filestore_service.infra.storage import Storage

    @router.get("/list-files")
    async def list_files(storage: Storage):
        match await storage.list_objects("chatbot-files"):
            case Success(value=listing):
                return list(listing.object_keys)
            case Failure(error=detail):
                raise exception_for_failure(detail)

    # Direct access from scripts and the CLI
    from filestore_service.infra.storage import S3StorageGateway

    async with S3StorageGateway(settings) as gateway:
        result = await gateway.ensure_bucket(settings.bucket)
"""

from __future__ import annotations

from .content_types import CONTENT_TYPES_BY_EXTENSION, DEFAULT_CONTENT_TYPE, content_type_for_key
from .dependencies import Storage, require_storage
from .exceptions import (
    StorageError,
    StorageFileNotFoundError,
    StorageNotConfiguredError,
    StorageOperationError,
    StorageStreamClosedError,
    exception_for_failure,
    failure_from_exception,
    map_boto_error,
)
from .gateway import S3StorageGateway, get_storage_gateway, set_storage_gateway
from .models import DownloadOutcome, ListingOutcome, ObjectStream, UploadOutcome
from .protocol import StorageGateway
from .results import (
    Failure,
    FailureDetail,
    FailureKind,
    Result,
    Success,
    not_found,
    protocol_failure,
    unexpected_failure,
)

__all__ = [
    "CONTENT_TYPES_BY_EXTENSION",
    "DEFAULT_CONTENT_TYPE",
    "DownloadOutcome",
    "Failure",
    "FailureDetail",
    "FailureKind",
    "ListingOutcome",
    "ObjectStream",
    "Result",
    "S3StorageGateway",
    "Storage",
    "StorageError",
    "StorageFileNotFoundError",
    "StorageGateway",
    "StorageNotConfiguredError",
    "StorageOperationError",
    "StorageStreamClosedError",
    "Success",
    "UploadOutcome",
    "content_type_for_key",
    "exception_for_failure",
    "failure_from_exception",
    "get_storage_gateway",
    "map_boto_error",
    "not_found",
    "protocol_failure",
    "require_storage",
    "set_storage_gateway",
    "unexpected_failure",
]
