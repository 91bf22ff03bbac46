"""FastAPI dependency injection for the storage gateway.

Two dependencies are provided:

1. **get_storage_gateway**: returns the process-wide gateway
2. **require_storage**: additionally enforces that the gateway is started
   (HTTP 503 otherwise)

Example Usage
-------------
::

    from filestore_service.infra.storage.dependencies import Storage

    @router.get("/list-files")
    async def list_files(storage: Storage) -> list[str]:
        result = await storage.list_objects(bucket)
        ...

Tests replace the gateway with ``app.dependency_overrides[get_storage_gateway]``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status

from .gateway import S3StorageGateway


def get_storage_gateway() -> S3StorageGateway:
    """Get the process-wide storage gateway.

    The returned gateway may not be started; check ``is_ready``.

    Raises:
        StorageNotConfiguredError: If storage is disabled (rendered as 503)
    """
    from .gateway import get_storage_gateway as _get_storage_gateway

    return _get_storage_gateway()


async def require_storage(
    storage: Annotated[S3StorageGateway, Depends(get_storage_gateway)],
) -> S3StorageGateway:
    """Dependency that requires a started gateway.

    Raises:
        HTTPException: 503 Service Unavailable if the gateway has no client
    """
    if not storage.is_ready:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "storage_unavailable",
                "message": "Storage service is not available",
            },
        )
    return storage


Storage = Annotated[S3StorageGateway, Depends(require_storage)]
"""Gateway dependency that raises HTTP 503 unless the gateway is ready."""
