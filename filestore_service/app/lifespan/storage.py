"""Storage gateway lifespan management."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from filestore_service.infra.storage.exceptions import StorageError
from filestore_service.infra.storage.gateway import get_storage_gateway, set_storage_gateway
from filestore_service.infra.storage.results import Failure

if TYPE_CHECKING:
    from filestore_service.core.settings.storage import StorageSettings

logger = logging.getLogger(__name__)


async def startup_storage(settings: StorageSettings) -> None:
    """Start the storage gateway and optionally provision the bucket.

    Failures leave the service running in degraded mode (storage routes
    answer 503) unless ``startup_require_storage`` is set.
    """
    if not settings.is_configured:
        logger.info("Object storage disabled, skipping gateway startup")
        return

    try:
        gateway = get_storage_gateway()
        await gateway.startup()

        if settings.ensure_bucket_on_startup:
            result = await gateway.ensure_bucket(settings.bucket)
            if isinstance(result, Failure):
                raise StorageError(
                    result.error.message,
                    code="STORAGE_BUCKET_UNAVAILABLE",
                    status_code=503,
                    metadata={"bucket": settings.bucket},
                )

        logger.info(
            "Storage gateway ready",
            extra={"bucket": settings.bucket, "endpoint": settings.endpoint},
        )
    except Exception as e:
        if settings.startup_require_storage:
            logger.error(
                "Object storage required but unavailable, failing startup",
                extra={"error": str(e)},
            )
            raise
        logger.warning(
            "Object storage unavailable, continuing in degraded mode",
            extra={"error": str(e)},
        )


async def shutdown_storage(settings: StorageSettings) -> None:
    """Close the storage gateway and forget the process-wide instance."""
    if not settings.is_configured:
        return

    try:
        gateway = get_storage_gateway()
        await gateway.shutdown()
    except StorageError as e:
        logger.warning("Error during storage gateway shutdown", extra={"error": str(e)})
    finally:
        set_storage_gateway(None)
