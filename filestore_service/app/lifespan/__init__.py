"""Application lifespan management.

Configures logging, then starts the storage gateway before the application
accepts requests and shuts it down afterwards.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from filestore_service.app.lifespan.storage import shutdown_storage, startup_storage
from filestore_service.core.settings import (
    get_app_settings,
    get_logging_settings,
    get_storage_settings,
)
from filestore_service.infra.logging import setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    _ = app

    app_settings = get_app_settings()
    storage_settings = get_storage_settings()
    setup_logging(get_logging_settings())

    logger.info(
        "Starting application",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": app_settings.environment,
        },
    )

    await startup_storage(storage_settings)

    try:
        yield
    finally:
        logger.info("Shutting down application")
        await shutdown_storage(storage_settings)


__all__ = ["lifespan"]
