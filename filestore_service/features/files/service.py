"""Service layer for file upload, listing and download.

Each operation provisions the bucket first and then performs one gateway
call. Gateway failures become StorageErrors here: 500 when the bucket could
not be provisioned, 404 for a missing download, 400 for any other failed
operation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, BinaryIO

from filestore_service.infra.storage.content_types import content_type_for_key
from filestore_service.infra.storage.results import Failure

if TYPE_CHECKING:
    from filestore_service.core.settings.storage import StorageSettings
    from filestore_service.infra.storage.models import DownloadOutcome, UploadOutcome
    from filestore_service.infra.storage.protocol import StorageGateway

logger = logging.getLogger(__name__)


class FileService:
    """Orchestrates file operations against the configured bucket."""

    def __init__(self, gateway: StorageGateway, settings: StorageSettings) -> None:
        self._gateway = gateway
        self._settings = settings

    @property
    def bucket(self) -> str:
        return self._settings.bucket

    async def _ensure_bucket(self) -> None:
        result = await self._gateway.ensure_bucket(self.bucket)
        if isinstance(result, Failure):
            logger.debug("Bucket provisioning failed", extra={"bucket": self.bucket})
            raise result.to_exception(status_code=500)

    async def upload_file(
        self,
        file_obj: BinaryIO,
        filename: str,
        content_type: str | None = None,
    ) -> UploadOutcome:
        """Store ``file_obj`` under ``filename``, replacing any existing object.

        ``file_obj`` is left open; the caller owns it.
        """
        await self._ensure_bucket()

        result = await self._gateway.upload_object(
            file_obj,
            filename,
            self.bucket,
            content_type=content_type or content_type_for_key(filename),
        )
        if isinstance(result, Failure):
            raise result.to_exception(status_code=400)
        return result.value

    async def list_files(self) -> list[str]:
        """Return every file name in the bucket, in store order."""
        await self._ensure_bucket()

        result = await self._gateway.list_objects(self.bucket)
        if isinstance(result, Failure):
            raise result.to_exception(status_code=400)
        return list(result.value.object_keys)

    async def open_download(self, file_name: str) -> DownloadOutcome:
        """Open a download stream; the caller must release it.

        Raises:
            StorageFileNotFoundError: If the file does not exist
            StorageOperationError: On any other failure
        """
        await self._ensure_bucket()

        result = await self._gateway.download_object(file_name, self.bucket)
        if isinstance(result, Failure):
            raise result.to_exception(status_code=400)
        return result.value
