"""Storage gateway protocol.

Structural interface consumed by the HTTP layer and the CLI. Every operation
returns a Result instead of raising, so implementations must catch store
faults at their boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from .models import DownloadOutcome, ListingOutcome, UploadOutcome
    from .results import Result


class StorageGateway(Protocol):
    """Protocol interface for object-store gateways.

    Example:
        class InMemoryGateway:
            async def ensure_bucket(self, bucket: str) -> Result[None]:
                self._buckets.setdefault(bucket, {})
                return Success(None)
            ...
    """

    @property
    def is_ready(self) -> bool:
        """Whether the gateway can talk to the store."""
        ...

    async def ensure_bucket(self, bucket: str) -> Result[None]:
        """Create the bucket unless it already exists. Idempotent."""
        ...

    async def upload_object(
        self,
        data: BinaryIO,
        key: str,
        bucket: str,
        content_type: str | None = None,
    ) -> Result[UploadOutcome]:
        """Stream ``data`` to ``bucket/key``, replacing any existing object.

        The caller keeps ownership of ``data``; it is never closed here.
        """
        ...

    async def list_objects(self, bucket: str) -> Result[ListingOutcome]:
        """List every key in the bucket, in store order."""
        ...

    async def download_object(self, key: str, bucket: str) -> Result[DownloadOutcome]:
        """Open a stream over ``bucket/key``; ownership passes to the caller."""
        ...
