"""Outcome values produced by the storage gateway.

All outcomes are transient: created per call and owned by the caller once
returned. ``DownloadOutcome`` additionally hands over a live ObjectStream
that the caller must consume or release.
"""

from __future__ import annotations

from dataclasses import dataclass
import inspect
import logging
from typing import TYPE_CHECKING, Any

from .exceptions import StorageStreamClosedError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class ObjectStream:
    """Single-consumer handle on the body of a downloaded object.

    Wraps the streaming body returned by ``get_object`` without buffering it.
    Release it with ``aclose()`` or by using it as an async context manager;
    iterating to the end with ``iter_chunks()`` releases it as well.
    Releasing is idempotent, reading after release raises
    StorageStreamClosedError.

    Example:
        async with outcome.content_stream as stream:
            async for chunk in stream.iter_chunks():
                destination.write(chunk)
    """

    def __init__(self, body: Any, key: str, content_length: int | None = None) -> None:
        self._body = body
        self._key = key
        self._closed = False
        self.content_length = content_length

    @property
    def key(self) -> str:
        return self._key

    @property
    def closed(self) -> bool:
        """Whether the underlying connection has been released."""
        return self._closed

    async def read(self, amt: int | None = None) -> bytes:
        """Read up to ``amt`` bytes, or everything that is left when None.

        Returns:
            The bytes read; ``b""`` at end of stream.

        Raises:
            StorageStreamClosedError: If the stream was already released.
        """
        if self._closed:
            raise StorageStreamClosedError(self._key)
        data = await self._body.read(amt) if amt is not None else await self._body.read()
        return bytes(data)

    async def iter_chunks(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield the remaining content in chunks of at most ``chunk_size`` bytes.

        The stream is released once the end is reached.
        """
        while True:
            chunk = await self.read(chunk_size)
            if not chunk:
                break
            yield chunk
        await self.aclose()

    async def aclose(self) -> None:
        """Release the underlying connection."""
        if self._closed:
            return
        self._closed = True
        try:
            result = self._body.close()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(
                "Error releasing download stream",
                extra={"key": self._key, "error": str(e)},
            )

    async def __aenter__(self) -> ObjectStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    """Result of a successful upload.

    Attributes:
        public_url: ``<public base>/<bucket>/<key>``; not checked for reachability
        object_key: Key the content was stored under
    """

    public_url: str
    object_key: str


@dataclass(frozen=True, slots=True)
class ListingOutcome:
    """Snapshot of the keys in a bucket, in the order the store returned them."""

    object_keys: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class DownloadOutcome:
    """Result of a successful download.

    Attributes:
        content_stream: Open stream over the object's bytes, owned by the caller
        content_type: MIME type derived from the key's extension
        object_key: Key that was downloaded
        content_length: Size reported by the store, if any
    """

    content_stream: ObjectStream
    content_type: str
    object_key: str
    content_length: int | None = None
