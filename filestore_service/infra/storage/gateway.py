"""S3-compatible storage gateway.

Single point of contact with the object store. Talks to RustFS, MinIO, AWS S3
and other S3-compatible services through aioboto3 using path-style
addressing, and converts every store fault into a Result at its boundary.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, BinaryIO

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from .content_types import content_type_for_key
from .exceptions import (
    StorageError,
    StorageNotConfiguredError,
    failure_from_exception,
    is_bucket_already_owned,
)
from .models import DownloadOutcome, ListingOutcome, ObjectStream, UploadOutcome
from .results import Failure, FailureKind, Success, protocol_failure

if TYPE_CHECKING:
    from types import TracebackType

    from filestore_service.core.settings.storage import StorageSettings

    from .results import Result

logger = logging.getLogger(__name__)


def _response_status(response: dict[str, Any]) -> int | None:
    return response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def _is_success_status(status: int | None) -> bool:
    # Test doubles and some stores omit ResponseMetadata entirely
    return status is None or 200 <= status < 300


class S3StorageGateway:
    """Object-store gateway for one S3-compatible endpoint.

    Implements the StorageGateway protocol. The four operations
    (ensure_bucket, upload_object, list_objects, download_object) each make
    an independent round trip and return ``Success`` or ``Failure``; no store
    fault escapes them. Task cancellation is not a store fault and is left
    to propagate.

    Attributes:
        settings: Storage configuration settings
        is_ready: Whether a client is available

    Example:
        async with S3StorageGateway(settings) as gateway:
            await gateway.ensure_bucket(settings.bucket)
            with open("report.pdf", "rb") as fh:
                result = await gateway.upload_object(fh, "report.pdf", settings.bucket)
    """

    def __init__(
        self,
        settings: StorageSettings,
        client: Any | None = None,
        session: Any | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            settings: Storage settings (endpoint, credentials, timeouts)
            client: Already-open S3 client to use instead of creating one.
                The gateway does not close a client it did not create.
            session: aioboto3 session used to create the client

        Raises:
            StorageNotConfiguredError: If storage is disabled
        """
        if not settings.is_configured:
            msg = "Object storage is not configured. Set STORAGE_ENABLED=true and STORAGE_ENDPOINT."
            raise StorageNotConfiguredError(msg)

        self.settings = settings
        self._session = session or aioboto3.Session()
        self._client = client
        self._client_context: Any | None = None

    @property
    def is_ready(self) -> bool:
        """Check if the gateway has a client to talk to the store."""
        return self._client is not None

    # ========================================================================
    # Lifecycle Management
    # ========================================================================

    async def startup(self) -> None:
        """Open the S3 client and its connection pool."""
        if self._client is not None:
            logger.debug("Storage gateway already initialized")
            return

        logger.info(
            "Initializing storage gateway",
            extra={
                "endpoint": self.settings.endpoint,
                "bucket": self.settings.bucket,
                "region": self.settings.region,
                "addressing_style": self.settings.addressing_style,
            },
        )

        try:
            boto_config = Config(
                retries={
                    "max_attempts": self.settings.max_retries,
                    "mode": self.settings.retry_mode,
                },
                connect_timeout=self.settings.timeout,
                read_timeout=self.settings.timeout,
                max_pool_connections=self.settings.max_pool_connections,
                s3={"addressing_style": self.settings.addressing_style},
            )

            self._client_context = self._session.client(
                "s3",
                **self.settings.get_boto3_config(),
                config=boto_config,
            )
            self._client = await self._client_context.__aenter__()

            logger.info("Storage gateway initialized")

        except Exception as e:
            self._client_context = None
            logger.exception("Failed to initialize storage gateway", extra={"error": str(e)})
            raise StorageError(
                f"Failed to initialize storage gateway: {e}",
                code="STORAGE_INITIALIZATION_ERROR",
                status_code=503,
            ) from e

    async def shutdown(self) -> None:
        """Close the S3 client if this gateway opened it."""
        if self._client_context is None:
            self._client = None
            logger.debug("Storage gateway owns no client, nothing to shut down")
            return

        logger.info("Shutting down storage gateway")

        try:
            await self._client_context.__aexit__(None, None, None)
        except Exception as e:
            logger.warning("Error closing S3 client", extra={"error": str(e)})
        finally:
            self._client = None
            self._client_context = None

        logger.info("Storage gateway shutdown complete")

    async def health_check(self) -> bool:
        """Check connectivity and credentials with a HEAD on the configured bucket.

        Returns:
            True if healthy, False otherwise
        """
        if self._client is None:
            return False

        try:
            async with asyncio.timeout(self.settings.operation_timeout):
                await self._client.head_bucket(Bucket=self.settings.bucket)
            return True
        except Exception as e:
            logger.warning(
                "Storage health check failed",
                extra={"error": str(e), "bucket": self.settings.bucket},
            )
            return False

    def _ensure_client(self) -> Any:
        """Return the client or raise if the gateway was never started."""
        if self._client is None:
            msg = "Storage gateway is not started"
            raise StorageNotConfiguredError(msg)
        return self._client

    def _failure(
        self,
        error: Exception,
        operation: str,
        target: str,
        *,
        not_found_aware: bool = False,
    ) -> Failure:
        """Classify and log a fault caught at the gateway boundary.

        Must be called from inside the ``except`` block handling ``error``.
        """
        detail = failure_from_exception(
            error, operation, target, not_found_aware=not_found_aware
        )
        log_extra = {
            "operation": operation,
            "target": target,
            "failure_kind": str(detail.kind),
            "error_code": detail.code,
            "error": str(error),
        }

        if detail.kind is FailureKind.NOT_FOUND:
            logger.info("Requested object does not exist", extra=log_extra)
        elif detail.kind is FailureKind.STORAGE_PROTOCOL:
            logger.error("S3 error during %s", operation, extra=log_extra)
        else:
            logger.exception("Unexpected error during %s", operation, extra=log_extra)

        return Failure(detail)

    # ========================================================================
    # Gateway Operations
    # ========================================================================

    async def ensure_bucket(self, bucket: str) -> Result[None]:
        """Create ``bucket`` unless it already exists.

        Lists the buckets first; when the bucket is absent, creates it. A
        concurrent creator winning the race between the two requests
        (``BucketAlreadyOwnedByYou``) still counts as success.

        Args:
            bucket: Bucket name

        Returns:
            Success(None), or Failure with STORAGE_PROTOCOL/UNEXPECTED kind
        """
        try:
            client = self._ensure_client()

            async with asyncio.timeout(self.settings.operation_timeout):
                response = await client.list_buckets()
                existing = {item.get("Name") for item in response.get("Buckets", [])}
                if bucket in existing:
                    logger.debug("Bucket already exists", extra={"bucket": bucket})
                    return Success(None)

                await self._create_bucket(client, bucket)

            return Success(None)

        except Exception as e:
            return self._failure(e, "bucket creation", bucket)

    async def _create_bucket(self, client: Any, bucket: str) -> None:
        kwargs: dict[str, Any] = {"Bucket": bucket}

        # S3 requires CreateBucketConfiguration for regions other than us-east-1
        region = self.settings.region
        if region and region != "us-east-1":
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            await client.create_bucket(**kwargs)
        except ClientError as e:
            if is_bucket_already_owned(e):
                logger.info(
                    "Bucket was created concurrently and is owned by us",
                    extra={"bucket": bucket},
                )
                return
            raise

        logger.info("Bucket created", extra={"bucket": bucket, "region": region})

    async def upload_object(
        self,
        data: BinaryIO,
        key: str,
        bucket: str,
        content_type: str | None = None,
    ) -> Result[UploadOutcome]:
        """Stream ``data`` into ``bucket/key``.

        An existing object with the same key is replaced (last write wins).
        ``data`` is never closed here; the caller opened it and closes it.

        Args:
            data: Readable binary file object positioned at the content start
            key: Object key
            bucket: Target bucket
            content_type: Optional MIME type stored with the object

        Returns:
            Success(UploadOutcome) or Failure (STORAGE_PROTOCOL/UNEXPECTED)
        """
        try:
            client = self._ensure_client()

            extra_args: dict[str, Any] = {}
            if content_type:
                extra_args["ContentType"] = content_type

            async with asyncio.timeout(self.settings.operation_timeout):
                response = await client.put_object(
                    Bucket=bucket,
                    Key=key,
                    Body=data,
                    **extra_args,
                )

            status = _response_status(response)
            if not _is_success_status(status):
                logger.error(
                    "Upload rejected by object store",
                    extra={"key": key, "bucket": bucket, "status": status},
                )
                return protocol_failure(f"Upload of {key} failed with HTTP status {status}")

            public_url = self.settings.object_url(bucket, key)
            logger.info(
                "File uploaded",
                extra={
                    "key": key,
                    "bucket": bucket,
                    "url": public_url,
                    "etag": response.get("ETag", "").strip('"'),
                },
            )
            return Success(UploadOutcome(public_url=public_url, object_key=key))

        except Exception as e:
            return self._failure(e, "upload", key)

    async def list_objects(self, bucket: str) -> Result[ListingOutcome]:
        """List every key in ``bucket``.

        Follows continuation tokens until the store reports no more pages and
        returns the keys in the order the store produced them.

        Args:
            bucket: Bucket to list

        Returns:
            Success(ListingOutcome) or Failure (STORAGE_PROTOCOL/UNEXPECTED);
            a missing bucket is reported as the store's protocol error
        """
        keys: list[str] = []
        pages = 0

        try:
            client = self._ensure_client()
            kwargs: dict[str, Any] = {
                "Bucket": bucket,
                "MaxKeys": self.settings.list_page_size,
            }

            async with asyncio.timeout(self.settings.operation_timeout):
                while True:
                    response = await client.list_objects_v2(**kwargs)
                    pages += 1
                    keys.extend(item["Key"] for item in response.get("Contents", []))

                    next_token = response.get("NextContinuationToken")
                    if not response.get("IsTruncated") or not next_token:
                        break
                    kwargs["ContinuationToken"] = next_token

            logger.info(
                "Listed files",
                extra={"bucket": bucket, "count": len(keys), "pages": pages},
            )
            return Success(ListingOutcome(object_keys=tuple(keys)))

        except Exception as e:
            return self._failure(e, "listing", bucket)

    async def download_object(self, key: str, bucket: str) -> Result[DownloadOutcome]:
        """Open a stream over ``bucket/key``.

        The content type comes from the key's extension. The returned stream
        is open and owned by the caller, who must consume or release it.

        Args:
            key: Object key
            bucket: Source bucket

        Returns:
            Success(DownloadOutcome), Failure(NOT_FOUND) when the store reports
            the object absent, or Failure (STORAGE_PROTOCOL/UNEXPECTED)
        """
        stream: ObjectStream | None = None

        try:
            client = self._ensure_client()

            async with asyncio.timeout(self.settings.operation_timeout):
                response = await client.get_object(Bucket=bucket, Key=key)

            stream = ObjectStream(
                response["Body"],
                key,
                content_length=response.get("ContentLength"),
            )

            status = _response_status(response)
            if not _is_success_status(status):
                await stream.aclose()
                logger.error(
                    "Download rejected by object store",
                    extra={"key": key, "bucket": bucket, "status": status},
                )
                return protocol_failure(f"Download of {key} failed with HTTP status {status}")

            content_type = content_type_for_key(key)
            logger.info(
                "File download started",
                extra={
                    "key": key,
                    "bucket": bucket,
                    "content_type": content_type,
                    "size_bytes": stream.content_length,
                },
            )
            return Success(
                DownloadOutcome(
                    content_stream=stream,
                    content_type=content_type,
                    object_key=key,
                    content_length=stream.content_length,
                )
            )

        except Exception as e:
            if stream is not None:
                await stream.aclose()
            return self._failure(e, "download", key, not_found_aware=True)

    # ========================================================================
    # Context Manager
    # ========================================================================

    async def __aenter__(self) -> S3StorageGateway:
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.shutdown()


# ============================================================================
# Process-wide instance
# ============================================================================

_gateway: S3StorageGateway | None = None


def get_storage_gateway() -> S3StorageGateway:
    """Get the process-wide gateway, creating it from settings on first use.

    The instance is not started here; the application lifespan (or the CLI)
    calls ``startup()``.

    Raises:
        StorageNotConfiguredError: If storage is disabled
    """
    global _gateway

    if _gateway is None:
        from filestore_service.core.settings import get_storage_settings

        _gateway = S3StorageGateway(get_storage_settings())
    return _gateway


def set_storage_gateway(gateway: S3StorageGateway | None) -> None:
    """Replace (or with None, forget) the process-wide gateway."""
    global _gateway
    _gateway = gateway
