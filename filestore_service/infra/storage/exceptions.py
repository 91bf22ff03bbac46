"""Storage-specific exceptions and botocore error classification.

Gateway operations do not raise; they classify whatever went wrong into a
FailureDetail (see ``results``). The exception classes here are used at the
edges: when the gateway cannot even be constructed, when a released download
stream is read, and by the HTTP layer, which turns a Failure back into an
exception rendered as RFC 7807 problem details.

Example:
    ```python
    try:
        await client.get_object(Bucket=bucket, Key=key)
    except ClientError as e:
        detail = map_boto_error(e, operation="download", key=key, not_found_aware=True)
    ```
"""

from __future__ import annotations

from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from filestore_service.core.exceptions import AppException

from .results import FailureDetail, FailureKind

NOT_FOUND_ERROR_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NotFound", "404"})
BUCKET_ALREADY_OWNED_ERROR_CODES = frozenset({"BucketAlreadyOwnedByYou"})


class StorageError(AppException):
    """Base exception for all storage-related errors.

    Attributes:
        code: Error code identifier for programmatic error handling.
        message: Human-readable error message.
        status_code: HTTP status code for the error.
        extra: Additional context-specific information about the error.

    Example:
        ```python
        raise StorageError(
            message="Failed to connect to storage backend",
            code="STORAGE_CONNECTION_ERROR",
            status_code=503,
            metadata={"endpoint": "http://localhost:9000"},
        )
        ```
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 500,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Initialize storage error.

        Args:
            message: Human-readable error message.
            code: Error code for programmatic handling.
            status_code: HTTP status code (default: 500).
            metadata: Additional error context.
        """
        self.code = code
        self.message = message
        super().__init__(
            status_code=status_code,
            detail=message,
            type=code.lower().replace("_", "-"),
            extra=metadata or {},
        )


class StorageNotConfiguredError(StorageError):
    """Raised when storage is disabled, misconfigured or not started."""

    def __init__(
        self,
        message: str = "Storage is not configured or enabled",
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_CONFIGURED",
            status_code=503,
            metadata=metadata,
        )


class StorageFileNotFoundError(StorageError):
    """Raised at the HTTP boundary when a requested file does not exist."""

    def __init__(
        self,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code="STORAGE_NOT_FOUND",
            status_code=404,
            metadata=metadata,
        )


class StorageOperationError(StorageError):
    """Raised at the HTTP boundary when a storage operation failed.

    The status code is chosen by the caller: 400 for a failed upload, listing
    or download, 500 when the bucket itself could not be provisioned.
    """

    def __init__(
        self,
        message: str,
        code: str = "STORAGE_PROTOCOL_ERROR",
        status_code: int = 400,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            metadata=metadata,
        )


class StorageStreamClosedError(StorageError):
    """Raised when a download stream is read after it was released."""

    def __init__(self, key: str) -> None:
        super().__init__(
            message=f"Download stream for {key} has already been released",
            code="STORAGE_STREAM_CLOSED",
            status_code=500,
            metadata={"key": key},
        )


def error_code(error: ClientError) -> str:
    """Return the store error code of a ClientError ("Unknown" if absent)."""
    return error.response.get("Error", {}).get("Code", "Unknown")


def http_status(error: ClientError) -> int | None:
    """Return the HTTP status the store answered with, if known."""
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def is_not_found_error(error: ClientError) -> bool:
    """Check whether a ClientError means the object or bucket is absent."""
    return error_code(error) in NOT_FOUND_ERROR_CODES or http_status(error) == 404


def is_bucket_already_owned(error: ClientError) -> bool:
    """Check whether a create-bucket error means we already own the bucket."""
    return error_code(error) in BUCKET_ALREADY_OWNED_ERROR_CODES


def map_boto_error(
    error: ClientError,
    operation: str,
    key: str | None = None,
    *,
    not_found_aware: bool = False,
) -> FailureDetail:
    """Map a botocore ClientError to a FailureDetail.

    Args:
        error: The ClientError raised by the S3 client.
        operation: The storage operation being performed (e.g., "upload").
        key: Object key or bucket name being operated on.
        not_found_aware: Classify "absent" answers as NOT_FOUND. Only
            downloads do this; elsewhere a missing resource is surfaced as
            the store's own protocol error.

    Returns:
        FailureDetail carrying the store's error code and message text.

    Error Code Mappings:
        - NoSuchKey, NoSuchBucket, NotFound, HTTP 404 -> NOT_FOUND (when not_found_aware)
        - Everything else -> STORAGE_PROTOCOL
    """
    code = error_code(error)
    store_message = error.response.get("Error", {}).get("Message") or str(error)

    if not_found_aware and is_not_found_error(error):
        return FailureDetail(
            message=f"Requested file was not found: {key}",
            kind=FailureKind.NOT_FOUND,
            code=code,
        )

    return FailureDetail(
        message=f"S3 error during {operation} ({code}): {store_message}",
        kind=FailureKind.STORAGE_PROTOCOL,
        code=code,
    )


def failure_from_exception(
    error: Exception,
    operation: str,
    key: str | None = None,
    *,
    not_found_aware: bool = False,
) -> FailureDetail:
    """Classify any exception caught at the gateway boundary.

    - ClientError: see map_boto_error
    - BotoCoreError (connection refused, DNS, read timeouts, bad credentials
      format): STORAGE_PROTOCOL with the raw text
    - TimeoutError (operation_timeout expired): STORAGE_PROTOCOL
    - StorageError raised by the gateway itself: UNEXPECTED with its message
    - Anything else: UNEXPECTED with a generic message
    """
    if isinstance(error, ClientError):
        return map_boto_error(error, operation, key, not_found_aware=not_found_aware)

    if isinstance(error, BotoCoreError):
        return FailureDetail(
            message=f"S3 transport error during {operation}: {error}",
            kind=FailureKind.STORAGE_PROTOCOL,
        )

    if isinstance(error, TimeoutError):
        return FailureDetail(
            message=f"S3 {operation} timed out",
            kind=FailureKind.STORAGE_PROTOCOL,
        )

    if isinstance(error, StorageError):
        return FailureDetail(message=error.message, kind=FailureKind.UNEXPECTED)

    return FailureDetail(
        message=f"Unexpected error during {operation}",
        kind=FailureKind.UNEXPECTED,
    )


def exception_for_failure(detail: FailureDetail, status_code: int = 400) -> StorageError:
    """Turn a FailureDetail into the StorageError the HTTP layer raises.

    Args:
        detail: The failure returned by the gateway.
        status_code: Status for non-not-found failures.

    Returns:
        StorageFileNotFoundError for NOT_FOUND, StorageOperationError otherwise.
    """
    metadata: dict[str, Any] = {"failure_kind": str(detail.kind)}
    if detail.code:
        metadata["store_error_code"] = detail.code

    if detail.is_not_found:
        return StorageFileNotFoundError(detail.message, metadata=metadata)

    code = (
        "STORAGE_UNEXPECTED_ERROR"
        if detail.kind is FailureKind.UNEXPECTED
        else "STORAGE_PROTOCOL_ERROR"
    )
    return StorageOperationError(
        detail.message,
        code=code,
        status_code=status_code,
        metadata=metadata,
    )
