"""Typed outcomes returned by every storage gateway operation.

Gateway operations never raise for store-level faults. They return either
``Success(value)`` or ``Failure(FailureDetail)`` so callers can branch on the
outcome without knowing botocore's exception types:

    match await gateway.download_object(key, bucket):
        case Success(value=download):
            ...
        case Failure(error=detail) if detail.is_not_found:
            ...
        case Failure(error=detail):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, NoReturn

if TYPE_CHECKING:
    from .exceptions import StorageError


class FailureKind(StrEnum):
    """Classification of a failed storage operation."""

    NOT_FOUND = "not_found"
    """The requested object (or its bucket) does not exist."""

    STORAGE_PROTOCOL = "storage_protocol_error"
    """The store answered with an error status or the transport failed."""

    UNEXPECTED = "unexpected_error"
    """Any other fault, such as local stream I/O."""


@dataclass(frozen=True, slots=True)
class FailureDetail:
    """Why an operation failed.

    Attributes:
        message: Human-readable explanation. For store protocol errors it
            carries the store's own text, which is not stable across stores.
        kind: Failure classification.
        code: Store error code (e.g. ``NoSuchKey``) when one was reported.
    """

    message: str
    kind: FailureKind = FailureKind.STORAGE_PROTOCOL
    code: str | None = None

    @property
    def is_not_found(self) -> bool:
        """True when the failure means "the resource is absent"."""
        return self.kind is FailureKind.NOT_FOUND


@dataclass(frozen=True, slots=True)
class Success[T]:
    """Successful outcome carrying the operation's value (None for unit results)."""

    value: T

    @property
    def is_success(self) -> Literal[True]:
        return True

    @property
    def is_failure(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Return the carried value."""
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    """Failed outcome carrying a classified FailureDetail."""

    error: FailureDetail

    @property
    def is_success(self) -> Literal[False]:
        return False

    @property
    def is_failure(self) -> Literal[True]:
        return True

    def unwrap(self) -> NoReturn:
        """Raise the StorageError matching this failure.

        Useful in scripts and tests that prefer exceptions to branching.
        """
        raise self.to_exception()

    def to_exception(self, status_code: int = 400) -> StorageError:
        """Convert to an HTTP-mappable StorageError (404 for not-found failures)."""
        from .exceptions import exception_for_failure

        return exception_for_failure(self.error, status_code=status_code)


type Result[T] = Success[T] | Failure


def not_found(message: str, code: str | None = None) -> Failure:
    """Build a not-found failure."""
    return Failure(FailureDetail(message=message, kind=FailureKind.NOT_FOUND, code=code))


def protocol_failure(message: str, code: str | None = None) -> Failure:
    """Build a store protocol/transport failure."""
    return Failure(
        FailureDetail(message=message, kind=FailureKind.STORAGE_PROTOCOL, code=code)
    )


def unexpected_failure(message: str) -> Failure:
    """Build an unexpected failure with a deliberately generic message."""
    return Failure(FailureDetail(message=message, kind=FailureKind.UNEXPECTED))


__all__ = [
    "Failure",
    "FailureDetail",
    "FailureKind",
    "Result",
    "Success",
    "not_found",
    "protocol_failure",
    "unexpected_failure",
]
