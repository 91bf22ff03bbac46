"""Exceptions rendered as RFC 7807 problem details by the app's handlers."""

from __future__ import annotations

from typing import Any

PROBLEM_TITLES: dict[int, str] = {
    400: "Bad Request",
    404: "Not Found",
    413: "Content Too Large",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}


def problem_title(status_code: int) -> str:
    """Short summary used as the ``title`` of a problem document."""
    return PROBLEM_TITLES.get(status_code, "Error")


class AppException(Exception):
    """Base class for errors that reach the HTTP client.

    ``type`` becomes the problem type slug and ``extra`` is merged into the
    response body, so it must only carry client-safe fields.

    Example:
        raise AppException(404, "File report.pdf not found", type="storage-not-found")
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        type: str = "about:blank",
        title: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        self.type = type
        self.title = title or problem_title(status_code)
        self.extra = extra or {}
        super().__init__(detail)


class BadRequestException(AppException):
    """The upload request carried nothing usable, e.g. no file part."""

    def __init__(self, detail: str, type: str = "bad-request") -> None:
        super().__init__(400, detail, type=type)


class PayloadTooLargeException(AppException):
    """The uploaded file is larger than ``StorageSettings.max_file_size_mb``."""

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(413, detail, type="payload-too-large", extra=extra)
