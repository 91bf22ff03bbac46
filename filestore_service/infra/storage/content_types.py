"""Content type derivation for downloaded files.

The type is taken from the key's extension only. Bytes are never inspected,
so a PNG uploaded as ``notes.txt`` is served as ``text/plain``.
"""

from __future__ import annotations

from pathlib import PurePosixPath

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES_BY_EXTENSION: dict[str, str] = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".txt": "text/plain",
}


def content_type_for_key(key: str) -> str:
    """Return the content type for an object key.

    Args:
        key: Object key, usually the uploaded file name.

    Returns:
        The mapped MIME type, or ``application/octet-stream`` for unknown
        or missing extensions.

    Example:
        >>> content_type_for_key("scan.JPG")
        'image/jpeg'
        >>> content_type_for_key("archive.tar.gz")
        'application/octet-stream'
    """
    suffix = PurePosixPath(key).suffix.lower()
    return CONTENT_TYPES_BY_EXTENSION.get(suffix, DEFAULT_CONTENT_TYPE)
