"""Helpers for the click commands: async bridging and terminal output."""

from filestore_service.cli.utils.async_runner import coro
from filestore_service.cli.utils.formatters import (
    error,
    field,
    format_bytes,
    header,
    info,
    success,
    warning,
)

__all__ = [
    "coro",
    "error",
    "field",
    "format_bytes",
    "header",
    "info",
    "success",
    "warning",
]
