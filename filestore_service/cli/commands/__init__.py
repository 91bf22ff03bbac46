"""CLI command modules."""

from filestore_service.cli.commands import server, storage

__all__ = [
    "server",
    "storage",
]
