"""Files feature package."""

from .router import router
from .service import FileService

__all__ = [
    "FileService",
    "router",
]
