"""API router for the files feature."""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from filestore_service.core.exceptions import BadRequestException, PayloadTooLargeException
from filestore_service.core.settings import get_storage_settings
from filestore_service.core.settings.storage import StorageSettings
from filestore_service.features.files.schemas import FileUploadResponse
from filestore_service.features.files.service import FileService
from filestore_service.infra.storage.dependencies import Storage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from filestore_service.infra.storage.models import ObjectStream

router = APIRouter(prefix="/file-management", tags=["files"])

NO_FILE_MESSAGE = "No file was uploaded."


def get_file_service(
    storage: Storage,
    settings: Annotated[StorageSettings, Depends(get_storage_settings)],
) -> FileService:
    """Dependency for file service."""
    return FileService(gateway=storage, settings=settings)


FileServiceDep = Annotated[FileService, Depends(get_file_service)]


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    return size


def _content_disposition(file_name: str) -> str:
    name = file_name.rsplit("/", 1)[-1]
    if name.isascii() and '"' not in name and "\\" not in name:
        return f'attachment; filename="{name}"'
    return f"attachment; filename*=UTF-8''{quote(name)}"


async def _iter_stream(stream: ObjectStream, chunk_size: int) -> AsyncIterator[bytes]:
    try:
        async for chunk in stream.iter_chunks(chunk_size):
            yield chunk
    finally:
        await stream.aclose()


@router.post(
    "/upload-file",
    response_model=FileUploadResponse,
    summary="Upload a file",
    description="Upload a file using multipart form data. An existing file with the same name is replaced.",
)
async def upload_file(
    service: FileServiceDep,
    settings: Annotated[StorageSettings, Depends(get_storage_settings)],
    file: Annotated[UploadFile | None, File()] = None,
) -> FileUploadResponse:
    """Upload a file via multipart form data.

    Raises:
        400: No file, or the store rejected the upload
        413: File exceeds the configured size limit
        500: Bucket could not be provisioned
        503: Storage not available
    """
    if file is None or not file.filename:
        raise BadRequestException(detail=NO_FILE_MESSAGE, type="no-file-uploaded")

    try:
        size = _upload_size(file)
        if size == 0:
            raise BadRequestException(detail=NO_FILE_MESSAGE, type="no-file-uploaded")
        if size > settings.max_file_size_bytes:
            raise PayloadTooLargeException(
                detail=f"File exceeds the maximum size of {settings.max_file_size_mb} MB",
                extra={"max_file_size_mb": settings.max_file_size_mb, "size_bytes": size},
            )

        outcome = await service.upload_file(
            file_obj=file.file,
            filename=file.filename,
            content_type=file.content_type,
        )
    finally:
        await file.close()

    return FileUploadResponse(file_url=outcome.public_url, file_name=outcome.object_key)


@router.get(
    "/list-files",
    response_model=list[str],
    summary="List files",
    description="List the names of all stored files.",
)
async def list_files(service: FileServiceDep) -> list[str]:
    """List every stored file name."""
    return await service.list_files()


@router.get(
    "/download/{file_name:path}",
    summary="Download a file",
    description="Stream a stored file as an attachment.",
    response_class=StreamingResponse,
    responses={404: {"description": "File not found"}},
)
async def download_file(
    file_name: str,
    service: FileServiceDep,
    settings: Annotated[StorageSettings, Depends(get_storage_settings)],
) -> StreamingResponse:
    """Stream a file to the client.

    The media type is derived from the file extension.
    """
    outcome = await service.open_download(file_name)
    stream = outcome.content_stream

    headers = {"Content-Disposition": _content_disposition(outcome.object_key)}
    if outcome.content_length is not None:
        headers["Content-Length"] = str(outcome.content_length)

    # Release also runs when the body iterator never starts
    return StreamingResponse(
        _iter_stream(stream, settings.download_chunk_size),
        media_type=outcome.content_type,
        headers=headers,
        background=BackgroundTask(stream.aclose),
    )
