"""Storage management commands for the configured S3-compatible bucket.

Each command builds a gateway from settings, performs one operation and
reports the outcome. Failed operations exit with status 1; a download of a
missing file exits with status 2.
"""

from pathlib import Path
import sys

import click

from filestore_service.cli.utils import (
    coro,
    error,
    field,
    format_bytes,
    header,
    info,
    success,
    warning,
)
from filestore_service.core.settings import get_storage_settings
from filestore_service.core.settings.storage import StorageSettings
from filestore_service.infra.storage.content_types import content_type_for_key
from filestore_service.infra.storage.exceptions import StorageError
from filestore_service.infra.storage.gateway import S3StorageGateway
from filestore_service.infra.storage.results import Failure

EXIT_FAILURE = 1
EXIT_NOT_FOUND = 2


def _build_gateway(settings: StorageSettings) -> S3StorageGateway:
    return S3StorageGateway(settings)


def _exit_on_failure(result: object, action: str) -> None:
    if isinstance(result, Failure):
        error(f"{action} failed: {result.error.message}")
        sys.exit(EXIT_NOT_FOUND if result.error.is_not_found else EXIT_FAILURE)


def _load_configured_settings() -> StorageSettings:
    settings = get_storage_settings()
    if not settings.is_configured:
        error("Storage is disabled. Set STORAGE_ENABLED=true to use these commands.")
        sys.exit(EXIT_FAILURE)
    return settings


@click.group(name="storage")
def storage() -> None:
    """Storage management commands.

    Provision the bucket and upload, list or download files.
    """


@storage.command(name="info")
@coro
async def info_cmd() -> None:
    """Show storage configuration and test connectivity."""
    settings = get_storage_settings()

    header("Storage Configuration")
    field("Enabled", settings.enabled)
    field("Endpoint", settings.endpoint)
    field("Public base URL", settings.public_url_base)
    field("Bucket", settings.bucket)
    field("Region", settings.region)
    field("Addressing style", settings.addressing_style)
    field("Retries", f"{settings.max_retries} ({settings.retry_mode})")
    field("Max file size", f"{settings.max_file_size_mb} MB ({format_bytes(settings.max_file_size_bytes)})")

    if settings.access_key and settings.secret_key:
        success("Credentials: configured")
    else:
        warning("Credentials: not configured (using the default credential chain)")

    if not settings.is_configured:
        warning("Storage is disabled")
        return

    try:
        async with _build_gateway(settings) as gateway:
            healthy = await gateway.health_check()
    except StorageError as e:
        error(f"Could not connect to storage: {e.message}")
        sys.exit(EXIT_FAILURE)

    if healthy:
        success(f"Bucket '{settings.bucket}' is reachable")
    else:
        warning(f"Bucket '{settings.bucket}' is not reachable (run 'storage ensure-bucket')")


@storage.command(name="ensure-bucket")
@coro
async def ensure_bucket_cmd() -> None:
    """Create the configured bucket unless it already exists."""
    settings = _load_configured_settings()
    info(f"Ensuring bucket '{settings.bucket}' exists...")

    async with _build_gateway(settings) as gateway:
        result = await gateway.ensure_bucket(settings.bucket)

    _exit_on_failure(result, "Bucket provisioning")
    success(f"Bucket '{settings.bucket}' is ready")


@storage.command(name="list")
@coro
async def list_cmd() -> None:
    """List every file in the configured bucket."""
    settings = _load_configured_settings()

    async with _build_gateway(settings) as gateway:
        result = await gateway.list_objects(settings.bucket)

    _exit_on_failure(result, "Listing")

    keys = result.value.object_keys
    if not keys:
        info(f"Bucket '{settings.bucket}' is empty")
        return

    header(f"Files in '{settings.bucket}'")
    for key in keys:
        click.echo(f"  {key}")
    click.echo()
    info(f"{len(keys)} file(s)")


@storage.command(name="upload")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--key", default=None, help="Object key (default: the file name)")
@coro
async def upload_cmd(path: Path, key: str | None) -> None:
    """Upload a local file, replacing any file with the same key."""
    if path.stat().st_size == 0:
        error("No file was uploaded.")
        sys.exit(EXIT_FAILURE)

    settings = _load_configured_settings()
    key = key or path.name

    async with _build_gateway(settings) as gateway:
        ensured = await gateway.ensure_bucket(settings.bucket)
        _exit_on_failure(ensured, "Bucket provisioning")

        with path.open("rb") as fh:
            result = await gateway.upload_object(
                fh,
                key,
                settings.bucket,
                content_type=content_type_for_key(key),
            )

    _exit_on_failure(result, "Upload")
    success(f"Uploaded {path} as '{key}'")
    click.echo(result.value.public_url)


@storage.command(name="download")
@click.argument("key")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Destination file (default: the key's file name in the current directory)",
)
@coro
async def download_cmd(key: str, output: Path | None) -> None:
    """Download a file from the configured bucket."""
    settings = _load_configured_settings()
    output = output or Path(Path(key).name)

    async with _build_gateway(settings) as gateway:
        result = await gateway.download_object(key, settings.bucket)
        _exit_on_failure(result, "Download")

        outcome = result.value
        written = 0
        async with outcome.content_stream as stream:
            with output.open("wb") as fh:
                async for chunk in stream.iter_chunks(settings.download_chunk_size):
                    fh.write(chunk)
                    written += len(chunk)

    success(f"Downloaded '{key}' to {output} ({format_bytes(written)}, {outcome.content_type})")
