"""Server command."""

import click
import uvicorn

from filestore_service.cli.utils import info
from filestore_service.core.settings import get_app_settings, get_logging_settings


@click.command(name="serve")
@click.option("--host", default=None, help="Host to bind (default: from settings)")
@click.option("--port", default=None, type=int, help="Port to bind (default: from settings)")
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Enable auto-reload on code changes (default: from settings)",
)
def serve(host: str | None, port: int | None, reload: bool | None) -> None:
    """Run the HTTP API with uvicorn."""
    settings = get_app_settings()
    log_settings = get_logging_settings()

    host = host or settings.host
    port = port or settings.port
    reload = settings.reload if reload is None else reload

    info(f"Server will run at: http://{host}:{port}{settings.api_prefix}")
    info(f"Environment: {settings.environment}")

    uvicorn.run(
        "filestore_service.app.main:app",
        host=host,
        port=port,
        reload=reload,
        access_log=settings.debug,
        log_level=log_settings.level.lower(),
    )
