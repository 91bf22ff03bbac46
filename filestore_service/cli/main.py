"""Main CLI entry point for filestore-service management commands."""

import click

from filestore_service.cli.commands import server, storage
from filestore_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="filestore-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """File Store CLI - manage the object store behind the file API.

    \b
    Command Groups:
      storage    Bucket provisioning and file operations
      serve      Run the HTTP API

    \b
    Quick Start:
      filestore-service storage ensure-bucket
      filestore-service storage upload ./report.pdf
      filestore-service storage download report.pdf -o /tmp/report.pdf
      filestore-service serve --port 8000
    """
    ctx.ensure_object(dict)


cli.add_command(storage.storage)
cli.add_command(server.serve)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
