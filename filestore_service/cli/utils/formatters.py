"""Terminal output helpers shared by the storage and server commands.

Errors go to stderr so scripts piping ``storage list`` or the public URL
printed by ``storage upload`` only see the payload on stdout.
"""

import click

_STYLES = {
    "success": ("✓", "green"),
    "error": ("✗", "red"),
    "warning": ("⚠", "yellow"),
    "info": ("ℹ", "blue"),
}


def _status(kind: str, message: str) -> None:
    symbol, colour = _STYLES[kind]
    click.secho(f"{symbol} {message}", fg=colour, err=kind == "error")


def success(message: str) -> None:
    _status("success", message)


def error(message: str) -> None:
    _status("error", message)


def warning(message: str) -> None:
    _status("warning", message)


def info(message: str) -> None:
    _status("info", message)


def header(message: str) -> None:
    click.secho(f"\n{message}", fg="cyan", bold=True)


def field(label: str, value: object) -> None:
    """Print one aligned ``label: value`` row of a settings listing."""
    click.echo(f"{label + ':':<18}{value}")


def format_bytes(size_bytes: int) -> str:
    """Human-readable size, e.g. ``format_bytes(1536) == "1.5 KB"``."""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.2f} PB"
