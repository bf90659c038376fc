"""Shared helpers for CLI commands."""

import logging
import re
from datetime import datetime
from typing import NoReturn

import typer

from ..client import FileSearchClient
from ..errors import ConfigurationError, HttpStatusError

logger = logging.getLogger(__name__)

_FRACTION = re.compile(r"\.(\d+)")
_SIZE_UNITS = ("KiB", "MiB", "GiB", "TiB")


def get_client() -> FileSearchClient:
    """Build a client from the environment configuration."""
    return FileSearchClient()


def fail(action: str, error: Exception) -> NoReturn:
    """Report ``error`` on stderr and exit with status 1."""
    if isinstance(error, ConfigurationError):
        typer.echo(f"Error: {error}", err=True)
        typer.echo("\nMake sure GEMINI_API_KEY environment variable is set.", err=True)
    elif isinstance(error, HttpStatusError):
        typer.echo(f"Error {action}: HTTP {error.status}", err=True)
        typer.echo(error.body.decode("utf-8", errors="replace"), err=True)
    else:
        typer.echo(f"Error {action}: {error}", err=True)
    logger.debug(f"Command failed while {action}", exc_info=error)
    raise typer.Exit(1)


def format_timestamp(value: str | None) -> str:
    """
    Render an RFC 3339 timestamp as ``YYYY-MM-DD HH:MM:SS``.

    Fractions are truncated to microseconds (the service sends nanoseconds).
    Unparseable values are returned unchanged.
    """
    if not value:
        return "N/A"
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        parsed = datetime.fromisoformat(normalized.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def format_size(size_bytes: int | None) -> str:
    """Render a byte count with binary units, e.g. ``1536`` -> ``1.5 KiB``."""
    if size_bytes is None:
        return "N/A"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    size = float(size_bytes)
    for unit in _SIZE_UNITS:
        size /= 1024
        if size < 1024 or unit == _SIZE_UNITS[-1]:
            break
    return f"{size:.1f} {unit}"
