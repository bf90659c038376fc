"""File upload and import commands."""

import json
from pathlib import Path

import typer

from . import common
from ..errors import FileSearchError
from ..upload import DEFAULT_CHUNK_SIZE

app = typer.Typer(help="Upload files and import them into stores")


@app.command("upload")
def upload(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to upload"),
    store_name: str | None = typer.Option(
        None, "--store", "-s", help="Upload straight into this store"
    ),
    mime_type: str | None = typer.Option(None, "--mime-type", help="Content type (guessed if omitted)"),
    display_name: str | None = typer.Option(None, "--display-name", help="Name shown in citations"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", help="Bytes per chunk"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for store ingestion to finish"),
    timeout: float = typer.Option(300.0, "--timeout", help="Max seconds to wait for ingestion"),
) -> None:
    """Upload a file, either as a standalone file or into a store."""
    with common.get_client() as client:
        try:
            ack = client.upload_file(
                path,
                store_name=store_name,
                mime_type=mime_type,
                display_name=display_name,
                chunk_size=chunk_size,
            )
        except FileSearchError as e:
            common.fail(f"uploading {path.name}", e)

        if not store_name:
            file_info = ack.get("file", ack)
            typer.echo(f"✓ Uploaded {path.name} as {file_info.get('name', 'N/A')}")
            return

        operation_name = ack.get("name")
        typer.echo(f"✓ Uploaded {path.name} to {store_name}")
        if not (wait and operation_name and not ack.get("done")):
            return

        typer.echo(f"Waiting for ingestion ({operation_name})...")
        try:
            operation = client.wait_operation(operation_name, timeout=timeout)
        except FileSearchError as e:
            common.fail("waiting for ingestion", e)

    if operation.error is not None:
        typer.echo(f"✗ Ingestion failed: {operation.error.message}", err=True)
        raise typer.Exit(1)
    typer.echo("✓ Ingestion complete")


@app.command("import")
def import_file(
    store_name: str = typer.Argument(..., help="Store resource name (fileSearchStores/...)"),
    file_name: str = typer.Argument(..., help="Uploaded file resource name (files/...)"),
    wait: bool = typer.Option(True, "--wait/--no-wait", help="Wait for the import to finish"),
    timeout: float = typer.Option(300.0, "--timeout", help="Max seconds to wait"),
) -> None:
    """Import an uploaded file into a store."""
    try:
        with common.get_client() as client:
            operation = client.import_file_to_store(store_name, file_name)
            if wait and not operation.done:
                operation = client.wait_operation(operation.name, timeout=timeout)
    except FileSearchError as e:
        common.fail(f"importing {file_name}", e)

    typer.echo(json.dumps(operation.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))
    if operation.error is not None:
        raise typer.Exit(1)
