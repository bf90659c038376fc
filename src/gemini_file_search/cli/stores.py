"""File Search store management commands."""

import json

import typer
from rich.console import Console
from rich.table import Table

from . import common
from ..errors import FileSearchError

app = typer.Typer(help="File Search store management")

console = Console()


@app.command("list")
def list_stores(
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
) -> None:
    """List all File Search stores."""
    try:
        with common.get_client() as client:
            stores = client.list_stores()
    except FileSearchError as e:
        common.fail("listing stores", e)

    if json_output:
        output = [store.model_dump(mode="json") for store in stores]
        typer.echo(json.dumps(output, indent=2))
        return

    if not stores:
        typer.echo("No File Search stores found.")
        return

    table = Table(title="File Search Stores")
    table.add_column("Name", style="cyan")
    table.add_column("Display name")
    table.add_column("Created")
    table.add_column("Active", justify="right", style="green")
    table.add_column("Pending", justify="right", style="yellow")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Size", justify="right")

    for store in stores:
        table.add_row(
            store.name,
            store.display_name or "N/A",
            common.format_timestamp(store.create_time),
            str(store.active_documents_count),
            str(store.pending_documents_count),
            str(store.failed_documents_count),
            common.format_size(store.size_bytes),
        )

    console.print(table)
    typer.echo(f"Total: {len(stores)} store{'s' if len(stores) != 1 else ''}")


@app.command("create")
def create_store(
    display_name: str = typer.Argument(..., help="Display name for the new store"),
) -> None:
    """Create a File Search store and print its resource name."""
    try:
        with common.get_client() as client:
            store = client.create_store(display_name)
    except FileSearchError as e:
        common.fail("creating store", e)
    typer.echo(store.name)


@app.command("get")
def get_store(
    store_name: str = typer.Argument(..., help="Store resource name (fileSearchStores/...)"),
) -> None:
    """Show a File Search store."""
    try:
        with common.get_client() as client:
            store = client.get_store(store_name)
    except FileSearchError as e:
        common.fail("getting store", e)
    typer.echo(json.dumps(store.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))


@app.command("delete")
def delete_store(
    store_name: str = typer.Argument(..., help="Store resource name (fileSearchStores/...)"),
    force: bool = typer.Option(False, "--force", "-f", help="Also delete documents in the store"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Delete a File Search store."""
    if not yes:
        typer.confirm(f"Delete {store_name}?", abort=True)
    try:
        with common.get_client() as client:
            client.delete_store(store_name, force=force)
    except FileSearchError as e:
        common.fail("deleting store", e)
    typer.echo(f"✓ Deleted {store_name}")
