"""Long-running operation commands."""

import json

import typer

from . import common
from ..errors import FileSearchError
from ..models import Operation

app = typer.Typer(help="Inspect long-running operations")


def _echo_operation(operation: Operation) -> None:
    typer.echo(json.dumps(operation.model_dump(mode="json", by_alias=True, exclude_none=True), indent=2))


@app.command("get")
def get_operation(
    operation_name: str = typer.Argument(..., help="Operation resource name"),
) -> None:
    """Show the current state of an operation."""
    try:
        with common.get_client() as client:
            operation = client.get_operation(operation_name)
    except FileSearchError as e:
        common.fail("getting operation", e)
    _echo_operation(operation)


@app.command("wait")
def wait_operation(
    operation_name: str = typer.Argument(..., help="Operation resource name"),
    timeout: float = typer.Option(120.0, "--timeout", help="Max seconds to wait"),
    interval: float = typer.Option(2.0, "--interval", help="Seconds between polls"),
) -> None:
    """Poll an operation until it is done."""
    try:
        with common.get_client() as client:
            operation = client.wait_operation(
                operation_name, timeout=timeout, poll_interval=interval
            )
    except FileSearchError as e:
        common.fail("waiting for operation", e)
    _echo_operation(operation)
    if operation.error is not None:
        raise typer.Exit(1)
