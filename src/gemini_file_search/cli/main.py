"""Main CLI entry point for Gemini File Search."""

import json

import typer

from . import common, files, ops, stores
from ..errors import FileSearchError
from ..grounding import extract_grounding_chunks, extract_text
from ..logging_utils import setup_logging

app = typer.Typer(
    name="gemini-fs",
    help="Gemini File Search CLI - manage stores, upload documents and ask grounded questions",
    no_args_is_help=True,
)

# Register subcommand groups
app.add_typer(stores.app, name="stores", help="File Search store commands")
app.add_typer(files.app, name="files", help="File upload and import commands")
app.add_typer(ops.app, name="ops", help="Long-running operation commands")


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING", "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR"
    ),
    use_logfire: bool = typer.Option(
        False, "--logfire", help="Trace requests with the Logfire console exporter"
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    setup_logging(log_level, use_logfire=use_logfire)


@app.command("ask")
def ask(
    prompt: str = typer.Argument(..., help="Question to ask"),
    store_names: list[str] = typer.Option(
        ..., "--store", "-s", help="Store to ground on (repeatable)"
    ),
    metadata_filter: str | None = typer.Option(
        None, "--filter", help='Metadata filter, e.g. source_type = "wikipedia"'
    ),
    model: str | None = typer.Option(None, "--model", "-m", help="Override the configured model"),
    json_output: bool = typer.Option(False, "--json", help="Print the raw response"),
) -> None:
    """Generate an answer grounded on one or more File Search stores."""
    try:
        with common.get_client() as base:
            client = base.with_model(model) if model else base
            response = client.generate_content(prompt, store_names, metadata_filter=metadata_filter)
    except FileSearchError as e:
        common.fail("generating content", e)

    if json_output:
        typer.echo(json.dumps(response, indent=2))
        return

    typer.echo(extract_text(response) or "(no text in response)")
    chunks = extract_grounding_chunks(response)
    if chunks:
        typer.echo("\nSources:")
        for chunk in chunks:
            typer.echo(f"  • {chunk['title'] or 'untitled'} (cited {chunk['reference_count']}x)")


if __name__ == "__main__":
    app()
