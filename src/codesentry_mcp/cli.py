"""CodeSentry CLI - run the MCP server and inspect its configuration."""

from __future__ import annotations

import json

import typer

from codesentry_mcp import SERVER_NAME, __version__
from codesentry_mcp.config import describe_settings, load_settings, validate_settings
from codesentry_mcp.logging import setup_logging

app = typer.Typer(
    name=SERVER_NAME,
    help="CodeSentry MCP Server - AI-powered code review assistant.",
)

config_app = typer.Typer(
    name="config",
    help="Configuration - view and check settings.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"{SERVER_NAME} {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """CodeSentry MCP Server. Serves on stdio when no command is given."""
    if ctx.invoked_subcommand is None:
        serve()


@app.command()
def serve() -> None:
    """Run the MCP server on stdin/stdout."""
    from codesentry_mcp.server import run

    setup_logging()
    settings = load_settings()
    raise typer.Exit(run(settings))


@config_app.command()
def show(
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Show effective configuration with secrets masked."""
    data = describe_settings(load_settings())

    if output_json:
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo("")
    typer.echo("CodeSentry Configuration")
    typer.echo("------------------------")
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(value) or "(none)"
        elif value is None:
            value = "(not set)"
        typer.echo(f"{key}: {value}")
    typer.echo("")
    typer.echo("Set values using environment variables, e.g. MAX_FILE_SIZE=2097152")


@config_app.command()
def check() -> None:
    """Report configuration warnings. Never fails."""
    setup_logging(cache_loggers=False)
    warnings = validate_settings(load_settings())

    if not warnings:
        typer.echo("Configuration OK")
        return

    for message in warnings:
        typer.echo(f"warning: {message}")
