"""Main CLI application for Vehicle Makes DB."""

from typing import Annotated

import typer
import uvicorn
from rich.console import Console

from vehicle_makes_db import __version__
from vehicle_makes_db.cli import makes as makes_cmd
from vehicle_makes_db.cli import sync as sync_cmd
from vehicle_makes_db.config import get_settings
from vehicle_makes_db.logging import setup_logging

app = typer.Typer(
    name="vmakes",
    help="Vehicle makes and types synchronized from NHTSA vPIC.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"vmakes version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """Vehicle Makes DB - Sync and serve vPIC vehicle makes."""
    settings = get_settings()
    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        config=settings.logging,
    )


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port.")] = None,
    no_scheduler: Annotated[
        bool,
        typer.Option("--no-scheduler", help="Serve reads only, without periodic sync."),
    ] = False,
) -> None:
    """Serve the REST and GraphQL read APIs (with the periodic sync).

    SIGINT/SIGTERM stop the server; an in-flight sync finishes its current
    group of requests first.
    """
    from vehicle_makes_db.api import create_app

    server_config = get_settings().server
    uvicorn.run(
        create_app(enable_scheduler=not no_scheduler),
        host=host or server_config.host,
        port=port or server_config.port,
        log_config=None,
    )


# Register subcommands
app.add_typer(sync_cmd.app, name="sync")
app.add_typer(makes_cmd.app, name="makes")


if __name__ == "__main__":
    app()
