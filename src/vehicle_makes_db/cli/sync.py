"""Sync commands for Vehicle Makes DB."""

import json
from typing import Any

import typer

from vehicle_makes_db.db import MakeRepository, create_tables, get_session
from vehicle_makes_db.sync import SelfCheckResult, check_make_count, run_sync_cycle
from vehicle_makes_db.vpic import VPICClient

from .common import OutputFormat, OutputFormatOption, console, run_async_command

app = typer.Typer(help="Sync makes and vehicle types from NHTSA vPIC")


@app.command("run")
def sync_run(
    max_makes: int | None = typer.Option(
        None,
        "--max",
        "-m",
        min=1,
        help="Only load vehicle types for this many makes (useful for testing)",
    ),
    no_self_check: bool = typer.Option(
        False,
        "--no-self-check",
        help="Skip the post-sync make count comparison",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Run one complete sync against vPIC.

    Examples:
        vmakes sync run
        vmakes sync run --max 20 --no-self-check
        vmakes sync run --format json
    """
    if output_format == OutputFormat.TEXT:
        console.print("[dim]Syncing makes from vPIC...[/dim]")

    run_result = run_async_command(
        run_sync_cycle(
            self_check=False if no_self_check else None,
            max_makes=max_makes,
        ),
        error_prefix="Sync failed",
    )
    result = run_result.to_dict()

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result))
        return

    type_load = result["type_load"]
    console.print("[bold]Sync Complete[/bold]")
    console.print()
    console.print(f"  Makes fetched:          {result['makes_fetched']}")
    console.print(f"  [green]Makes created:[/green]          {result['created']}")
    console.print(f"  [blue]Makes written:[/blue]          {result['upserted']}")
    console.print(f"  [yellow]Makes deleted:[/yellow]          {result['deleted']}")
    console.print()
    console.print(f"  [green]Types loaded:[/green]           {type_load['succeeded']}")
    if type_load["failed"]:
        console.print(f"  [red]Type loads failed:[/red]      {type_load['failed']}")
    if type_load["not_started"]:
        console.print(f"  [dim]Not started:[/dim]            {type_load['not_started']}")
    console.print(f"  Duration: {result['duration_seconds']:.1f}s")

    if type_load["failed_makes"]:
        console.print()
        console.print("[bold red]Failed makes (retried on the next run):[/bold red]")
        for failed in type_load["failed_makes"]:
            console.print(f"  {failed['make_id']}: {failed['error'][:80]}")

    if run_result.self_check is not None:
        console.print()
        _print_self_check(run_result.self_check)


@app.command("check")
def sync_check(
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Compare the make count reported by vPIC with the stored row count.

    Exits with code 1 when the counts differ or the check cannot complete.
    """

    async def _check() -> SelfCheckResult:
        await create_tables()
        async with VPICClient() as client, get_session() as session:
            return await check_make_count(client, MakeRepository(session))

    check = run_async_command(_check(), error_prefix="Self-check failed")

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(check.to_dict()))
    else:
        _print_self_check(check)

    if not check.passed:
        raise typer.Exit(1)


def _print_self_check(check: SelfCheckResult) -> None:
    data: dict[str, Any] = check.to_dict()
    if data["error"]:
        console.print(f"[red]Self-check error:[/red] {data['error']}")
    elif check.passed:
        console.print(f"[green]✓[/green] Self-check passed: {data['stored_count']} makes stored")
    else:
        console.print(
            f"[yellow]⚠[/yellow] Self-check mismatch: vPIC reports "
            f"{data['remote_count']} makes, store holds {data['stored_count']}"
        )
