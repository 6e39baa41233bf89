"""Commands for browsing stored makes."""

import json

import typer
from rich.table import Table

from vehicle_makes_db.db import MakeRepository, create_tables, get_session
from vehicle_makes_db.schemas import Make

from .common import OutputFormat, OutputFormatOption, console, run_async_command

app = typer.Typer(help="Browse stored vehicle makes")


@app.command("list")
def list_makes(
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Show at most this many makes",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """List stored makes with their vehicle types.

    Examples:
        vmakes makes list
        vmakes makes list --limit 20
        vmakes makes list --format json
    """

    async def _list() -> list[Make]:
        await create_tables()
        async with get_session() as session:
            return await MakeRepository(session).find_all()

    makes = run_async_command(_list(), error_prefix="Listing makes failed")
    if limit is not None:
        makes = makes[:limit]

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([make.to_record() for make in makes]))
        return

    if not makes:
        console.print("[yellow]No makes stored yet. Run: vmakes sync run[/yellow]")
        return

    table = Table(title="Vehicle Makes")
    table.add_column("Make ID", justify="right", style="bold")
    table.add_column("Name")
    table.add_column("Vehicle Types")

    for make in makes:
        types = ", ".join(vt.type_name for vt in make.vehicle_types)
        table.add_row(make.make_id, make.make_name, types or "[dim]-[/dim]")

    console.print(table)
    console.print(f"[dim]{len(makes)} makes[/dim]")
