"""History command for viewing past destructive runs."""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from vmsweep.core.state import StateManager
from vmsweep.models.history import HistoryEntry
from vmsweep.utils.formatting import console, format_size, print_info

app = typer.Typer(
    name="history",
    help="View history of rename and delete runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    cluster: Annotated[
        str | None,
        typer.Option(
            "--cluster",
            "-c",
            help="Only show runs against this cluster.",
        ),
    ] = None,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show entries since date (YYYY-MM-DD).",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of rename and delete runs.

    Examples:
        vmsweep history              # Show last 20 runs
        vmsweep history -n 50        # Show last 50 runs
        vmsweep history -c Prod --since 2024-01-01
        vmsweep history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    entries = StateManager().get_history()

    if cluster:
        entries = [e for e in entries if e.location == cluster]

    if since:
        try:
            since_date = datetime.fromisoformat(since).date()
        except ValueError:
            typer.echo(f"Invalid date format: {since}. Use YYYY-MM-DD.", err=True)
            raise typer.Exit(code=1) from None
        entries = [e for e in entries if _parse_timestamp(e.timestamp).date() >= since_date]

    entries = entries[:limit]

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table."""
    table = Table(title="Run History")
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="cyan")
    table.add_column("Action", style="green")
    table.add_column("Cluster", style="white")
    table.add_column("Files", justify="right")
    table.add_column("Failed", justify="right", style="yellow")
    table.add_column("Size", justify="right")

    for entry in entries:
        table.add_row(
            entry.id[:8],
            _parse_timestamp(entry.timestamp).strftime("%Y-%m-%d %H:%M"),
            entry.action_type.value,
            escape(entry.location),
            str(len(entry.items)),
            str(entry.failed_count),
            format_size(sum(item.size_bytes for item in entry.items)),
        )

    console.print(table)


def _parse_timestamp(iso_timestamp: str) -> datetime:
    """Parse a stored ISO 8601 timestamp."""
    return datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))


def _print_json(entries: list[HistoryEntry]) -> None:
    """Print history as JSON for scripting."""
    console.print_json(json.dumps([entry.to_dict() for entry in entries]))
