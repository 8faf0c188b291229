"""Sweep command.

Finds orphaned VMDK files on the datastores of a cluster and reports,
renames or deletes them.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from vmsweep.core.config import SweepConfig, get_password, load_config_or_default
from vmsweep.core.engine import run_sweep
from vmsweep.core.persistence import ReportWriter
from vmsweep.core.report import ReportSink
from vmsweep.core.state import StateManager
from vmsweep.errors import ConfigError, PlatformError, SnapshotError
from vmsweep.models.action import ActionMode, ActionResult
from vmsweep.models.history import create_history_entry
from vmsweep.platform.vsphere import VSphereSession
from vmsweep.utils.formatting import (
    console,
    format_gb,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Find orphaned disk files on a cluster and act on them.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.callback(invoke_without_command=True)
def run(
    cluster: Annotated[
        str,
        typer.Option("--cluster", "-c", help="Cluster whose datastores are swept."),
    ],
    action: Annotated[
        ActionMode,
        typer.Option(
            "--action",
            "-a",
            help="What to do with orphans (case-insensitive).",
            metavar="[report|rename|delete]",
            parser=ActionMode.parse,
        ),
    ],
    server: Annotated[
        str | None,
        typer.Option("--server", "-s", help="vCenter host (default from config)."),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-u", help="vCenter user (default from config)."),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Directory for the CSV report."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", min=1, max=32, help="Datastores searched concurrently."),
    ] = None,
    no_verify_ssl: Annotated[
        bool,
        typer.Option("--no-verify-ssl", help="Accept self-signed vCenter certificates."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Sweep a cluster for orphaned VMDK files.

    Examples:
        vmsweep run -s vc01 -c Prod -a report
        vmsweep run -s vc01 -c Prod -a rename -o ./reports
        vmsweep run -s vc01 -c Prod -a delete --yes
    """
    try:
        config = load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    host = server or config.server
    if not host:
        print_error("No vCenter server given (use --server or set 'server' in config).")
        raise typer.Exit(code=1)

    login = user or config.user
    if not login:
        login = typer.prompt("vCenter user")

    if action.is_destructive and not yes:
        confirmed = typer.confirm(
            f"{action.value.capitalize()} orphaned disk files on cluster '{cluster}'?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    password = get_password() or typer.prompt("vCenter password", hide_input=True)

    try:
        session = VSphereSession.connect(
            host,
            login,
            password,
            port=config.port,
            verify_ssl=config.verify_ssl and not no_verify_ssl,
        )
    except PlatformError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    # Filled as the run goes, so an interrupt can still persist it
    sink = ReportSink()
    try:
        with session:
            result = run_sweep(
                session,
                cluster,
                action,
                pattern=config.disk_pattern,
                exclude=config.exclude,
                workers=workers or config.workers,
                grace_days=config.grace_days,
                sink=sink,
            )
    except SnapshotError as e:
        print_error(f"{e}. No files were modified.")
        raise typer.Exit(code=1) from e
    except PlatformError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except KeyboardInterrupt:
        print_warning(f"Interrupted after {len(sink)} file(s); saving partial report.")
        _persist(cluster, action, host, sink, config, output_dir)
        raise typer.Exit(code=130) from None

    for datastore in result.failed_datastores:
        print_warning(f"Datastore {datastore} could not be searched and was skipped.")

    report = result.report
    if not report.rows:
        print_success(f"Cluster {cluster} is clean. No orphaned disk files found.")
        return

    _print_results(report.rows, action)
    console.print(
        f"\n[dim]{len(report)} orphaned disk file(s), {format_gb(report.total_bytes)} total "
        f"({result.scanned_count} scanned, {result.referenced_count} referenced)[/dim]"
    )
    _persist(cluster, action, host, report, config, output_dir)


# === Private helper functions ===


def _persist(
    cluster: str,
    action: ActionMode,
    host: str,
    sink: ReportSink,
    config: SweepConfig,
    output_dir: Path | None = None,
) -> None:
    """Append the CSV report and record destructive runs to history."""
    if not sink.rows:
        return

    writer = ReportWriter(output_dir or config.output_dir)
    try:
        path = writer.write(cluster, sink.rows, sink.total_bytes)
        print_info(f"Report written to {path}")
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not write report: {e}")

    if not action.is_destructive:
        return

    try:
        entry = create_history_entry(
            action,
            cluster,
            sink.rows,
            metadata={"server": host, "command": f"vmsweep run -a {action.value}"},
        )
        StateManager().record_run(entry)
        print_info("Run recorded to history.")
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record to history: {e}")


def _print_results(rows: list[ActionResult], action: ActionMode) -> None:
    """Display action results as a Rich table."""
    table = Table(title=f"Orphaned Disk Files ({action.value})", show_lines=False)
    table.add_column("Path", style="bold")
    table.add_column("Size", justify="right", width=10)
    table.add_column("Modified", style="dim", width=16)
    if action != ActionMode.DELETE:
        table.add_column("Proposed Name", style="dim")
    table.add_column("Status", width=8)
    table.add_column("Details", style="dim")

    for r in rows:
        record = r.candidate.record
        modified = (
            record.modification_time.strftime("%Y-%m-%d %H:%M") if record.modification_time else "-"
        )
        status = "[success]ok[/]" if r.success else "[error]failed[/]"
        cells = [escape(r.candidate.full_path), format_size(record.size_bytes), modified]
        if action != ActionMode.DELETE:
            cells.append(r.proposed_name or "-")
        cells.extend([status, escape(r.error or "")])
        table.add_row(*cells)

    console.print(table)

    failed = sum(1 for r in rows if r.failed)
    if failed:
        print_warning(f"{len(rows) - failed} succeeded, {failed} failed")
