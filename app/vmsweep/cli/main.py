"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from vmsweep import __version__
from vmsweep.cli.commands import config, history, run
from vmsweep.utils.log import configure_logging

# Create main Typer app
app = typer.Typer(
    name="vmsweep",
    help="Find and clean up orphaned VMDK files on vSphere datastores.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"vmsweep version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """vmsweep - Find and clean up orphaned VMDK files.

    Compares the disks referenced by every VM against the VMDK files
    on a cluster's datastores, then reports, renames or deletes the
    files nothing uses.
    """
    configure_logging(verbose=verbose, quiet=quiet)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(run.app, name="run")
app.add_typer(history.app, name="history")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
