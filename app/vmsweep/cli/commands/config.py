"""Configuration commands.

Shows the effective configuration and writes a starter config file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from vmsweep.core.config import (
    get_default_config,
    load_config_or_default,
    save_config,
)
from vmsweep.core.paths import get_config_path
from vmsweep.errors import ConfigError
from vmsweep.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the vmsweep configuration.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective configuration as TOML."""
    try:
        config = load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    path = get_config_path()
    if not path.exists():
        print_info(f"No config file at {path}; showing defaults.")
    data = config.model_dump(exclude_none=True, mode="json")
    console.print(tomli_w.dumps(data), markup=False, highlight=False)


@app.command()
def init(
    server: Annotated[
        str | None,
        typer.Option("--server", "-s", help="Default vCenter host."),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-u", help="Default vCenter user."),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Default report directory."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    path = get_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists: {path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    config = get_default_config().model_copy(
        update={"server": server, "user": user, "output_dir": output_dir}
    )
    try:
        saved = save_config(config, path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
