"""CLI package for vmsweep.

This package contains the Typer application and all subcommands.
"""

from vmsweep.cli.main import app

__all__ = ["app"]
