"""CLI commands for vmsweep.

This package contains all subcommand implementations.
"""

from vmsweep.cli.commands import config, history, run

__all__ = ["config", "history", "run"]
