"""Unit tests for the top-level CLI application."""

import logging

from rich.logging import RichHandler
from typer.testing import CliRunner
from vmsweep import __version__
from vmsweep.cli.main import app

runner = CliRunner()


class TestMainApp:
    """Tests for global options."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"vmsweep version {__version__}" in result.output

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])

        assert "run" in result.output
        assert "history" in result.output

    def test_verbose_sets_debug_logging(self, xdg_dirs) -> None:
        runner.invoke(app, ["-v", "history"])

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert sum(isinstance(h, RichHandler) for h in root.handlers) == 1

    def test_quiet_sets_error_logging(self, xdg_dirs) -> None:
        runner.invoke(app, ["-q", "history"])
        runner.invoke(app, ["history"])
        runner.invoke(app, ["-q", "history"])

        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert sum(isinstance(h, RichHandler) for h in root.handlers) == 1
