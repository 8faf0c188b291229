"""Unit tests for the history command."""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner
from vmsweep.cli.main import app
from vmsweep.core.state import StateManager
from vmsweep.models.action import ActionOutcome
from vmsweep.models.history import HistoryActionType, HistoryEntry, HistoryItem

runner = CliRunner()


@pytest.fixture
def sample_history(xdg_dirs: Path) -> list[HistoryEntry]:
    """Write three runs to the history file, oldest first."""
    entries = [
        HistoryEntry(
            id="abc123456789",
            timestamp="2024-01-01T09:00:00+00:00",
            action_type=HistoryActionType.RENAME,
            location="Prod",
            items=(
                HistoryItem(path="[ds-a] stale/stale.vmdk", outcome=ActionOutcome.SUCCESS,
                            size_bytes=1000, new_name="stale_ToDelete_01-16-2024.vmdk"),
                HistoryItem(path="[ds-b] old/old.vmdk", outcome=ActionOutcome.SUCCESS,
                            size_bytes=2048, new_name="old_ToDelete_01-16-2024.vmdk"),
            ),
        ),
        HistoryEntry(
            id="def678901234",
            timestamp="2024-01-16T09:00:00+00:00",
            action_type=HistoryActionType.DELETE,
            location="Prod",
            items=(
                HistoryItem(path="[ds-b] old/old_ToDelete_01-16-2024.vmdk",
                            outcome=ActionOutcome.FAILED, size_bytes=2048, error="locked"),
            ),
        ),
        HistoryEntry(
            id="ghi112233445",
            timestamp="2024-02-01T09:00:00+00:00",
            action_type=HistoryActionType.DELETE,
            location="Test",
            items=(HistoryItem(path="[ds9] x.vmdk", outcome=ActionOutcome.SUCCESS),),
        ),
    ]
    manager = StateManager()
    for entry in entries:
        manager.record_run(entry)
    return entries


class TestHistoryCommand:
    """Tests for vmsweep history."""

    def test_empty(self, xdg_dirs: Path) -> None:
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "No history entries found." in result.output

    def test_table(self, sample_history: list[HistoryEntry]) -> None:
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0, result.output
        assert "Run History" in result.output
        assert "abc12345" in result.output
        assert "ghi11223" in result.output

    def test_json_newest_first(self, sample_history: list[HistoryEntry]) -> None:
        result = runner.invoke(app, ["history", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [d["id"] for d in data] == ["ghi112233445", "def678901234", "abc123456789"]
        assert data[2]["items"][0]["path"] == "[ds-a] stale/stale.vmdk"

    def test_limit(self, sample_history: list[HistoryEntry]) -> None:
        result = runner.invoke(app, ["history", "--json", "-n", "1"])

        assert [d["id"] for d in json.loads(result.output)] == ["ghi112233445"]

    def test_cluster_filter(self, sample_history: list[HistoryEntry]) -> None:
        result = runner.invoke(app, ["history", "--json", "-c", "Prod"])

        assert [d["location"] for d in json.loads(result.output)] == ["Prod", "Prod"]

    def test_since(self, sample_history: list[HistoryEntry]) -> None:
        result = runner.invoke(app, ["history", "--json", "--since", "2024-01-16"])

        assert [d["id"] for d in json.loads(result.output)] == ["ghi112233445", "def678901234"]

    def test_invalid_since(self, sample_history: list[HistoryEntry]) -> None:
        result = runner.invoke(app, ["history", "--since", "last week"])

        assert result.exit_code == 1
        assert "Invalid date format" in result.output
