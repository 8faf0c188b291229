"""Unit tests for the run command.

VSphereSession is patched so connect() hands back the in-memory
session from conftest; config, state and reports live under tmp_path.
"""

import csv
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner
from vmsweep.cli.main import app
from vmsweep.core.config import PASSWORD_ENV_VAR
from vmsweep.errors import PlatformError

runner = CliRunner()

BASE_ARGS = ["run", "-s", "vc01", "-u", "admin", "-c", "Prod"]


@pytest.fixture
def env(xdg_dirs: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolated XDG directories with the password set in the environment."""
    monkeypatch.setenv(PASSWORD_ENV_VAR, "s3cret")
    return xdg_dirs


@pytest.fixture
def vsphere(cluster_session):
    """Patch VSphereSession so connect() returns the in-memory cluster."""
    with patch("vmsweep.cli.commands.run.VSphereSession") as cls:
        cls.connect.return_value = cluster_session
        yield cls


def _report_rows(directory: Path) -> list[list[str]]:
    reports = list(directory.glob("Orphaned_VMDKs_Prod_*.csv"))
    assert len(reports) == 1
    with reports[0].open(encoding="utf-8", newline="") as f:
        return list(csv.reader(f))


def _history_lines(env: Path) -> list[dict]:
    path = env / "state" / "vmsweep" / "history.jsonl"
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestReportAction:
    """Tests for report runs."""

    def test_writes_csv_and_nothing_else(self, env: Path, vsphere, cluster_session) -> None:
        out = env / "reports"

        result = runner.invoke(app, [*BASE_ARGS, "-a", "report", "-o", str(out)])

        assert result.exit_code == 0, result.output
        rows = _report_rows(out)
        assert [r[1] for r in rows[1:4]] == [
            "[ds-a] stale/stale.vmdk",
            "[ds-a] root.vmdk",
            "[ds-b] old/old.vmdk",
        ]
        assert rows[-1][0] == "TOTAL"
        assert rows[-1][3] == "3048"
        assert cluster_session.renamed == {}
        assert cluster_session.deleted == []
        assert _history_lines(env) == []
        assert "3 orphaned disk file(s)" in result.output

    def test_session_closed(self, env: Path, vsphere, cluster_session) -> None:
        runner.invoke(app, [*BASE_ARGS, "-a", "report", "-o", str(env)])

        assert cluster_session.closed is True

    def test_connection_settings(self, env: Path, vsphere) -> None:
        runner.invoke(app, [*BASE_ARGS, "-a", "report", "--no-verify-ssl", "-o", str(env)])

        vsphere.connect.assert_called_once_with(
            "vc01", "admin", "s3cret", port=443, verify_ssl=False
        )

    def test_action_case_insensitive(self, env: Path, vsphere) -> None:
        result = runner.invoke(app, [*BASE_ARGS, "-a", "REPORT", "-o", str(env)])

        assert result.exit_code == 0, result.output

    def test_default_report_dir(self, env: Path, vsphere) -> None:
        result = runner.invoke(app, [*BASE_ARGS, "-a", "report"])

        assert result.exit_code == 0, result.output
        assert len(_report_rows(env / "data" / "vmsweep" / "reports")) == 5

    def test_clean_cluster(self, env: Path, vsphere, fake_session_cls) -> None:
        vsphere.connect.return_value = fake_session_cls(vm_disks=[], datastores={"ds1": []})

        result = runner.invoke(app, [*BASE_ARGS, "-a", "report", "-o", str(env / "out")])

        assert result.exit_code == 0
        assert "is clean" in result.output
        assert not (env / "out").exists()


class TestDestructiveActions:
    """Tests for rename and delete runs."""

    def test_rename_with_yes(self, env: Path, vsphere, cluster_session) -> None:
        result = runner.invoke(app, [*BASE_ARGS, "-a", "rename", "--yes", "-o", str(env)])

        assert result.exit_code == 0, result.output
        assert set(cluster_session.renamed) == {
            "[ds-a] stale/stale.vmdk",
            "[ds-a] root.vmdk",
            "[ds-b] old/old.vmdk",
        }
        history = _history_lines(env)
        assert len(history) == 1
        assert history[0]["action_type"] == "rename"
        assert history[0]["location"] == "Prod"
        assert history[0]["metadata"]["server"] == "vc01"

    def test_delete_confirmed(self, env: Path, vsphere, cluster_session) -> None:
        result = runner.invoke(app, [*BASE_ARGS, "-a", "delete", "-o", str(env)], input="y\n")

        assert result.exit_code == 0, result.output
        assert len(cluster_session.deleted) == 3

    def test_delete_declined(self, env: Path, vsphere, cluster_session) -> None:
        result = runner.invoke(app, [*BASE_ARGS, "-a", "delete", "-o", str(env)], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.output
        vsphere.connect.assert_not_called()
        assert cluster_session.deleted == []

    def test_failed_action_reported(self, env: Path, vsphere, cluster_session) -> None:
        """A failed delete is a row in the report, not a failed run."""
        cluster_session.fail_delete = ("[ds-a] root.vmdk",)

        result = runner.invoke(app, [*BASE_ARGS, "-a", "delete", "-y", "-o", str(env)])

        assert result.exit_code == 0, result.output
        rows = _report_rows(env)
        outcomes = {r[1]: r[7] for r in rows[1:-1]}
        assert outcomes["[ds-a] root.vmdk"] == "failed"
        assert outcomes["[ds-b] old/old.vmdk"] == "success"
        assert _history_lines(env)[0]["items"][1]["outcome"] == "failed"

    def test_failed_action_warned_once(self, env: Path, vsphere, cluster_session) -> None:
        """Per-file failures come from the log only, not a second CLI warning."""
        cluster_session.fail_delete = ("[ds-a] root.vmdk",)

        with patch("vmsweep.cli.commands.run.print_warning") as warn:
            result = runner.invoke(app, [*BASE_ARGS, "-a", "delete", "-y", "-o", str(env)])

        assert result.exit_code == 0, result.output
        messages = [c.args[0] for c in warn.call_args_list]
        assert not any("root.vmdk" in m for m in messages)
        assert "2 succeeded, 1 failed" in messages


class TestFailures:
    """Tests for fatal errors and exit codes."""

    def test_snapshot_failure(self, env: Path, vsphere, cluster_session) -> None:
        cluster_session.fail_snapshot = True

        result = runner.invoke(app, [*BASE_ARGS, "-a", "delete", "-y", "-o", str(env / "out")])

        assert result.exit_code == 1
        assert "Cannot collect referenced disks" in result.output
        assert cluster_session.deleted == []
        assert not (env / "out").exists()

    def test_connect_failure(self, env: Path, vsphere) -> None:
        vsphere.connect.side_effect = PlatformError("Cannot connect to vc01: refused")

        result = runner.invoke(app, [*BASE_ARGS, "-a", "report"])

        assert result.exit_code == 1
        assert "Cannot connect to vc01" in result.output

    def test_unknown_cluster(self, env: Path, vsphere, cluster_session) -> None:
        def fail(location: str) -> list[str]:
            raise PlatformError(f"Cluster not found: {location}")

        cluster_session.list_datastores = fail

        result = runner.invoke(app, [*BASE_ARGS, "-a", "report"])

        assert result.exit_code == 1
        assert "Cluster not found: Prod" in result.output

    def test_skipped_datastore_warned(self, env: Path, vsphere, cluster_session) -> None:
        cluster_session.fail_search = ("ds-a",)

        result = runner.invoke(app, [*BASE_ARGS, "-a", "report", "-o", str(env)])

        assert result.exit_code == 0
        assert "ds-a could not be searched" in result.output

    def test_no_server(self, env: Path, vsphere) -> None:
        result = runner.invoke(app, ["run", "-c", "Prod", "-a", "report"])

        assert result.exit_code == 1
        assert "No vCenter server given" in result.output

    def test_invalid_action(self, env: Path, vsphere) -> None:
        result = runner.invoke(app, [*BASE_ARGS, "-a", "shred"])

        assert result.exit_code == 2
        assert "shred" in result.output
        vsphere.connect.assert_not_called()

    def test_interrupt_saves_partial_report(self, env: Path, vsphere, cluster_session) -> None:
        """Ctrl-C after the first delete still leaves a CSV row and a history entry."""
        delete = cluster_session.delete_file

        def delete_then_interrupt(path: str) -> None:
            if cluster_session.deleted:
                raise KeyboardInterrupt
            delete(path)

        cluster_session.delete_file = delete_then_interrupt

        result = runner.invoke(app, [*BASE_ARGS, "-a", "delete", "-y", "-o", str(env)])

        assert result.exit_code == 130
        rows = _report_rows(env)
        assert [r[1] for r in rows[1:-1]] == ["[ds-a] stale/stale.vmdk"]
        assert rows[-1][3] == "1000"
        assert len(_history_lines(env)[0]["items"]) == 1

    def test_broken_config(self, env: Path, vsphere) -> None:
        path = env / "config" / "vmsweep" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text("workers = [\n")

        result = runner.invoke(app, [*BASE_ARGS, "-a", "report"])

        assert result.exit_code == 1
        assert "Invalid TOML" in result.output


class TestDefaults:
    """Tests for values taken from config, prompts and the environment."""

    def test_server_and_user_from_config(self, env: Path, vsphere) -> None:
        path = env / "config" / "vmsweep" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text('server = "vc-cfg"\nuser = "svc"\nport = 8443\n')

        result = runner.invoke(app, ["run", "-c", "Prod", "-a", "report", "-o", str(env)])

        assert result.exit_code == 0, result.output
        vsphere.connect.assert_called_once_with(
            "vc-cfg", "svc", "s3cret", port=8443, verify_ssl=True
        )

    def test_prompts_for_user_and_password(
        self, xdg_dirs: Path, vsphere, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(PASSWORD_ENV_VAR, raising=False)

        result = runner.invoke(
            app,
            ["run", "-s", "vc01", "-c", "Prod", "-a", "report", "-o", str(xdg_dirs)],
            input="admin\npw\n",
        )

        assert result.exit_code == 0, result.output
        vsphere.connect.assert_called_once_with("vc01", "admin", "pw", port=443, verify_ssl=True)
