"""Pytest configuration and shared fixtures.

This module contains an in-memory platform session and fixtures used
across all test modules.
"""

import fnmatch
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from vmsweep.errors import PlatformError
from vmsweep.platform.base import DatastoreFile, PlatformSession


class FakeSession(PlatformSession):
    """In-memory platform session recording every mutating call."""

    def __init__(
        self,
        vm_disks: list[str] | None = None,
        datastores: dict[str, list[DatastoreFile]] | None = None,
        *,
        fail_snapshot: bool = False,
        fail_search: tuple[str, ...] = (),
        fail_rename: tuple[str, ...] = (),
        fail_delete: tuple[str, ...] = (),
    ) -> None:
        self.vm_disks = list(vm_disks or [])
        self.datastores = dict(datastores or {})
        self.fail_snapshot = fail_snapshot
        self.fail_search = fail_search
        self.fail_rename = fail_rename
        self.fail_delete = fail_delete
        self.calls: list[str] = []
        self.renamed: dict[str, str] = {}
        self.deleted: list[str] = []
        self.closed = False

    def list_vm_disk_paths(self) -> list[str]:
        self.calls.append("list_vm_disk_paths")
        if self.fail_snapshot:
            raise PlatformError("vCenter unavailable")
        return list(self.vm_disks)

    def list_datastores(self, location: str) -> list[str]:
        self.calls.append(f"list_datastores:{location}")
        return list(self.datastores)

    def search_datastore(self, datastore: str, pattern: str) -> list[DatastoreFile]:
        self.calls.append(f"search:{datastore}")
        if datastore in self.fail_search:
            raise PlatformError(f"InaccessibleDatastore: {datastore}")
        return [f for f in self.datastores[datastore] if fnmatch.fnmatch(f.file_name, pattern)]

    def rename_file(self, path: str, new_name: str) -> None:
        self.calls.append(f"rename:{path}")
        if path in self.fail_rename:
            raise PlatformError(f"File {path} is locked")
        self.renamed[path] = new_name

    def delete_file(self, path: str) -> None:
        self.calls.append(f"delete:{path}")
        if path in self.fail_delete:
            raise PlatformError(f"Cannot delete {path}: permission denied")
        self.deleted.append(path)

    def close(self) -> None:
        self.closed = True


def make_file(
    datastore: str,
    folder: str,
    name: str,
    size: int | None = 1024,
    modified: datetime | None = None,
) -> DatastoreFile:
    """Create a DatastoreFile the way the datastore browser reports it."""
    folder_path = f"[{datastore}] {folder}" if folder else f"[{datastore}]"
    return DatastoreFile(
        folder_path=folder_path,
        file_name=name,
        size_bytes=size,
        modified=modified,
    )


@pytest.fixture
def fake_session_cls() -> type[FakeSession]:
    """The in-memory session class, for tests that need custom setups."""
    return FakeSession


@pytest.fixture
def make_datastore_file() -> Callable[..., DatastoreFile]:
    """Factory for DatastoreFile search hits."""
    return make_file


@pytest.fixture
def cluster_session() -> FakeSession:
    """A cluster with two datastores, one in-use disk and three orphans.

    ds-b is listed before ds-a so tests can check name ordering.
    """
    modified = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    return FakeSession(
        vm_disks=[
            "[ds-a] web01/web01.vmdk",
            "[ds-b] db01/db01.vmdk",
            "[other-ds] app01/app01.vmdk",
        ],
        datastores={
            "ds-b": [
                make_file("ds-b", "db01", "db01.vmdk", size=4096),
                make_file("ds-b", "old", "old.vmdk", size=2048),
            ],
            "ds-a": [
                make_file("ds-a", "web01", "web01.vmdk", size=8192),
                make_file("ds-a", "web01", "web01-ctk.vmdk", size=64),
                make_file("ds-a", "stale", "stale.vmdk", size=1000, modified=modified),
                make_file("ds-a", "", "root.vmdk", size=None),
            ],
        },
    )


@pytest.fixture
def xdg_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point all XDG base directories at a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    yield tmp_path
