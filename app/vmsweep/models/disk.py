"""Disk file models for datastore enumeration and orphan detection.

This module defines the records produced while browsing datastores
and the helpers that turn raw datastore paths into the normalized
``[datastore] folder/file.vmdk`` form used for set membership.
"""

import re
from dataclasses import dataclass
from datetime import datetime

_DATASTORE_PATH_RE = re.compile(r"^\[(?P<datastore>[^\]]+)\]\s*(?P<relative>.*)$")


def normalize_datastore_path(path: str) -> str:
    """Normalize a datastore path to ``[datastore] relative/path`` form.

    The platform is inconsistent about separators: files in a datastore
    root come back as ``[ds]file.vmdk``, search roots may add a leading
    slash, and some folders carry a trailing one. Every variant maps to
    a single canonical string so that paths from VM layouts and paths
    from datastore browsing compare equal.

    Args:
        path: Raw datastore path.

    Returns:
        Canonical datastore path. Strings that are not datastore paths
        are returned stripped but otherwise unchanged.
    """
    path = path.strip()
    match = _DATASTORE_PATH_RE.match(path)
    if match is None:
        return path

    relative = re.sub(r"/{2,}", "/", match.group("relative").strip()).lstrip("/")
    return f"[{match.group('datastore')}] {relative}"


def join_datastore_path(folder_path: str, file_name: str) -> str:
    """Join a search-result folder path and a file name.

    Args:
        folder_path: Folder path as reported by the datastore browser,
            e.g. ``[ds1] vm01/`` or ``[ds1]``.
        file_name: Bare file name, e.g. ``vm01.vmdk``.

    Returns:
        Normalized full datastore path.
    """
    folder = folder_path.strip().rstrip("/")
    if folder.endswith("]"):
        return normalize_datastore_path(f"{folder} {file_name}")
    return normalize_datastore_path(f"{folder}/{file_name}")


@dataclass(frozen=True, slots=True)
class DiskFileRecord:
    """A disk file found on a datastore.

    Attributes:
        datastore_name: Name of the datastore that was searched.
        folder_path: Folder path as reported by the search (``[ds] folder``).
        file_name: Bare file name.
        size_bytes: File size in bytes (0 when the platform did not supply it).
        modification_time: Last modification time, None if not supplied.
    """

    datastore_name: str
    folder_path: str
    file_name: str
    size_bytes: int = 0
    modification_time: datetime | None = None

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.file_name:
            msg = "File name cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    @property
    def full_path(self) -> str:
        """Fully qualified, normalized datastore path of the file."""
        return join_datastore_path(self.folder_path, self.file_name)


@dataclass(frozen=True, slots=True)
class OrphanCandidate:
    """A disk file that no virtual machine references.

    Only the orphan resolver creates these; each one is handed to the
    action executor exactly once.

    Attributes:
        record: The underlying datastore file.
    """

    record: DiskFileRecord

    @property
    def full_path(self) -> str:
        """Fully qualified datastore path of the orphaned file."""
        return self.record.full_path

    @property
    def file_name(self) -> str:
        """Bare file name of the orphaned file."""
        return self.record.file_name

    @property
    def size_bytes(self) -> int:
        """Size of the orphaned file in bytes."""
        return self.record.size_bytes


def datastore_name_of(path: str) -> str:
    """Return the datastore name of a ``[datastore] ...`` path.

    Raises:
        ValueError: If the string is not a datastore path.
    """
    match = _DATASTORE_PATH_RE.match(path.strip())
    if match is None:
        msg = f"Not a datastore path: {path}"
        raise ValueError(msg)
    return match.group("datastore")


def replace_file_name(path: str, new_name: str) -> str:
    """Return a datastore path with its file name replaced.

    Args:
        path: Full datastore path, e.g. ``[ds1] vm01/vm01.vmdk``.
        new_name: New bare file name.

    Returns:
        Normalized path of ``new_name`` in the same folder.
    """
    normalized = normalize_datastore_path(path)
    head, sep, _ = normalized.rpartition("/")
    if sep:
        return join_datastore_path(head, new_name)
    return join_datastore_path(f"[{datastore_name_of(normalized)}]", new_name)
