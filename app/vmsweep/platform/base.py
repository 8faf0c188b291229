"""Abstract base class for virtualization platform sessions.

This module defines the PlatformSession interface the reconciliation
engine talks to. Every call may be slow and may fail independently;
implementations raise PlatformError for any platform-level failure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class DatastoreFile:
    """A single file returned by a recursive datastore search.

    Attributes:
        folder_path: Folder the file lives in (``[ds] folder``).
        file_name: Bare file name.
        size_bytes: File size, None if the platform did not supply it.
        modified: Last modification time, None if not supplied.
    """

    folder_path: str
    file_name: str
    size_bytes: int | None = None
    modified: datetime | None = None


class PlatformSession(ABC):
    """Abstract base class for a connected platform session.

    A session is an explicit handle passed to every engine component;
    the engine assumes exclusive use of it for the duration of a run.

    Example:
        >>> session = VSphereSession.connect("vc01", "admin", password)
        >>> for name in session.list_datastores("Prod-Cluster"):
        ...     files = session.search_datastore(name, "*.vmdk")
    """

    @abstractmethod
    def list_vm_disk_paths(self) -> list[str]:
        """Return disk file paths referenced by every VM's disk layout.

        Covers the whole platform, not a single location.

        Raises:
            PlatformError: If the VM inventory cannot be read.
        """

    @abstractmethod
    def list_datastores(self, location: str) -> list[str]:
        """Return the names of all datastores under a location.

        Args:
            location: Cluster name.

        Raises:
            PlatformError: If the location is unknown or cannot be read.
        """

    @abstractmethod
    def search_datastore(self, datastore: str, pattern: str) -> list[DatastoreFile]:
        """Recursively search a datastore for files matching a glob pattern.

        Args:
            datastore: Datastore name as returned by list_datastores().
            pattern: Glob-style file name pattern, e.g. ``*.vmdk``.

        Raises:
            PlatformError: If the search fails.
        """

    @abstractmethod
    def rename_file(self, path: str, new_name: str) -> None:
        """Rename a datastore file in place.

        Args:
            path: Full datastore path of the file.
            new_name: New bare file name (same folder).

        Raises:
            PlatformError: If the rename fails.
        """

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """Permanently delete a datastore file.

        Args:
            path: Full datastore path of the file.

        Raises:
            PlatformError: If the deletion fails.
        """

    def close(self) -> None:  # noqa: B027
        """Release the session. The default implementation does nothing."""

    def __enter__(self) -> "PlatformSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
