"""Datastore enumeration for disk files.

Walks every datastore attached to a cluster and yields the disk files
found by a recursive search, one DiskFileRecord per file.
"""

import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

from vmsweep.errors import PlatformError
from vmsweep.models.disk import DiskFileRecord
from vmsweep.platform.base import DatastoreFile, PlatformSession

logger = logging.getLogger(__name__)


class StorageEnumerator:
    """Enumerates disk files on the datastores of a location.

    Datastores are visited in name order so reports are deterministic.
    A datastore whose search fails is logged and skipped; the rest of
    the location is still enumerated.

    Args:
        session: Connected platform session.
        pattern: Glob pattern for disk files.
        workers: Number of datastores searched concurrently. Results
            are yielded in datastore name order whatever the value.
    """

    def __init__(
        self,
        session: PlatformSession,
        *,
        pattern: str = "*.vmdk",
        workers: int = 1,
    ) -> None:
        if workers < 1:
            msg = f"Workers must be at least 1, got {workers}"
            raise ValueError(msg)
        self._session = session
        self._pattern = pattern
        self._workers = workers
        self.failed_datastores: list[str] = []

    def enumerate(self, location: str) -> Iterator[DiskFileRecord]:
        """Yield disk file records for every datastore under a location.

        Args:
            location: Cluster name.

        Yields:
            DiskFileRecord for each matching file, never the same full
            path twice.

        Raises:
            PlatformError: If the datastores of the location cannot be listed.
        """
        self.failed_datastores = []
        datastores = sorted(self._session.list_datastores(location))
        logger.info("Enumerating %d datastore(s) in %s", len(datastores), location)

        seen: set[str] = set()
        for name, files in self._search_all(datastores):
            if files is None:
                continue
            for file in files:
                record = _to_record(name, file)
                path = record.full_path
                if path in seen:
                    logger.debug("Skipping duplicate path: %s", path)
                    continue
                seen.add(path)
                yield record

    def _search_all(
        self, datastores: list[str]
    ) -> Iterator[tuple[str, list[DatastoreFile] | None]]:
        """Search datastores, sequentially or on a thread pool."""
        if self._workers == 1 or len(datastores) <= 1:
            for name in datastores:
                yield name, self._search(name)
            return

        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            # map() keeps input order
            yield from zip(datastores, pool.map(self._search, datastores), strict=True)

    def _search(self, datastore: str) -> list[DatastoreFile] | None:
        """Search one datastore, returning None if the search failed."""
        try:
            files = self._session.search_datastore(datastore, self._pattern)
        except PlatformError as e:
            logger.warning("Skipping datastore %s: %s", datastore, e)
            self.failed_datastores.append(datastore)
            return None
        logger.debug("Datastore %s: %d file(s) match %s", datastore, len(files), self._pattern)
        return files


def _to_record(datastore: str, file: DatastoreFile) -> DiskFileRecord:
    """Convert a search hit to a record, zeroing missing metadata."""
    return DiskFileRecord(
        datastore_name=datastore,
        folder_path=file.folder_path,
        file_name=file.file_name,
        size_bytes=file.size_bytes or 0,
        modification_time=file.modified,
    )
