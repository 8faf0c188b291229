"""Orphan resolution.

Diffs the datastore inventory against the referenced-disk snapshot.
"""

import logging
from collections.abc import Iterable, Iterator

from vmsweep.core.exclusions import is_excluded_name
from vmsweep.models.disk import DiskFileRecord, OrphanCandidate

logger = logging.getLogger(__name__)


class OrphanResolver:
    """Classifies datastore files as orphans.

    A record is an orphan iff its file name is not excluded and its
    full datastore path is not in the referenced set. Output order is
    input order; nothing is re-sorted.

    Args:
        exclude_patterns: Extra glob patterns of file names to skip.
    """

    def __init__(self, exclude_patterns: Iterable[str] = ()) -> None:
        self._exclude_patterns = tuple(exclude_patterns)

    def is_excluded(self, file_name: str) -> bool:
        """Check if a file name is excluded from orphan detection."""
        return is_excluded_name(file_name, self._exclude_patterns)

    def resolve(
        self,
        records: Iterable[DiskFileRecord],
        referenced: frozenset[str],
    ) -> Iterator[OrphanCandidate]:
        """Yield records that no VM references.

        Args:
            records: Datastore files in enumeration order.
            referenced: Completed snapshot of referenced disk paths.

        Yields:
            OrphanCandidate for every unreferenced, non-excluded record.
        """
        for record in records:
            if self.is_excluded(record.file_name):
                logger.debug("Excluded by name: %s", record.full_path)
                continue
            if record.full_path in referenced:
                continue
            yield OrphanCandidate(record=record)
