"""Referenced-disk snapshot collection."""

import logging

from vmsweep.errors import PlatformError, SnapshotError
from vmsweep.models.disk import normalize_datastore_path
from vmsweep.platform.base import PlatformSession

logger = logging.getLogger(__name__)


class UsageCollector:
    """Collects the set of disk paths referenced by any virtual machine.

    The snapshot spans the whole platform, not one cluster: a VM on
    another cluster may still use a disk that lives on a datastore
    shared with this one. Paths are fully qualified and normalized so
    that same-named disks on different datastores never collide.

    Args:
        session: Connected platform session.
    """

    def __init__(self, session: PlatformSession) -> None:
        self._session = session

    def collect(self) -> frozenset[str]:
        """Take a complete snapshot of referenced disk paths.

        Returns:
            Frozen set of normalized datastore paths.

        Raises:
            SnapshotError: If the VM inventory cannot be read completely.
        """
        try:
            raw_paths = self._session.list_vm_disk_paths()
        except PlatformError as e:
            raise SnapshotError(f"Cannot collect referenced disks: {e}") from e

        referenced = frozenset(normalize_datastore_path(p) for p in raw_paths if p and p.strip())
        logger.info("Snapshot holds %d referenced disk files", len(referenced))
        return referenced
