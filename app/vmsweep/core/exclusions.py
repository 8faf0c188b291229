"""Disk file names that are never orphan candidates.

Change-tracking files, the service console disk and RDM mapping files
are auxiliary to a real disk, or owned by the host rather than a VM.
They are excluded from orphan detection regardless of whether any VM
references them.
"""

import fnmatch

# Marker carried by change block tracking files (e.g. vm01-ctk.vmdk)
CHANGE_TRACKING_MARKER = "-ctk."

# Reserved name of the ESX service console disk
CONSOLE_DISK_NAME = "esxconsole.vmdk"

# Raw device mapping pointer files (virtual and physical compatibility)
RDM_MARKERS: tuple[str, ...] = ("-rdm.", "-rdmp.")


def is_excluded_name(file_name: str, extra_patterns: tuple[str, ...] = ()) -> bool:
    """Check if a disk file name is excluded from orphan detection.

    Matching is case-insensitive because VMFS and NFS datastores
    disagree on case handling.

    Args:
        file_name: Bare file name (no folder).
        extra_patterns: Additional glob patterns from configuration.

    Returns:
        True if the file must never be classified as an orphan.
    """
    name = file_name.lower()

    if CHANGE_TRACKING_MARKER in name:
        return True
    if name == CONSOLE_DISK_NAME:
        return True
    if any(marker in name for marker in RDM_MARKERS):
        return True

    return any(fnmatch.fnmatch(name, pattern.lower()) for pattern in extra_patterns)
