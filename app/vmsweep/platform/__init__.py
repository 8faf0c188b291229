"""Virtualization platform sessions.

The engine only depends on the PlatformSession interface; the vSphere
implementation lives in vmsweep.platform.vsphere and is imported by
the CLI so that pyVmomi is loaded only when actually connecting.
"""

from vmsweep.platform.base import DatastoreFile, PlatformSession

__all__ = [
    "DatastoreFile",
    "PlatformSession",
]
