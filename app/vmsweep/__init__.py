"""vmsweep - Find and clean up orphaned VMDK files on vSphere datastores."""

__version__ = "0.1.0"
