"""Data models for vmsweep.

This module exports the disk, action and history models.
"""

from vmsweep.models.action import ActionMode, ActionOutcome, ActionResult
from vmsweep.models.disk import (
    DiskFileRecord,
    OrphanCandidate,
    datastore_name_of,
    join_datastore_path,
    normalize_datastore_path,
    replace_file_name,
)
from vmsweep.models.history import (
    HistoryActionType,
    HistoryEntry,
    HistoryItem,
    create_history_entry,
)

__all__ = [
    "ActionMode",
    "ActionOutcome",
    "ActionResult",
    "DiskFileRecord",
    "HistoryActionType",
    "HistoryEntry",
    "HistoryItem",
    "OrphanCandidate",
    "create_history_entry",
    "datastore_name_of",
    "join_datastore_path",
    "normalize_datastore_path",
    "replace_file_name",
]
