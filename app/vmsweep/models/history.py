"""History entry model for auditing destructive runs.

This module defines data structures for recording rename and delete
runs in a history file, so every mutation of a datastore leaves a
trail even when the run's CSV report is lost.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from vmsweep.models.action import ActionMode, ActionOutcome, ActionResult


class HistoryActionType(str, Enum):
    """Type of run recorded in history.

    Attributes:
        RENAME: Orphans were marked for deletion by renaming.
        DELETE: Orphans were permanently deleted.
    """

    RENAME = "rename"
    DELETE = "delete"

    @classmethod
    def from_mode(cls, mode: ActionMode) -> "HistoryActionType":
        """Map a destructive action mode to its history type.

        Raises:
            ValueError: If the mode does not mutate datastores.
        """
        if mode == ActionMode.RENAME:
            return cls.RENAME
        if mode == ActionMode.DELETE:
            return cls.DELETE
        msg = f"Action mode '{mode.value}' is not recorded in history"
        raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class HistoryItem:
    """Single disk file affected by a run.

    Attributes:
        path: Full datastore path of the file.
        outcome: Outcome of the action on this file.
        size_bytes: Size of the file when it was enumerated.
        new_name: Rename target, for rename runs.
        error: Error detail, for failed actions.
    """

    path: str
    outcome: ActionOutcome
    size_bytes: int = 0
    new_name: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)

    @classmethod
    def from_result(cls, result: ActionResult) -> "HistoryItem":
        """Build a history item from an action result."""
        return cls(
            path=result.candidate.full_path,
            outcome=result.outcome,
            size_bytes=result.candidate.size_bytes,
            new_name=result.proposed_name,
            error=result.error,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        data: dict[str, Any] = {
            "path": self.path,
            "outcome": self.outcome.value,
            "size_bytes": self.size_bytes,
        }
        if self.new_name is not None:
            data["new_name"] = self.new_name
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryItem":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If outcome is invalid.
        """
        return cls(
            path=data["path"],
            outcome=ActionOutcome(data["outcome"]),
            size_bytes=data.get("size_bytes", 0),
            new_name=data.get("new_name"),
            error=data.get("error"),
        )


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of one destructive run.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the run finished (ISO 8601 with timezone).
        action_type: Rename or delete.
        location: Cluster the run targeted.
        items: Files acted upon, successes and failures alike.
        metadata: Additional context (server, command, ...).
    """

    id: str
    timestamp: str
    action_type: HistoryActionType
    location: str
    items: tuple[HistoryItem, ...]
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if not self.items:
            msg = "History entry must have at least one item"
            raise ValueError(msg)

    @property
    def failed_count(self) -> int:
        """Number of items whose action failed."""
        return sum(1 for item in self.items if item.outcome == ActionOutcome.FAILED)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "action_type": self.action_type.value,
            "location": self.location,
            "items": [item.to_dict() for item in self.items],
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If action_type or item data is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            action_type=HistoryActionType(data["action_type"]),
            location=data["location"],
            items=tuple(HistoryItem.from_dict(item) for item in data["items"]),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "HistoryEntry":
        """Deserialize from JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(line.strip()))


def create_history_entry(
    mode: ActionMode,
    location: str,
    results: list[ActionResult],
    metadata: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Factory function to create a new HistoryEntry from run results.

    Automatically generates a unique ID and current timestamp.

    Args:
        mode: Destructive action mode of the run.
        location: Cluster the run targeted.
        results: Action results of the run.
        metadata: Optional additional context.

    Returns:
        New HistoryEntry with auto-generated ID and timestamp.

    Raises:
        ValueError: If results is empty or mode is not destructive.
    """
    if not results:
        msg = "Cannot create history entry with no results"
        raise ValueError(msg)

    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        action_type=HistoryActionType.from_mode(mode),
        location=location,
        items=tuple(HistoryItem.from_result(r) for r in results),
        metadata=metadata or {},
    )
