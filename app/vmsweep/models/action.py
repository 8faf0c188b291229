"""Action models for orphan handling.

This module defines the three action modes and the single result
record every action produces, whatever the mode and outcome.
"""

from dataclasses import dataclass
from enum import Enum

from vmsweep.models.disk import OrphanCandidate


class ActionMode(str, Enum):
    """What to do with an orphaned disk file.

    Attributes:
        REPORT: List the file and its proposed rename target only.
        RENAME: Mark the file for deletion by renaming it in place.
        DELETE: Permanently remove the file.
    """

    REPORT = "report"
    RENAME = "rename"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str) -> "ActionMode":
        """Parse an action mode name case-insensitively.

        Raises:
            ValueError: If the name is not a known mode.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(m.value for m in cls)
            msg = f"Unknown action mode '{value}' (expected one of: {choices})"
            raise ValueError(msg) from None

    @property
    def is_destructive(self) -> bool:
        """Check if this mode mutates datastore contents."""
        return self in (ActionMode.RENAME, ActionMode.DELETE)


class ActionOutcome(str, Enum):
    """Terminal state of a single action."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of applying an action mode to one orphan candidate.

    Attributes:
        candidate: The orphan the action was applied to.
        mode: The action mode that was applied.
        outcome: Whether the action succeeded.
        proposed_name: Rename target (report and rename modes only).
        error: Error detail if the action failed, None otherwise.
    """

    candidate: OrphanCandidate
    mode: ActionMode
    outcome: ActionOutcome
    proposed_name: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate result data after initialization."""
        if self.outcome == ActionOutcome.FAILED and not self.error:
            msg = "Failed results must carry an error"
            raise ValueError(msg)
        if self.mode == ActionMode.DELETE and self.proposed_name is not None:
            msg = "Delete results have no proposed name"
            raise ValueError(msg)

    @property
    def success(self) -> bool:
        """Check if the action succeeded."""
        return self.outcome == ActionOutcome.SUCCESS

    @property
    def failed(self) -> bool:
        """Check if the action failed."""
        return self.outcome == ActionOutcome.FAILED
