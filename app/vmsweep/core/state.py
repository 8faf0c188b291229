"""Audit trail of destructive sweeps.

Every rename or delete run is appended as one JSON line to
``history.jsonl`` in the state directory. Lines are never rewritten, so
the file doubles as an audit log of what vmsweep changed on which
cluster.
"""

import json
import logging
from collections.abc import Iterator
from pathlib import Path

from vmsweep.core.paths import ensure_state_dir, get_state_dir
from vmsweep.models.history import HistoryEntry

logger = logging.getLogger(__name__)


class StateManager:
    """Appends and reads sweep runs in the history file.

    Args:
        state_dir: Directory holding history.jsonl. Defaults to the XDG
            state directory (~/.local/state/vmsweep).
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Location of the history file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record_run(self, entry: HistoryEntry) -> None:
        """Append one run to the audit trail.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the history file cannot be written.
        """
        ensure_state_dir(self._state_dir)
        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")
        logger.debug("Recorded %s run %s on %s", entry.action_type.value, entry.id, entry.location)

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        """Return recorded runs, newest first.

        A line that cannot be decoded is skipped with a warning so one
        damaged write does not hide the rest of the trail.

        Args:
            limit: Maximum number of runs to return, None for all.
        """
        entries = list(self._read_entries())
        entries.reverse()
        return entries if limit is None else entries[:limit]

    def _read_entries(self) -> Iterator[HistoryEntry]:
        """Yield decodable entries in file order."""
        if not self.history_path.exists():
            return

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    yield HistoryEntry.from_json_line(raw)
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)
