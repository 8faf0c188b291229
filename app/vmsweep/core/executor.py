"""Action execution for orphaned disk files.

Applies report, rename or delete to orphan candidates. Every
candidate yields exactly one ActionResult; platform failures are
captured in the result instead of being raised, so one locked or
already-renamed file never stops the rest of the run.
"""

import logging
from collections.abc import Iterable, Iterator
from datetime import date, timedelta
from pathlib import PurePosixPath

from vmsweep.errors import PlatformError
from vmsweep.models.action import ActionMode, ActionOutcome, ActionResult
from vmsweep.models.disk import OrphanCandidate
from vmsweep.platform.base import PlatformSession

logger = logging.getLogger(__name__)

DEFAULT_GRACE_DAYS = 15

# Marker inserted into the names of disks marked for deletion
DELETE_MARKER = "_ToDelete_"


def proposed_name(file_name: str, run_date: date, grace_days: int = DEFAULT_GRACE_DAYS) -> str:
    """Build the rename target that marks a disk for deletion.

    Args:
        file_name: Bare disk file name, e.g. ``foo.vmdk``.
        run_date: Date of the run.
        grace_days: Days until the disk may be deleted.

    Returns:
        ``<stem>_ToDelete_<MM-dd-yyyy>.vmdk``, e.g.
        ``foo_ToDelete_01-16-2024.vmdk`` for a run on 2024-01-01.
    """
    due = run_date + timedelta(days=grace_days)
    stem = PurePosixPath(file_name).stem
    return f"{stem}{DELETE_MARKER}{due.strftime('%m-%d-%Y')}.vmdk"


class ActionExecutor:
    """Applies one action mode to orphan candidates.

    Attributes:
        mode: The action mode applied to every candidate.
    """

    def __init__(
        self,
        session: PlatformSession,
        mode: ActionMode,
        *,
        run_date: date | None = None,
        grace_days: int = DEFAULT_GRACE_DAYS,
    ) -> None:
        """Initialize the ActionExecutor.

        Args:
            session: Connected platform session.
            mode: Action mode to apply.
            run_date: Date used for rename targets. Defaults to today.
            grace_days: Days added to run_date in rename targets.
        """
        self._session = session
        self.mode = mode
        self._run_date = run_date or date.today()
        self._grace_days = grace_days

    def proposed_name(self, file_name: str) -> str:
        """Rename target for a file under this executor's run date."""
        return proposed_name(file_name, self._run_date, self._grace_days)

    def execute(self, candidate: OrphanCandidate) -> ActionResult:
        """Apply the action mode to a single candidate.

        Args:
            candidate: Orphan to act on.

        Returns:
            ActionResult with SUCCESS or FAILED outcome.
        """
        if self.mode == ActionMode.REPORT:
            return ActionResult(
                candidate=candidate,
                mode=self.mode,
                outcome=ActionOutcome.SUCCESS,
                proposed_name=self.proposed_name(candidate.file_name),
            )

        if self.mode == ActionMode.RENAME:
            return self._rename(candidate)

        return self._delete(candidate)

    def execute_all(self, candidates: Iterable[OrphanCandidate]) -> Iterator[ActionResult]:
        """Apply the action mode to every candidate, one result each."""
        for candidate in candidates:
            yield self.execute(candidate)

    def _rename(self, candidate: OrphanCandidate) -> ActionResult:
        """Mark a candidate for deletion by renaming it in place."""
        new_name = self.proposed_name(candidate.file_name)
        try:
            self._session.rename_file(candidate.full_path, new_name)
        except PlatformError as e:
            logger.warning("Failed to rename %s: %s", candidate.full_path, e)
            return ActionResult(
                candidate=candidate,
                mode=self.mode,
                outcome=ActionOutcome.FAILED,
                proposed_name=new_name,
                error=str(e) or type(e).__name__,
            )

        logger.info("Renamed %s to %s", candidate.full_path, new_name)
        return ActionResult(
            candidate=candidate,
            mode=self.mode,
            outcome=ActionOutcome.SUCCESS,
            proposed_name=new_name,
        )

    def _delete(self, candidate: OrphanCandidate) -> ActionResult:
        """Permanently delete a candidate."""
        try:
            self._session.delete_file(candidate.full_path)
        except PlatformError as e:
            logger.warning("Failed to delete %s: %s", candidate.full_path, e)
            return ActionResult(
                candidate=candidate,
                mode=self.mode,
                outcome=ActionOutcome.FAILED,
                error=str(e) or type(e).__name__,
            )

        logger.info("Deleted %s", candidate.full_path)
        return ActionResult(
            candidate=candidate,
            mode=self.mode,
            outcome=ActionOutcome.SUCCESS,
        )
