"""Sweep orchestration.

Ties the components together in the only order that is safe: the
referenced-disk snapshot is completed first, then datastores are
enumerated, diffed against that snapshot and acted upon.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

from vmsweep.core.enumerator import StorageEnumerator
from vmsweep.core.executor import DEFAULT_GRACE_DAYS, ActionExecutor
from vmsweep.core.report import ReportSink
from vmsweep.core.resolver import OrphanResolver
from vmsweep.core.usage import UsageCollector

if TYPE_CHECKING:
    from vmsweep.models.action import ActionMode
    from vmsweep.models.disk import DiskFileRecord
    from vmsweep.platform.base import PlatformSession

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepResult:
    """Outcome of one sweep run.

    Attributes:
        location: Cluster that was swept.
        mode: Action mode that was applied.
        referenced_count: Size of the referenced-disk snapshot.
        scanned_count: Disk files found on the location's datastores.
        failed_datastores: Datastores whose search failed and were skipped.
        report: Accumulated action results and byte total.
    """

    location: str
    mode: ActionMode
    referenced_count: int = 0
    scanned_count: int = 0
    failed_datastores: list[str] = field(default_factory=list)
    report: ReportSink = field(default_factory=ReportSink)


def run_sweep(
    session: PlatformSession,
    location: str,
    mode: ActionMode,
    *,
    pattern: str = "*.vmdk",
    exclude: Iterable[str] = (),
    workers: int = 1,
    grace_days: int = DEFAULT_GRACE_DAYS,
    run_date: date | None = None,
    sink: ReportSink | None = None,
) -> SweepResult:
    """Find orphaned disk files on a location and apply an action to each.

    Args:
        session: Connected platform session.
        location: Cluster whose datastores are swept.
        mode: Action to apply to every orphan.
        pattern: Glob pattern for disk files.
        exclude: Extra file name patterns never treated as orphans.
        workers: Datastores searched concurrently.
        grace_days: Days added to the run date in rename targets.
        run_date: Date used for rename targets. Defaults to today.
        sink: Report to fill. Passing one lets the caller keep the rows
            gathered so far if the run is interrupted.

    Returns:
        SweepResult with the filled report.

    Raises:
        SnapshotError: If the referenced-disk snapshot fails. Nothing
            has been modified when this is raised.
        PlatformError: If the datastores of the location cannot be listed.
    """
    report = sink if sink is not None else ReportSink()
    result = SweepResult(location=location, mode=mode, report=report)

    # Must complete before any datastore is looked at
    referenced = UsageCollector(session).collect()
    result.referenced_count = len(referenced)

    enumerator = StorageEnumerator(session, pattern=pattern, workers=workers)
    resolver = OrphanResolver(exclude)
    executor = ActionExecutor(session, mode, run_date=run_date, grace_days=grace_days)

    def counted(records: Iterator[DiskFileRecord]) -> Iterator[DiskFileRecord]:
        for record in records:
            result.scanned_count += 1
            yield record

    candidates = resolver.resolve(counted(enumerator.enumerate(location)), referenced)
    try:
        for action_result in executor.execute_all(candidates):
            result.report.add(action_result)
    finally:
        result.failed_datastores = sorted(enumerator.failed_datastores)

    logger.info(
        "Swept %s: %d file(s) scanned, %d orphan(s), %d failed action(s), %d bytes",
        location,
        result.scanned_count,
        len(result.report),
        len(result.report.failed),
        result.report.total_bytes,
    )
    return result
