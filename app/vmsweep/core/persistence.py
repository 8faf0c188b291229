"""CSV persistence of sweep reports.

Reports are appended, never overwritten: running the same location
twice on one day adds a second block of rows to the same file.
"""

import csv
import logging
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from vmsweep.core.paths import ensure_report_dir
from vmsweep.models.action import ActionResult

logger = logging.getLogger(__name__)

CSV_HEADER: tuple[str, ...] = (
    "Datastore",
    "Path",
    "FileName",
    "SizeBytes",
    "LastModified",
    "Action",
    "ProposedName",
    "Outcome",
    "Error",
)

TOTAL_LABEL = "TOTAL"


def report_filename(location: str, run_date: date) -> str:
    """Build the report file name for a location and run date.

    Characters that are awkward in file names are replaced by ``_``.
    """
    safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in location)
    return f"Orphaned_VMDKs_{safe}_{run_date.isoformat()}.csv"


def result_to_row(result: ActionResult) -> list[str]:
    """Flatten an action result to a CSV row matching CSV_HEADER."""
    record = result.candidate.record
    modified = record.modification_time.isoformat() if record.modification_time else ""
    return [
        record.datastore_name,
        record.full_path,
        record.file_name,
        str(record.size_bytes),
        modified,
        result.mode.value,
        result.proposed_name or "",
        result.outcome.value,
        result.error or "",
    ]


class ReportWriter:
    """Appends sweep results to CSV files in an output directory.

    Attributes:
        output_dir: Directory reports are written to.
    """

    def __init__(self, output_dir: Path | None = None) -> None:
        """Initialize the ReportWriter.

        Args:
            output_dir: Report directory. Default: ~/.local/share/vmsweep/reports
        """
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path | None:
        """Configured output directory, None for the default."""
        return self._output_dir

    def write(
        self,
        location: str,
        rows: Sequence[ActionResult],
        total_bytes: int,
        run_date: date | None = None,
    ) -> Path:
        """Append rows and a total line to the location's report file.

        The header is written only when the file is new.

        Args:
            location: Cluster the run targeted.
            rows: Action results in processing order.
            total_bytes: Byte total of all rows.
            run_date: Date used in the file name. Defaults to today.

        Returns:
            Path of the report file.

        Raises:
            RuntimeError: If the output directory cannot be created.
            OSError: If the file cannot be written.
        """
        directory = ensure_report_dir(self._output_dir)
        path = directory / report_filename(location, run_date or date.today())
        is_new = not path.exists() or path.stat().st_size == 0

        with path.open(mode="a", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            if is_new:
                writer.writerow(CSV_HEADER)
            for result in rows:
                writer.writerow(result_to_row(result))
            total_row = [""] * len(CSV_HEADER)
            total_row[0] = TOTAL_LABEL
            total_row[3] = str(total_bytes)
            writer.writerow(total_row)

        logger.debug("Wrote %d row(s) to %s", len(rows), path)
        return path
