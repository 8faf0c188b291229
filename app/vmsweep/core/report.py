"""In-memory report of a sweep run."""

from dataclasses import dataclass, field

from vmsweep.models.action import ActionResult


@dataclass(slots=True)
class ReportSink:
    """Accumulates action results and the bytes they represent.

    The byte total sums the enumerated size of every processed
    candidate, whatever the outcome, so a rename or delete run reports
    the same total as a report run over the same orphans.

    Attributes:
        rows: Action results in processing order.
        total_bytes: Sum of candidate sizes over all rows.
    """

    rows: list[ActionResult] = field(default_factory=list)
    total_bytes: int = 0

    def add(self, result: ActionResult) -> None:
        """Append a result and add its candidate's size to the total."""
        self.rows.append(result)
        self.total_bytes += result.candidate.size_bytes

    @property
    def succeeded(self) -> list[ActionResult]:
        """Results with SUCCESS outcome."""
        return [r for r in self.rows if r.success]

    @property
    def failed(self) -> list[ActionResult]:
        """Results with FAILED outcome."""
        return [r for r in self.rows if r.failed]

    def __len__(self) -> int:
        return len(self.rows)
