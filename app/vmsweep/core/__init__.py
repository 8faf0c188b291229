"""Reconciliation engine for vmsweep.

Exports the engine components and the run orchestrator.
"""

from vmsweep.core.engine import SweepResult, run_sweep
from vmsweep.core.enumerator import StorageEnumerator
from vmsweep.core.executor import ActionExecutor, proposed_name
from vmsweep.core.report import ReportSink
from vmsweep.core.resolver import OrphanResolver
from vmsweep.core.usage import UsageCollector

__all__ = [
    "ActionExecutor",
    "OrphanResolver",
    "ReportSink",
    "StorageEnumerator",
    "SweepResult",
    "UsageCollector",
    "proposed_name",
    "run_sweep",
]
