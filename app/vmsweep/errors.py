"""Exception hierarchy for vmsweep.

Platform and snapshot errors are raised by the engine's collaborators;
configuration errors by the config loader. Per-file action failures are
never raised, they are captured in ActionResult instead.
"""


class VmsweepError(Exception):
    """Base exception for all vmsweep errors."""


class PlatformError(VmsweepError):
    """Raised when a call against the virtualization platform fails."""


class SnapshotError(VmsweepError):
    """Raised when the referenced-disk snapshot cannot be completed.

    This is fatal: orphan detection must not proceed on a partial
    snapshot, so no destructive action may follow.
    """


class ConfigError(VmsweepError):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""
