"""Logging setup for the CLI.

Library modules only create module loggers; the CLI attaches a single
Rich handler writing to stderr.
"""

import logging

from rich.logging import RichHandler

from vmsweep.utils.formatting import err_console


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Attach a Rich handler to the root logger.

    Args:
        verbose: Log DEBUG and above.
        quiet: Log ERROR and above. Ignored if verbose is set.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    handler = RichHandler(console=err_console, show_path=verbose, rich_tracebacks=verbose)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h, RichHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
    # pyVmomi's SOAP layer is chatty at DEBUG
    logging.getLogger("pyVmomi").setLevel(max(level, logging.INFO))
