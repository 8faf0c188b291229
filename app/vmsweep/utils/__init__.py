"""Utility modules for vmsweep.

This module exports commonly used utility functions.
"""

from vmsweep.utils.formatting import (
    console,
    err_console,
    format_gb,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "err_console",
    "format_gb",
    "format_size",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
