"""Utility modules for genctl.

This module exports commonly used utility functions.
"""

from genctl.utils.formatting import (
    console,
    create_generation_table,
    create_package_table,
    create_store_table,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from genctl.utils.shell import (
    CommandResult,
    command_exists,
    format_command,
    run_command,
    run_with_timeout,
)
from genctl.utils.units import format_bytes

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "create_generation_table",
    "create_package_table",
    "create_store_table",
    "err_console",
    "format_bytes",
    "format_command",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "run_with_timeout",
]
