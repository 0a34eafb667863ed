"""Utility modules for railctl.

This module exports commonly used utility functions.
"""

from railctl.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from railctl.utils.shell import CommandResult, command_exists, run_command
from railctl.utils.version import compare_versions, is_newer_version, parse_version

__all__ = [
    "CommandResult",
    "command_exists",
    "compare_versions",
    "console",
    "err_console",
    "is_newer_version",
    "parse_version",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
]
