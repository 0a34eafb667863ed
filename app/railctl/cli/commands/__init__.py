"""CLI commands for railctl.

This package contains all subcommand implementations.
"""

from railctl.cli.commands import check, diff, reset, setup, upgrade

__all__ = ["check", "diff", "reset", "setup", "upgrade"]
