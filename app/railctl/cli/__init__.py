"""CLI package for railctl.

This package contains the Typer application and all subcommands.
"""

from railctl.cli.main import app

__all__ = ["app"]
