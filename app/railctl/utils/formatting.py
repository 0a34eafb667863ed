"""Rich console output for railctl.

Results and tables go to stdout; warnings, errors and progress go to
stderr so that ``--json`` output stays machine-readable.
"""

import sys
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

from railctl.core.theme import get_theme

# Hex theme colors need truecolor; piped output lets Rich decide
_COLOR_SYSTEM = "truecolor" if sys.stdout.isatty() else None

console = Console(theme=get_theme(), color_system=_COLOR_SYSTEM)
err_console = Console(theme=get_theme(), stderr=True, color_system=_COLOR_SYSTEM)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message to stderr."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[error]Error:[/] {message}")


def print_dry_run_notice() -> None:
    """Tell the user that a dry run left the project untouched."""
    print_info("\nDry-run mode: No changes were made.")


def format_path(path: str, is_dir: bool = False) -> str:
    """Project-relative path for display, with a trailing slash for directories."""
    return f"{path}/" if is_dir and not path.endswith("/") else path


@contextmanager
def working(message: str, enabled: bool = True) -> Iterator[None]:
    """Show a spinner on stderr while a slow step runs.

    Args:
        message: Text next to the spinner.
        enabled: Show nothing when False (dry runs, no package manager).
    """
    if not enabled or not err_console.is_terminal:
        yield
        return
    with err_console.status(f"[muted]{message}[/muted]"):
        yield
