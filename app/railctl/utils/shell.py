"""Subprocess helpers for running package managers inside a project."""

import os
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

# Keeps package manager output free of ANSI codes so errors can be shown as is
_QUIET_ENV = {"NO_COLOR": "1", "FORCE_COLOR": "0", "npm_config_fund": "false", "npm_config_audit": "false"}


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of a finished command.

    Attributes:
        args: The command line that was run.
        returncode: Exit code.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        """Check if the command exited with code 0."""
        return self.returncode == 0

    def error_summary(self, max_lines: int = 5) -> str:
        """Last non-empty lines of stderr, falling back to stdout.

        Package managers print progress first and the actual failure last,
        so the tail is what is worth showing.
        """
        for stream in (self.stderr, self.stdout):
            lines = [line.rstrip() for line in stream.splitlines() if line.strip()]
            if lines:
                return "\n".join(lines[-max_lines:])
        return f"{self.args[0]} exited with code {self.returncode}"


def run_command(args: Sequence[str], *, cwd: Path, timeout: float | None = None) -> CommandResult:
    """Run a command in a directory and capture its output.

    Args:
        args: Command and arguments.
        cwd: Working directory (the project root).
        timeout: Seconds to wait before the command is killed.

    Returns:
        CommandResult; a non-zero exit is not an exception.

    Raises:
        subprocess.TimeoutExpired: If the command exceeds timeout.
        FileNotFoundError: If the executable is not found.
    """
    completed = subprocess.run(
        list(args),
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
        env={**os.environ, **_QUIET_ENV},
        stdin=subprocess.DEVNULL,
        check=False,
    )
    return CommandResult(
        args=tuple(args),
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
    )


def command_exists(name: str) -> bool:
    """Check if an executable is on PATH."""
    return shutil.which(name) is not None
