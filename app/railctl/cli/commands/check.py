"""Check command implementation.

Reports whether a project is configured, how its recorded schema version
compares to this railctl, and which files have drifted. Never writes.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import typer
from rich.table import Table

from railctl import __version__
from railctl.cli.types import JsonOption, PathOption, load_project, read_project_version, run_operation
from railctl.core.engine import Operation
from railctl.models.result import FileActionType, ReconcileResult
from railctl.utils.formatting import console, print_success, print_warning
from railctl.utils.version import compare_versions

app = typer.Typer(
    help="Check a project's railctl status without changing it.",
    invoke_without_command=True,
)


class VersionStatus(Enum):
    """How the recorded schema version relates to this railctl."""

    UNCONFIGURED = "unconfigured"
    CURRENT = "current"
    OUTDATED = "outdated"
    NEWER = "newer"


@dataclass(slots=True)
class Drift:
    """Files that differ from what an upgrade would produce.

    Attributes:
        missing: Files and directories an upgrade would create.
        outdated: Files an upgrade would rewrite.
        customized: Managed files the user edited (left alone by upgrades).
        deprecated: Paths an upgrade would delete.
    """

    missing: list[str] = field(default_factory=list)
    outdated: list[str] = field(default_factory=list)
    customized: list[str] = field(default_factory=list)
    deprecated: list[str] = field(default_factory=list)

    @property
    def needs_upgrade(self) -> bool:
        """True if an upgrade would change anything."""
        return bool(self.missing or self.outdated or self.deprecated)

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "missing": self.missing,
            "outdated": self.outdated,
            "customized": self.customized,
            "deprecated": self.deprecated,
        }


def version_status(recorded: str | None, current: str) -> VersionStatus:
    """Classify a recorded schema version against the current one.

    An unreadable recorded version counts as outdated.
    """
    if recorded is None:
        return VersionStatus.UNCONFIGURED
    try:
        order = compare_versions(recorded, current)
    except ValueError:
        return VersionStatus.OUTDATED
    if order < 0:
        return VersionStatus.OUTDATED
    if order > 0:
        return VersionStatus.NEWER
    return VersionStatus.CURRENT


def drift_from_result(result: ReconcileResult) -> Drift:
    """Collect drift from a dry-run upgrade result."""
    drift = Drift(customized=list(result.preserved))
    for action in result.actions:
        if action.action_type in (FileActionType.CREATE, FileActionType.MKDIR):
            drift.missing.append(action.path)
        elif action.action_type is FileActionType.UPDATE:
            drift.outdated.append(action.path)
        else:
            drift.deprecated.append(action.path)
    return drift


def _create_drift_table(drift: Drift) -> Table:
    table = Table(
        title="Drift",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=10)
    table.add_column("Path", no_wrap=True)

    rows = [
        ("missing", "created", drift.missing),
        ("outdated", "updated", drift.outdated),
        ("customized", "preserved", drift.customized),
        ("deprecated", "deleted", drift.deprecated),
    ]
    for label, style, paths in rows:
        for path in paths:
            table.add_row(f"[{style}]{label}[/{style}]", f"[path]{path}[/path]")
    return table


@app.callback(invoke_without_command=True)
def check_project(
    ctx: typer.Context,
    path: PathOption = Path("."),
    json_output: JsonOption = False,
) -> None:
    """Check a project's railctl status.

    Compares the recorded schema version with this railctl and lists
    files that are missing, outdated, customized or deprecated.

    Exits with code 1 if the project is not configured or an upgrade
    would change something.

    Examples:
        railctl check                   # Check the current directory
        railctl check --json            # JSON output for scripting
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    context, schema = load_project(path)
    recorded = read_project_version(context)
    status = version_status(recorded, schema.version)

    drift: Drift | None = None
    errors: list[dict[str, str]] = []
    if status in (VersionStatus.CURRENT, VersionStatus.OUTDATED):
        result = run_operation(Operation.UPGRADE, schema, context, dry_run=True)
        drift = drift_from_result(result)
        errors = [e.to_dict() for e in result.errors]

    needs_attention = status is not VersionStatus.CURRENT or drift is None or drift.needs_upgrade

    if json_output:
        data: dict[str, Any] = {
            "configured": recorded is not None,
            "project_version": recorded,
            "cli_version": __version__,
            "schema_version": schema.version,
            "status": status.value,
            "drift": drift.to_dict() if drift is not None else None,
            "errors": errors,
        }
        console.print_json(json.dumps(data))
        if needs_attention:
            raise typer.Exit(code=1)
        return

    console.print(f"[muted]railctl:[/muted] {__version__} (schema {schema.version})")
    console.print(f"[muted]project:[/muted] {recorded or 'not configured'}")

    if status is VersionStatus.UNCONFIGURED:
        print_warning("Not configured. Run 'railctl setup' first.")
        raise typer.Exit(code=1)
    if status is VersionStatus.NEWER:
        print_warning(f"Project uses schema {recorded}, newer than this railctl. Update railctl.")
        raise typer.Exit(code=1)
    if status is VersionStatus.OUTDATED:
        print_warning(f"Project is on schema {recorded}. Run 'railctl upgrade'.")

    if drift is not None:
        if drift.missing or drift.outdated or drift.customized or drift.deprecated:
            console.print(_create_drift_table(drift))
        if drift.needs_upgrade:
            print_warning("Files have drifted. Run 'railctl upgrade' to converge.")
    for error in errors:
        print_warning(f"{error['path']}: {error['message']}")

    if needs_attention:
        raise typer.Exit(code=1)
    print_success("Project is up to date.")
