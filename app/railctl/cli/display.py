"""Shared Rich display functions for reconciliation results.

Provides reusable table builders and summary printers for file actions,
package actions, and the errors and warnings of a reconciliation pass
(setup, upgrade, reset, diff).
"""

import difflib

from rich.syntax import Syntax
from rich.table import Table

from railctl.models.package import NodeClient, PackageAction, PackageChange, package_actions
from railctl.models.result import FileAction, FileActionType, ReconcileResult
from railctl.utils.formatting import console, err_console, format_path

# action type -> (label, style)
_ACTION_STYLES: dict[FileActionType, tuple[str, str]] = {
    FileActionType.MKDIR: ("+mkdir", "created"),
    FileActionType.CREATE: ("+create", "created"),
    FileActionType.UPDATE: ("~update", "updated"),
    FileActionType.DELETE: ("-delete", "deleted"),
    FileActionType.RMDIR: ("-rmdir", "deleted"),
}


def create_changes_table(actions: list[FileAction], dry_run: bool = False) -> Table:
    """Create a Rich table displaying file actions.

    Args:
        actions: File actions to display.
        dry_run: Whether the actions are planned rather than applied.

    Returns:
        Rich Table configured for file action display.
    """
    title = "Planned Changes (Dry Run)" if dry_run else "Changes"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8, justify="center")
    table.add_column("Path", no_wrap=True)
    table.add_column("Reason")

    for action in actions:
        label, style = _ACTION_STYLES[action.action_type]
        path = format_path(action.path, is_dir=action.action_type in (FileActionType.MKDIR, FileActionType.RMDIR))
        table.add_row(
            f"[{style}]{label}[/{style}]",
            f"[{style}]{path}[/{style}]",
            f"[muted]{action.reason or ''}[/muted]",
        )

    return table


def result_packages(result: ReconcileResult, client: NodeClient) -> list[PackageAction]:
    """Package actions of a result, for display.

    Args:
        result: Reconciliation result.
        client: Package manager client the packages belong to.

    Returns:
        Install actions (installed and pending) followed by remove actions.
    """
    return [
        *package_actions(PackageChange.INSTALL, result.packages_installed, client, "required by railctl"),
        *package_actions(PackageChange.INSTALL, result.packages_pending, client, "pending: install manually"),
        *package_actions(PackageChange.REMOVE, result.packages_removed, client, "no longer needed"),
    ]


def create_packages_table(actions: list[PackageAction], dry_run: bool = False) -> Table:
    """Create a Rich table displaying package actions.

    Args:
        actions: Package actions to display.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table configured for package display.
    """
    title = "Planned Packages (Dry Run)" if dry_run else "Packages"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=8, justify="center")
    table.add_column("Client", width=6)
    table.add_column("Package", no_wrap=True)
    table.add_column("Reason")

    for action in actions:
        if action.change is PackageChange.INSTALL:
            action_text = "[created]+install[/created]"
            pkg_style = "created"
        else:
            action_text = "[deleted]-remove[/deleted]"
            pkg_style = "deleted"

        table.add_row(
            action_text,
            action.client.value,
            f"[{pkg_style}]{action.package}[/{pkg_style}]",
            f"[muted]{action.reason or ''}[/muted]",
        )

    return table


def print_result(result: ReconcileResult, client: NodeClient) -> None:
    """Print the file and package tables of a result, if non-empty."""
    if result.actions:
        console.print(create_changes_table(result.actions, dry_run=result.dry_run))
    packages = result_packages(result, client)
    if packages:
        console.print(create_packages_table(packages, dry_run=result.dry_run))


def print_summary(result: ReconcileResult) -> None:
    """Print a one-line summary of a reconciliation pass.

    Args:
        result: Reconciliation result.
    """
    counts = [
        (len(result.created), "created"),
        (len(result.updated), "updated"),
        (len(result.unchanged), "unchanged"),
        (len(result.deleted), "deleted"),
        (len(result.preserved), "preserved"),
    ]
    parts = [f"[{style}]{count} {style}[/{style}]" for count, style in counts if count]
    if parts:
        console.print(f"\nSummary: {', '.join(parts)}")
    else:
        console.print("\n[muted]Nothing to do.[/muted]")

    if result.preserved:
        console.print("\n[preserved]Kept customized files:[/preserved]")
        for path in result.preserved:
            console.print(f"  [muted]{path}[/muted]")


def print_problems(result: ReconcileResult) -> None:
    """Print the Warnings and Errors sections of a result.

    Args:
        result: Reconciliation result.
    """
    if result.warnings:
        err_console.print("\n[warning]Warnings[/warning]")
        for warning in result.warnings:
            err_console.print(f"  [warning]![/warning] {warning.path}: {warning.message}")

    if result.packages_pending:
        err_console.print(
            f"\n[warning]Packages need manual install:[/warning] {' '.join(result.packages_pending)}"
        )

    if result.errors:
        err_console.print("\n[error]Errors[/error]")
        for error in result.errors:
            err_console.print(f"  [error]x[/error] {error.path}: {error.message} [muted]({error.kind.value})[/muted]")
        if not result.packages_confirmed:
            err_console.print("[warning]Packages were not confirmed; install them manually.[/warning]")


def unified_diff(action: FileAction) -> str:
    """Unified diff of one file action's before and after content."""
    before = (action.before or "").splitlines(keepends=True)
    after = (action.after or "").splitlines(keepends=True)
    return "".join(
        difflib.unified_diff(
            before,
            after,
            fromfile="/dev/null" if action.before is None else f"a/{action.path}",
            tofile="/dev/null" if action.action_type is FileActionType.DELETE else f"b/{action.path}",
        )
    )


def print_diffs(actions: list[FileAction]) -> None:
    """Print unified diffs for every file write in a list of actions."""
    for action in actions:
        if action.action_type not in (FileActionType.CREATE, FileActionType.UPDATE):
            continue
        text = unified_diff(action)
        if text:
            console.print(Syntax(text, "diff", theme="ansi_dark", background_color="default"))


def exit_code(result: ReconcileResult) -> int:
    """Process exit code for a result: 1 if any error was recorded."""
    return 1 if result.errors else 0
