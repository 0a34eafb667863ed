"""Shared types and utilities for CLI commands.

This module provides the common options and the load/reconcile helpers
used across the command modules, so every command reports context,
schema and configuration failures the same way.
"""

from pathlib import Path
from typing import Annotated

import typer

from railctl.core.config import ConfigError, load_config
from railctl.core.context import ContextBuildError, ProjectContext, build_context
from railctl.core.engine import DowngradeError, Operation, reconcile
from railctl.core.schema import SchemaError, load_schema
from railctl.core.state import StateError, StateManager
from railctl.models.package import NodeClient
from railctl.models.result import ReconcileResult
from railctl.models.schema import Schema
from railctl.operators import PackageOperator, detect_node_client, get_package_operator
from railctl.utils.formatting import print_error, working

PathOption = Annotated[
    Path,
    typer.Option(
        "--path",
        "-C",
        help="Project directory (default: current directory).",
        file_okay=False,
    ),
]

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        "-n",
        help="Show what would be done without making changes.",
    ),
]

YesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Skip confirmation prompt and proceed.",
    ),
]

SkipPackagesOption = Annotated[
    bool,
    typer.Option(
        "--skip-packages",
        help="Do not run the package manager; list needed packages instead.",
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        "-j",
        help="Output as JSON for scripting.",
    ),
]


def load_project(path: Path) -> tuple[ProjectContext, Schema]:
    """Build the project context and load the built-in schema.

    Args:
        path: Project directory.

    Returns:
        Tuple of (context, schema).

    Raises:
        typer.Exit: If the project or the schema cannot be loaded.
    """
    try:
        context = build_context(path)
    except ContextBuildError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    try:
        schema = load_schema()
    except SchemaError as e:
        print_error(f"Built-in schema is invalid: {e}")
        raise typer.Exit(code=1) from e

    return context, schema


def read_project_version(context: ProjectContext) -> str | None:
    """Read the schema version recorded in a project.

    Raises:
        typer.Exit: If the version marker exists but cannot be read.
    """
    try:
        return StateManager(context.root).read_version()
    except StateError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_operator(context: ProjectContext, skip_packages: bool) -> tuple[PackageOperator | None, float | None]:
    """Get the package operator and timeout for a run.

    Args:
        context: Project context.
        skip_packages: True if the user asked not to run the package manager.

    Returns:
        Tuple of (operator or None, timeout in seconds or None).

    Raises:
        typer.Exit: If the user configuration is invalid.
    """
    try:
        config = load_config()
    except ConfigError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from e

    if skip_packages or not context.languages.javascript:
        return None, float(config.package_timeout_seconds)
    return get_package_operator(context.root, config), float(config.package_timeout_seconds)


def get_client(context: ProjectContext, operator: PackageOperator | None) -> NodeClient:
    """Package manager client shown in package tables."""
    if operator is not None:
        return operator.client
    return detect_node_client(context.root)


def run_operation(
    operation: Operation,
    schema: Schema,
    context: ProjectContext,
    *,
    operator: PackageOperator | None = None,
    timeout: float | None = None,
    dry_run: bool = False,
    full: bool = False,
) -> ReconcileResult:
    """Run a reconciliation, turning fatal engine errors into exit code 1.

    Raises:
        typer.Exit: If the schema is invalid or the upgrade would downgrade.
    """
    try:
        with working(f"Running {operation.value}...", enabled=operator is not None and not dry_run):
            return reconcile(
                operation,
                schema,
                context,
                package_manager=operator,
                package_timeout=timeout,
                dry_run=dry_run,
                full=full,
            )
    except DowngradeError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except SchemaError as e:
        print_error(f"Built-in schema is invalid: {e}")
        raise typer.Exit(code=1) from e


def confirm_actions(action_count: int) -> bool:
    """Prompt user to confirm action execution.

    Args:
        action_count: Number of actions to be executed.

    Returns:
        True if user confirms, False otherwise.
    """
    return typer.confirm(
        f"\nProceed with {action_count} action(s)?",
        default=False,
    )


def require_configured(version: str | None) -> str:
    """Exit unless the project has been set up.

    Raises:
        typer.Exit: If no version marker exists.
    """
    if version is None:
        print_error("Not configured. Run 'railctl setup' first.")
        raise typer.Exit(code=1)
    return version
