"""Diff command implementation.

Shows what an upgrade (or, for an unconfigured project, a setup) would
change, without changing anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from railctl.cli.display import (
    create_changes_table,
    create_packages_table,
    print_diffs,
    print_problems,
    print_summary,
    result_packages,
)
from railctl.cli.types import (
    JsonOption,
    PathOption,
    get_client,
    load_project,
    read_project_version,
    run_operation,
)
from railctl.core.engine import Operation
from railctl.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Show what an upgrade would change.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def diff_project(
    ctx: typer.Context,
    path: PathOption = Path("."),
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show unified diffs of file contents.",
        ),
    ] = False,
    json_output: JsonOption = False,
) -> None:
    """Show what an upgrade would change.

    Lists the files that would be created, updated or deleted. For a
    project that is not set up yet, shows what setup would do.

    Examples:
        railctl diff                    # List pending changes
        railctl diff --verbose          # Include unified diffs
        railctl diff --json             # JSON output for scripting
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    context, schema = load_project(path)
    version = read_project_version(context)
    operation = Operation.INSTALL if version is None else Operation.UPGRADE

    result = run_operation(operation, schema, context, dry_run=True)

    if json_output:
        data = result.to_dict()
        if verbose:
            data["diffs"] = {a.path: a.after for a in result.actions if a.after is not None}
        console.print_json(json.dumps(data))
        if result.errors:
            raise typer.Exit(code=1)
        return

    if version is None:
        print_info("railctl is not set up here; showing what 'railctl setup' would do.\n")

    if not result.actions and not result.packages_installed and not result.packages_removed:
        print_success("Project is in sync with railctl.")
    else:
        if result.actions:
            console.print(create_changes_table(result.actions, dry_run=True))
        packages = result_packages(result, get_client(context, None))
        if packages:
            console.print(create_packages_table(packages, dry_run=True))
        if verbose:
            print_diffs(result.actions)
        print_summary(result)

    print_problems(result)
    if result.errors:
        raise typer.Exit(code=1)
