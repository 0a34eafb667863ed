"""Upgrade command implementation.

Converges a configured project to the schema shipped with this railctl.
"""

from pathlib import Path

import typer

from railctl.cli.display import exit_code, print_problems, print_result, print_summary
from railctl.cli.types import (
    DryRunOption,
    PathOption,
    SkipPackagesOption,
    get_client,
    get_operator,
    load_project,
    read_project_version,
    require_configured,
    run_operation,
)
from railctl.core.engine import Operation
from railctl.utils.formatting import print_dry_run_notice, print_success

app = typer.Typer(
    help="Upgrade a configured project to this railctl version.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def upgrade_project(
    ctx: typer.Context,
    path: PathOption = Path("."),
    skip_packages: SkipPackagesOption = False,
    dry_run: DryRunOption = False,
) -> None:
    """Upgrade a configured project.

    Removes deprecated files and packages, regenerates the files railctl
    owns, and updates managed configs you have not edited. Edited configs
    are kept and listed as preserved.

    Examples:
        railctl upgrade                 # Upgrade the current directory
        railctl upgrade --dry-run       # Preview changes
        railctl upgrade --skip-packages # Leave dependencies alone
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    context, schema = load_project(path)
    previous = require_configured(read_project_version(context))

    if dry_run:
        operator, timeout = None, None
    else:
        operator, timeout = get_operator(context, skip_packages)
    client = get_client(context, operator)

    result = run_operation(
        Operation.UPGRADE,
        schema,
        context,
        operator=operator,
        timeout=timeout,
        dry_run=dry_run,
    )
    print_result(result, client)
    print_summary(result)
    print_problems(result)

    if dry_run:
        print_dry_run_notice()
        raise typer.Exit(code=exit_code(result))

    if result.errors:
        raise typer.Exit(code=1)
    if previous == schema.version:
        print_success(f"\nAlready at schema {schema.version}; project reconciled.")
    else:
        print_success(f"\nUpgraded from {previous} to {schema.version}.")
