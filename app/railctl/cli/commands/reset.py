"""Reset command implementation.

Removes railctl from a project.
"""

from pathlib import Path
from typing import Annotated

import typer

from railctl.cli.display import exit_code, print_problems, print_result, print_summary
from railctl.cli.types import (
    DryRunOption,
    PathOption,
    SkipPackagesOption,
    YesOption,
    confirm_actions,
    get_client,
    get_operator,
    load_project,
    read_project_version,
    run_operation,
)
from railctl.core.engine import Operation
from railctl.utils.formatting import console, print_dry_run_notice, print_info, print_success

app = typer.Typer(
    help="Remove railctl from a project.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def reset_project(
    ctx: typer.Context,
    path: PathOption = Path("."),
    full: Annotated[
        bool,
        typer.Option(
            "--full",
            help="Also remove managed configs you have edited.",
        ),
    ] = False,
    skip_packages: SkipPackagesOption = False,
    dry_run: DryRunOption = False,
    yes: YesOption = False,
) -> None:
    """Remove railctl from a project.

    Unmerges railctl's JSON keys, removes its text patches, owned files
    and directories, and the packages it installed. Managed configs you
    have edited are kept unless --full is given. Learnings, logs and
    tickets are never removed.

    Examples:
        railctl reset --dry-run         # Preview changes
        railctl reset --yes             # Remove without confirmation
        railctl reset --full            # Also remove edited configs
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    context, schema = load_project(path)

    if read_project_version(context) is None:
        print_info("railctl is not set up here. Nothing to remove.")
        return

    operator, timeout = get_operator(context, skip_packages)
    client = get_client(context, operator)

    # Show planned changes
    preview = run_operation(Operation.UNINSTALL, schema, context, dry_run=True, full=full)
    print_result(preview, client)
    print_summary(preview)
    print_problems(preview)

    if dry_run:
        print_dry_run_notice()
        raise typer.Exit(code=exit_code(preview))

    # Confirm unless --yes was provided
    count = len(preview.actions) + len(preview.packages_removed)
    if not yes and not confirm_actions(count):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    console.print("\n[bold]Removing railctl...[/bold]\n")
    result = run_operation(
        Operation.UNINSTALL,
        schema,
        context,
        operator=operator,
        timeout=timeout,
        full=full,
    )
    print_result(result, client)
    print_summary(result)
    print_problems(result)

    if result.errors:
        raise typer.Exit(code=1)
    print_success("\nrailctl has been removed.")
