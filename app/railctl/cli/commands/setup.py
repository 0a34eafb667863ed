"""Setup command implementation.

Installs the railctl schema into a project that has not been set up yet.
"""

from pathlib import Path

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
from railctl.utils.formatting import console, print_dry_run_notice, print_error, print_info, print_success

app = typer.Typer(
    help="Set up railctl in a project.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def setup_project(
    ctx: typer.Context,
    path: PathOption = Path("."),
    skip_packages: SkipPackagesOption = False,
    dry_run: DryRunOption = False,
    yes: YesOption = False,
) -> None:
    """Set up railctl in a project.

    Creates the .railctl directory, agent instructions, hooks and lint
    configuration for the detected languages, merges railctl's keys into
    existing JSON configs and installs the required dev dependencies.

    Existing files you own are never overwritten.

    Examples:
        railctl setup                   # Set up the current directory
        railctl setup --dry-run         # Preview changes
        railctl setup -C ../web --yes   # Set up another project, no prompt
        railctl setup --skip-packages   # Only list needed packages
    """
    # Skip if a subcommand is being invoked
    if ctx.invoked_subcommand is not None:
        return

    context, schema = load_project(path)

    version = read_project_version(context)
    if version is not None:
        print_error(f"Already configured (schema {version}).")
        print_info("Run 'railctl upgrade' to update it.")
        raise typer.Exit(code=1)

    operator, timeout = get_operator(context, skip_packages)
    client = get_client(context, operator)

    # Show planned changes
    preview = run_operation(Operation.INSTALL, schema, context, dry_run=True)
    print_result(preview, client)
    print_summary(preview)
    print_problems(preview)

    if dry_run:
        print_dry_run_notice()
        raise typer.Exit(code=exit_code(preview))

    # Confirm unless --yes was provided
    count = len(preview.actions) + len(preview.packages_installed)
    if not yes and not confirm_actions(count):
        print_info("Aborted.")
        raise typer.Exit(code=0)

    console.print("\n[bold]Setting up...[/bold]\n")
    result = run_operation(Operation.INSTALL, schema, context, operator=operator, timeout=timeout)
    print_result(result, client)
    print_summary(result)
    print_problems(result)

    if result.errors:
        raise typer.Exit(code=1)
    print_success(f"\nrailctl {schema.version} is set up.")
