"""Python pack of the built-in schema.

Ruff, mypy and import-linter configuration. Python tooling is configured
but never installed; the project's own environment manager does that.
"""

from typing import TYPE_CHECKING, Any

import tomli_w

from railctl.models.schema import SKIP, Content, FileDefinition, FileOutcome, GeneratedFile

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

RUFF_SETTINGS: dict[str, Any] = {
    "line-length": 100,
    "lint": {
        "select": ["E", "F", "B", "S", "SIM", "UP", "I", "ASYNC", "C90", "PT"],
        "mccabe": {"max-complexity": 10},
    },
}

# Extra rules the hooks enforce on top of the project settings
STRICT_RULES = ["ANN", "BLE", "ERA", "PL", "RET", "TRY"]

MYPY_CONFIG = """[mypy]
ignore_missing_imports = True
show_error_codes = True
pretty = True
"""


def ruff_config(ctx: "ProjectContext") -> FileOutcome:
    """Project-level ruff.toml, unless ruff is already configured."""
    if not ctx.languages.python or ctx.tooling.ruff_config:
        return SKIP
    return Content(tomli_w.dumps(RUFF_SETTINGS))


def hook_ruff_config(ctx: "ProjectContext") -> FileOutcome:
    """Stricter ruff config the hooks lint with."""
    if not ctx.languages.python:
        return SKIP
    settings: dict[str, Any] = {
        "line-length": RUFF_SETTINGS["line-length"],
        "lint": {
            "select": [*RUFF_SETTINGS["lint"]["select"], *STRICT_RULES],
            "mccabe": dict(RUFF_SETTINGS["lint"]["mccabe"]),
        },
    }
    return Content(tomli_w.dumps(settings))


def mypy_config(ctx: "ProjectContext") -> FileOutcome:
    """Minimal mypy.ini, unless mypy is already configured."""
    if not ctx.languages.python or ctx.tooling.mypy_config:
        return SKIP
    return Content(MYPY_CONFIG)


def import_linter_config(ctx: "ProjectContext") -> FileOutcome:
    """Layer contract for import-linter.

    Generated only when at least two architecture layers were found.
    Layers are listed highest first, as import-linter expects.
    """
    if not ctx.languages.python or ctx.python_package is None or len(ctx.python_layers) < 2:
        return SKIP
    package = ctx.python_package
    layers = "\n".join(f"    {package}.{layer}" for layer in reversed(ctx.python_layers))
    return Content(
        "[importlinter]\n"
        f"root_packages =\n    {package}\n"
        "\n"
        "[importlinter:contract:layers]\n"
        "name = Layer architecture\n"
        "type = layers\n"
        f"layers =\n{layers}\n"
    )


OWNED_FILES: dict[str, FileDefinition] = {
    ".railctl/ruff.toml": GeneratedFile(hook_ruff_config),
}

MANAGED_FILES: dict[str, FileDefinition] = {
    "ruff.toml": GeneratedFile(ruff_config),
    "mypy.ini": GeneratedFile(mypy_config),
    ".importlinter": GeneratedFile(import_linter_config),
}
