"""Go pack of the built-in schema."""

from typing import TYPE_CHECKING

from railctl.models.schema import SKIP, Content, FileDefinition, FileOutcome, GeneratedFile

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

GOLANGCI_LINTERS = [
    "bodyclose",
    "errorlint",
    "gocognit",
    "gocritic",
    "gosec",
    "nilerr",
    "revive",
    "unconvert",
]


def golangci_config(ctx: "ProjectContext") -> FileOutcome:
    """golangci-lint v2 config, unless the module already has one."""
    if not ctx.languages.golang or ctx.tooling.golangci_config:
        return SKIP
    enabled = "".join(f"    - {linter}\n" for linter in GOLANGCI_LINTERS)
    return Content(
        'version: "2"\n'
        "\n"
        "linters:\n"
        "  default: standard\n"
        "  enable:\n"
        f"{enabled}"
        "  settings:\n"
        "    gocognit:\n"
        "      min-complexity: 15\n"
        "\n"
        "formatters:\n"
        "  enable:\n"
        "    - gofumpt\n"
        "    - goimports\n"
    )


MANAGED_FILES: dict[str, FileDefinition] = {
    ".golangci.yml": GeneratedFile(golangci_config),
}
