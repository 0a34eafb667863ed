"""Rust pack of the built-in schema."""

from typing import TYPE_CHECKING, Any

import tomli_w

from railctl.models.schema import SKIP, Content, FileDefinition, FileOutcome, GeneratedFile

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

CLIPPY_SETTINGS: dict[str, Any] = {
    "cognitive-complexity-threshold": 15,
    "too-many-arguments-threshold": 6,
    "too-many-lines-threshold": 80,
}


def clippy_config(ctx: "ProjectContext") -> FileOutcome:
    """clippy.toml thresholds for Cargo projects."""
    if not ctx.languages.rust:
        return SKIP
    return Content(tomli_w.dumps(CLIPPY_SETTINGS))


MANAGED_FILES: dict[str, FileDefinition] = {
    "clippy.toml": GeneratedFile(clippy_config),
}
