"""File definition resolution.

Turns a FileDefinition from the schema into a FileOutcome for a given
project context: bundled templates are read from railctl/data/templates,
static content is used as is, and generator functions are called.
"""

import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING

from railctl.models.schema import (
    Content,
    FileDefinition,
    FileOutcome,
    GeneratedFile,
    Skip,
    StaticContent,
    TemplateFile,
)

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

logger = logging.getLogger(__name__)

TEMPLATE_PACKAGE = "railctl.data"
TEMPLATE_DIR = "templates"


class GeneratorError(Exception):
    """Raised when a file definition cannot produce content.

    Attributes:
        path: Project-relative path of the file being generated.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


@dataclass(slots=True)
class ReconcileCache:
    """Memoized template reads and resolved outcomes.

    Owned by the caller and scoped to one reconciliation; pass a fresh
    instance (or none) per call so nothing leaks between calls.
    """

    templates: dict[str, str] = field(default_factory=dict)
    outcomes: dict[tuple[Path, str, FileDefinition], FileOutcome] = field(default_factory=dict)


def load_template(name: str, cache: ReconcileCache | None = None) -> str:
    """Read a bundled template.

    Args:
        name: Template path relative to railctl/data/templates.
        cache: Optional cache for repeated reads.

    Returns:
        Template text.

    Raises:
        FileNotFoundError: If the template does not exist.
    """
    if cache is not None and name in cache.templates:
        return cache.templates[name]
    resource = resources.files(TEMPLATE_PACKAGE).joinpath(TEMPLATE_DIR)
    for part in name.split("/"):
        resource = resource.joinpath(part)
    text = resource.read_text(encoding="utf-8")
    if cache is not None:
        cache.templates[name] = text
    return text


def resolve_file(
    path: str,
    definition: FileDefinition,
    ctx: "ProjectContext",
    cache: ReconcileCache | None = None,
) -> FileOutcome:
    """Resolve a file definition to the desired outcome for a project.

    Args:
        path: Project-relative target path (for error reporting).
        definition: File definition from the schema.
        ctx: Project context.
        cache: Optional per-call cache.

    Returns:
        Content to write, or SKIP.

    Raises:
        GeneratorError: If a template is missing, a generator raises, or a
            generator returns something other than a FileOutcome.
    """
    key = (ctx.root, path, definition)
    if cache is not None and key in cache.outcomes:
        return cache.outcomes[key]

    outcome: FileOutcome
    if isinstance(definition, TemplateFile):
        try:
            outcome = Content(load_template(definition.template, cache))
        except (FileNotFoundError, OSError) as e:
            msg = f"Template not found: {definition.template}"
            raise GeneratorError(path, msg) from e
    elif isinstance(definition, StaticContent):
        outcome = Content(definition.content)
    elif isinstance(definition, GeneratedFile):
        try:
            result = definition.generator(ctx)
        except Exception as e:
            msg = f"Generator failed: {e}"
            raise GeneratorError(path, msg) from e
        if not isinstance(result, (Content, Skip)):
            msg = f"Generator returned {type(result).__name__}, expected Content or SKIP"
            raise GeneratorError(path, msg)
        outcome = result
    else:
        msg = f"Unsupported file definition: {type(definition).__name__}"
        raise GeneratorError(path, msg)

    if cache is not None:
        cache.outcomes[key] = outcome
    logger.debug("Resolved %s -> %s", path, "skip" if isinstance(outcome, Skip) else "content")
    return outcome
