"""Schema models.

The Schema is the declarative description of everything railctl manages
in a project: directories by deletion policy, owned and managed files,
JSON documents it merges keys into, text files it patches, deprecated
artifacts, and packages.

Structural rules (disjoint categories, normalized paths, deprecation
conflicts) are enforced by pydantic when a Schema is constructed.
Predicate names are checked by railctl.core.schema, which knows the
context predicates.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from railctl.core.paths import RESERVED_PATHS

if TYPE_CHECKING:
    from railctl.core.context import ProjectContext

_VERSION_PATTERN = re.compile(r"^\d+(\.\d+)*$")


# =============================================================================
# File outcomes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Content:
    """Generator outcome: manage this file with the given text."""

    text: str


@dataclass(frozen=True, slots=True)
class Skip:
    """Generator outcome: do not create or manage this file for this project."""


SKIP = Skip()

FileOutcome = Content | Skip


# =============================================================================
# File definitions
# =============================================================================


class FileDefinition:
    """Base class for the ways a file's desired content can be declared."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class TemplateFile(FileDefinition):
    """Content comes from a bundled template under railctl/data/templates/."""

    template: str


@dataclass(frozen=True, slots=True)
class StaticContent(FileDefinition):
    """Content is a fixed string."""

    content: str


@dataclass(frozen=True, slots=True)
class GeneratedFile(FileDefinition):
    """Content is computed from the project context.

    The generator must be pure and deterministic for a fixed context, and
    returns SKIP to leave the file unmanaged for this project.
    """

    generator: Callable[["ProjectContext"], FileOutcome]


# =============================================================================
# JSON merges and text patches
# =============================================================================

JsonDocument = dict[str, Any]
MergeFunction = Callable[[JsonDocument, "ProjectContext"], JsonDocument]


@dataclass(frozen=True, slots=True)
class JsonMergeDefinition:
    """Keys railctl owns inside an otherwise user-owned JSON document.

    Attributes:
        keys: Dot-paths railctl owns unconditionally.
        merge: Returns the document with railctl's keys applied.
        unmerge: Returns the document with railctl's keys removed.
        conditional_keys: Predicate name -> extra dot-paths owned only when
            the predicate holds.
        remove_file_if_empty: Delete the file if unmerge leaves nothing
            meaningful in it.
        skip_if_missing: Never create the file; only modify an existing one.
    """

    keys: tuple[str, ...]
    merge: MergeFunction
    unmerge: MergeFunction
    conditional_keys: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    remove_file_if_empty: bool = False
    skip_if_missing: bool = False

    def active_keys(self, ctx: "ProjectContext") -> list[str]:
        """Declared keys for a context: base keys plus satisfied conditionals."""
        active = list(self.keys)
        for predicate, extra in self.conditional_keys.items():
            if ctx.has(predicate):
                active.extend(k for k in extra if k not in active)
        return active

    def all_keys(self) -> list[str]:
        """Every key railctl could own, regardless of context."""
        keys = list(self.keys)
        for extra in self.conditional_keys.values():
            keys.extend(k for k in extra if k not in keys)
        return keys


class PatchOperation(Enum):
    """Where a text patch goes."""

    PREPEND = "prepend"
    APPEND = "append"


@dataclass(frozen=True, slots=True)
class TextPatchDefinition:
    """A fixed block prepended or appended to a user-owned text file.

    Attributes:
        operation: Prepend or append.
        content: The exact block inserted (and removed on uninstall).
        marker: Substring whose presence means the patch is applied.
        create_if_missing: Create the file if it does not exist.
    """

    operation: PatchOperation
    content: str
    marker: str
    create_if_missing: bool = False

    def __post_init__(self) -> None:
        """Validate patch data after initialization."""
        if not self.marker:
            msg = "Text patch marker cannot be empty"
            raise ValueError(msg)
        if self.marker not in self.content:
            msg = f"Text patch marker {self.marker!r} does not occur in its content"
            raise ValueError(msg)


# =============================================================================
# Schema
# =============================================================================


def _check_relative_path(path: str) -> str:
    """Reject absolute, non-normalized or escaping paths."""
    if not path or path.startswith("/") or "\\" in path:
        msg = f"Path must be relative and use '/': {path!r}"
        raise ValueError(msg)
    pure = PurePosixPath(path)
    if pure.as_posix() != path or ".." in pure.parts or path == ".":
        msg = f"Path must be normalized and stay inside the project: {path!r}"
        raise ValueError(msg)
    return path


def _is_under(path: str, directory: str) -> bool:
    return path == directory or path.startswith(directory + "/")


_ENTRY_TYPES: dict[str, type] = {
    "owned_files": FileDefinition,
    "managed_files": FileDefinition,
    "json_merges": JsonMergeDefinition,
    "text_patches": TextPatchDefinition,
}


class PackageSpec(BaseModel):
    """Packages railctl installs into a project."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    base: Annotated[
        list[str],
        Field(description="Packages installed whenever the package set applies"),
    ] = []
    conditional: Annotated[
        dict[str, list[str]],
        Field(description="Predicate name -> packages installed when it holds"),
    ] = {}
    requires: Annotated[
        str | None,
        Field(description="Predicate gating the whole package set (e.g. 'javascript')"),
    ] = None

    def required(self, ctx: "ProjectContext") -> list[str]:
        """Packages that should be present for a context, in declaration order."""
        if self.requires is not None and not ctx.has(self.requires):
            return []
        names = list(self.base)
        for predicate, extra in self.conditional.items():
            if ctx.has(predicate):
                names.extend(n for n in extra if n not in names)
        return names

    def all_names(self) -> set[str]:
        """Every package this PackageSpec could ever install."""
        names = set(self.base)
        for extra in self.conditional.values():
            names.update(extra)
        return names


class Schema(BaseModel):
    """Declarative description of everything railctl manages.

    Example:
        >>> schema = Schema(
        ...     version="1.0.0",
        ...     owned_files={"GUIDE.md": StaticContent("v1")},
        ... )
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: Annotated[str, Field(description="Dotted numeric schema version")]
    owned_directories: list[str] = []
    shared_directories: list[str] = []
    preserved_directories: list[str] = []
    owned_files: dict[str, Any] = {}
    managed_files: dict[str, Any] = {}
    json_merges: dict[str, Any] = {}
    text_patches: dict[str, Any] = {}
    deprecated_files: list[str] = []
    deprecated_directories: list[str] = []
    deprecated_packages: list[str] = []
    packages: PackageSpec = PackageSpec()

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate the version is dotted numeric (e.g. 1.4.0)."""
        if not _VERSION_PATTERN.match(v):
            msg = f"Invalid schema version: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator(
        "owned_directories",
        "shared_directories",
        "preserved_directories",
        "deprecated_files",
        "deprecated_directories",
    )
    @classmethod
    def validate_path_list(cls, v: list[str]) -> list[str]:
        """Validate every path is relative and normalized, without duplicates."""
        seen: set[str] = set()
        for path in v:
            _check_relative_path(path)
            if path in seen:
                msg = f"Duplicate path: {path!r}"
                raise ValueError(msg)
            seen.add(path)
        return v

    @field_validator("owned_files", "managed_files", "json_merges", "text_patches")
    @classmethod
    def validate_entries(cls, v: dict[str, Any], info: Any) -> dict[str, Any]:
        """Validate file keys are normalized paths and values have the right type."""
        expected = _ENTRY_TYPES[info.field_name]
        for path, definition in v.items():
            _check_relative_path(path)
            if not isinstance(definition, expected):
                msg = f"{info.field_name}[{path!r}] must be a {expected.__name__}"
                raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_categories(self) -> "Schema":
        """Validate that categories do not overlap or contradict each other."""
        dir_categories = {
            "owned_directories": set(self.owned_directories),
            "shared_directories": set(self.shared_directories),
            "preserved_directories": set(self.preserved_directories),
        }
        names = list(dir_categories)
        for i, first in enumerate(names):
            for second in names[i + 1 :]:
                overlap = dir_categories[first] & dir_categories[second]
                if overlap:
                    msg = f"Directories in both {first} and {second}: {sorted(overlap)}"
                    raise ValueError(msg)

        file_categories = {
            "owned_files": set(self.owned_files),
            "managed_files": set(self.managed_files),
            "json_merges": set(self.json_merges),
            "text_patches": set(self.text_patches),
        }
        seen: dict[str, str] = {}
        for category, paths in file_categories.items():
            for path in sorted(paths):
                if path in seen:
                    msg = f"Path {path!r} declared in both {seen[path]} and {category}"
                    raise ValueError(msg)
                seen[path] = category

        live_dirs = set().union(*dir_categories.values())
        for path in seen:
            if path in live_dirs:
                msg = f"Path {path!r} declared as both a directory and a file"
                raise ValueError(msg)
            if path in RESERVED_PATHS:
                msg = f"Path {path!r} is reserved for install state"
                raise ValueError(msg)

        for path in self.deprecated_files:
            if path in seen:
                msg = f"Path {path!r} is both {seen[path]} and deprecated"
                raise ValueError(msg)

        for directory in self.deprecated_directories:
            if directory in live_dirs:
                msg = f"Directory {directory!r} is both live and deprecated"
                raise ValueError(msg)
            for path in seen:
                if _is_under(path, directory):
                    msg = f"Path {path!r} lives inside deprecated directory {directory!r}"
                    raise ValueError(msg)

        overlap_pkgs = set(self.deprecated_packages) & self.packages.all_names()
        if overlap_pkgs:
            msg = f"Packages both required and deprecated: {sorted(overlap_pkgs)}"
            raise ValueError(msg)

        return self

    @property
    def all_directories(self) -> list[str]:
        """Every live directory, parents before children."""
        dirs = [*self.owned_directories, *self.shared_directories, *self.preserved_directories]
        return sorted(dirs, key=lambda d: (d.count("/"), d))

    def predicate_names(self) -> set[str]:
        """Every predicate name the schema refers to."""
        names = set(self.packages.conditional)
        if self.packages.requires is not None:
            names.add(self.packages.requires)
        for definition in self.json_merges.values():
            names.update(definition.conditional_keys)
        return names
