"""Reconciliation result models.

A ReconcileResult is what the engine hands back to the command layer:
which paths were created, updated, left alone, deleted or preserved,
the planned file actions (with before/after content for dry runs and
diffs), and every per-entry error and warning.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FileActionType(Enum):
    """Kind of filesystem change.

    Attributes:
        MKDIR: Create a directory.
        CREATE: Write a file that did not exist.
        UPDATE: Rewrite an existing file.
        DELETE: Remove a file.
        RMDIR: Remove a directory (recursively for owned directories).
    """

    MKDIR = "mkdir"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RMDIR = "rmdir"


@dataclass(frozen=True, slots=True)
class FileAction:
    """A single filesystem change, planned or applied.

    Attributes:
        action_type: Kind of change.
        path: Project-relative path.
        before: Previous text content for file changes, if known.
        after: New text content for writes.
        reason: Short explanation shown in verbose output.
    """

    action_type: FileActionType
    path: str
    before: str | None = None
    after: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "action": self.action_type.value,
            "path": self.path,
            "reason": self.reason,
        }


class ErrorKind(Enum):
    """Failure domain of a per-entry error."""

    GENERATOR = "generator"
    IO = "io"
    PACKAGE = "package"


@dataclass(frozen=True, slots=True)
class ReconcileError:
    """A per-entry failure recorded without aborting the pass."""

    path: str
    message: str
    kind: ErrorKind = ErrorKind.IO

    def to_dict(self) -> dict[str, str]:
        """Convert to a JSON-serializable dictionary."""
        return {"path": self.path, "message": self.message, "kind": self.kind.value}


@dataclass(frozen=True, slots=True)
class ReconcileWarning:
    """A recoverable condition, such as a malformed JSON merge target."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        """Convert to a JSON-serializable dictionary."""
        return {"path": self.path, "message": self.message}


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one reconciliation pass.

    Attributes:
        operation: Operation name (install, upgrade, uninstall).
        schema_version: Version of the schema applied.
        previous_version: Version recorded before the pass, if any.
        dry_run: True if nothing was written.
        created: Paths created (files and directories).
        updated: Files rewritten.
        unchanged: Files already in the desired state.
        deleted: Paths removed.
        preserved: Managed files left alone because the user edited them.
        errors: Per-entry failures.
        warnings: Recoverable problems.
        actions: File actions in the order they were (or would be) applied.
        packages_installed: Packages installed (or to install, in dry runs).
        packages_removed: Packages removed (or to remove).
        packages_pending: Packages needed but not handled by a package manager.
        packages_confirmed: False if a package manager call failed or timed out.
        applied: True if the version marker was written.
    """

    operation: str
    schema_version: str
    previous_version: str | None = None
    dry_run: bool = False
    created: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    preserved: list[str] = field(default_factory=list)
    errors: list[ReconcileError] = field(default_factory=list)
    warnings: list[ReconcileWarning] = field(default_factory=list)
    actions: list[FileAction] = field(default_factory=list)
    packages_installed: list[str] = field(default_factory=list)
    packages_removed: list[str] = field(default_factory=list)
    packages_pending: list[str] = field(default_factory=list)
    packages_confirmed: bool = True
    applied: bool = False

    @property
    def success(self) -> bool:
        """True if no per-entry error was recorded."""
        return not self.errors

    @property
    def has_changes(self) -> bool:
        """True if any file or package change was made (or planned)."""
        return bool(
            self.created or self.updated or self.deleted or self.packages_installed or self.packages_removed
        )

    @property
    def file_errors(self) -> list[ReconcileError]:
        """Errors outside the package domain."""
        return [e for e in self.errors if e.kind is not ErrorKind.PACKAGE]

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "operation": self.operation,
            "schema_version": self.schema_version,
            "previous_version": self.previous_version,
            "dry_run": self.dry_run,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "deleted": self.deleted,
            "preserved": self.preserved,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "actions": [a.to_dict() for a in self.actions],
            "packages": {
                "installed": self.packages_installed,
                "removed": self.packages_removed,
                "pending": self.packages_pending,
                "confirmed": self.packages_confirmed,
            },
            "applied": self.applied,
        }
