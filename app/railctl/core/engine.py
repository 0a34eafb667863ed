"""Schema reconciliation engine.

The engine brings a project from its current state to the state the
schema describes, for one of three operations:

- install: additive; creates directories, owned and managed files,
  merges JSON keys, applies text patches, installs packages.
- upgrade: removes deprecated artifacts first, then regenerates owned
  files, converges managed files the user has not edited, re-merges and
  re-patches, and reconciles packages.
- uninstall: the inverse of install; unmerges and unpatches, removes
  owned files and directories, and removes only what railctl created.

Categories are processed strictly in order. Within a category each entry
is an independent unit of work: failures are recorded in the result and
the pass continues. Only schema and downgrade problems raise.
"""

import logging
import posixpath
import shutil
from enum import Enum
from pathlib import Path

from railctl.core.context import ProjectContext
from railctl.core.generators import GeneratorError, ReconcileCache, resolve_file
from railctl.core.merge import (
    MalformedJsonError,
    added_parents,
    detect_indent,
    dump_json,
    has_meaningful_content,
    load_json_document,
    merge_json_keys,
    patch_text,
    prune_empty_parents,
    unmerge_json_keys,
    unpatch_text,
)
from railctl.core.paths import STATE_FILE, VERSION_MARKER
from railctl.core.schema import check_predicates
from railctl.core.state import InstallState, StateError, StateManager, content_checksum
from railctl.models.package import PackageResult
from railctl.models.result import (
    ErrorKind,
    FileAction,
    FileActionType,
    ReconcileError,
    ReconcileResult,
    ReconcileWarning,
)
from railctl.models.schema import (
    Content,
    FileDefinition,
    JsonMergeDefinition,
    Schema,
    Skip,
    TextPatchDefinition,
)
from railctl.operators.base import PackageOperator
from railctl.utils.version import is_newer_version

logger = logging.getLogger(__name__)

EXECUTABLE_SUFFIXES = (".sh",)
EXECUTABLE_MODE = 0o755


class Operation(Enum):
    """Lifecycle operation."""

    INSTALL = "install"
    UPGRADE = "upgrade"
    UNINSTALL = "uninstall"


class DowngradeError(Exception):
    """Raised when upgrading would apply an older schema than the recorded one."""


def _is_under(path: str, directory: str) -> bool:
    return path == directory or path.startswith(directory + "/")


class ReconcileEngine:
    """Applies one operation of a schema to one project.

    An engine instance is single-use: construct it, call run() once.

    Attributes:
        schema: Schema being applied.
        context: Project context.
        result: Result being accumulated.
    """

    def __init__(
        self,
        schema: Schema,
        context: ProjectContext,
        operation: Operation,
        *,
        package_manager: PackageOperator | None = None,
        package_timeout: float | None = None,
        dry_run: bool = False,
        cache: ReconcileCache | None = None,
        full: bool = False,
    ) -> None:
        self.schema = schema
        self.context = context
        self.operation = operation
        self.root = context.root
        self.package_manager = package_manager
        self.package_timeout = package_timeout
        self.dry_run = dry_run
        self.cache = cache if cache is not None else ReconcileCache()
        self.full = full

        self._state_manager = StateManager(self.root)
        self._failed_dirs: set[str] = set()
        self._planned_dirs: set[str] = set()
        self._removed: set[str] = set()

        self.result = ReconcileResult(
            operation=operation.value,
            schema_version=schema.version,
            dry_run=dry_run,
        )
        self.state = self._load_state()
        self.result.previous_version = self.state.version

    # =========================================================================
    # Entry point
    # =========================================================================

    def run(self) -> ReconcileResult:
        """Run the operation.

        Returns:
            ReconcileResult describing everything done (or planned).

        Raises:
            DowngradeError: If upgrading to a schema older than the recorded one.
        """
        logger.info(
            "%s %s (schema %s, dry_run=%s)",
            self.operation.value.capitalize(),
            self.root,
            self.schema.version,
            self.dry_run,
        )
        if self.operation is Operation.INSTALL:
            self._install()
        elif self.operation is Operation.UPGRADE:
            self._check_downgrade()
            self._upgrade()
        else:
            self._uninstall()
        self._finish()
        return self.result

    def _install(self) -> None:
        self._create_directories()
        self._reconcile_owned_files()
        self._reconcile_managed_files()
        self._apply_json_merges()
        self._apply_text_patches()
        self._install_packages(deprecated=[])

    def _upgrade(self) -> None:
        self._create_directories()
        deprecated_packages = self._remove_deprecated()
        self._reconcile_owned_files()
        self._reconcile_managed_files()
        self._apply_json_merges()
        self._apply_text_patches()
        self._install_packages(deprecated=deprecated_packages)

    def _uninstall(self) -> None:
        self._remove_json_merges()
        self._remove_text_patches()
        self._remove_files()
        self._remove_owned_directories()
        self._remove_created_directories()
        self._remove_packages()

    def _check_downgrade(self) -> None:
        previous = self.state.version
        if previous is None:
            return
        try:
            newer = is_newer_version(previous, self.schema.version)
        except ValueError:
            logger.warning("Unreadable recorded version %r; treating as older", previous)
            return
        if newer:
            msg = (
                f"Project was configured with railctl schema {previous}, "
                f"which is newer than {self.schema.version}. Update railctl instead."
            )
            raise DowngradeError(msg)

    # =========================================================================
    # Result bookkeeping
    # =========================================================================

    def _error(self, path: str, message: str, kind: ErrorKind = ErrorKind.IO) -> None:
        logger.warning("%s: %s", path, message)
        self.result.errors.append(ReconcileError(path=path, message=message, kind=kind))

    def _warn(self, path: str, message: str) -> None:
        logger.warning("%s: %s", path, message)
        self.result.warnings.append(ReconcileWarning(path=path, message=message))

    def _action(self, action_type: FileActionType, path: str, **kwargs: str | None) -> None:
        self.result.actions.append(FileAction(action_type=action_type, path=path, **kwargs))

    # =========================================================================
    # Filesystem primitives (dry-run aware)
    # =========================================================================

    def _abs(self, rel: str) -> Path:
        return self.root / rel

    def _is_removed(self, rel: str) -> bool:
        return any(_is_under(rel, removed) for removed in self._removed)

    def _exists(self, rel: str) -> bool:
        if self._is_removed(rel):
            return False
        if rel in self._planned_dirs:
            return True
        path = self._abs(rel)
        return path.exists() or path.is_symlink()

    def _dir_exists(self, rel: str) -> bool:
        if self._is_removed(rel):
            return False
        return rel in self._planned_dirs or self._abs(rel).is_dir()

    def _is_empty_dir(self, rel: str) -> bool:
        if rel in self._planned_dirs:
            return True
        try:
            children = list(self._abs(rel).iterdir())
        except OSError:
            return False
        return all(not self._exists(f"{rel}/{child.name}") for child in children)

    def _blocked_by(self, rel: str) -> str | None:
        for failed in self._failed_dirs:
            if _is_under(rel, failed):
                return failed
        return None

    def _read_text(self, rel: str) -> str | None:
        """Read a project file.

        Returns:
            Text content, or None if the file does not exist.

        Raises:
            OSError: If the file exists but cannot be read.
            UnicodeDecodeError: If the file is not UTF-8.
        """
        if not self._exists(rel):
            return None
        path = self._abs(rel)
        if path.is_dir():
            msg = f"{rel} is a directory"
            raise IsADirectoryError(msg)
        return path.read_bytes().decode("utf-8")

    def _read_or_error(self, rel: str) -> tuple[bool, str | None]:
        """Read a file, recording an error on failure.

        Returns:
            (ok, content); content is None when the file is absent.
        """
        try:
            return True, self._read_text(rel)
        except (OSError, UnicodeDecodeError) as e:
            self._error(rel, f"Cannot read file: {e}")
            return False, None

    def _mkdir(self, rel: str) -> bool:
        """Create a directory and any missing parents.

        Returns:
            True if the directory exists afterwards (or would, in a dry run).
        """
        if rel in self._failed_dirs:
            return False
        if self._dir_exists(rel):
            return True
        if self._exists(rel):
            self._error(rel, "Path exists and is not a directory")
            self._failed_dirs.add(rel)
            return False
        parent = posixpath.dirname(rel)
        if parent and not self._mkdir(parent):
            self._failed_dirs.add(rel)
            return False
        if self.dry_run:
            self._planned_dirs.add(rel)
        else:
            try:
                self._abs(rel).mkdir()
            except FileExistsError:
                if not self._abs(rel).is_dir():
                    self._error(rel, "Path exists and is not a directory")
                    self._failed_dirs.add(rel)
                    return False
                return True
            except OSError as e:
                self._error(rel, f"Cannot create directory: {e}")
                self._failed_dirs.add(rel)
                return False
        self._removed.discard(rel)
        self.state.created_dirs.add(rel)
        self.result.created.append(f"{rel}/")
        self._action(FileActionType.MKDIR, rel)
        logger.debug("Created directory %s", rel)
        return True

    def _ensure_parent(self, rel: str) -> bool:
        parent = posixpath.dirname(rel)
        if not parent:
            return True
        failed = self._blocked_by(parent)
        if failed is not None or not self._mkdir(parent):
            self._error(rel, f"Parent directory {failed or parent} could not be created")
            return False
        return True

    def _write(self, rel: str, content: str, before: str | None, reason: str | None = None) -> bool:
        """Write a file, creating parent directories on demand.

        Args:
            rel: Project-relative path.
            content: New text content.
            before: Current content, or None if the file does not exist.
            reason: Short explanation for verbose output.

        Returns:
            True if the write succeeded (or would, in a dry run).
        """
        if not self._ensure_parent(rel):
            return False
        if not self.dry_run:
            path = self._abs(rel)
            try:
                path.write_bytes(content.encode("utf-8"))
                if rel.endswith(EXECUTABLE_SUFFIXES):
                    path.chmod(EXECUTABLE_MODE)
            except OSError as e:
                self._error(rel, f"Cannot write file: {e}")
                return False
        created = before is None
        (self.result.created if created else self.result.updated).append(rel)
        self._action(
            FileActionType.CREATE if created else FileActionType.UPDATE,
            rel,
            before=before,
            after=content,
            reason=reason,
        )
        logger.debug("%s %s", "Created" if created else "Updated", rel)
        return True

    def _delete_file(self, rel: str, reason: str | None = None) -> bool:
        if not self.dry_run:
            try:
                self._abs(rel).unlink()
            except FileNotFoundError:
                return False
            except OSError as e:
                self._error(rel, f"Cannot delete file: {e}")
                return False
        self._removed.add(rel)
        self.result.deleted.append(rel)
        self._action(FileActionType.DELETE, rel, reason=reason)
        logger.debug("Deleted %s", rel)
        return True

    def _delete_tree(self, rel: str, reason: str | None = None) -> bool:
        if not self.dry_run:
            try:
                shutil.rmtree(self._abs(rel))
            except FileNotFoundError:
                return False
            except OSError as e:
                self._error(rel, f"Cannot delete directory: {e}")
                return False
        self._removed.add(rel)
        self.result.deleted.append(f"{rel}/")
        self._action(FileActionType.RMDIR, rel, reason=reason)
        logger.debug("Deleted directory %s", rel)
        return True

    def _remove_empty_dir(self, rel: str) -> bool:
        if not self._dir_exists(rel) or not self._is_empty_dir(rel):
            return False
        if not self.dry_run:
            try:
                self._abs(rel).rmdir()
            except OSError as e:
                self._error(rel, f"Cannot remove directory: {e}")
                return False
        self._removed.add(rel)
        self.result.deleted.append(f"{rel}/")
        self._action(FileActionType.RMDIR, rel)
        return True

    # =========================================================================
    # Install / upgrade categories
    # =========================================================================

    def _create_directories(self) -> None:
        for directory in self.schema.all_directories:
            self._mkdir(directory)

    def _resolve(self, rel: str, definition: FileDefinition) -> Content | Skip | None:
        """Resolve a definition, recording generator failures.

        Returns:
            The outcome, or None if resolution failed.
        """
        try:
            return resolve_file(rel, definition, self.context, self.cache)
        except GeneratorError as e:
            self._error(e.path, str(e), ErrorKind.GENERATOR)
            return None

    def _reconcile_owned_files(self) -> None:
        for rel, definition in self.schema.owned_files.items():
            outcome = self._resolve(rel, definition)
            if outcome is None:
                continue
            if isinstance(outcome, Skip):
                self._drop_skipped_owned(rel)
                continue
            ok, existing = self._read_or_error(rel)
            if not ok:
                continue
            if existing == outcome.text:
                self.result.unchanged.append(rel)
                self.state.checksums[rel] = content_checksum(outcome.text)
                continue
            if self._write(rel, outcome.text, existing, reason="owned"):
                self.state.checksums[rel] = content_checksum(outcome.text)

    def _drop_skipped_owned(self, rel: str) -> None:
        """Remove an owned file railctl generated earlier but no longer manages."""
        if rel not in self.state.checksums:
            return
        if self._exists(rel):
            self._delete_file(rel, reason="no longer generated for this project")
        del self.state.checksums[rel]

    def _reconcile_managed_files(self) -> None:
        for rel, definition in self.schema.managed_files.items():
            outcome = self._resolve(rel, definition)
            if outcome is None or isinstance(outcome, Skip):
                continue
            ok, existing = self._read_or_error(rel)
            if not ok:
                continue
            new_checksum = content_checksum(outcome.text)

            if existing is None:
                if self._write(rel, outcome.text, None, reason="managed"):
                    self.state.checksums[rel] = new_checksum
                continue

            if existing == outcome.text:
                self.result.unchanged.append(rel)
                self.state.checksums[rel] = new_checksum
                continue

            recorded = self.state.checksums.get(rel)
            if (
                self.operation is Operation.UPGRADE
                and recorded is not None
                and content_checksum(existing) == recorded
            ):
                if self._write(rel, outcome.text, existing, reason="managed, unmodified since last write"):
                    self.state.checksums[rel] = new_checksum
                continue

            logger.info("Preserving customized %s", rel)
            self.result.preserved.append(rel)

    def _apply_json_merges(self) -> None:
        for rel, definition in self.schema.json_merges.items():
            self._apply_json_merge(rel, definition)

    def _load_json(self, rel: str) -> tuple[bool, str | None, dict | None]:
        """Read and parse a JSON merge target.

        Returns:
            (ok, raw text, parsed document); raw and parsed are None when the
            file is absent. ok is False if the entry must be skipped.
        """
        ok, raw = self._read_or_error(rel)
        if not ok:
            return False, None, None
        if raw is None:
            return True, None, None
        try:
            return True, raw, load_json_document(raw)
        except MalformedJsonError as e:
            self._warn(rel, f"Skipping merge of malformed JSON: {e}")
            return False, raw, None

    def _apply_json_merge(self, rel: str, definition: JsonMergeDefinition) -> None:
        ok, raw, existing = self._load_json(rel)
        if not ok:
            return
        if existing is None and definition.skip_if_missing:
            return
        current = existing if existing is not None else {}
        try:
            merged = merge_json_keys(current, definition, self.context)
        except Exception as e:
            self._error(rel, f"Merge function failed: {e}", ErrorKind.GENERATOR)
            return

        if existing is None:
            if not merged:
                return
            if self._write(rel, dump_json(merged), None, reason="json merge"):
                self.state.created_files.add(rel)
            return

        if merged == existing:
            self.result.unchanged.append(rel)
            return
        if self._write(rel, dump_json(merged, detect_indent(raw or "")), raw, reason="json merge"):
            added = added_parents(existing, merged, definition.all_keys())
            if added:
                self.state.created_keys.setdefault(rel, set()).update(added)

    def _apply_text_patches(self) -> None:
        for rel, definition in self.schema.text_patches.items():
            self._apply_text_patch(rel, definition)

    def _apply_text_patch(self, rel: str, definition: TextPatchDefinition) -> None:
        ok, existing = self._read_or_error(rel)
        if not ok:
            return
        patched = patch_text(existing, definition)
        if patched is None:
            if existing is not None:
                self.result.unchanged.append(rel)
            return
        if self._write(rel, patched, existing, reason=f"text patch ({definition.operation.value})") and existing is None:
            self.state.created_files.add(rel)

    def _remove_deprecated(self) -> list[str]:
        """Delete deprecated files and directories.

        Runs before owned and managed files are regenerated.

        Returns:
            Deprecated packages present in the project, to be removed later.
        """
        for rel in self.schema.deprecated_files:
            if self._exists(rel) and not self._abs(rel).is_dir():
                self._delete_file(rel, reason="deprecated")
            self._forget(rel)

        for rel in self.schema.deprecated_directories:
            if self._dir_exists(rel):
                self._delete_tree(rel, reason="deprecated")
            self._forget(rel)

        return [name for name in self.schema.deprecated_packages if name in self.context.dependencies]

    def _forget(self, rel: str) -> None:
        """Drop state records at or below a path."""
        for path in [p for p in self.state.checksums if _is_under(p, rel)]:
            del self.state.checksums[path]
        self.state.created_dirs = {d for d in self.state.created_dirs if not _is_under(d, rel)}
        self.state.created_files = {f for f in self.state.created_files if not _is_under(f, rel)}

    # =========================================================================
    # Packages
    # =========================================================================

    def _record_package_results(self, results: list[PackageResult], done: list[str]) -> list[str]:
        succeeded: list[str] = []
        for item in results:
            if item.success:
                succeeded.append(item.action.package)
                done.append(item.action.package)
            else:
                self.result.packages_confirmed = False
                self._error(
                    item.action.package,
                    f"Package {item.action.change.value} failed: {item.error}",
                    ErrorKind.PACKAGE,
                )
        return succeeded

    def _install_packages(self, deprecated: list[str]) -> None:
        required = self.schema.packages.required(self.context)
        needed = [name for name in required if name not in self.context.dependencies]

        if self.dry_run:
            self.result.packages_installed.extend(needed)
            self.result.packages_removed.extend(deprecated)
            return

        if self.package_manager is None:
            self.result.packages_pending.extend(needed)
            for name in deprecated:
                self._warn(name, "Deprecated package should be removed manually")
            return

        if needed:
            results = self.package_manager.install(needed, dev=True, timeout=self.package_timeout)
            self.state.packages.update(self._record_package_results(results, self.result.packages_installed))
        if deprecated:
            results = self.package_manager.remove(deprecated, timeout=self.package_timeout)
            for name in self._record_package_results(results, self.result.packages_removed):
                self.state.packages.discard(name)

    def _remove_packages(self) -> None:
        installed = sorted(name for name in self.state.packages if name in self.context.dependencies)
        if not installed:
            return
        if self.dry_run:
            self.result.packages_removed.extend(installed)
            return
        if self.package_manager is None:
            for name in installed:
                self._warn(name, "Package should be removed manually")
            return
        results = self.package_manager.remove(installed, timeout=self.package_timeout)
        for name in self._record_package_results(results, self.result.packages_removed):
            self.state.packages.discard(name)

    # =========================================================================
    # Uninstall categories
    # =========================================================================

    def _remove_json_merges(self) -> None:
        for rel, definition in self.schema.json_merges.items():
            ok, raw, existing = self._load_json(rel)
            if not ok or existing is None:
                continue
            try:
                unmerged = unmerge_json_keys(existing, definition, self.context)
            except Exception as e:
                self._error(rel, f"Unmerge function failed: {e}", ErrorKind.GENERATOR)
                continue
            prune_empty_parents(unmerged, self.state.created_keys.get(rel, set()))

            created = rel in self.state.created_files
            # Empty leftovers only count as nothing in files railctl created
            if (definition.remove_file_if_empty or created) and not has_meaningful_content(
                unmerged, ignore_empty=created
            ):
                if self._delete_file(rel, reason="json unmerge left it empty"):
                    self.state.created_files.discard(rel)
                    self.state.created_keys.pop(rel, None)
                continue
            if unmerged == existing:
                self.result.unchanged.append(rel)
                self.state.created_keys.pop(rel, None)
                continue
            if self._write(rel, dump_json(unmerged, detect_indent(raw or "")), raw, reason="json unmerge"):
                self.state.created_keys.pop(rel, None)

    def _remove_text_patches(self) -> None:
        for rel, definition in self.schema.text_patches.items():
            ok, existing = self._read_or_error(rel)
            if not ok or existing is None:
                continue
            unpatched = unpatch_text(existing, definition)
            if unpatched is None:
                if definition.marker in existing:
                    self._warn(rel, "Patched block was edited; leaving it in place")
                continue
            if rel in self.state.created_files and not unpatched.strip():
                if self._delete_file(rel, reason="text unpatch left it empty"):
                    self.state.created_files.discard(rel)
                continue
            self._write(rel, unpatched, existing, reason="text unpatch")

    def _is_unmodified(self, rel: str) -> bool:
        recorded = self.state.checksums.get(rel)
        if recorded is None:
            return False
        try:
            return content_checksum(self._abs(rel).read_bytes()) == recorded
        except OSError:
            return False

    def _remove_files(self) -> None:
        for rel in self.schema.owned_files:
            if self._exists(rel) and not self._abs(rel).is_dir():
                self._delete_file(rel, reason="owned")
            self.state.checksums.pop(rel, None)

        for rel in self.schema.managed_files:
            if not self._exists(rel) or self._abs(rel).is_dir():
                continue
            if self.full or self._is_unmodified(rel):
                self._delete_file(rel, reason="managed")
                self.state.checksums.pop(rel, None)
            else:
                logger.info("Preserving customized %s", rel)
                self.result.preserved.append(rel)

        # Files recorded by an earlier schema that the current one dropped
        declared = set(self.schema.owned_files) | set(self.schema.managed_files)
        for rel in sorted(set(self.state.checksums) - declared):
            if self._exists(rel) and self._is_unmodified(rel):
                self._delete_file(rel, reason="left over from an earlier version")
            self.state.checksums.pop(rel, None)

    def _remove_owned_directories(self) -> None:
        owned = sorted(self.schema.owned_directories, key=lambda d: (d.count("/"), d))
        tops = [d for d in owned if not any(_is_under(d, other) and d != other for other in owned)]
        for directory in tops:
            if self._dir_exists(directory):
                self._remove_owned_tree(directory)

    def _remove_owned_tree(self, rel: str) -> None:
        """Remove an owned directory, keeping non-empty preserved subtrees."""
        preserved = [p for p in self.schema.preserved_directories if _is_under(p, rel)]
        if not preserved:
            self._delete_tree(rel, reason="owned")
            return
        if rel in preserved:
            self._remove_empty_dir(rel)
            return
        try:
            children = sorted(self._abs(rel).iterdir())
        except OSError as e:
            self._error(rel, f"Cannot list directory: {e}")
            return
        for child in children:
            child_rel = f"{rel}/{child.name}"
            if not self._exists(child_rel):
                continue
            if child.is_dir() and not child.is_symlink():
                self._remove_owned_tree(child_rel)
            else:
                self._delete_file(child_rel, reason="owned")
        self._remove_empty_dir(rel)

    def _remove_created_directories(self) -> None:
        for rel in sorted(self.state.created_dirs, key=lambda d: (-d.count("/"), d)):
            if self._dir_exists(rel):
                self._remove_empty_dir(rel)

    # =========================================================================
    # State
    # =========================================================================

    def _load_state(self) -> InstallState:
        try:
            return self._state_manager.load()
        except StateError as e:
            self._error(STATE_FILE, str(e))
            return InstallState()

    def _finish(self) -> None:
        if self.dry_run:
            return
        file_errors = self.result.file_errors
        try:
            if self.operation is Operation.UNINSTALL:
                if file_errors:
                    self._state_manager.save(self.state)
                else:
                    self._state_manager.clear()
                    self.result.applied = True
                return

            self._state_manager.save(self.state)
            if file_errors:
                logger.warning("Not recording version %s: %d error(s)", self.schema.version, len(file_errors))
                return
            self._state_manager.write_version(self.schema.version)
            self.result.applied = True
        except StateError as e:
            self._error(VERSION_MARKER, str(e))


def reconcile(
    operation: Operation,
    schema: Schema,
    context: ProjectContext,
    *,
    package_manager: PackageOperator | None = None,
    package_timeout: float | None = None,
    dry_run: bool = False,
    cache: ReconcileCache | None = None,
    full: bool = False,
) -> ReconcileResult:
    """Apply a schema operation to a project.

    Args:
        operation: install, upgrade or uninstall.
        schema: Validated schema.
        context: Project context (read-only for the whole pass).
        package_manager: Operator used for packages; None reports needed
            packages as pending.
        package_timeout: Timeout in seconds for each package manager call.
        dry_run: Compute actions without touching the filesystem or packages.
        cache: Caller-owned cache for this call; a fresh one is used if None.
        full: Uninstall only; also remove managed files the user edited.

    Returns:
        ReconcileResult. Per-entry failures are in result.errors.

    Raises:
        SchemaError: If the schema uses unknown predicates.
        DowngradeError: If upgrading would downgrade the recorded schema.
    """
    check_predicates(schema)
    engine = ReconcileEngine(
        schema,
        context,
        operation,
        package_manager=package_manager,
        package_timeout=package_timeout,
        dry_run=dry_run,
        cache=cache,
        full=full,
    )
    return engine.run()
