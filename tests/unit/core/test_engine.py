"""Unit tests for the reconciliation engine.

Tests for install, upgrade and uninstall against small custom schemas.
"""

import json
import stat
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from railctl.core.context import Languages, ProjectContext
from railctl.core.engine import DowngradeError, Operation, reconcile
from railctl.core.generators import ReconcileCache
from railctl.core.schema import SchemaError
from railctl.core.state import StateManager
from railctl.models.package import NodeClient, PackageAction, PackageChange, PackageResult
from railctl.models.result import ErrorKind, FileActionType
from railctl.models.schema import (
    SKIP,
    Content,
    FileOutcome,
    GeneratedFile,
    JsonMergeDefinition,
    PackageSpec,
    PatchOperation,
    Schema,
    StaticContent,
    TextPatchDefinition,
)
from railctl.operators.base import PackageOperator

SchemaFactory = Callable[..., Schema]
Snapshot = Callable[[Path], dict[str, bytes | None]]


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text())


def _ok(package: str, change: PackageChange = PackageChange.INSTALL) -> PackageResult:
    return PackageResult(PackageAction(change, package, NodeClient.NPM))


class TestInstall:
    """Tests for a fresh install."""

    def test_creates_directories_and_files(
        self, project: Path, context: ProjectContext, make_schema: SchemaFactory
    ) -> None:
        """Install creates every declared directory and file."""
        result = reconcile(Operation.INSTALL, make_schema(), context)

        assert result.success
        assert result.applied
        for directory in (".tool", ".tool/hooks", ".tool/notes", ".agents"):
            assert (project / directory).is_dir()
        assert (project / ".tool/GUIDE.md").read_text() == "guide 1.0.0\n"
        assert (project / "lint.toml").read_text() == "max-line = 100\n"
        assert _read_json(project / "settings.json") == {"tool": {"enabled": True}, "hooks": {"stop": "tool-stop"}}
        assert (project / "AGENTS.md").read_text() == "Read .tool/GUIDE.md first.\n\n"

    def test_writes_version_marker(self, project: Path, context: ProjectContext, make_schema: SchemaFactory) -> None:
        """Install records the schema version."""
        reconcile(Operation.INSTALL, make_schema("1.2.0"), context)

        assert (project / ".railctl/version").read_text() == "1.2.0\n"
        assert StateManager(project).read_version() == "1.2.0"

    def test_shell_scripts_are_executable(
        self, project: Path, context: ProjectContext, make_schema: SchemaFactory
    ) -> None:
        """Files ending in .sh are made executable."""
        reconcile(Operation.INSTALL, make_schema(), context)

        mode = (project / ".tool/hooks/check.sh").stat().st_mode
        assert mode & stat.S_IXUSR

    def test_reports_created_paths(self, context: ProjectContext, make_schema: SchemaFactory) -> None:
        """Result lists created directories (with a slash) and files."""
        result = reconcile(Operation.INSTALL, make_schema(), context)

        assert ".tool/" in result.created
        assert ".tool/GUIDE.md" in result.created
        assert "settings.json" in result.created
        assert result.updated == []

    def test_existing_managed_file_is_kept(
        self, project: Path, context: ProjectContext, make_schema: SchemaFactory
    ) -> None:
        """Install never overwrites a managed file the user already has."""
        (project / "lint.toml").write_text("mine = true\n")

        result = reconcile(Operation.INSTALL, make_schema(), context)

        assert (project / "lint.toml").read_text() == "mine = true\n"
        assert "lint.toml" in result.preserved

    def test_existing_text_file_is_prepended(
        self, project: Path, context: ProjectContext, make_schema: SchemaFactory
    ) -> None:
        """A prepend patch keeps the rest of the file."""
        (project / "AGENTS.md").write_text("# Agents\n")

        reconcile(Operation.INSTALL, make_schema(), context)

        assert (project / "AGENTS.md").read_text() == "Read .tool/GUIDE.md first.\n\n# Agents\n"

    def test_unknown_predicate_raises(self, context: ProjectContext, make_schema: SchemaFactory) -> None:
        """Schemas referring to unknown predicates are rejected before any write."""
        schema = make_schema(packages=PackageSpec(requires="cobol"))

        with pytest.raises(SchemaError, match="cobol"):
            reconcile(Operation.INSTALL, schema, context)


class TestIdempotence:
    """Tests that repeated installs converge."""

    def test_second_install_changes_nothing(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
        snapshot: Snapshot,
    ) -> None:
        """Running install twice leaves a byte-identical tree."""
        (project / "settings.json").write_text('{"user": 1}\n')
        reconcile(Operation.INSTALL, make_schema(), context)
        first = snapshot(project)

        result = reconcile(Operation.INSTALL, make_schema(), context)

        assert snapshot(project) == first
        assert result.created == []
        assert result.updated == []
        assert result.actions == []

    def test_upgrade_to_same_version_is_noop(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
        snapshot: Snapshot,
    ) -> None:
        """Upgrading to the installed version changes nothing."""
        reconcile(Operation.INSTALL, make_schema(), context)
        first = snapshot(project)

        result = reconcile(Operation.UPGRADE, make_schema(), context)

        assert snapshot(project) == first
        assert not result.has_changes


class TestRoundTrip:
    """Tests that uninstall undoes install."""

    def test_pristine_project_is_restored(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
        snapshot: Snapshot,
    ) -> None:
        """Install then uninstall restores an empty project exactly."""
        (project / "README.md").write_text("# Project\n")
        before = snapshot(project)

        reconcile(Operation.INSTALL, make_schema(), context)
        result = reconcile(Operation.UNINSTALL, make_schema(), context)

        assert result.success
        assert snapshot(project) == before
        assert not (project / ".railctl").exists()

    def test_user_json_is_restored(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """A pre-existing JSON file gets back exactly its own keys."""
        original = {"user": 1, "hooks": {"pre": "lint"}}
        (project / "settings.json").write_text(json.dumps(original, indent=2) + "\n")

        reconcile(Operation.INSTALL, make_schema(), context)
        reconcile(Operation.UNINSTALL, make_schema(), context)

        assert _read_json(project / "settings.json") == original

    def test_preserved_directory_content_survives(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """User files in preserved directories are never removed."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / ".tool/notes/learned.md").write_text("keep me\n")

        reconcile(Operation.UNINSTALL, make_schema(), context)

        assert (project / ".tool/notes/learned.md").read_text() == "keep me\n"
        assert not (project / ".tool/GUIDE.md").exists()
        assert not (project / ".tool/hooks").exists()

    def test_shared_directory_with_user_files_is_kept(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Shared directories are removed only when railctl created them and they are empty."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / ".agents/custom.md").write_text("mine\n")

        reconcile(Operation.UNINSTALL, make_schema(), context)

        assert (project / ".agents/custom.md").exists()

    def test_preexisting_shared_directory_is_kept(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """An empty shared directory the user created stays after uninstall."""
        (project / ".agents").mkdir()

        reconcile(Operation.INSTALL, make_schema(), context)
        reconcile(Operation.UNINSTALL, make_schema(), context)

        assert (project / ".agents").is_dir()


class TestCustomizationPreservation:
    """Tests for managed-file handling on upgrade."""

    def test_edited_managed_file_is_untouched(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Upgrade leaves a user-edited managed file alone."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / "lint.toml").write_text("max-line = 120\n")
        v2 = make_schema("2.0.0", managed_files={"lint.toml": StaticContent("max-line = 88\n")})

        result = reconcile(Operation.UPGRADE, v2, context)

        assert (project / "lint.toml").read_text() == "max-line = 120\n"
        assert "lint.toml" in result.preserved
        assert "lint.toml" not in result.updated

    def test_unedited_managed_file_converges(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Upgrade rewrites a managed file railctl wrote and nobody touched."""
        reconcile(Operation.INSTALL, make_schema(), context)
        v2 = make_schema("2.0.0", managed_files={"lint.toml": StaticContent("max-line = 88\n")})

        result = reconcile(Operation.UPGRADE, v2, context)

        assert (project / "lint.toml").read_text() == "max-line = 88\n"
        assert "lint.toml" in result.updated

    def test_managed_file_without_record_is_preserved(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Without a recorded checksum a differing managed file counts as customized."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / ".railctl/state.json").unlink()
        v2 = make_schema("2.0.0", managed_files={"lint.toml": StaticContent("max-line = 88\n")})

        reconcile(Operation.UPGRADE, v2, context)

        assert (project / "lint.toml").read_text() == "max-line = 100\n"


class TestOwnedOverwrite:
    """Tests for owned-file handling on upgrade."""

    def test_edited_owned_file_is_overwritten(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Upgrade regenerates owned files regardless of edits."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / ".tool/GUIDE.md").write_text("my notes\n")

        result = reconcile(Operation.UPGRADE, make_schema("1.1.0"), context)

        assert (project / ".tool/GUIDE.md").read_text() == "guide 1.1.0\n"
        assert ".tool/GUIDE.md" in result.updated

    def test_skipped_owned_file_is_removed(self, project: Path, make_schema: SchemaFactory) -> None:
        """An owned file no longer generated for the project is deleted on upgrade."""

        def python_only(ctx: ProjectContext) -> FileOutcome:
            return Content("ruff\n") if ctx.languages.python else SKIP

        schema = make_schema(owned_files={".tool/ruff.toml": GeneratedFile(python_only)})
        reconcile(Operation.INSTALL, schema, ProjectContext(root=project, languages=Languages(python=True)))
        assert (project / ".tool/ruff.toml").exists()

        result = reconcile(Operation.UPGRADE, schema, ProjectContext(root=project))

        assert not (project / ".tool/ruff.toml").exists()
        assert ".tool/ruff.toml" in result.deleted


class TestJsonMerges:
    """Tests for JSON merge handling in the engine."""

    def test_foreign_keys_survive_every_operation(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Keys outside the declared set are never altered."""
        (project / "settings.json").write_text('{"theme": "dark", "hooks": {"pre": "x"}}\n')

        reconcile(Operation.INSTALL, make_schema(), context)
        assert _read_json(project / "settings.json")["theme"] == "dark"
        assert _read_json(project / "settings.json")["hooks"]["pre"] == "x"

        reconcile(Operation.UPGRADE, make_schema("1.1.0"), context)
        assert _read_json(project / "settings.json")["theme"] == "dark"

        reconcile(Operation.UNINSTALL, make_schema("1.1.0"), context)
        assert _read_json(project / "settings.json") == {"theme": "dark", "hooks": {"pre": "x"}}

    def test_indentation_is_preserved(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """A rewritten document keeps its indentation unit."""
        (project / "settings.json").write_text('{\n    "theme": "dark"\n}\n')

        reconcile(Operation.INSTALL, make_schema(), context)

        assert '\n    "theme": "dark"' in (project / "settings.json").read_text()

    def test_malformed_json_is_skipped_with_warning(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Invalid JSON is left untouched and reported as a warning."""
        (project / "settings.json").write_text("{not json")

        result = reconcile(Operation.INSTALL, make_schema(), context)

        assert (project / "settings.json").read_text() == "{not json"
        assert [w.path for w in result.warnings] == ["settings.json"]
        assert result.success
        assert result.applied

    def test_merge_function_failure_is_isolated(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """A failing merge function records an error; other entries still apply."""

        def broken(doc: dict[str, Any], ctx: ProjectContext) -> dict[str, Any]:
            raise RuntimeError("boom")

        schema = make_schema(json_merges={"settings.json": JsonMergeDefinition(("tool",), broken, broken)})

        result = reconcile(Operation.INSTALL, schema, context)

        assert [(e.path, e.kind) for e in result.errors] == [("settings.json", ErrorKind.GENERATOR)]
        assert (project / "lint.toml").exists()
        assert not result.applied


class TestTextPatches:
    """Tests for text patch handling in the engine."""

    def test_patch_applied_once_across_runs(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Repeated runs never duplicate the block."""
        (project / "AGENTS.md").write_text("# Agents\n")

        for _ in range(3):
            reconcile(Operation.UPGRADE, make_schema(), context)

        assert (project / "AGENTS.md").read_text().count("Read .tool/GUIDE.md first.") == 1

    def test_edited_block_is_left_on_uninstall(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Uninstall warns instead of guessing when the block was edited."""
        (project / "AGENTS.md").write_text("# Agents\n")
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / "AGENTS.md").write_text("Read .tool/GUIDE.md first, always.\n\n# Agents\n")

        result = reconcile(Operation.UNINSTALL, make_schema(), context)

        assert (project / "AGENTS.md").read_text() == "Read .tool/GUIDE.md first, always.\n\n# Agents\n"
        assert [w.path for w in result.warnings] == ["AGENTS.md"]

    def test_patch_not_created_when_not_allowed(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Patches without create_if_missing do nothing for absent files."""
        schema = make_schema(
            text_patches={
                "CLAUDE.md": TextPatchDefinition(PatchOperation.APPEND, "\nsee GUIDE\n", "GUIDE"),
            }
        )

        reconcile(Operation.INSTALL, schema, context)

        assert not (project / "CLAUDE.md").exists()


class TestUninstall:
    """Tests for uninstall edge cases."""

    def test_edited_managed_file_is_kept(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Uninstall keeps managed files the user edited."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / "lint.toml").write_text("mine\n")

        result = reconcile(Operation.UNINSTALL, make_schema(), context)

        assert (project / "lint.toml").read_text() == "mine\n"
        assert result.preserved == ["lint.toml"]

    def test_full_removes_edited_managed_file(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Uninstall with full=True removes managed files regardless of edits."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / "lint.toml").write_text("mine\n")

        reconcile(Operation.UNINSTALL, make_schema(), context, full=True)

        assert not (project / "lint.toml").exists()

    def test_files_from_earlier_schema_are_removed(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Unedited files recorded by an earlier schema are cleaned up."""
        v1 = make_schema(managed_files={"lint.toml": StaticContent("a\n"), "old.toml": StaticContent("b\n")})
        reconcile(Operation.INSTALL, v1, context)

        reconcile(Operation.UNINSTALL, make_schema("2.0.0"), context)

        assert not (project / "old.toml").exists()
        assert not (project / "lint.toml").exists()


class TestUpgrade:
    """Tests for upgrade-specific behaviour."""

    def test_downgrade_is_refused(self, context: ProjectContext, make_schema: SchemaFactory) -> None:
        """Upgrading to an older schema raises before touching anything."""
        reconcile(Operation.INSTALL, make_schema("2.0.0"), context)

        with pytest.raises(DowngradeError, match="2.0.0"):
            reconcile(Operation.UPGRADE, make_schema("1.0.0"), context)

    def test_deprecated_directory_is_removed(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Deprecated directories are deleted recursively."""
        reconcile(Operation.INSTALL, make_schema(), context)
        (project / ".tool/lib").mkdir()
        (project / ".tool/lib/helper.sh").write_text("echo\n")

        result = reconcile(Operation.UPGRADE, make_schema("2.0.0", deprecated_directories=[".tool/lib"]), context)

        assert not (project / ".tool/lib").exists()
        assert ".tool/lib/" in result.deleted

    def test_version_not_recorded_after_file_error(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """A failed entry keeps the previous version so the next upgrade retries."""
        reconcile(Operation.INSTALL, make_schema(), context)

        def broken(ctx: ProjectContext) -> FileOutcome:
            raise ValueError("bad template data")

        v2 = make_schema("2.0.0", managed_files={"lint.toml": GeneratedFile(broken)})
        result = reconcile(Operation.UPGRADE, v2, context)

        assert result.errors[0].kind is ErrorKind.GENERATOR
        assert "bad template data" in result.errors[0].message
        assert (project / ".tool/GUIDE.md").read_text() == "guide 2.0.0\n"
        assert StateManager(project).read_version() == "1.0.0"


class TestFailureIsolation:
    """Tests that one failing entry does not stop the pass."""

    def test_blocked_directory_skips_its_files_only(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """A file in place of a directory fails that subtree only."""
        (project / ".tool").write_text("not a directory\n")

        result = reconcile(Operation.INSTALL, make_schema(), context)

        error_paths = {e.path for e in result.errors}
        assert ".tool" in error_paths
        assert ".tool/GUIDE.md" in error_paths
        assert (project / "lint.toml").exists()
        assert (project / "AGENTS.md").exists()
        assert not result.applied


class TestDryRun:
    """Tests for dry-run mode."""

    def test_install_writes_nothing(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
        snapshot: Snapshot,
    ) -> None:
        """A dry run reports actions without touching the filesystem."""
        result = reconcile(Operation.INSTALL, make_schema(), context, dry_run=True)

        assert snapshot(project) == {}
        assert result.dry_run
        assert not result.applied
        assert ".tool/GUIDE.md" in result.created
        types = {a.action_type for a in result.actions}
        assert FileActionType.MKDIR in types
        assert FileActionType.CREATE in types

    def test_uninstall_writes_nothing(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
        snapshot: Snapshot,
    ) -> None:
        """A dry-run uninstall lists deletions but keeps every file."""
        reconcile(Operation.INSTALL, make_schema(), context)
        before = snapshot(project)

        result = reconcile(Operation.UNINSTALL, make_schema(), context, dry_run=True)

        assert snapshot(project) == before
        assert ".tool/GUIDE.md" in result.deleted
        assert "AGENTS.md" in result.deleted

    def test_update_action_carries_content(
        self,
        project: Path,
        context: ProjectContext,
        make_schema: SchemaFactory,
    ) -> None:
        """Planned updates include before and after text for diffs."""
        reconcile(Operation.INSTALL, make_schema(), context)

        result = reconcile(Operation.UPGRADE, make_schema("1.1.0"), context, dry_run=True)

        action = next(a for a in result.actions if a.path == ".tool/GUIDE.md")
        assert action.action_type is FileActionType.UPDATE
        assert action.before == "guide 1.0.0\n"
        assert action.after == "guide 1.1.0\n"


class TestPackages:
    """Tests for package reconciliation."""

    @pytest.fixture
    def js_context(self, project: Path) -> ProjectContext:
        """Context of a JavaScript project that already depends on knip."""
        return ProjectContext(
            root=project,
            languages=Languages(javascript=True),
            dependencies={"knip": "^5.0.0"},
        )

    @pytest.fixture
    def schema(self, make_schema: SchemaFactory) -> Schema:
        """Schema requiring two packages for JavaScript projects."""
        return make_schema(packages=PackageSpec(requires="javascript", base=["eslint", "knip"]))

    def test_installs_missing_packages(self, js_context: ProjectContext, schema: Schema) -> None:
        """Only packages not already present are installed, as dev dependencies."""
        operator = MagicMock(spec=PackageOperator)
        operator.install.return_value = [_ok("eslint")]

        result = reconcile(Operation.INSTALL, schema, js_context, package_manager=operator, package_timeout=30.0)

        operator.install.assert_called_once_with(["eslint"], dev=True, timeout=30.0)
        assert result.packages_installed == ["eslint"]
        assert result.packages_confirmed
        assert StateManager(js_context.root).load().packages == {"eslint"}

    def test_failure_is_recorded_but_version_written(self, js_context: ProjectContext, schema: Schema) -> None:
        """Package failures are errors but do not block the version marker."""
        operator = MagicMock(spec=PackageOperator)
        operator.install.return_value = [
            PackageResult(PackageAction(PackageChange.INSTALL, "eslint", NodeClient.NPM), error="timed out")
        ]

        result = reconcile(Operation.INSTALL, schema, js_context, package_manager=operator)

        assert not result.packages_confirmed
        assert [(e.path, e.kind) for e in result.errors] == [("eslint", ErrorKind.PACKAGE)]
        assert result.applied

    def test_without_operator_packages_are_pending(self, js_context: ProjectContext, schema: Schema) -> None:
        """With no package manager the needed packages are listed as pending."""
        result = reconcile(Operation.INSTALL, schema, js_context)

        assert result.packages_pending == ["eslint"]
        assert result.packages_installed == []

    def test_not_required_outside_javascript(self, context: ProjectContext, schema: Schema) -> None:
        """The gate predicate disables the whole package set."""
        operator = MagicMock(spec=PackageOperator)

        result = reconcile(Operation.INSTALL, schema, context, package_manager=operator)

        operator.install.assert_not_called()
        assert result.packages_pending == []

    def test_uninstall_removes_installed_packages(
        self, project: Path, js_context: ProjectContext, schema: Schema
    ) -> None:
        """Uninstall removes only packages railctl installed and that are still present."""
        operator = MagicMock(spec=PackageOperator)
        operator.install.return_value = [_ok("eslint")]
        reconcile(Operation.INSTALL, schema, js_context, package_manager=operator)

        after_install = ProjectContext(
            root=project,
            languages=Languages(javascript=True),
            dependencies={"knip": "^5.0.0", "eslint": "^9.0.0"},
        )
        operator.remove.return_value = [_ok("eslint", PackageChange.REMOVE)]

        result = reconcile(Operation.UNINSTALL, schema, after_install, package_manager=operator)

        operator.remove.assert_called_once_with(["eslint"], timeout=None)
        assert result.packages_removed == ["eslint"]

    def test_upgrade_removes_deprecated_packages(self, js_context: ProjectContext, make_schema: SchemaFactory) -> None:
        """Deprecated packages present in the project are removed on upgrade."""
        schema = make_schema(
            packages=PackageSpec(requires="javascript", base=["knip"]),
            deprecated_packages=["knip-legacy"],
        )
        context = ProjectContext(
            root=js_context.root,
            languages=Languages(javascript=True),
            dependencies={"knip": "^5.0.0", "knip-legacy": "^1.0.0"},
        )
        operator = MagicMock(spec=PackageOperator)
        operator.remove.return_value = [_ok("knip-legacy", PackageChange.REMOVE)]

        result = reconcile(Operation.UPGRADE, schema, context, package_manager=operator)

        operator.install.assert_not_called()
        assert result.packages_removed == ["knip-legacy"]


class TestCache:
    """Tests for the caller-owned reconcile cache."""

    def test_cache_is_filled_per_call(self, context: ProjectContext, make_schema: SchemaFactory) -> None:
        """A caller-supplied cache collects resolved outcomes."""
        cache = ReconcileCache()

        reconcile(Operation.INSTALL, make_schema(), context, dry_run=True, cache=cache)

        assert any(key[1] == ".tool/GUIDE.md" for key in cache.outcomes)

    def test_calls_without_cache_do_not_share_outcomes(self, project: Path, make_schema: SchemaFactory) -> None:
        """Generators see each call's own context."""

        def by_language(ctx: ProjectContext) -> FileOutcome:
            return Content("py\n" if ctx.languages.python else "plain\n")

        schema = make_schema(owned_files={".tool/lang.txt": GeneratedFile(by_language)})

        reconcile(Operation.INSTALL, schema, ProjectContext(root=project))
        reconcile(Operation.UPGRADE, schema, ProjectContext(root=project, languages=Languages(python=True)))

        assert (project / ".tool/lang.txt").read_text() == "py\n"
