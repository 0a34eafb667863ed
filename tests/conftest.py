"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from railctl.core.context import ProjectContext
from railctl.models.schema import (
    Content,
    FileOutcome,
    GeneratedFile,
    JsonMergeDefinition,
    PatchOperation,
    Schema,
    StaticContent,
    TextPatchDefinition,
)

AGENTS_BLOCK = "Read .tool/GUIDE.md first.\n\n"

SchemaFactory = Callable[..., Schema]
Snapshot = Callable[[Path], dict[str, bytes | None]]


def _snapshot(root: Path) -> dict[str, bytes | None]:
    state: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        state[rel] = None if path.is_dir() else path.read_bytes()
    return state


def merge_settings(doc: dict[str, Any], ctx: ProjectContext) -> dict[str, Any]:
    """Add the tool's settings keys."""
    doc["tool"] = {"enabled": True}
    doc.setdefault("hooks", {})["stop"] = "tool-stop"
    return doc


def unmerge_settings(doc: dict[str, Any], ctx: ProjectContext) -> dict[str, Any]:
    """Remove the tool's settings keys."""
    doc.pop("tool", None)
    hooks = doc.get("hooks")
    if isinstance(hooks, dict):
        hooks.pop("stop", None)
    return doc


def lint_config(ctx: ProjectContext) -> FileOutcome:
    """Managed lint config shared by every test project."""
    return Content("max-line = 100\n")


def _make_schema(version: str = "1.0.0", **overrides: Any) -> Schema:
    data: dict[str, Any] = {
        "version": version,
        "owned_directories": [".tool", ".tool/hooks"],
        "shared_directories": [".agents"],
        "preserved_directories": [".tool/notes"],
        "owned_files": {
            ".tool/GUIDE.md": StaticContent(f"guide {version}\n"),
            ".tool/hooks/check.sh": StaticContent("#!/bin/sh\nexit 0\n"),
        },
        "managed_files": {
            "lint.toml": GeneratedFile(lint_config),
        },
        "json_merges": {
            "settings.json": JsonMergeDefinition(
                keys=("tool", "hooks.stop"),
                merge=merge_settings,
                unmerge=unmerge_settings,
            ),
        },
        "text_patches": {
            "AGENTS.md": TextPatchDefinition(
                operation=PatchOperation.PREPEND,
                content=AGENTS_BLOCK,
                marker=".tool/GUIDE.md",
                create_if_missing=True,
            ),
        },
    }
    data.update(overrides)
    return Schema(**data)


@pytest.fixture
def make_schema() -> SchemaFactory:
    """Factory for a small schema exercising every category.

    Keyword overrides replace whole categories.
    """
    return _make_schema


@pytest.fixture
def snapshot() -> Snapshot:
    """Function capturing every file (with content) and directory below a root."""
    return _snapshot


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def context(project: Path) -> ProjectContext:
    """A context for the empty project with nothing detected."""
    return ProjectContext(root=project)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point railctl's user configuration at an empty temporary directory."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("RAILCTL_CONFIG", str(config_home / "railctl" / "config.toml"))
    return config_home / "railctl"
