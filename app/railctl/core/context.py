"""Project context provider.

Builds the immutable ProjectContext snapshot that every generator and the
reconciliation engine consult. Detection itself lives in railctl.scanners;
this module folds the detector results together and exposes the named
predicates schemas may refer to.
"""

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType

from railctl.core.state import StateError, StateManager
from railctl.scanners import get_detectors
from railctl.scanners.base import Detection

logger = logging.getLogger(__name__)


class ContextBuildError(Exception):
    """Raised when the project root cannot be inspected at all."""


@dataclass(frozen=True, slots=True)
class Languages:
    """Language ecosystems detected in the project."""

    javascript: bool = False
    python: bool = False
    golang: bool = False
    rust: bool = False


@dataclass(frozen=True, slots=True)
class ExistingTooling:
    """Pre-existing tooling that railctl must not overwrite.

    Attributes:
        linter: The project already lints with something other than a bare ESLint run.
        formatter: A non-Prettier formatter (Biome, dprint, Rome) is configured.
        eslint_config: A flat ESLint config file exists.
        legacy_eslint_config: An ``.eslintrc*`` file exists.
        prettier_config: A Prettier config file exists.
        biome_config: ``biome.json`` or ``biome.jsonc`` exists.
        dependency_cruiser_config: A ``.dependency-cruiser.*`` config exists.
        ruff_config: Ruff is configured (``ruff.toml`` or ``[tool.ruff]``).
        mypy_config: mypy is configured (``mypy.ini`` or ``[tool.mypy]``).
        golangci_config: A golangci-lint config file exists.
    """

    linter: bool = False
    formatter: bool = False
    eslint_config: bool = False
    legacy_eslint_config: bool = False
    prettier_config: bool = False
    biome_config: bool = False
    dependency_cruiser_config: bool = False
    ruff_config: bool = False
    mypy_config: bool = False
    golangci_config: bool = False


@dataclass(frozen=True, slots=True)
class Frameworks:
    """Frameworks and project traits that tune generated configuration."""

    typescript: bool = False
    react: bool = False
    nextjs: bool = False
    astro: bool = False
    tailwind: bool = False
    playwright: bool = False
    vitest: bool = False
    shell: bool = False
    publishable_library: bool = False


@dataclass(frozen=True, slots=True)
class ProjectContext:
    """Immutable snapshot of detected facts about a project.

    Built once per command invocation by build_context() and never
    mutated afterwards.

    Attributes:
        root: Absolute path of the project root.
        languages: Detected language ecosystems.
        tooling: Pre-existing user tooling.
        frameworks: Detected frameworks and traits.
        dependencies: Package name to version, root plus workspace packages.
        dev_dependencies: The subset declared as development dependencies.
        is_version_controlled: True if the root is a git work tree.
        python_package: Importable root package name of a Python project.
        python_layers: Architecture layers found in a Python project, in
            dependency order.
        js_layers: (layer, directory) pairs found in a JavaScript project,
            root and workspace packages.
        js_workspaces: Top-level directories holding workspace packages,
            e.g. ``packages`` and ``apps``.
    """

    root: Path
    languages: Languages = field(default_factory=Languages)
    tooling: ExistingTooling = field(default_factory=ExistingTooling)
    frameworks: Frameworks = field(default_factory=Frameworks)
    dependencies: Mapping[str, str] = field(default_factory=dict)
    dev_dependencies: Mapping[str, str] = field(default_factory=dict)
    is_version_controlled: bool = False
    python_package: str | None = None
    python_layers: tuple[str, ...] = ()
    js_layers: tuple[tuple[str, str], ...] = ()
    js_workspaces: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Freeze the dependency mappings."""
        object.__setattr__(self, "dependencies", MappingProxyType(dict(self.dependencies)))
        object.__setattr__(self, "dev_dependencies", MappingProxyType(dict(self.dev_dependencies)))

    def has(self, predicate: str) -> bool:
        """Evaluate a named predicate against this context.

        Args:
            predicate: Predicate name (see PREDICATES).

        Returns:
            True if the predicate holds.

        Raises:
            KeyError: If the predicate name is unknown.
        """
        try:
            check = PREDICATES[predicate]
        except KeyError:
            msg = f"Unknown predicate: {predicate}"
            raise KeyError(msg) from None
        return check(self)


def _flag(group: str, name: str) -> Callable[[ProjectContext], bool]:
    return lambda ctx: bool(getattr(getattr(ctx, group), name))


def _build_predicates() -> dict[str, Callable[[ProjectContext], bool]]:
    predicates: dict[str, Callable[[ProjectContext], bool]] = {}
    for f in fields(Languages):
        predicates[f.name] = _flag("languages", f.name)
    for f in fields(Frameworks):
        predicates[f.name] = _flag("frameworks", f.name)
    for f in fields(ExistingTooling):
        predicates[f"existing_{f.name}"] = _flag("tooling", f.name)
    predicates["standard"] = lambda ctx: not ctx.tooling.formatter
    predicates["legacy_eslint"] = lambda ctx: ctx.tooling.legacy_eslint_config
    predicates["test_framework"] = lambda ctx: ctx.frameworks.playwright or ctx.frameworks.vitest
    predicates["git"] = lambda ctx: ctx.is_version_controlled
    return predicates


# Named predicates usable in schema conditionals
PREDICATES: Mapping[str, Callable[[ProjectContext], bool]] = MappingProxyType(_build_predicates())


def _fold(root: Path, detections: list[Detection], is_git: bool) -> ProjectContext:
    """Combine detector results into a single context."""
    languages: set[str] = set()
    tooling: set[str] = set()
    frameworks: set[str] = set()
    dependencies: dict[str, str] = {}
    dev_dependencies: dict[str, str] = {}
    python_package: str | None = None
    python_layers: tuple[str, ...] = ()
    js_layers: tuple[tuple[str, str], ...] = ()
    js_workspaces: tuple[str, ...] = ()

    for detection in detections:
        languages |= detection.languages
        tooling |= detection.tooling
        frameworks |= detection.frameworks
        dependencies.update(detection.dependencies)
        dev_dependencies.update(detection.dev_dependencies)
        if detection.python_package is not None:
            python_package = detection.python_package
        if detection.python_layers:
            python_layers = detection.python_layers
        if detection.js_layers:
            js_layers = detection.js_layers
        if detection.js_workspaces:
            js_workspaces = detection.js_workspaces

    return ProjectContext(
        root=root,
        languages=Languages(**{name: True for name in languages}),
        tooling=ExistingTooling(**{name: True for name in tooling}),
        frameworks=Frameworks(**{name: True for name in frameworks}),
        dependencies=dependencies,
        dev_dependencies=dev_dependencies,
        is_version_controlled=is_git,
        python_package=python_package,
        python_layers=python_layers,
        js_layers=js_layers,
        js_workspaces=js_workspaces,
    )


def _managed_paths(root: Path) -> frozenset[str]:
    """Config files railctl itself manages in this project.

    These are excluded from "pre-existing tooling" detection so that a
    second run does not mistake railctl's own output for user config.
    """
    try:
        state = StateManager(root).load()
    except StateError as e:
        logger.warning("Ignoring unreadable install state: %s", e)
        return frozenset()
    return frozenset(state.checksums)


def build_context(root: Path) -> ProjectContext:
    """Inspect a project directory and build its context.

    Missing or malformed manifests degrade to "unknown/false"; only an
    unusable root directory is an error.

    Args:
        root: Project root directory.

    Returns:
        Immutable ProjectContext for the project.

    Raises:
        ContextBuildError: If root does not exist, is not a directory, or
            cannot be read.
    """
    root = root.expanduser().resolve()
    if not root.exists():
        msg = f"Project directory not found: {root}"
        raise ContextBuildError(msg)
    if not root.is_dir():
        msg = f"Not a directory: {root}"
        raise ContextBuildError(msg)
    if not os.access(root, os.R_OK | os.X_OK):
        msg = f"Project directory is not readable: {root}"
        raise ContextBuildError(msg)

    ignore = _managed_paths(root)
    detections: list[Detection] = []
    for detector in get_detectors(root, ignore):
        if not detector.is_present():
            continue
        logger.debug("Running %s detector", detector.name)
        detections.append(detector.detect())

    context = _fold(root, detections, is_git=(root / ".git").exists())
    logger.debug("Built context for %s: %s", root, context)
    return context
