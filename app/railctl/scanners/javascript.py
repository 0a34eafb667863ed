"""JavaScript/TypeScript project detector.

Reads package.json at the root plus any workspace packages and reports
dependencies, frameworks and pre-existing lint/format tooling.
"""

import json
import logging
from pathlib import Path
from typing import Any

from railctl.scanners.base import Detection, Detector

logger = logging.getLogger(__name__)

ESLINT_CONFIG_FILES = (
    "eslint.config.js",
    "eslint.config.mjs",
    "eslint.config.cjs",
    "eslint.config.ts",
    "eslint.config.mts",
)

LEGACY_ESLINT_CONFIG_FILES = (
    ".eslintrc",
    ".eslintrc.js",
    ".eslintrc.cjs",
    ".eslintrc.json",
    ".eslintrc.yml",
    ".eslintrc.yaml",
)

PRETTIER_CONFIG_FILES = (
    ".prettierrc",
    ".prettierrc.json",
    ".prettierrc.yml",
    ".prettierrc.yaml",
    ".prettierrc.js",
    ".prettierrc.cjs",
    ".prettierrc.mjs",
    "prettier.config.js",
    "prettier.config.cjs",
    "prettier.config.mjs",
)

BIOME_CONFIG_FILES = ("biome.json", "biome.jsonc")

DEPENDENCY_CRUISER_CONFIG_FILES = (
    ".dependency-cruiser.js",
    ".dependency-cruiser.cjs",
    ".dependency-cruiser.mjs",
    ".dependency-cruiser.json",
)

# Non-Prettier formatters; Prettier is the default and does not count
ALTERNATIVE_FORMATTER_FILES = (
    *BIOME_CONFIG_FILES,
    "rome.json",
    "dprint.json",
    ".dprint.json",
    "dprint.jsonc",
    ".dprint.jsonc",
)

TAILWIND_PACKAGES = ("tailwindcss", "@tailwindcss/vite", "@tailwindcss/postcss")
PLAYWRIGHT_PACKAGES = ("@playwright/test", "playwright")

# Monorepo layouts scanned even without a workspaces declaration
COMMON_WORKSPACE_PATTERNS = ("apps/*", "packages/*")

# Layer name -> directory names that indicate it, lowest layer first
JS_LAYERS: dict[str, tuple[str, ...]] = {
    "types": ("types", "interfaces", "schemas"),
    "utils": ("utils", "helpers", "shared", "common", "core"),
    "lib": ("lib", "libraries"),
    "hooks": ("hooks", "composables"),
    "services": ("services", "api", "stores", "state"),
    "components": ("components", "ui"),
    "features": ("features", "modules", "domains"),
    "app": ("app", "pages", "views", "routes", "commands"),
}

# The lint script railctl itself adds; its presence is not a pre-existing linter
DEFAULT_LINT_COMMAND = "eslint ."


def read_package_json(path: Path) -> dict[str, Any]:
    """Read a package.json file, degrading to an empty document.

    Args:
        path: Path to package.json.

    Returns:
        Parsed object, or an empty dict if missing or malformed.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top level is not an object", path)
        return {}
    return data


def _string_map(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


class JavaScriptDetector(Detector):
    """Detector for package.json based projects."""

    @property
    def name(self) -> str:
        return "javascript"

    def is_present(self) -> bool:
        return (self.root / "package.json").is_file()

    def _workspace_patterns(self, package: dict[str, Any]) -> list[str]:
        workspaces = package.get("workspaces")
        if isinstance(workspaces, dict):
            workspaces = workspaces.get("packages")
        patterns = [p for p in workspaces if isinstance(p, str)] if isinstance(workspaces, list) else []
        for pattern in COMMON_WORKSPACE_PATTERNS:
            if pattern not in patterns:
                patterns.append(pattern)
        return patterns

    def _workspace_manifests(self, package: dict[str, Any]) -> list[Path]:
        """Find package.json files of workspace packages.

        Only ``dir/*`` patterns are expanded; other glob shapes are ignored.
        """
        manifests: list[Path] = []
        for pattern in self._workspace_patterns(package):
            if not pattern.endswith("/*"):
                continue
            base = self.root / pattern[:-2]
            if not base.is_dir():
                continue
            try:
                children = sorted(base.iterdir())
            except OSError as e:
                logger.warning("Cannot list workspace directory %s: %s", base, e)
                continue
            for child in children:
                manifest = child / "package.json"
                if child.is_dir() and manifest.is_file():
                    manifests.append(manifest)
        return manifests

    def detect(self) -> Detection:
        package = read_package_json(self.root / "package.json")
        detection = Detection(languages={"javascript"})
        workspace_manifests = self._workspace_manifests(package)

        for manifest in [self.root / "package.json", *workspace_manifests]:
            data = package if manifest == self.root / "package.json" else read_package_json(manifest)
            deps = _string_map(data.get("dependencies"))
            dev_deps = _string_map(data.get("devDependencies"))
            detection.dependencies.update(deps)
            detection.dependencies.update(dev_deps)
            detection.dev_dependencies.update(dev_deps)

        detection.frameworks = self._frameworks(package, detection.dependencies)
        detection.tooling = self._tooling(package)

        packages = [manifest.parent.relative_to(self.root).as_posix() for manifest in workspace_manifests]
        detection.js_layers = self._layers(packages)
        detection.js_workspaces = tuple(sorted({package_dir.split("/")[0] for package_dir in packages}))
        return detection

    def _layers(self, packages: list[str]) -> tuple[tuple[str, str], ...]:
        """Detect architecture layers in workspace packages and at the root.

        Each base directory is searched under ``src/`` first, then at its
        top level; a layer is reported at most once per base.

        Returns:
            (layer, project-relative directory) pairs.
        """
        found: list[tuple[str, str]] = []
        for base in [*packages, ""]:
            prefix = f"{base}/" if base else ""
            for layer, candidates in JS_LAYERS.items():
                for search in (f"{prefix}src/", prefix):
                    directory = next((f"{search}{c}" for c in candidates if (self.root / search / c).is_dir()), None)
                    if directory is not None:
                        found.append((layer, directory))
                        break
        return tuple(found)

    def _frameworks(self, package: dict[str, Any], deps: dict[str, str]) -> set[str]:
        found: set[str] = set()
        if "typescript" in deps or "typescript-eslint" in deps:
            found.add("typescript")
        if "next" in deps:
            found.update({"nextjs", "react"})
        if "react" in deps:
            found.add("react")
        if "astro" in deps:
            found.add("astro")
        if any(pkg in deps for pkg in TAILWIND_PACKAGES):
            found.add("tailwind")
        if any(pkg in deps for pkg in PLAYWRIGHT_PACKAGES):
            found.add("playwright")
        if "vitest" in deps:
            found.add("vitest")
        if not package.get("private") and any(key in package for key in ("main", "exports", "bin", "module")):
            found.add("publishable_library")
        return found

    def _tooling(self, package: dict[str, Any]) -> set[str]:
        found: set[str] = set()
        if self.has_any(ESLINT_CONFIG_FILES):
            found.add("eslint_config")
        if self.has_any(LEGACY_ESLINT_CONFIG_FILES):
            found.add("legacy_eslint_config")
        if self.has_any(PRETTIER_CONFIG_FILES):
            found.add("prettier_config")
        if self.has_any(BIOME_CONFIG_FILES):
            found.add("biome_config")
        if self.has_any(ALTERNATIVE_FORMATTER_FILES):
            found.add("formatter")
        if self.has_any(DEPENDENCY_CRUISER_CONFIG_FILES):
            found.add("dependency_cruiser_config")

        scripts = _string_map(package.get("scripts"))
        lint = scripts.get("lint")
        if lint is not None and lint.strip() != DEFAULT_LINT_COMMAND:
            found.add("linter")
        return found
