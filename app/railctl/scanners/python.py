"""Python project detector.

Reads pyproject.toml for dependencies and tool configuration, and looks
at the directory layout to find the root package and architecture layers.
"""

import logging
import re
import tomllib
from pathlib import Path
from typing import Any

from railctl.scanners.base import Detection, Detector

logger = logging.getLogger(__name__)

PYTHON_MARKERS = ("pyproject.toml", "setup.py", "setup.cfg", "requirements.txt")

RUFF_CONFIG_FILES = ("ruff.toml", ".ruff.toml")
MYPY_CONFIG_FILES = ("mypy.ini", ".mypy.ini")

# Layer name -> directory names that indicate it, in dependency order
PYTHON_LAYERS: dict[str, tuple[str, ...]] = {
    "domain": ("domain", "models", "entities", "core"),
    "services": ("services", "usecases", "application"),
    "infra": ("infra", "infrastructure", "adapters", "repositories"),
    "api": ("api", "routes", "handlers", "views", "controllers"),
}

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def parse_requirement(requirement: str) -> tuple[str, str] | None:
    """Split a PEP 508 requirement into name and version specifier.

    Args:
        requirement: Requirement string, e.g. "pydantic>=2.0".

    Returns:
        (name, specifier) tuple, or None if no name could be read.
    """
    match = _REQUIREMENT_NAME.match(requirement)
    if not match:
        return None
    name = match.group(1)
    rest = requirement[match.end() :].split(";", 1)[0].strip()
    return name.lower(), rest


def read_pyproject(path: Path) -> dict[str, Any]:
    """Read pyproject.toml, degrading to an empty document."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable %s: %s", path, e)
        return {}


def _requirements(entries: object) -> dict[str, str]:
    found: dict[str, str] = {}
    if not isinstance(entries, list):
        return found
    for entry in entries:
        if not isinstance(entry, str):
            continue
        parsed = parse_requirement(entry)
        if parsed is not None:
            found[parsed[0]] = parsed[1]
    return found


class PythonDetector(Detector):
    """Detector for Python projects."""

    @property
    def name(self) -> str:
        return "python"

    def is_present(self) -> bool:
        return any((self.root / marker).is_file() for marker in PYTHON_MARKERS)

    def detect(self) -> Detection:
        pyproject = read_pyproject(self.root / "pyproject.toml")
        project = pyproject.get("project", {})
        if not isinstance(project, dict):
            project = {}
        tool = pyproject.get("tool", {})
        if not isinstance(tool, dict):
            tool = {}

        detection = Detection(languages={"python"})
        detection.dependencies.update(_requirements(project.get("dependencies")))

        dev: dict[str, str] = {}
        optional = project.get("optional-dependencies", {})
        if isinstance(optional, dict):
            for group in ("dev", "test"):
                dev.update(_requirements(optional.get(group)))
        groups = pyproject.get("dependency-groups", {})
        if isinstance(groups, dict):
            dev.update(_requirements(groups.get("dev")))
        detection.dependencies.update(dev)
        detection.dev_dependencies.update(dev)

        if self.has_any(RUFF_CONFIG_FILES) or "ruff" in tool:
            detection.tooling.add("ruff_config")
        if self.has_any(MYPY_CONFIG_FILES) or "mypy" in tool:
            detection.tooling.add("mypy_config")

        detection.python_package = self._root_package(project)
        detection.python_layers = self._layers()
        return detection

    def _root_package(self, project: dict[str, Any]) -> str:
        """Importable name of the project's root package."""
        name = project.get("name")
        if isinstance(name, str) and name:
            return name.replace("-", "_").lower()
        if (self.root / "src").is_dir():
            return "src"
        return self.root.name.replace("-", "_")

    def _layers(self) -> tuple[str, ...]:
        """Detect architecture layers at the root or under src/."""
        found: list[str] = []
        for layer, candidates in PYTHON_LAYERS.items():
            for candidate in candidates:
                if (self.root / candidate).is_dir() or (self.root / "src" / candidate).is_dir():
                    found.append(layer)
                    break
        return tuple(found)
