"""Abstract base class for project detectors.

This module defines the Detector interface that every ecosystem
detector must implement, and the partial Detection result they return.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True)
class Detection:
    """Partial facts reported by a single detector.

    Set-valued attributes hold the names of the ProjectContext flags that
    are true (e.g. ``{"typescript", "react"}`` for frameworks).
    """

    languages: set[str] = field(default_factory=set)
    tooling: set[str] = field(default_factory=set)
    frameworks: set[str] = field(default_factory=set)
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    python_package: str | None = None
    python_layers: tuple[str, ...] = ()
    js_layers: tuple[tuple[str, str], ...] = ()
    js_workspaces: tuple[str, ...] = ()


class Detector(ABC):
    """Abstract base class for all project detectors.

    Detectors inspect the filesystem of a project root and report what
    they find. They never write and never raise for a malformed manifest;
    they log a warning and report less.

    Example:
        >>> detector = JavaScriptDetector(Path("."))
        >>> if detector.is_present():
        ...     detection = detector.detect()
    """

    def __init__(self, root: Path, ignore: frozenset[str] = frozenset()) -> None:
        """Initialize the detector.

        Args:
            root: Project root directory.
            ignore: Project-relative paths managed by railctl itself; these
                never count as pre-existing user tooling.
        """
        self.root = root
        self.ignore = ignore

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a short name for log output."""

    @abstractmethod
    def is_present(self) -> bool:
        """Check if this ecosystem is present in the project.

        Returns:
            True if detect() has something to report.
        """

    @abstractmethod
    def detect(self) -> Detection:
        """Inspect the project.

        Returns:
            Detection with whatever this detector could determine.
        """

    def has_file(self, relative: str) -> bool:
        """Check for a user-owned file at a project-relative path."""
        return relative not in self.ignore and (self.root / relative).is_file()

    def has_any(self, candidates: tuple[str, ...]) -> bool:
        """Check whether any of the candidate files exists."""
        return any(self.has_file(candidate) for candidate in candidates)
