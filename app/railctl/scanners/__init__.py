"""Project detectors.

Each detector inspects one ecosystem; build_context() runs them in the
order returned by get_detectors() and folds their results.
"""

from pathlib import Path

from railctl.scanners.base import Detection, Detector
from railctl.scanners.golang import GolangDetector
from railctl.scanners.javascript import JavaScriptDetector
from railctl.scanners.python import PythonDetector
from railctl.scanners.rust import RustDetector
from railctl.scanners.shell import ShellDetector

__all__ = [
    "Detection",
    "Detector",
    "GolangDetector",
    "JavaScriptDetector",
    "PythonDetector",
    "RustDetector",
    "ShellDetector",
    "get_detectors",
]


def get_detectors(root: Path, ignore: frozenset[str] = frozenset()) -> list[Detector]:
    """Get all detectors for a project root, in folding order.

    Args:
        root: Project root directory.
        ignore: Project-relative paths managed by railctl.

    Returns:
        List of detector instances.
    """
    return [
        JavaScriptDetector(root, ignore),
        PythonDetector(root, ignore),
        GolangDetector(root, ignore),
        RustDetector(root, ignore),
        ShellDetector(root, ignore),
    ]
