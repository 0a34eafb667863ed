"""Shell script detector.

Reports the ``shell`` trait when the project keeps shell scripts at the
root or in ``scripts/``. Deeper trees are not searched.
"""

import logging

from railctl.scanners.base import Detection, Detector

logger = logging.getLogger(__name__)

SCRIPT_DIRS = ("", "scripts")


class ShellDetector(Detector):
    """Detector for projects that ship shell scripts."""

    @property
    def name(self) -> str:
        return "shell"

    def is_present(self) -> bool:
        for subdir in SCRIPT_DIRS:
            directory = self.root / subdir if subdir else self.root
            try:
                scripts = sorted(directory.glob("*.sh"))
            except OSError as e:
                logger.warning("Cannot list %s: %s", directory, e)
                continue
            for script in scripts:
                if self.has_file(script.relative_to(self.root).as_posix()):
                    return True
        return False

    def detect(self) -> Detection:
        return Detection(frameworks={"shell"})
