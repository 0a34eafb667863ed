"""Go project detector."""

import logging

from railctl.scanners.base import Detection, Detector

logger = logging.getLogger(__name__)

GOLANGCI_CONFIG_FILES = (".golangci.yml", ".golangci.yaml", ".golangci.toml", ".golangci.json")


def parse_go_mod(text: str) -> dict[str, str]:
    """Extract required modules from go.mod content.

    Handles both single-line ``require x v1`` and block ``require ( ... )``
    forms. Comments and indirect markers are dropped.

    Args:
        text: Content of a go.mod file.

    Returns:
        Mapping of module path to version.
    """
    requires: dict[str, str] = {}
    in_block = False
    for raw in text.splitlines():
        line = raw.split("//", 1)[0].strip()
        if not line:
            continue
        if in_block:
            if line == ")":
                in_block = False
                continue
            parts = line.split()
        elif line.startswith("require"):
            rest = line[len("require") :].strip()
            if rest == "(":
                in_block = True
                continue
            parts = rest.split()
        else:
            continue
        if len(parts) >= 2:
            requires[parts[0]] = parts[1]
    return requires


class GolangDetector(Detector):
    """Detector for Go modules."""

    @property
    def name(self) -> str:
        return "golang"

    def is_present(self) -> bool:
        return (self.root / "go.mod").is_file()

    def detect(self) -> Detection:
        detection = Detection(languages={"golang"})
        try:
            detection.dependencies.update(parse_go_mod((self.root / "go.mod").read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable go.mod: %s", e)
        if self.has_any(GOLANGCI_CONFIG_FILES):
            detection.tooling.add("golangci_config")
        return detection
