"""Rust project detector."""

import logging
import tomllib

from railctl.scanners.base import Detection, Detector

logger = logging.getLogger(__name__)


def _crate_versions(table: object) -> dict[str, str]:
    """Read a Cargo dependency table into name -> version."""
    if not isinstance(table, dict):
        return {}
    versions: dict[str, str] = {}
    for name, spec in table.items():
        if isinstance(spec, str):
            versions[name] = spec
        elif isinstance(spec, dict):
            versions[name] = str(spec.get("version", "*"))
    return versions


class RustDetector(Detector):
    """Detector for Cargo projects."""

    @property
    def name(self) -> str:
        return "rust"

    def is_present(self) -> bool:
        return (self.root / "Cargo.toml").is_file()

    def detect(self) -> Detection:
        detection = Detection(languages={"rust"})
        try:
            with open(self.root / "Cargo.toml", "rb") as f:
                cargo = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Ignoring unreadable Cargo.toml: %s", e)
            return detection

        dev = _crate_versions(cargo.get("dev-dependencies"))
        detection.dependencies.update(_crate_versions(cargo.get("dependencies")))
        detection.dependencies.update(dev)
        detection.dev_dependencies.update(dev)
        return detection
