"""Install state kept inside a managed project.

railctl persists two files under the project's ``.railctl/`` directory:

- ``version``: a single line with the schema version last applied.
- ``state.json``: checksums of the owned and managed files railctl wrote,
  and the directories, files and packages it brought into existence.

Both are written atomically (temporary file in the same directory, then
``os.replace``).
"""

import hashlib
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from railctl.core.paths import OWNED_DIR, get_state_path, get_version_marker_path

logger = logging.getLogger(__name__)


class StateError(Exception):
    """Raised when install state cannot be read or written."""


def content_checksum(content: bytes | str) -> str:
    """Compute the sha256 hex digest used to fingerprint file content.

    Args:
        content: File content; text is encoded as UTF-8.

    Returns:
        Hex digest string.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha256(content).hexdigest()


def write_atomic(path: Path, content: str) -> None:
    """Write text to a file atomically.

    Args:
        path: Destination path. Its parent must exist.
        content: Text to write (UTF-8).

    Raises:
        OSError: If the file cannot be written.
    """
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(content.encode("utf-8"))
        os.replace(str(tmp_path), str(path))
    except OSError:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


@dataclass(slots=True)
class InstallState:
    """What railctl knows about its previous passes over a project.

    Attributes:
        version: Schema version last applied, or None if never installed.
        checksums: Project-relative path -> sha256 of the content railctl
            last wrote (or confirmed) for owned and managed files.
        created_dirs: Directories railctl created.
        created_files: Merge/patch targets railctl created from scratch.
        created_keys: JSON merge target -> dot-paths of objects railctl
            added to a file it did not create.
        packages: Packages railctl installed.
    """

    version: str | None = None
    checksums: dict[str, str] = field(default_factory=dict)
    created_dirs: set[str] = field(default_factory=set)
    created_files: set[str] = field(default_factory=set)
    created_keys: dict[str, set[str]] = field(default_factory=dict)
    packages: set[str] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the state.json document (version lives elsewhere)."""
        return {
            "checksums": dict(sorted(self.checksums.items())),
            "created_dirs": sorted(self.created_dirs),
            "created_files": sorted(self.created_files),
            "created_keys": {rel: sorted(paths) for rel, paths in sorted(self.created_keys.items()) if paths},
            "packages": sorted(self.packages),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], version: str | None = None) -> "InstallState":
        """Deserialize a state.json document.

        Raises:
            ValueError: If the document has the wrong shape.
        """
        checksums = data.get("checksums", {})
        if not isinstance(checksums, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in checksums.items()
        ):
            msg = "checksums must be a mapping of path to digest"
            raise ValueError(msg)

        def _strings(key: str) -> set[str]:
            value = data.get(key, [])
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                msg = f"{key} must be a list of strings"
                raise ValueError(msg)
            return set(value)

        created_keys = data.get("created_keys", {})
        if not isinstance(created_keys, dict) or not all(
            isinstance(paths, list) and all(isinstance(p, str) for p in paths) for paths in created_keys.values()
        ):
            msg = "created_keys must be a mapping of path to a list of keys"
            raise ValueError(msg)

        return cls(
            version=version,
            checksums=dict(checksums),
            created_dirs=_strings("created_dirs"),
            created_files=_strings("created_files"),
            created_keys={str(rel): set(paths) for rel, paths in created_keys.items()},
            packages=_strings("packages"),
        )


class StateManager:
    """Reads and writes the install state of one project.

    Storage location: <root>/.railctl/version and <root>/.railctl/state.json

    Attributes:
        root: Project root directory.
    """

    def __init__(self, root: Path) -> None:
        """Initialize StateManager.

        Args:
            root: Project root directory.
        """
        self.root = root

    @property
    def version_path(self) -> Path:
        """Path to the version marker file."""
        return get_version_marker_path(self.root)

    @property
    def state_path(self) -> Path:
        """Path to state.json."""
        return get_state_path(self.root)

    def read_version(self) -> str | None:
        """Read the recorded schema version.

        Returns:
            Version string, or None if no marker exists (never installed).

        Raises:
            StateError: If the marker exists but cannot be read.
        """
        try:
            text = self.version_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            msg = f"Failed to read version marker: {e}"
            raise StateError(msg) from e
        version = text.strip()
        return version or None

    def load(self) -> InstallState:
        """Load install state.

        A missing state.json yields an empty state. A corrupt one is logged
        and treated as empty, which makes railctl conservative (it will
        treat every managed file as possibly customized).

        Returns:
            InstallState with the recorded version.

        Raises:
            StateError: If a state file exists but cannot be read.
        """
        version = self.read_version()
        try:
            raw = self.state_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return InstallState(version=version)
        except OSError as e:
            msg = f"Failed to read install state: {e}"
            raise StateError(msg) from e

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                msg = "top level must be an object"
                raise ValueError(msg)
            return InstallState.from_dict(data, version=version)
        except ValueError as e:
            logger.warning("Ignoring corrupt install state %s: %s", self.state_path, e)
            return InstallState(version=version)

    def _ensure_dir(self) -> None:
        try:
            (self.root / OWNED_DIR).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Failed to create {OWNED_DIR}: {e}"
            raise StateError(msg) from e

    def save(self, state: InstallState) -> None:
        """Persist checksums and created-path records.

        Raises:
            StateError: If the file cannot be written.
        """
        self._ensure_dir()
        try:
            write_atomic(self.state_path, json.dumps(state.to_dict(), indent=2) + "\n")
        except OSError as e:
            msg = f"Failed to write install state: {e}"
            raise StateError(msg) from e
        logger.debug("Saved install state to %s", self.state_path)

    def write_version(self, version: str) -> None:
        """Record the applied schema version.

        Raises:
            StateError: If the marker cannot be written.
        """
        self._ensure_dir()
        try:
            write_atomic(self.version_path, f"{version}\n")
        except OSError as e:
            msg = f"Failed to write version marker: {e}"
            raise StateError(msg) from e
        logger.debug("Recorded schema version %s", version)

    def clear(self) -> None:
        """Remove the version marker, state.json and the owned directory if empty.

        Raises:
            StateError: If a file cannot be removed.
        """
        for path in (self.version_path, self.state_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                msg = f"Failed to remove {path.name}: {e}"
                raise StateError(msg) from e
        owned = self.root / OWNED_DIR
        try:
            owned.rmdir()
        except FileNotFoundError:
            pass
        except OSError:
            logger.debug("%s not empty, leaving it in place", owned)
