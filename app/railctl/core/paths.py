"""Path management for railctl.

Two families of paths live here:

- XDG-compliant user paths for railctl's own configuration
  (``~/.config/railctl/``).
- Project-relative paths for the state railctl keeps inside the
  repositories it manages (``.railctl/version``, ``.railctl/state.json``).
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "railctl"

# Directory railctl fully owns inside a managed project
OWNED_DIR = ".railctl"

# Project-relative location of the version marker and install state
VERSION_MARKER = f"{OWNED_DIR}/version"
STATE_FILE = f"{OWNED_DIR}/state.json"

# Paths the engine writes itself; schemas may not declare them
RESERVED_PATHS: frozenset[str] = frozenset({VERSION_MARKER, STATE_FILE})


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/railctl/ (or XDG_CONFIG_HOME/railctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_config_path() -> Path:
    """Get the user configuration file path.

    The ``RAILCTL_CONFIG`` environment variable takes precedence over the
    XDG location.

    Returns:
        Path to ~/.config/railctl/config.toml.
    """
    override = os.environ.get("RAILCTL_CONFIG")
    if override:
        return Path(override)
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme configuration path.

    Returns:
        Path to ~/.config/railctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_version_marker_path(root: Path) -> Path:
    """Get the version marker path inside a project.

    Args:
        root: Project root directory.

    Returns:
        Path to <root>/.railctl/version.
    """
    return root / VERSION_MARKER


def get_state_path(root: Path) -> Path:
    """Get the install state path inside a project.

    Args:
        root: Project root directory.

    Returns:
        Path to <root>/.railctl/state.json.
    """
    return root / STATE_FILE
