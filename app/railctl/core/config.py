"""User configuration for railctl.

Configuration is stored in ~/.config/railctl/config.toml (or the path in
the RAILCTL_CONFIG environment variable). A missing file means defaults.

Example config.toml:

    package_timeout_seconds = 600
    install_packages = true
    package_manager = "pnpm"
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from railctl.core.paths import get_config_path
from railctl.models.package import NodeClient

logger = logging.getLogger(__name__)


class RailctlConfig(BaseModel):
    """Configuration for railctl.

    Attributes:
        package_timeout_seconds: Timeout for each package manager call.
        install_packages: Whether setup/upgrade/reset run the package manager.
        package_manager: Force a JavaScript package manager instead of
            detecting it from lock files.
    """

    model_config = ConfigDict(extra="forbid")

    package_timeout_seconds: Annotated[
        int,
        Field(ge=10, le=3600, description="Package manager timeout in seconds (10-3600)"),
    ] = 300
    install_packages: Annotated[
        bool,
        Field(description="Run the package manager during setup, upgrade and reset"),
    ] = True
    package_manager: Annotated[
        NodeClient | None,
        Field(description="Force npm, pnpm, yarn or bun (None = detect from lock files)"),
    ] = None


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> RailctlConfig:
    """Load railctl configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated RailctlConfig; defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or the content is invalid.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return RailctlConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return RailctlConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e
