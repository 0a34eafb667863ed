"""Color theme for railctl output.

The bundled ``data/theme.toml`` defines every color; a user theme at
``~/.config/railctl/theme.toml`` may override any subset of them. Each
color becomes a Rich style of the same name, plus a few derived styles
(``bold_header``, ``dim``, ``path``) used by the tables.
"""

import logging
import re
import sys
import tomllib
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from railctl.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")

# Styles that are not a plain color, as format strings over ThemeColors fields
_DERIVED_STYLES: dict[str, str] = {
    "error": "bold {error}",
    "bold_header": "bold {header}",
    "dim": "{muted}",
    "path": "bold {text}",
}


class ThemeColors(BaseModel):
    """Colors used by railctl, as ``#RGB`` or ``#RRGGBB`` hex codes."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    # Reconciliation outcomes
    created: str = "#c1ff62"
    updated: str = "#0e8ac8"
    deleted: str = "#f53263"
    preserved: str = "#faf870"
    unchanged: str = "#226666"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object) -> str:
        """Accept only hex color strings."""
        if not isinstance(v, str) or not _HEX_COLOR.match(v.strip()):
            msg = f"expected a hex color like '#1a2b3c', got {v!r}"
            raise ValueError(msg)
        return v.strip()


def read_theme_file(path: Path) -> dict[str, str]:
    """Read the ``[colors]`` table of a theme file.

    Args:
        path: Theme TOML file.

    Returns:
        Color name to value; empty if the file is missing or unusable.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        print(f"Warning: Ignoring theme file {path}: {e}", file=sys.stderr)
        return {}

    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return {}
    return {str(name): value for name, value in colors.items() if isinstance(value, str)}


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load the bundled colors with user overrides applied.

    An invalid user theme is reported and ignored; the bundled colors are
    then used as they are.

    Args:
        user_path: User theme file (default: ~/.config/railctl/theme.toml).

    Returns:
        Validated ThemeColors.
    """
    bundled = read_theme_file(Path(str(resources.files("railctl.data").joinpath("theme.toml"))))
    overrides = read_theme_file(user_path or get_user_theme_path())

    if overrides:
        try:
            return ThemeColors(**{**bundled, **overrides})
        except ValidationError as e:
            logger.warning("Invalid user theme, using bundled colors: %s", e)
            print(f"Warning: Invalid theme configuration: {e}", file=sys.stderr)

    try:
        return ThemeColors(**bundled)
    except ValidationError as e:
        logger.error("Bundled theme is invalid, installation may be corrupted: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for a set of colors.

    Args:
        colors: Colors to use. Loaded with load_theme() if None.

    Returns:
        Rich Theme with one style per color plus the derived styles.
    """
    if colors is None:
        colors = load_theme()
    values = colors.model_dump()
    styles = dict(values)
    for name, template in _DERIVED_STYLES.items():
        styles[name] = template.format(**values)
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Get the Rich theme, loading it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
