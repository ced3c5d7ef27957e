"""Terminal colours for dustpan.

Colours ship in ``dustpan/data/theme.toml``. A user file at
``$XDG_CONFIG_HOME/dustpan/theme.toml`` may override any subset of the
``[colors]`` keys. The merged result is validated and turned into the
Rich style names the views refer to (``selected``, ``cursor``, ``dialog``...).
"""

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from dustpan.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class ThemeColors(BaseModel):
    """Validated colour palette.

    Every value is a ``#RGB`` or ``#RRGGBB`` hex code.
    """

    model_config = ConfigDict(extra="forbid")

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    # Result list: selection mark, age above/below the threshold, dialog background
    selected: str = "#c1ff62"
    stale: str = "#f5b332"
    fresh: str = "#0e8ac8"
    highlight: str = "#226666"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        """Accept hex colour codes only."""
        name = info.field_name
        if not isinstance(v, str):
            msg = f"{name}: color must be a string"
            raise ValueError(msg)
        color = v.strip()
        if not color.startswith("#"):
            msg = f"{name}: color must start with '#'"
            raise ValueError(msg)
        digits = color[1:]
        if len(digits) not in (3, 6):
            msg = f"{name}: color must be #RGB or #RRGGBB format"
            raise ValueError(msg)
        if not set(digits) <= _HEX_DIGITS:
            msg = f"{name}: invalid hex color '{color}'"
            raise ValueError(msg)
        return color

    def to_styles(self) -> dict[str, str]:
        """Map the palette to the Rich style names used by dustpan."""
        return {
            "text": self.text,
            "muted": self.muted,
            "dim": self.muted,
            "header": self.header,
            "bold_header": f"bold {self.header}",
            "border": self.border,
            "success": self.success,
            "warning": self.warning,
            "error": f"bold {self.error}",
            "info": self.info,
            "selected": f"bold {self.selected}",
            "stale": self.stale,
            "fresh": self.fresh,
            "cursor": f"reverse {self.text}",
            "dialog": f"on {self.highlight}",
        }


def get_bundled_theme_path() -> Path:
    """Location of the theme file shipped inside the package."""
    return resources.files("dustpan.data").joinpath("theme.toml")  # type: ignore[return-value]


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are dropped. Returns None when the file is missing,
    unreadable, or not valid TOML.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring malformed theme file %s: %s", path, e)
        return None
    except OSError as e:
        logger.warning("Cannot read theme file %s: %s", path, e)
        return None

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Theme file %s has no [colors] table", path)
        return None
    return {key: value for key, value in table.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Merge the bundled palette with the user's overrides.

    Returns:
        The merged palette, or the built-in defaults when the merge is invalid.
    """
    colors = _load_toml_colors(Path(get_bundled_theme_path()))
    if colors is None:
        logger.error("Bundled theme is missing; using built-in colors")
        colors = {}

    user_path = get_user_theme_path()
    overrides = _load_toml_colors(user_path)
    if overrides:
        logger.debug("Applying %d theme override(s) from %s", len(overrides), user_path)
        colors = {**colors, **overrides}

    try:
        return ThemeColors(**colors)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build a Rich theme from a palette (loaded from disk when omitted)."""
    return Theme((colors or load_theme()).to_styles())


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Return the process-wide Rich theme, loading it on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
