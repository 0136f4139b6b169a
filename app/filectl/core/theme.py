"""Console colors for filectl output.

Colors ship with the package in ``data/theme.toml``; a ``theme.toml`` in
the user's config directory may override any subset of them.
"""

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Annotated, cast

from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError
from rich.theme import Theme

from filectl.core.paths import get_config_dir

logger = logging.getLogger(__name__)

THEME_FILENAME = "theme.toml"


def _hex_color(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError("color must be a string")
    color = value.strip()
    if color[:1] != "#":
        raise ValueError(f"color {color!r} must start with '#'")
    digits = color[1:]
    if len(digits) not in (3, 6):
        raise ValueError(f"color {color!r} must be #RGB or #RRGGBB")
    if any(c not in "0123456789abcdefABCDEF" for c in digits):
        raise ValueError(f"invalid hex color {color!r}")
    return color


HexColor = Annotated[str, BeforeValidator(_hex_color)]


class ThemeColors(BaseModel):
    """Palette used by every table and message filectl prints.

    The event colors tint result rows: ``created`` for new files and
    links, ``modified`` for drift, ``changed`` for attribute updates and
    ``planned`` for dry-run rows.
    """

    model_config = ConfigDict(extra="forbid", validate_default=True)

    text: HexColor = "#ffffff"
    muted: HexColor = "#b2bec3"
    header: HexColor = "#69B9A1"
    border: HexColor = "#29526d"

    success: HexColor = "#03b971"
    warning: HexColor = "#f5b332"
    error: HexColor = "#f53263"
    info: HexColor = "#0ec1c8"

    created: HexColor = "#c1ff62"
    modified: HexColor = "#faf870"
    changed: HexColor = "#0e8ac8"
    planned: HexColor = "#d44ebc"


# Styles composed from a palette entry, keyed by style name.
_DERIVED_STYLES: dict[str, tuple[str, str]] = {
    "error": ("bold", "error"),
    "bold_header": ("bold", "header"),
    "path": ("bold", "text"),
    "dim": ("", "muted"),
}


def get_user_theme_path() -> Path:
    """Location of the user's color overrides."""
    return get_config_dir() / THEME_FILENAME


def get_bundled_theme_path() -> Path:
    return resources.files("filectl.data").joinpath(THEME_FILENAME)  # type: ignore[return-value]


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are dropped. A file without a ``[colors]`` table
    yields an empty dict.

    Returns:
        Color names mapped to their raw values, or None when the file is
        missing or unreadable.
    """
    if not path.is_file():
        return None
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return None

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Theme file %s has no usable [colors] table", path)
        return None
    entries = cast(dict[str, object], table)
    return {name: value for name, value in entries.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Build the palette from the bundled colors and the user's overrides.

    An override that fails validation discards the whole palette in
    favor of the built-in defaults.
    """
    layers = [
        _load_toml_colors(Path(get_bundled_theme_path())),
        _load_toml_colors(get_user_theme_path()),
    ]
    if layers[0] is None:
        logger.error("Bundled theme is missing; filectl may not be installed correctly")

    merged: dict[str, str] = {}
    for layer in layers:
        merged.update(layer or {})

    try:
        return ThemeColors.model_validate(merged)
    except ValidationError as e:
        logger.warning("Theme colors rejected, falling back to defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Turn a palette into Rich styles.

    Every palette entry becomes a style of the same name; a few bold or
    aliased styles are layered on top.
    """
    palette = colors if colors is not None else load_theme()
    base_colors: dict[str, str] = palette.model_dump()
    styles = dict(base_colors)
    for name, (attrs, base) in _DERIVED_STYLES.items():
        styles[name] = f"{attrs} {base_colors[base]}".strip()
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Rich theme for the process, built once."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
