"""Settings for pi-backdrop, loaded from JSON.

Precedence, lowest first: built-in defaults, global settings
(``~/.pi/backdrop/settings.json``), project settings
(``<cwd>/.pi/backdrop.json``), CLI overrides.  Keys are camelCase on disk and
exposed as the typed :class:`BackdropSettings`.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pi.backdrop.grid import GlyphSet

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".pi"

_GLYPH_KEYS: dict[str, str] = {
    "background": "background",
    "trail": "trail",
    "borderH": "border_h",
    "borderV": "border_v",
    "borderCorner": "border_corner",
    "blank": "blank",
}


def _settings_defaults() -> dict[str, Any]:
    """Default settings values."""
    return {
        "trailDurationMs": 100,
        "frameRate": 60,
        "doubleClickMs": 400,
        "navRows": 1,
        "navTitle": "pi",
        "navTabs": ["main", "projects", "about"],
        "layout": None,
        "pixelMouse": False,
        "glyphs": {},
    }


# --- Deep merge ---


def deep_merge_settings(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into base settings.

    Nested dicts merge key by key; any other value replaces the base value.
    ``None`` overrides are ignored.
    """
    result = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_settings(result[key], value)
        else:
            result[key] = value
    return result


# --- Typed view ---


@dataclass
class BackdropSettings:
    trail_duration_ms: float = 100.0
    frame_rate: float = 60.0
    double_click_ms: float = 400.0
    nav_rows: int = 1
    nav_title: str = "pi"
    nav_tabs: list[str] = field(default_factory=lambda: ["main", "projects", "about"])
    layout: str | None = None
    pixel_mouse: bool = False
    glyphs: GlyphSet = field(default_factory=GlyphSet)

    @property
    def frame_interval(self) -> float:
        """Seconds between frames."""
        return 1.0 / self.frame_rate

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BackdropSettings:
        """Build settings from a merged camelCase dict.

        Raises ``ValueError`` for out-of-range numbers or bad glyphs.
        """
        merged = deep_merge_settings(_settings_defaults(), data)

        glyph_overrides = merged.get("glyphs") or {}
        unknown = set(glyph_overrides) - set(_GLYPH_KEYS)
        if unknown:
            raise ValueError(f"unknown glyph names: {', '.join(sorted(unknown))}")
        glyphs = GlyphSet(**{_GLYPH_KEYS[k]: v for k, v in glyph_overrides.items()})

        settings = cls(
            trail_duration_ms=float(merged["trailDurationMs"]),
            frame_rate=float(merged["frameRate"]),
            double_click_ms=float(merged["doubleClickMs"]),
            nav_rows=int(merged["navRows"]),
            nav_title=str(merged["navTitle"]),
            nav_tabs=[str(tab) for tab in merged["navTabs"]],
            layout=merged["layout"],
            pixel_mouse=bool(merged["pixelMouse"]),
            glyphs=glyphs,
        )
        if settings.frame_rate <= 0:
            raise ValueError(f"frameRate must be positive, got {settings.frame_rate}")
        if settings.trail_duration_ms < 0:
            raise ValueError(f"trailDurationMs must not be negative, got {settings.trail_duration_ms}")
        if settings.nav_rows < 0:
            raise ValueError(f"navRows must not be negative, got {settings.nav_rows}")
        return settings


# --- Loading ---


def load_settings(
    cwd: str | None = None,
    overrides: dict[str, Any] | None = None,
    config_dir: str | None = None,
) -> BackdropSettings:
    """Load and merge global, project and override settings.

    Files that cannot be read or parsed are logged and skipped.
    """
    cdir = config_dir or default_config_dir()
    global_settings = _load_checked(os.path.join(cdir, "settings.json"))
    project_settings = _load_checked(os.path.join(cwd or os.getcwd(), CONFIG_DIR_NAME, "backdrop.json"))

    merged = deep_merge_settings(global_settings, project_settings)
    merged = deep_merge_settings(merged, overrides or {})
    return BackdropSettings.from_dict(merged)


def _load_checked(path: str) -> dict[str, Any]:
    settings, error = _load_from_file(path)
    if error is not None:
        logger.warning("Ignoring settings file %s: %s", path, error)
    return settings


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load settings from a JSON file. Returns (settings, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        content = Path(path).read_text(encoding="utf-8")
        settings = json.loads(content)
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(settings, dict):
        return {}, ValueError("settings file must contain a JSON object")
    return settings, None


def default_config_dir() -> str:
    """Default data directory (``~/.pi/backdrop``, or ``$PI_BACKDROP_DIR``)."""
    return os.environ.get("PI_BACKDROP_DIR") or os.path.join(
        os.path.expanduser("~"), CONFIG_DIR_NAME, "backdrop"
    )
