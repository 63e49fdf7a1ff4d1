"""
Theme Registry

Discovers installed themes on disk and reads their declared style data.

A theme is a directory under the themes root, optionally nested one level
(``parent-dir/theme-dir``), that contains a ``theme.json`` or a ``style.css``.
The directory path relative to the root is the theme's stylesheet.

Theme layout::

    <stylesheet>/
        style.css       header comment with "Theme Name:" and "Template:"
        theme.json      base settings and styles
        styles/*.json   style variations

A child theme names its parent's stylesheet in the ``Template:`` header; the
parent's theme.json and variations are merged beneath the child's.
"""

import json
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from globalstyles.models.contracts.global_styles import (
    LATEST_SCHEMA,
    ThemeStyleVariation,
)

logger = logging.getLogger(__name__)

THEME_JSON = "theme.json"
STYLE_CSS = "style.css"
VARIATIONS_DIR = "styles"

# Only the start of style.css is scanned for headers
HEADER_READ_BYTES = 8192

MAX_STYLESHEET_DEPTH = 2


@dataclass(frozen=True)
class ThemeHandle:
    """An installed theme."""

    stylesheet: str
    path: Path
    name: str
    template: str

    @property
    def is_child_theme(self) -> bool:
        return self.template != self.stylesheet


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Merge two theme.json fragments.

    Objects merge key by key; any other value in override (including lists)
    replaces the value in base. Neither input is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def read_file_headers(path: Path, fields: list[str]) -> dict[str, str]:
    """
    Read "Field: value" headers from the leading comment of a file.

    Args:
        path: File to read
        fields: Header names to look for (case-insensitive)

    Returns:
        Mapping of header name to value for the headers present
    """
    try:
        with path.open("rb") as handle:
            text = handle.read(HEADER_READ_BYTES).decode("utf-8", errors="replace")
    except OSError:
        return {}

    text = text.replace("\r", "\n")
    headers: dict[str, str] = {}
    for field in fields:
        match = re.search(
            rf"^[ \t/*#@]*{re.escape(field)}:(.*)$",
            text,
            re.MULTILINE | re.IGNORECASE,
        )
        if match:
            value = re.sub(r"\s*(?:\*/|\?>).*", "", match.group(1)).strip()
            if value:
                headers[field] = value
    return headers


class ThemeRegistry:
    """Lookup of installed themes below a themes root directory."""

    def __init__(self, themes_root: Path | str):
        self.themes_root = Path(themes_root)

    # =========================================================================
    # Theme Lookup
    # =========================================================================

    def resolve_theme(self, stylesheet: str) -> ThemeHandle | None:
        """
        Resolve a stylesheet to an installed theme.

        Args:
            stylesheet: Theme directory reference, e.g. "mytheme" or "subdir/mytheme"

        Returns:
            ThemeHandle, or None if no theme is installed there
        """
        path = self._theme_path(stylesheet)
        if path is None or not path.is_dir():
            return None

        if not (path / THEME_JSON).is_file() and not (path / STYLE_CSS).is_file():
            return None

        headers = read_file_headers(path / STYLE_CSS, ["Theme Name", "Template"])
        return ThemeHandle(
            stylesheet=stylesheet,
            path=path,
            name=headers.get("Theme Name", path.name),
            template=headers.get("Template", stylesheet),
        )

    def get_parent(self, theme: ThemeHandle) -> ThemeHandle | None:
        """Get the parent of a child theme, if it is installed."""
        if not theme.is_child_theme:
            return None

        parent = self.resolve_theme(theme.template)
        if parent is None:
            logger.warning(
                f"Parent theme {theme.template!r} of {theme.stylesheet!r} is not installed"
            )
        return parent

    def _theme_path(self, stylesheet: str) -> Path | None:
        segments = stylesheet.split("/")
        if len(segments) > MAX_STYLESHEET_DEPTH:
            return None
        if any(segment in ("", ".", "..") or "\x00" in segment for segment in segments):
            return None

        root = self.themes_root.resolve()
        path = root.joinpath(*segments).resolve()
        if not path.is_relative_to(root):
            return None
        return path

    # =========================================================================
    # Style Data
    # =========================================================================

    def load_theme_json(self, theme: ThemeHandle) -> dict[str, Any]:
        """Load a theme's own theme.json; an absent or invalid file reads as empty."""
        return self._load_json_object(theme.path / THEME_JSON) or {}

    def load_base_styles(self, theme: ThemeHandle) -> dict[str, dict[str, Any]]:
        """
        Load the settings and styles a theme declares.

        For child themes, the parent's theme.json is merged beneath the child's.

        Returns:
            {"settings": {...}, "styles": {...}}
        """
        data: dict[str, Any] = {}
        parent = self.get_parent(theme)
        if parent is not None:
            data = self.load_theme_json(parent)
        data = deep_merge(data, self.load_theme_json(theme))

        settings = data.get("settings")
        styles = data.get("styles")
        return {
            "settings": settings if isinstance(settings, dict) else {},
            "styles": styles if isinstance(styles, dict) else {},
        }

    def list_style_variation_files(self, theme: ThemeHandle) -> list[Path]:
        """
        List a theme's style variation files.

        Parent theme variations are included; a child file with the same name
        replaces the parent's. Files are ordered by filename.
        """
        files: dict[str, Path] = {}
        parent = self.get_parent(theme)
        for source in (parent, theme):
            if source is None:
                continue
            variations_dir = source.path / VARIATIONS_DIR
            if not variations_dir.is_dir():
                continue
            for path in variations_dir.glob("*.json"):
                if path.is_file():
                    files[path.name] = path

        return [files[name] for name in sorted(files)]

    def get_style_variations(self, theme: ThemeHandle) -> Iterator[ThemeStyleVariation]:
        """
        Produce a theme's style variations, merged over its base styles.

        Variation files that cannot be read or do not hold a JSON object are
        skipped.
        """
        base = self.load_base_styles(theme)

        for path in self.list_style_variation_files(theme):
            data = self._load_json_object(path)
            if not data:
                continue

            settings = deep_merge(base["settings"], _as_dict(data.get("settings")))
            styles = deep_merge(base["styles"], _as_dict(data.get("styles")))

            version = data.get("version")
            title = data.get("title")

            yield ThemeStyleVariation(
                version=version if isinstance(version, int) else LATEST_SCHEMA,
                title=title if isinstance(title, str) and title else path.stem,
                settings=settings or None,
                styles=styles or None,
            )

    def _load_json_object(self, path: Path) -> dict[str, Any] | None:
        if not path.is_file():
            return None

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {path}: top level is not a JSON object")
            return None
        return data


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}
