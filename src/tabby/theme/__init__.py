"""Tabby theme loader — fallback chain for page templates.

User templates (``templates/``) take priority.  When a template is not found
in the user directory, Kida falls through to the bundled default theme, so
a site can override just ``about.html`` and keep everything else.

Thread Safety:
    All returned values are read-only path lists.  Safe for free-threading.

"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tabby.config import TabbyConfig


def _bundled_theme_path() -> Path:
    """Return the absolute path to the bundled default theme."""
    return Path(__file__).parent / "default"


def bundled_template_dir() -> Path:
    """Directory holding the default ``base.html`` and page templates."""
    return _bundled_theme_path() / "templates"


def get_template_dirs(config: TabbyConfig) -> list[Path]:
    """Return template directories in priority order.

    Returns:
        ``[user_templates_dir, bundled_default_templates]``, or only the
        bundled directory when the user directory does not exist.

    """
    bundled = bundled_template_dir()
    user_dir = config.templates_path

    dirs: list[Path] = []
    if user_dir != bundled and user_dir.is_dir():
        dirs.append(user_dir)
    dirs.append(bundled)
    return dirs
