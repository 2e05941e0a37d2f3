"""Startup banner — mode-aware status output.

Prints a short branded banner with the source, output and manifest
locations.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tabby._types import TabbyMode
    from tabby.config import TabbyConfig


# ---------------------------------------------------------------------------
# ANSI helpers: respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_ORANGE = "\033[38;5;214m" if _COLOR else ""


_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (_YELLOW, "build"),
    "serve": (_CYAN, "serve"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: TabbyConfig,
    mode: TabbyMode,
    *,
    resource_count: int = 0,
    force: bool = False,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the Tabby banner to stderr.

    Args:
        config: Resolved TabbyConfig.
        mode: ``"build"`` or ``"serve"``.
        resource_count: Resources converted by the first build (serve mode).
        force: Whether timings are ignored (``--no-cache``).
        load_ms: Time spent on the first build in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    from tabby import __version__

    cat = "\u14DA\u1618\u14E2"  # ᓚᘏᗢ
    header = f"  {_ORANGE}{_BOLD}{cat}{_RESET}  Tabby {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}"

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
        f"  {_DIM}├─{_RESET} static: {_DIM}{config.static_path}{_RESET}",
        f"  {_DIM}├─{_RESET} manifest: {_DIM}{config.metadata_path}{_RESET}",
    ]

    if force:
        lines.append(f"  {_DIM}├─{_RESET} {_YELLOW}no-cache{_RESET} — rebuilding everything")

    if mode == "serve":
        label = "resource" if resource_count == 1 else "resources"
        timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
        lines.append(f"  {_DIM}├─{_RESET} {resource_count} {label} built{timing}")

    lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")

    if mode == "serve":
        lines.append("")
        lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
