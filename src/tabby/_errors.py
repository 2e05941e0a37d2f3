"""Tabby error hierarchy.

All tabby-specific errors inherit from TabbyError for easy catching.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tabby.export.dispatcher import ResourceFailure


class TabbyError(Exception):
    """Base error for all tabby operations."""


class ConfigError(TabbyError):
    """Invalid or missing configuration."""


class ScanError(TabbyError):
    """The source directory could not be scanned (malformed source tree)."""


class ConversionError(TabbyError):
    """A single resource could not be converted to its published form."""


class ManifestError(TabbyError):
    """The timing manifest could not be written."""


class WatchError(TabbyError):
    """The filesystem watcher failed; the watch loop cannot continue."""


class BuildError(TabbyError):
    """One or more units of a build cycle failed.

    Sibling units are never cancelled, so ``failures`` lists every unit
    that failed in the cycle.
    """

    def __init__(self, failures: tuple[ResourceFailure, ...]) -> None:
        self.failures = failures
        names = ", ".join(f.name for f in failures)
        noun = "resource" if len(failures) == 1 else "resources"
        super().__init__(f"Build failed for {len(failures)} {noun}: {names}")
