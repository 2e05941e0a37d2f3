"""Resource classifier — typed, named resources from directory entries.

The five resource kinds form a closed set.  Each kind is its own frozen
dataclass and ``Resource`` is their union, so the dispatcher handles them
with a ``match`` statement instead of per-class virtual methods.

Extension mapping (fixed, case-sensitive)::

    md   -> Article
    jpg  -> Photo
    sass -> Style
    js   -> Script
    ico  -> Icon

Anything else is skipped.  Hidden files, directories and other non-regular
entries are skipped too.  An entry with no extension, or whose name cannot
be represented as text, means the source tree is malformed and raises
``ScanError``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from tabby._errors import ScanError
from tabby.content.timing import Timing

if TYPE_CHECKING:
    from tabby.content.manifest import Manifest
    from tabby.observability.collector import StackCollector


@dataclass(frozen=True, slots=True)
class _SourceFile:
    """Fields shared by every resource kind.

    Attributes:
        name: File stem (the recognized extension stripped).
        path: Absolute path of the source file.
        timing: Timing computed during this scan.
        changed: True if the manifest had no Timing for ``name`` or a
            different one.

    """

    kind: ClassVar[str] = "resource"
    extension: ClassVar[str] = ""

    name: str
    path: Path
    timing: Timing
    changed: bool


@dataclass(frozen=True, slots=True)
class Article(_SourceFile):
    """A markdown article, published under ``blog/``."""

    kind: ClassVar[str] = "article"
    extension: ClassVar[str] = "md"


@dataclass(frozen=True, slots=True)
class Photo(_SourceFile):
    """A JPEG photo, published as a thumbnail and a full-size image."""

    kind: ClassVar[str] = "photo"
    extension: ClassVar[str] = "jpg"


@dataclass(frozen=True, slots=True)
class Style(_SourceFile):
    """A Sass stylesheet, compiled to compressed CSS."""

    kind: ClassVar[str] = "style"
    extension: ClassVar[str] = "sass"


@dataclass(frozen=True, slots=True)
class Script(_SourceFile):
    """A JavaScript file, copied as-is."""

    kind: ClassVar[str] = "script"
    extension: ClassVar[str] = "js"


@dataclass(frozen=True, slots=True)
class Icon(_SourceFile):
    """A favicon, copied as-is."""

    kind: ClassVar[str] = "icon"
    extension: ClassVar[str] = "ico"


type Resource = Article | Photo | Style | Script | Icon

RESOURCE_TYPES: dict[str, type[Resource]] = {
    cls.extension: cls for cls in (Article, Photo, Style, Script, Icon)
}


def resource_type_for(extension: str) -> type[Resource] | None:
    """Return the resource class for a bare extension (no dot), or None."""
    return RESOURCE_TYPES.get(extension)


def classify(
    entry: os.DirEntry[str] | Path,
    manifest: Manifest,
    collector: StackCollector | None = None,
) -> Resource | None:
    """Classify one directory entry.

    Args:
        entry: Entry from ``os.scandir`` (or a plain path).
        manifest: Previous manifest, consulted for the ``created`` fallback
            and the changed flag.  Never mutated.
        collector: Optional sink for skip records.

    Returns:
        The classified resource, or None if the entry is skipped.

    Raises:
        ScanError: On an unreadable entry, a name that is not valid text,
            or a regular file without an extension.

    """
    path = Path(entry)
    file_name = path.name
    _require_text(file_name, path)

    if file_name.startswith("."):
        _skip(collector, path, "hidden")
        return None

    try:
        is_file = entry.is_file() if isinstance(entry, os.DirEntry) else path.is_file()
    except OSError as exc:
        msg = f"Cannot read directory entry {path}: {exc}"
        raise ScanError(msg) from exc
    if not is_file:
        _skip(collector, path, "not_a_file")
        return None

    if not path.suffix:
        msg = f"No file extension: {path}"
        raise ScanError(msg)

    cls = resource_type_for(path.suffix[1:])
    if cls is None:
        _skip(collector, path, "unknown_extension")
        return None

    name = file_name.removesuffix(path.suffix)

    try:
        metadata = entry.stat() if isinstance(entry, os.DirEntry) else path.stat()
        previous = manifest.get(name)
        timing = Timing.derive(metadata, previous)
    except OSError as exc:
        msg = f"Cannot read metadata of {path}: {exc}"
        raise ScanError(msg) from exc

    changed = previous is None or previous != timing
    return cls(name=name, path=path, timing=timing, changed=changed)


def _require_text(file_name: str, path: Path) -> None:
    # Undecodable bytes survive os.fsdecode as lone surrogates.
    try:
        file_name.encode("utf-8")
    except UnicodeEncodeError as exc:
        msg = f"Invalid filename: {path!r}"
        raise ScanError(msg) from exc


def _skip(collector: StackCollector | None, path: Path, reason: str) -> None:
    if collector is not None:
        collector.record_skip(str(path), reason=reason)
