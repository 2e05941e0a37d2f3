"""Resource registry — one scan's snapshot of every source resource.

``Registry.scan`` walks the (flat) static directory, classifies every entry,
computes each resource's Timing against the previous manifest and flags the
ones that changed.  Resources are ordered newest-first by creation time;
that order is what the index and gallery pages publish.

Scanning never writes: neither the source directory nor the manifest is
touched.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import ScanError
from tabby._types import ResourceName
from tabby.content.classifier import Article, Photo, Resource, classify
from tabby.content.manifest import Manifest

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tabby.content.timing import Timing
    from tabby.observability.collector import StackCollector


@dataclass(frozen=True, slots=True)
class Registry:
    """All classified resources of one scan, newest first.

    Attributes:
        resources: Resources sorted by ``timing.created`` descending.  Ties
            keep file-name order.

    """

    resources: tuple[Resource, ...] = ()

    @classmethod
    def scan(
        cls,
        directory: Path,
        manifest: Manifest,
        collector: StackCollector | None = None,
    ) -> Registry:
        """Scan *directory* against *manifest*.

        Raises:
            ScanError: If the directory or an entry cannot be read, an entry
                is malformed, or two resources of the same kind share a name.

        """
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            msg = f"Cannot read static directory {directory}: {exc}"
            raise ScanError(msg) from exc

        resources: list[Resource] = []
        seen: dict[tuple[str, str], Path] = {}
        for entry in entries:
            resource = classify(entry, manifest, collector)
            if resource is None:
                continue
            key = (resource.kind, resource.name)
            if key in seen:
                msg = (
                    f"Two {resource.kind} sources named {resource.name!r}: "
                    f"{seen[key]} and {resource.path}"
                )
                raise ScanError(msg)
            seen[key] = resource.path
            resources.append(resource)

        # sort newest to oldest
        resources.sort(key=lambda r: r.timing.created, reverse=True)
        return cls(resources=tuple(resources))

    def timings(self) -> dict[ResourceName, Timing]:
        """The Timing map to persist once this registry has been built.

        Keyed by name alone: resources of different kinds that share a stem
        (``post.md`` and ``post.jpg``) collapse into one entry, the one listed
        last winning.  On the next scan the other one is compared against a
        foreign Timing and counts as changed, so it is rebuilt every cycle.
        """
        return {r.name: r.timing for r in self.resources}

    def to_manifest(self) -> Manifest:
        """The manifest that replaces the previous one after a build."""
        return Manifest(timings=self.timings())

    def articles(self) -> tuple[Article, ...]:
        """All articles, in registry order."""
        return tuple(r for r in self.resources if isinstance(r, Article))

    def photos(self) -> tuple[Photo, ...]:
        """All photos, in registry order."""
        return tuple(r for r in self.resources if isinstance(r, Photo))

    def changed(self) -> tuple[Resource, ...]:
        """Resources whose Timing differs from the manifest."""
        return tuple(r for r in self.resources if r.changed)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)
