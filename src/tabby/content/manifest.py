"""Persisted manifest — the last-known Timing of every resource.

Stored as a small, key-sorted JSON document next to the sources::

    {
      "timings": {
        "bar": {"created": "2024-05-01T09:00:00+00:00", "modified": "..."},
        "foo": {"created": "...", "modified": "..."}
      }
    }

A missing or unreadable manifest is not an error: it loads as empty, which
makes every resource count as changed.  The manifest is only ever replaced
wholesale at the end of a build cycle.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from tabby._errors import ManifestError
from tabby._types import ResourceName
from tabby.content.timing import Timing


@dataclass(frozen=True, slots=True)
class Manifest:
    """Ordered mapping from resource name to its last-known Timing.

    Attributes:
        timings: Name -> Timing, kept sorted by name.

    """

    timings: Mapping[ResourceName, Timing] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ordered = dict(sorted(self.timings.items()))
        object.__setattr__(self, "timings", ordered)

    def get(self, name: ResourceName) -> Timing | None:
        """Previous Timing for *name*, if one was recorded."""
        return self.timings.get(name)

    def __len__(self) -> int:
        return len(self.timings)

    def __iter__(self) -> Iterator[ResourceName]:
        return iter(self.timings)

    def __contains__(self, name: object) -> bool:
        return name in self.timings

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def dumps(self) -> str:
        """Render the manifest document."""
        payload = {
            "timings": {name: timing.to_dict() for name, timing in self.timings.items()},
        }
        return json.dumps(payload, indent=2, sort_keys=True) + "\n"

    @classmethod
    def loads(cls, text: str) -> Manifest:
        """Parse a manifest document.

        Raises:
            ValueError: If the document is not a valid manifest.

        """
        data = json.loads(text)
        if not isinstance(data, dict) or not isinstance(data.get("timings", {}), dict):
            msg = "manifest must be an object with a 'timings' object"
            raise ValueError(msg)
        try:
            timings = {
                str(name): Timing.from_dict(entry)
                for name, entry in data.get("timings", {}).items()
            }
        except (KeyError, TypeError) as exc:
            msg = f"malformed timing entry: {exc}"
            raise ValueError(msg) from exc
        return cls(timings=timings)

    @classmethod
    def load(cls, path: Path) -> Manifest:
        """Load the manifest at *path*, degrading to empty on any failure."""
        try:
            return cls.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return cls()

    def save(self, path: Path) -> None:
        """Write the manifest to *path*, creating parent dirs as needed.

        Raises:
            ManifestError: If the file cannot be written.

        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.dumps(), encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to write manifest {path}: {exc}"
            raise ManifestError(msg) from exc
