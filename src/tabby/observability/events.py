"""Unified event model for build observability.

Defines event types for the scan, build and watch stages of a cycle.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.
    Conversion workers record events concurrently.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Scan events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResourceSkipped:
    """A source entry was not classified as a resource.

    Attributes:
        path: Path of the skipped entry.
        reason: Why it was skipped.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    reason: Literal["unknown_extension", "not_a_file", "hidden"]
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Build events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ResourceBuilt:
    """A resource was converted and its outputs written.

    Attributes:
        name: Resource name (file stem).
        kind: Resource variant (``"article"``, ``"photo"``, ...).
        source: Source file path.
        targets: Output paths written by the unit.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    name: str
    kind: str
    source: str
    targets: tuple[str, ...]
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ResourceFailed:
    """A build unit failed; siblings keep running.

    Attributes:
        name: Resource (or aggregate page) name.
        source: Source file path, or the page kind for aggregates.
        error: Rendered error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    name: str
    source: str
    error: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PageWritten:
    """An aggregate or static page was written.

    Attributes:
        kind: The type of page.
        target: Output file path.
        entries: Number of listed resources (0 for static pages).
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["index", "gallery", "static"]
    target: str
    entries: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class CycleCompleted:
    """A build cycle finished (successfully or with failures).

    Attributes:
        processed: Number of resources converted.
        skipped: Number of unchanged resources left untouched.
        failed: Number of failed units.
        duration_ms: Wall-clock time of the whole cycle.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    processed: int
    skipped: int
    failed: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ManifestWritten:
    """The timing manifest was persisted.

    Attributes:
        path: Manifest file path.
        entries: Number of timings stored.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    entries: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Watch events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class WatchNotice:
    """Something noteworthy happened in the watch loop.

    Attributes:
        kind: What happened.
        detail: Human-readable detail (error message, event kind, ...).
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["ignored", "rebuild", "unchanged", "cycle_failed", "persist_failed", "fatal"]
    detail: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = (
    ResourceSkipped
    | ResourceBuilt
    | ResourceFailed
    | PageWritten
    | CycleCompleted
    | ManifestWritten
    | WatchNotice
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
