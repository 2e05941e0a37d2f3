"""Stack collector — the observability sink threaded through a build cycle.

Passed explicitly into the registry scan, the build dispatcher and the
watch loop (no process-wide logger).  Every ``record_*`` call appends a
frozen event to the ``EventLog``; with ``verbose=True`` failures and watch
notices are also echoed to stderr as one-liners.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.
    Safe for concurrent use from conversion worker threads.

"""

from __future__ import annotations

import sys

from tabby.observability.events import (
    CycleCompleted,
    ManifestWritten,
    PageWritten,
    ResourceBuilt,
    ResourceFailed,
    ResourceSkipped,
    WatchNotice,
    now_ns,
)
from tabby.observability.log import EventLog

# Watch notices that are routine and never echoed
_QUIET_NOTICES = frozenset({"ignored", "unchanged"})


class StackCollector:
    """Unified event collector for scan, build and watch events.

    Args:
        log: The EventLog to store events in.
        verbose: Echo failures and watch notices to stderr.

    """

    __slots__ = ("_log", "_verbose")

    def __init__(self, log: EventLog | None = None, *, verbose: bool = False) -> None:
        self._log = log if log is not None else EventLog()
        self._verbose = verbose

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Scan events -----

    def record_skip(self, path: str, *, reason: str = "unknown_extension") -> None:
        """Record a source entry that was not classified."""
        self._log.append(
            ResourceSkipped(
                path=path,
                reason=reason,  # type: ignore[arg-type]
                timestamp_ns=now_ns(),
            )
        )

    # ----- Build events -----

    def record_built(
        self,
        name: str,
        kind: str,
        source: str,
        targets: tuple[str, ...],
        *,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a successfully converted resource."""
        self._log.append(
            ResourceBuilt(
                name=name,
                kind=kind,
                source=source,
                targets=targets,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_failure(self, name: str, source: str, error: str) -> None:
        """Record a failed build unit."""
        self._log.append(
            ResourceFailed(name=name, source=source, error=error, timestamp_ns=now_ns())
        )
        if self._verbose:
            print(f"  ! {name}: {error}", file=sys.stderr)

    def record_page(self, kind: str, target: str, *, entries: int = 0) -> None:
        """Record an aggregate or static page write."""
        self._log.append(
            PageWritten(
                kind=kind,  # type: ignore[arg-type]
                target=target,
                entries=entries,
                timestamp_ns=now_ns(),
            )
        )

    def record_cycle(
        self,
        *,
        processed: int = 0,
        skipped: int = 0,
        failed: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record the end of a build cycle."""
        self._log.append(
            CycleCompleted(
                processed=processed,
                skipped=skipped,
                failed=failed,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_manifest(self, path: str, *, entries: int = 0) -> None:
        """Record a manifest write."""
        self._log.append(ManifestWritten(path=path, entries=entries, timestamp_ns=now_ns()))

    # ----- Watch events -----

    def record_watch(self, kind: str, detail: str = "") -> None:
        """Record a watch-loop notice."""
        self._log.append(
            WatchNotice(
                kind=kind,  # type: ignore[arg-type]
                detail=detail,
                timestamp_ns=now_ns(),
            )
        )
        if self._verbose and kind not in _QUIET_NOTICES:
            suffix = f": {detail}" if detail else ""
            print(f"  [watch] {kind.replace('_', ' ')}{suffix}", file=sys.stderr)
