"""Source watcher — debounced filesystem events for the watch loop.

Runs ``watchfiles.watch`` on the static directory in a background thread.
watchfiles already coalesces a burst of changes within the debounce window
into one batch; each batch is condensed here into exactly one
``WatchEvent`` and put on a bounded queue.  The watch loop is the single
consumer and blocks on that queue.

Event kinds:

- ``created`` / ``modified`` / ``deleted`` / ``renamed``: content changed,
  the loop rebuilds.
- ``chmod``: every change in the batch was metadata-only (size and mtime
  unchanged since last seen), e.g. a permission flip.  Ignored by the loop.
- ``rescan``: the watcher asked for a full rescan.  Ignored by the loop.
- ``error``: the watcher failed.  Terminates the loop.
"""

from __future__ import annotations

import os
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change

if TYPE_CHECKING:
    from collections.abc import Iterable

type WatchKind = Literal[
    "created", "modified", "deleted", "renamed", "chmod", "rescan", "error"
]

# Event kinds the loop reacts to without rebuilding
BENIGN_KINDS: frozenset[str] = frozenset({"chmod", "rescan"})

# Size and mtime of a file as last seen by the watcher
type _Signature = tuple[int, int]


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """One debounced filesystem notification.

    Attributes:
        kind: Condensed kind of the batch.
        paths: Paths that changed (empty for ``rescan`` / ``error``).
        error: The watcher failure for ``error`` events.

    """

    kind: WatchKind
    paths: tuple[Path, ...] = ()
    error: BaseException | None = None

    @property
    def is_benign(self) -> bool:
        """Whether the loop should ignore this event."""
        return self.kind in BENIGN_KINDS


def _signature(path: Path) -> _Signature | None:
    try:
        st = path.stat()
    except OSError:
        return None
    return (st.st_size, st.st_mtime_ns)


def snapshot_directory(directory: Path) -> dict[Path, _Signature]:
    """Record the size/mtime signature of every file in *directory*."""
    snapshot: dict[Path, _Signature] = {}
    try:
        with os.scandir(directory) as it:
            for entry in it:
                path = Path(entry.path)
                sig = _signature(path)
                if sig is not None:
                    snapshot[path] = sig
    except OSError:
        return {}
    return snapshot


def condense_changes(
    raw_changes: Iterable[tuple[Change, str]],
    snapshot: dict[Path, _Signature],
) -> WatchEvent | None:
    """Condense one watchfiles batch into a single WatchEvent.

    Updates *snapshot* in place with the post-batch signatures.  Returns
    None for an empty batch.

    """
    added: list[Path] = []
    deleted: list[Path] = []
    modified: list[Path] = []
    touched: list[Path] = []

    for change, path_str in raw_changes:
        path = Path(path_str)
        if change == Change.deleted:
            snapshot.pop(path, None)
            deleted.append(path)
            continue

        previous = snapshot.get(path)
        current = _signature(path)
        if current is not None:
            snapshot[path] = current

        if change == Change.added:
            added.append(path)
        elif previous is not None and previous == current:
            touched.append(path)
        else:
            modified.append(path)

    paths = tuple(sorted({*added, *deleted, *modified}))
    if added and deleted:
        return WatchEvent(kind="renamed", paths=paths)
    if deleted:
        return WatchEvent(kind="deleted", paths=paths)
    if added:
        return WatchEvent(kind="created", paths=paths)
    if modified:
        return WatchEvent(kind="modified", paths=paths)
    if touched:
        return WatchEvent(kind="chmod", paths=tuple(sorted(touched)))
    return None


def _visible(change: Change, path: str) -> bool:
    # Dot-files (the manifest included) never trigger a rebuild.
    return not Path(path).name.startswith(".")


class SourceWatcher:
    """Watches the static directory and feeds a bounded event queue.

    Args:
        directory: The flat source directory to watch (non-recursive).
        debounce_ms: Window in which changes are coalesced into one event.
        maxsize: Capacity of the event queue.

    """

    def __init__(self, directory: Path, *, debounce_ms: int = 1000, maxsize: int = 64) -> None:
        self._directory = directory
        self._debounce_ms = debounce_ms
        self._queue: queue.Queue[WatchEvent] = queue.Queue(maxsize=maxsize)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def events(self) -> queue.Queue[WatchEvent]:
        """The queue the watch loop receives from."""
        return self._queue

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching for file changes in a background thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="tabby-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def _publish(self, event: WatchEvent) -> None:
        # Bounded channel: block while full, but give up once stopped.
        while not self._stop_event.is_set():
            try:
                self._queue.put(event, timeout=0.5)
            except queue.Full:
                continue
            return

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and push events to the queue."""
        from watchfiles import watch

        snapshot = snapshot_directory(self._directory)
        try:
            for raw_changes in watch(
                self._directory,
                watch_filter=_visible,
                debounce=self._debounce_ms,
                stop_event=self._stop_event,
                recursive=False,
            ):
                event = condense_changes(raw_changes, snapshot)
                if event is not None:
                    self._publish(event)
        except Exception as exc:  # noqa: BLE001
            self._publish(WatchEvent(kind="error", error=exc))
            return

        if not self._stop_event.is_set():
            msg = f"watcher for {self._directory} stopped unexpectedly"
            self._publish(WatchEvent(kind="error", error=RuntimeError(msg)))
