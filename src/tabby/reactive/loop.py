"""Watch loop — rebuild on every debounced filesystem event.

Two states:

- ``RUNNING``: the steady loop.  One event is received at a time from the
  watcher queue (the only blocking point).
- ``TERMINATED``: entered on a watcher error; ``run()`` raises WatchError.

Per event:

- ``error`` -> record, terminate.
- ``chmod`` / ``rescan`` -> ignored.
- anything else -> rescan against the manifest held in memory and build
  with ``force=False``.  A failed scan or build is recorded and the loop
  keeps running with the old manifest (the next event retries).  After a
  successful build the new Timing map replaces the held manifest and is
  persisted only if it differs from it.

The loop owns the in-memory manifest; nothing else writes it while a cycle
runs, since exactly one cycle runs at a time.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from tabby._errors import ManifestError, ScanError, WatchError
from tabby.content.registry import Registry

if TYPE_CHECKING:
    import queue
    from pathlib import Path

    from tabby.content.manifest import Manifest
    from tabby.content.watcher import WatchEvent
    from tabby.export.dispatcher import BuildDispatcher, BuildReport
    from tabby.observability.collector import StackCollector


class WatchState(enum.Enum):
    """States of the watch loop."""

    RUNNING = "running"
    TERMINATED = "terminated"


class WatchLoop:
    """Single-consumer rebuild loop over a queue of WatchEvents.

    Args:
        static_dir: Source directory to rescan.
        output_dir: Output root passed to the dispatcher.
        manifest_path: Where the manifest is persisted.
        manifest: Manifest loaded at startup.
        dispatcher: Build dispatcher (owns the converters).
        events: Bounded queue fed by the SourceWatcher.
        collector: Observability sink.

    """

    def __init__(
        self,
        *,
        static_dir: Path,
        output_dir: Path,
        manifest_path: Path,
        manifest: Manifest,
        dispatcher: BuildDispatcher,
        events: queue.Queue[WatchEvent],
        collector: StackCollector,
    ) -> None:
        self._static_dir = static_dir
        self._output_dir = output_dir
        self._manifest_path = manifest_path
        self._manifest = manifest
        self._dispatcher = dispatcher
        self._events = events
        self._collector = collector
        self._state = WatchState.RUNNING
        self._error: BaseException | None = None

    @property
    def state(self) -> WatchState:
        return self._state

    @property
    def manifest(self) -> Manifest:
        """The manifest currently held in memory."""
        return self._manifest

    def initial_build(self) -> BuildReport:
        """Build everything once before entering the loop.

        Unlike later cycles, a failure here is fatal: the loop only starts
        from a fully built tree.

        Raises:
            ScanError: If the source directory cannot be scanned.
            BuildError: If any unit of the first build fails.
            ManifestError: If the first manifest write fails.

        """
        registry = Registry.scan(self._static_dir, self._manifest, self._collector)
        report = self._dispatcher.build(registry, self._output_dir, force=False)
        report.raise_for_failures()
        self._store(registry.to_manifest())
        return report

    def run(self) -> None:
        """Initial build, then process events until the watcher fails."""
        self.initial_build()
        self.serve_forever()

    def serve_forever(self) -> None:
        """Block on the event queue, one cycle per event.

        Raises:
            WatchError: When the watcher reports an error.

        """
        while self._state is WatchState.RUNNING:
            self.handle(self._events.get())
        msg = f"File watch error, quitting: {self._error}"
        raise WatchError(msg) from self._error

    def handle(self, event: WatchEvent) -> WatchState:
        """Process one event and return the resulting state."""
        if self._state is WatchState.TERMINATED:
            return self._state

        if event.kind == "error":
            self._error = event.error
            self._collector.record_watch("fatal", str(event.error))
            self._state = WatchState.TERMINATED
            return self._state

        if event.is_benign:
            self._collector.record_watch("ignored", event.kind)
            return self._state

        self._collector.record_watch("rebuild", f"{event.kind}: {_describe(event)}")
        self._rebuild()
        return self._state

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def _rebuild(self) -> None:
        try:
            registry = Registry.scan(self._static_dir, self._manifest, self._collector)
            report = self._dispatcher.build(registry, self._output_dir, force=False)
        except (ScanError, OSError) as exc:
            self._collector.record_watch("cycle_failed", str(exc))
            return
        if not report.ok:
            names = ", ".join(f.name for f in report.failures)
            self._collector.record_watch("cycle_failed", f"could not build {names}")
            return

        self._store(registry.to_manifest(), fatal=False)

    def _store(self, updated: Manifest, *, fatal: bool = True) -> None:
        if updated == self._manifest:
            self._collector.record_watch("unchanged", str(self._manifest_path))
            return
        # The in-memory copy reflects the tree on disk even if the write fails.
        self._manifest = updated
        try:
            updated.save(self._manifest_path)
        except ManifestError as exc:
            if fatal:
                raise
            self._collector.record_watch("persist_failed", str(exc))
            return
        self._collector.record_manifest(str(self._manifest_path), entries=len(updated))


def _describe(event: WatchEvent) -> str:
    names = [p.name for p in event.paths]
    if len(names) > 3:
        return ", ".join(names[:3]) + f" (+{len(names) - 3} more)"
    return ", ".join(names) or "-"
