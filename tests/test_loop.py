"""Tests for tabby.reactive.loop — the watch state machine."""

from __future__ import annotations

import queue
from pathlib import Path

import pytest

from tabby._errors import BuildError, ManifestError, WatchError
from tabby.content.manifest import Manifest
from tabby.content.watcher import WatchEvent
from tabby.export.dispatcher import BuildDispatcher
from tabby.observability import EventLog, ManifestWritten, StackCollector, WatchNotice
from tabby.reactive.loop import WatchLoop, WatchState


@pytest.fixture
def collector() -> StackCollector:
    return StackCollector(EventLog())


@pytest.fixture
def events() -> queue.Queue[WatchEvent]:
    return queue.Queue()


@pytest.fixture
def manifest_path(static_dir: Path) -> Path:
    return static_dir / ".meta.json"


@pytest.fixture
def make_loop(fakes, collector, events, static_dir, out_dir, manifest_path):
    def _make(*, manifest: Manifest | None = None, path: Path | None = None) -> WatchLoop:
        return WatchLoop(
            static_dir=static_dir,
            output_dir=out_dir,
            manifest_path=path or manifest_path,
            manifest=manifest if manifest is not None else Manifest(),
            dispatcher=BuildDispatcher(fakes.bundle(), collector),
            events=events,
            collector=collector,
        )

    return _make


@pytest.fixture
def loop(make_loop) -> WatchLoop:
    """A loop that has completed its initial build."""
    watch_loop = make_loop()
    watch_loop.initial_build()
    return watch_loop


def _notices(collector: StackCollector, kind: str) -> list[WatchNotice]:
    return [e for e in collector.log.query(event_type=WatchNotice, limit=1000) if e.kind == kind]


# ---------------------------------------------------------------------------
# Initial build
# ---------------------------------------------------------------------------


class TestInitialBuild:
    """The first cycle, before any event is handled."""

    def test_builds_and_persists(self, make_loop, out_dir, manifest_path) -> None:
        watch_loop = make_loop()
        report = watch_loop.initial_build()

        assert len(report.processed) == 5
        assert (out_dir / "index.html").is_file()
        assert Manifest.load(manifest_path) == watch_loop.manifest
        assert len(watch_loop.manifest) == 5
        assert watch_loop.state is WatchState.RUNNING

    def test_up_to_date_manifest_not_rewritten(
        self, make_loop, collector, manifest_path
    ) -> None:
        make_loop().initial_build()
        current = Manifest.load(manifest_path)
        manifest_path.unlink()

        make_loop(manifest=current).initial_build()

        assert not manifest_path.exists()
        assert _notices(collector, "unchanged")

    def test_failure_is_fatal(self, make_loop, static_dir, manifest_path) -> None:
        (static_dir / "broken.md").write_text("boom\n")
        with pytest.raises(BuildError):
            make_loop().initial_build()
        assert not manifest_path.exists()

    def test_persist_failure_is_fatal(self, make_loop, tmp_path) -> None:
        (tmp_path / "blocker").write_text("file")
        with pytest.raises(ManifestError):
            make_loop(path=tmp_path / "blocker" / "meta.json").initial_build()


# ---------------------------------------------------------------------------
# Event handling
# ---------------------------------------------------------------------------


class TestHandle:
    """One event, one transition."""

    @pytest.mark.parametrize("kind", ["chmod", "rescan"])
    def test_benign_events_ignored(self, loop, fakes, collector, kind: str) -> None:
        fakes.calls.clear()
        state = loop.handle(WatchEvent(kind=kind))  # type: ignore[arg-type]

        assert state is WatchState.RUNNING
        assert fakes.calls["render_index"] == 0
        assert _notices(collector, "ignored")

    def test_new_file_rebuilds_and_persists(
        self, loop, fakes, static_dir, out_dir, manifest_path
    ) -> None:
        new = static_dir / "second-post.md"
        new.write_text("more\n")
        fakes.calls.clear()

        state = loop.handle(WatchEvent(kind="created", paths=(new,)))

        assert state is WatchState.RUNNING
        assert fakes.calls["markdown"] == 1
        assert (out_dir / "blog" / "second-post.html").is_file()
        assert "second-post" in loop.manifest
        assert Manifest.load(manifest_path) == loop.manifest

    def test_no_timing_change_skips_write(
        self, loop, collector, static_dir, manifest_path
    ) -> None:
        manifest_path.unlink()
        writes_before = len(collector.log.query(event_type=ManifestWritten))

        loop.handle(WatchEvent(kind="modified", paths=(static_dir / "app.js",)))

        assert not manifest_path.exists()
        assert len(collector.log.query(event_type=ManifestWritten)) == writes_before

    def test_deleted_resource_dropped_from_manifest(
        self, loop, static_dir, manifest_path
    ) -> None:
        (static_dir / "app.js").unlink()
        loop.handle(WatchEvent(kind="deleted", paths=(static_dir / "app.js",)))

        assert "app" not in loop.manifest
        assert "app" not in Manifest.load(manifest_path)

    def test_build_failure_keeps_running(
        self, loop, collector, static_dir, manifest_path
    ) -> None:
        before = loop.manifest
        (static_dir / "broken.md").write_text("boom\n")

        state = loop.handle(WatchEvent(kind="created", paths=(static_dir / "broken.md",)))

        assert state is WatchState.RUNNING
        assert loop.manifest == before
        assert Manifest.load(manifest_path) == before
        assert _notices(collector, "cycle_failed")

    def test_scan_failure_keeps_running(self, loop, collector, static_dir) -> None:
        before = loop.manifest
        (static_dir / "README").write_text("no extension")

        state = loop.handle(WatchEvent(kind="created", paths=(static_dir / "README",)))

        assert state is WatchState.RUNNING
        assert loop.manifest == before
        (notice,) = _notices(collector, "cycle_failed")
        assert "No file extension" in notice.detail

    def test_persist_failure_updates_memory(
        self, make_loop, collector, static_dir, tmp_path
    ) -> None:
        blocker = tmp_path / "blocker"
        watch_loop = make_loop(path=blocker / "meta.json")
        # Let the initial build persist, then make the location unwritable.
        blocker.mkdir()
        watch_loop.initial_build()
        (blocker / "meta.json").unlink()
        blocker.rmdir()
        blocker.write_text("file")

        (static_dir / "later.md").write_text("later\n")
        state = watch_loop.handle(WatchEvent(kind="created"))

        assert state is WatchState.RUNNING
        assert "later" in watch_loop.manifest
        assert _notices(collector, "persist_failed")

    def test_error_terminates(self, loop, collector) -> None:
        state = loop.handle(WatchEvent(kind="error", error=RuntimeError("inotify gone")))

        assert state is WatchState.TERMINATED
        assert loop.state is WatchState.TERMINATED
        (notice,) = _notices(collector, "fatal")
        assert "inotify gone" in notice.detail

    def test_events_after_termination_ignored(self, loop, fakes) -> None:
        loop.handle(WatchEvent(kind="error", error=RuntimeError("x")))
        fakes.calls.clear()
        assert loop.handle(WatchEvent(kind="modified")) is WatchState.TERMINATED
        assert fakes.calls["render_index"] == 0


# ---------------------------------------------------------------------------
# serve_forever / run
# ---------------------------------------------------------------------------


class TestServeForever:
    """The blocking loop ends only on a watcher error."""

    def test_drains_until_error(self, loop, events, fakes) -> None:
        fakes.calls.clear()
        events.put(WatchEvent(kind="chmod"))
        events.put(WatchEvent(kind="modified"))
        events.put(WatchEvent(kind="error", error=OSError("watch failed")))

        with pytest.raises(WatchError, match="watch failed") as info:
            loop.serve_forever()

        assert isinstance(info.value.__cause__, OSError)
        assert fakes.calls["render_index"] == 1
        assert events.empty()

    def test_run_builds_first(self, make_loop, events, out_dir) -> None:
        events.put(WatchEvent(kind="error", error=RuntimeError("stop")))
        with pytest.raises(WatchError):
            make_loop().run()
        assert (out_dir / "index.html").is_file()
