"""Tabby application — the build and serve entry points.

``build`` runs one scan -> build -> persist cycle.  ``serve`` runs the watch
loop until the filesystem watcher fails.  Both thread one explicit manifest
value and one StackCollector through the cycle.
"""

from __future__ import annotations

import shutil
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

from tabby.config_loader import load_config
from tabby.content.manifest import Manifest
from tabby.content.registry import Registry
from tabby.export.dispatcher import BuildDispatcher
from tabby.observability import EventLog, StackCollector

if TYPE_CHECKING:
    from tabby.config import TabbyConfig
    from tabby.export.converters import Converters
    from tabby.export.dispatcher import BuildReport


def _create_dispatcher(
    config: TabbyConfig,
    collector: StackCollector,
    converters: Converters | None = None,
) -> BuildDispatcher:
    """Create a dispatcher backed by the default converters unless given."""
    if converters is None:
        from tabby.export.converters import default_converters

        converters = default_converters(config)
    return BuildDispatcher(converters, collector, workers=config.workers)


def _clean_output(output_dir: Path) -> None:
    """Remove the output directory before a clean build."""
    if output_dir.exists():
        print(f"  Cleaning {output_dir}", file=sys.stderr)
        shutil.rmtree(output_dir)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def run_build(
    config: TabbyConfig,
    *,
    force: bool = False,
    clean: bool = False,
    converters: Converters | None = None,
    collector: StackCollector | None = None,
) -> BuildReport:
    """One build cycle for an already-resolved config.

    The manifest is rewritten only if the new Timing map differs from the
    one loaded.

    Raises:
        ScanError: If the source directory cannot be scanned.
        BuildError: If any resource or page failed to build.
        ManifestError: If the manifest cannot be written.

    """
    collector = collector if collector is not None else StackCollector(EventLog())
    manifest = Manifest.load(config.metadata_path)
    registry = Registry.scan(config.static_path, manifest, collector)

    if clean:
        _clean_output(config.output_path)

    dispatcher = _create_dispatcher(config, collector, converters)
    report = dispatcher.build(registry, config.output_path, force=force)
    report.raise_for_failures()

    updated = registry.to_manifest()
    if updated != manifest:
        updated.save(config.metadata_path)
        collector.record_manifest(str(config.metadata_path), entries=len(updated))
    return report


def build(
    root: str | Path = ".",
    *,
    force: bool = False,
    clean: bool = False,
    **kwargs: object,
) -> BuildReport:
    """Build the site once.

    Args:
        root: Path to the project root directory.
        force: Rebuild every resource regardless of timings (``--no-cache``).
        clean: Remove the output directory first.
        **kwargs: Override TabbyConfig fields.

    """
    from tabby.banner import print_banner

    config = load_config(Path(root), **kwargs)
    print_banner(config, mode="build", force=force)

    collector = StackCollector(EventLog(), verbose=True)
    report = run_build(config, force=force, clean=clean, collector=collector)
    _print_build_summary(report)
    return report


def serve(root: str | Path = ".", **kwargs: object) -> None:
    """Build, then rebuild on every change in the static directory.

    Runs until the filesystem watcher fails (raises WatchError) or the
    process is interrupted.

    Args:
        root: Path to the project root directory.
        **kwargs: Override TabbyConfig fields.

    """
    from tabby.banner import print_banner
    from tabby.content.watcher import SourceWatcher
    from tabby.reactive.loop import WatchLoop

    config = load_config(Path(root), **kwargs)
    collector = StackCollector(EventLog(), verbose=True)
    t0 = time.perf_counter()

    watcher = SourceWatcher(config.static_path, debounce_ms=config.debounce_ms)
    loop = WatchLoop(
        static_dir=config.static_path,
        output_dir=config.output_path,
        manifest_path=config.metadata_path,
        manifest=Manifest.load(config.metadata_path),
        dispatcher=_create_dispatcher(config, collector),
        events=watcher.events,
        collector=collector,
    )

    # Changes made while the first build runs queue up as events.
    watcher.start()
    try:
        report = loop.initial_build()
        load_ms = (time.perf_counter() - t0) * 1000
        print_banner(
            config, mode="serve", resource_count=len(report.processed), load_ms=load_ms,
        )
        loop.serve_forever()
    finally:
        watcher.stop()


def _print_build_summary(report: BuildReport) -> None:
    """Print build completion summary to stderr."""
    built = len(report.processed)
    lines = [
        "",
        "─" * 41,
        f"  Built {built} resource{'s' if built != 1 else ''}",
    ]
    if report.skipped:
        lines.append(f"  Unchanged: {len(report.skipped)}")
    lines.append(f"  Output: {report.output_dir}")
    lines.append(f"  Done in {report.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)
