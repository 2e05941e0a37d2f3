"""Build dispatcher — converts the resources that need it, then aggregates.

One build cycle:

1. Create the output directories (idempotent).
2. Select resources: ``changed or force or outputs missing``.  A photo
   counts as missing unless BOTH its sizes exist.
3. Convert the selection on a thread pool, one unit per resource.  Units
   write disjoint paths and share no mutable state; a failing unit is
   recorded and never cancels its siblings.
4. After every unit has joined, write ``index.html`` (all articles),
   ``gallery.html`` (all photos) and the static pages from the FULL
   registry, in registry order.

There is no rollback: a partial failure leaves partial output on disk,
and the missing-output rule repairs it on the next build.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from tabby._errors import BuildError, ConversionError
from tabby.content.classifier import Article, Icon, Photo, Resource, Script, Style
from tabby.export.outputs import (
    FULL_SIZE,
    GALLERY_PAGE,
    INDEX_PAGE,
    STATIC_PAGES,
    THUMBNAIL_SIZE,
    article_link,
    ensure_output_dirs,
    image_link,
    output_paths,
    outputs_exist,
    thumbnail_link,
    title_from_name,
)
from tabby.export.pages import ArticleEntry, GalleryEntry

if TYPE_CHECKING:
    from tabby.content.registry import Registry
    from tabby.export.converters import Converters
    from tabby.observability.collector import StackCollector


@dataclass(frozen=True, slots=True)
class ResourceFailure:
    """A build unit that failed.

    Attributes:
        name: Source file name, or the output page name for aggregates.
        source: Source path (or the page kind for aggregates).
        error: Rendered error message.
        exception: The raised exception (a ``ConversionError`` for resources,
            chained to the converter failure).

    """

    name: str
    source: str
    error: str
    exception: BaseException | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Outcome of one build cycle.

    Attributes:
        processed: Source file names that were converted successfully.
        skipped: Source file names left untouched (unchanged, outputs present).
        failures: Every failed unit (resources and aggregate pages).
        output_dir: The output root.
        duration_ms: Wall-clock time of the cycle.

    """

    processed: tuple[str, ...]
    skipped: tuple[str, ...]
    failures: tuple[ResourceFailure, ...]
    output_dir: Path
    duration_ms: float

    @property
    def ok(self) -> bool:
        """True only if every unit succeeded."""
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise ``BuildError`` listing every failure, if there were any."""
        if self.failures:
            raise BuildError(self.failures)


class BuildDispatcher:
    """Runs build cycles over a registry.

    Args:
        converters: The conversion functions (injected; never global).
        collector: Observability sink.
        workers: Thread pool size (0 = let the executor decide).

    """

    def __init__(
        self,
        converters: Converters,
        collector: StackCollector | None = None,
        *,
        workers: int = 0,
    ) -> None:
        from tabby.observability.collector import StackCollector

        self._converters = converters
        self._collector = collector if collector is not None else StackCollector()
        self._workers = workers or None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def select(
        self, registry: Registry, output_root: Path, *, force: bool = False
    ) -> tuple[tuple[Resource, ...], tuple[Resource, ...]]:
        """Split the registry into ``(to_build, to_skip)``."""
        selected: list[Resource] = []
        unchanged: list[Resource] = []
        for resource in registry:
            if resource.changed or force or not outputs_exist(resource, output_root):
                selected.append(resource)
            else:
                unchanged.append(resource)
        return tuple(selected), tuple(unchanged)

    def build(self, registry: Registry, output_root: Path, *, force: bool = False) -> BuildReport:
        """Run one build cycle.

        Returns:
            A BuildReport; ``report.ok`` is False if any unit failed.

        Raises:
            OSError: If the output directories cannot be created (nothing
                has been written yet in that case).

        """
        t0 = time.perf_counter()
        ensure_output_dirs(output_root)

        selected, unchanged = self.select(registry, output_root, force=force)
        processed, failures = self._run_units(selected, output_root)

        # Aggregates read only registry metadata; they run after the join.
        failures.extend(self._write_aggregates(registry, output_root))

        elapsed = (time.perf_counter() - t0) * 1000
        self._collector.record_cycle(
            processed=len(processed),
            skipped=len(unchanged),
            failed=len(failures),
            duration_ms=elapsed,
        )
        return BuildReport(
            processed=tuple(sorted(processed)),
            skipped=tuple(sorted(r.path.name for r in unchanged)),
            failures=tuple(failures),
            output_dir=output_root,
            duration_ms=elapsed,
        )

    # ------------------------------------------------------------------
    # Per-resource units
    # ------------------------------------------------------------------

    def _run_units(
        self, selected: tuple[Resource, ...], output_root: Path
    ) -> tuple[list[str], list[ResourceFailure]]:
        processed: list[str] = []
        failures: list[ResourceFailure] = []
        if not selected:
            return processed, failures

        with ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="tabby-build"
        ) as pool:
            futures = {pool.submit(self._run_unit, r, output_root): r for r in selected}
            for future in as_completed(futures):
                resource = futures[future]
                try:
                    future.result()
                except ConversionError as exc:
                    failure = ResourceFailure(
                        name=resource.path.name,
                        source=str(resource.path),
                        error=str(exc),
                        exception=exc,
                    )
                    failures.append(failure)
                    self._collector.record_failure(failure.name, failure.source, failure.error)
                else:
                    processed.append(resource.path.name)
        return processed, failures

    def _run_unit(self, resource: Resource, output_root: Path) -> None:
        """Convert one resource.

        Raises:
            ConversionError: Wrapping whatever the converter or the write
                raised; the original exception is its ``__cause__``.

        """
        t0 = time.perf_counter()
        try:
            match resource:
                case Article():
                    self._write_article(resource, output_root)
                case Photo():
                    self._write_photo(resource, output_root)
                case Style():
                    self._write_style(resource, output_root)
                case Script() | Icon():
                    self._copy_resource(resource, output_root)
        except Exception as exc:  # noqa: BLE001
            msg = f"{type(exc).__name__}: {exc}"
            raise ConversionError(msg) from exc
        elapsed = (time.perf_counter() - t0) * 1000
        self._collector.record_built(
            resource.name,
            resource.kind,
            str(resource.path),
            tuple(str(p) for p in output_paths(resource, output_root)),
            duration_ms=elapsed,
        )

    def _write_article(self, article: Article, output_root: Path) -> None:
        conv = self._converters
        text = article.path.read_text(encoding="utf-8")
        fragment = conv.highlight(conv.markdown(text))
        page = conv.pages.render_article(fragment, article_entry(article))
        (blog_file,) = output_paths(article, output_root)
        _write(blog_file, conv.minify(page))

    def _write_photo(self, photo: Photo, output_root: Path) -> None:
        conv = self._converters
        image = conv.decode_image(photo.path.read_bytes())
        thumbnail_path, fullsize_path = output_paths(photo, output_root)
        # Both sizes are always regenerated together.
        _write(thumbnail_path, conv.resize_image(image, *THUMBNAIL_SIZE))
        _write(fullsize_path, conv.resize_image(image, *FULL_SIZE))

    def _write_style(self, style: Style, output_root: Path) -> None:
        (css_file,) = output_paths(style, output_root)
        _write(css_file, self._converters.compile_style(style.path))

    def _copy_resource(self, resource: Script | Icon, output_root: Path) -> None:
        (out_file,) = output_paths(resource, output_root)
        _write(out_file, resource.path.read_bytes())

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def _write_aggregates(self, registry: Registry, output_root: Path) -> list[ResourceFailure]:
        pages = self._converters.pages
        articles = [article_entry(a) for a in registry.articles()]
        photos = [gallery_entry(p) for p in registry.photos()]

        jobs = [
            (INDEX_PAGE, "index", len(articles), lambda: pages.render_index(articles)),
            (GALLERY_PAGE, "gallery", len(photos), lambda: pages.render_gallery(photos)),
        ]
        for file_name, template_name in STATIC_PAGES:
            jobs.append(
                (file_name, "static", 0, lambda t=template_name: pages.render_static(t))
            )

        failures: list[ResourceFailure] = []
        for file_name, kind, entries, render in jobs:
            target = output_root / file_name
            try:
                _write(target, self._converters.minify(render()))
            except Exception as exc:  # noqa: BLE001
                failure = ResourceFailure(
                    name=file_name,
                    source=kind,
                    error=f"{type(exc).__name__}: {exc}",
                    exception=exc,
                )
                failures.append(failure)
                self._collector.record_failure(failure.name, failure.source, failure.error)
            else:
                self._collector.record_page(kind, str(target), entries=entries)
        return failures


def article_entry(article: Article) -> ArticleEntry:
    """Listing data for an article."""
    return ArticleEntry(
        link=article_link(article.name),
        title=title_from_name(article.name),
        created=article.timing.created.isoformat(),
    )


def gallery_entry(photo: Photo) -> GalleryEntry:
    """Listing data for a photo."""
    return GalleryEntry(
        preview_link=thumbnail_link(photo.name),
        image_link=image_link(photo.name),
        label=photo.name,
    )


def _write(path: Path, content: bytes) -> None:
    """Write bytes, creating parent dirs as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
