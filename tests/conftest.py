"""Shared test fixtures for tabby."""

from __future__ import annotations

import os
import threading
from collections import Counter
from pathlib import Path
from typing import Any

import pytest

from tabby.export.converters import Converters

# Fixed epoch instants (ns) so Timings are reproducible across runs
T0 = 1_700_000_000_000_000_000
HOUR_NS = 3_600 * 1_000_000_000


def set_mtime(path: Path, ns: int) -> None:
    """Pin a file's modification time to *ns*."""
    os.utime(path, ns=(ns, ns))


class FakePages:
    """Page renderer double that records every call."""

    def __init__(self, calls: Counter[str], lock: threading.Lock) -> None:
        self._calls = calls
        self._lock = lock
        self.index_entries: list[Any] = []
        self.gallery_entries: list[Any] = []
        self.fail_on: set[str] = set()

    def _count(self, name: str) -> None:
        with self._lock:
            self._calls[name] += 1
        if name in self.fail_on:
            msg = f"cannot render {name}"
            raise RuntimeError(msg)

    def render_article(self, fragment: str, entry: Any) -> str:
        self._count("render_article")
        return f"<h1>{entry.title}</h1>{fragment}"

    def render_index(self, entries: Any) -> str:
        self._count("render_index")
        self.index_entries = list(entries)
        return "index:" + ",".join(e.link for e in entries)

    def render_gallery(self, entries: Any) -> str:
        self._count("render_gallery")
        self.gallery_entries = list(entries)
        return "gallery:" + ",".join(e.image_link for e in entries)

    def render_static(self, template_name: str) -> str:
        self._count(f"render_static:{template_name}")
        return f"static:{template_name}"


class FakeConverters:
    """Counting converter set with the same shape as the real one.

    Markdown sources containing ``boom`` and image bytes starting with
    ``corrupt`` fail, mimicking converter errors.
    """

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()
        self._lock = threading.Lock()
        self.pages = FakePages(self.calls, self._lock)

    def _count(self, name: str) -> None:
        with self._lock:
            self.calls[name] += 1

    def markdown(self, text: str) -> str:
        self._count("markdown")
        if "boom" in text:
            msg = "unparseable markdown"
            raise ValueError(msg)
        return f"<p>{text.strip()}</p>"

    def highlight(self, fragment: str) -> str:
        self._count("highlight")
        return fragment

    def minify(self, page: str) -> bytes:
        self._count("minify")
        return page.encode("utf-8")

    def compile_style(self, path: Path) -> bytes:
        self._count("compile_style")
        return b"/*css*/" + path.read_bytes()

    def decode_image(self, data: bytes) -> bytes:
        self._count("decode_image")
        if data.startswith(b"corrupt"):
            msg = "not a JPEG"
            raise OSError(msg)
        return data

    def resize_image(self, image: bytes, width: int, height: int) -> bytes:
        self._count("resize_image")
        return f"{width}x{height}:".encode() + image

    def bundle(self) -> Converters:
        return Converters(
            markdown=self.markdown,
            highlight=self.highlight,
            pages=self.pages,  # type: ignore[arg-type]
            minify=self.minify,
            compile_style=self.compile_style,
            decode_image=self.decode_image,
            resize_image=self.resize_image,
        )


@pytest.fixture
def fakes() -> FakeConverters:
    """A fresh set of counting converters."""
    return FakeConverters()


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    """A flat source directory with one resource of every kind.

    Creation order (oldest first): styles, favicon, app, beach, hello.
    """
    static = tmp_path / "static"
    static.mkdir()
    files = {
        "styles.sass": "body\n  margin: 0\n",
        "favicon.ico": "ICO",
        "app.js": "console.log('hi');\n",
        "beach.jpg": "JPEGDATA",
        "hello-world.md": "# Hello\n\nFirst post.\n",
    }
    for offset, (name, content) in enumerate(files.items()):
        path = static / name
        path.write_text(content)
        set_mtime(path, T0 + offset * HOUR_NS)
    return static


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    """Output root (not created)."""
    return tmp_path / "build"
