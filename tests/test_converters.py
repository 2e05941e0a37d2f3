"""Tests for tabby.export.converters and tabby.export.pages with real libraries."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from tabby.config import TabbyConfig
from tabby.export.converters import (
    compile_sass,
    decode_image,
    default_converters,
    highlight_code_blocks,
    markdown_to_html,
    minify_page,
    resize_image,
)
from tabby.export.pages import ArticleEntry, GalleryEntry, PageRenderer


def _jpeg(width: int, height: int, mode: str = "RGB") -> bytes:
    buf = io.BytesIO()
    Image.new(mode, (width, height), color=128 if mode == "L" else (200, 120, 40)).save(
        buf, format="JPEG"
    )
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


class TestImages:
    """Pillow-backed decode and resize."""

    def test_decode(self) -> None:
        image = decode_image(_jpeg(32, 16))
        assert image.size == (32, 16)
        assert image.mode == "RGB"

    def test_decode_grayscale_converted(self) -> None:
        assert decode_image(_jpeg(8, 8, mode="L")).mode == "RGB"

    def test_decode_corrupt_raises(self) -> None:
        with pytest.raises(OSError):
            decode_image(b"definitely not a jpeg")

    def test_resize_keeps_aspect_ratio(self) -> None:
        data = resize_image(decode_image(_jpeg(2000, 1000)), 640, 360)
        with Image.open(io.BytesIO(data)) as out:
            assert out.format == "JPEG"
            assert out.size == (640, 320)

    def test_resize_one_decode_two_sizes(self) -> None:
        image = decode_image(_jpeg(1600, 900))
        small = resize_image(image, 640, 360)
        large = resize_image(image, 1280, 720)
        with Image.open(io.BytesIO(small)) as a, Image.open(io.BytesIO(large)) as b:
            assert a.size == (640, 360)
            assert b.size == (1280, 720)


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


class TestText:
    """Markdown, highlighting, minification and Sass."""

    def test_markdown_heading(self) -> None:
        assert "<h1" in markdown_to_html("# Hello\n\nWorld.\n")

    def test_highlight_known_language(self) -> None:
        fragment = '<pre><code class="language-python">def f():\n    return 1\n</code></pre>'
        result = highlight_code_blocks(fragment)
        assert "<span" in result
        assert result.startswith('<pre><code class="language-python">')

    def test_highlight_unknown_language_untouched(self) -> None:
        fragment = '<pre><code class="language-nosuchlang">x = 1</code></pre>'
        assert highlight_code_blocks(fragment) == fragment

    def test_plain_fragment_untouched(self) -> None:
        assert highlight_code_blocks("<p>hi</p>") == "<p>hi</p>"

    def test_minify(self) -> None:
        page = "<html>\n  <body>\n    <p>  hello  </p>\n  </body>\n</html>\n"
        result = minify_page(page)
        assert isinstance(result, bytes)
        assert len(result) < len(page)
        assert b"hello" in result

    def test_compile_sass(self, tmp_path: Path) -> None:
        source = tmp_path / "styles.sass"
        source.write_text("body\n  margin: 0\n")
        assert b"body{margin:0}" in compile_sass(source)


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


class TestPageRenderer:
    """Kida rendering through the template fallback chain."""

    @pytest.fixture
    def site(self, tmp_path: Path) -> TabbyConfig:
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "index.html").write_text(
            "{{ head.browser_title }}|{% for a in articles %}{{ a.title }};{% endfor %}"
        )
        (templates / "gallery.html").write_text(
            "{% for p in photos %}{{ p.image_link }};{% endfor %}"
        )
        return TabbyConfig(root=tmp_path, site_title="Cat Blog")

    def test_user_template_overrides(self, site: TabbyConfig) -> None:
        entries = [
            ArticleEntry(link="blog/b.html", title="B", created="2024-01-02T00:00:00+00:00"),
            ArticleEntry(link="blog/a.html", title="A", created="2024-01-01T00:00:00+00:00"),
        ]
        assert PageRenderer(site).render_index(entries) == "Cat Blog|B;A;"

    def test_gallery_order(self, site: TabbyConfig) -> None:
        entries = [
            GalleryEntry(preview_link="thumbnail/x.jpg", image_link="image/x.jpg", label="x"),
            GalleryEntry(preview_link="thumbnail/y.jpg", image_link="image/y.jpg", label="y"),
        ]
        assert PageRenderer(site).render_gallery(entries) == "image/x.jpg;image/y.jpg;"

    def test_bundled_static_page(self, tmp_path: Path) -> None:
        html = PageRenderer(TabbyConfig(root=tmp_path)).render_static("about.html")
        assert "<html" in html
        assert "About | Tabby" in html

    def test_default_converters(self, tmp_path: Path) -> None:
        converters = default_converters(TabbyConfig(root=tmp_path))
        assert isinstance(converters.pages, PageRenderer)
        assert converters.markdown is markdown_to_html
