"""Converters — the stateless per-resource conversion functions.

Each converter is a pure function of its input: markdown text to an HTML
fragment, a page to minified bytes, a stylesheet path to compressed CSS,
image bytes to a decoded image and a decoded image to resized JPEG bytes.
``Converters`` bundles them so the dispatcher receives them at construction
and tests can substitute counting fakes.

Heavy libraries are imported lazily, on first use.
"""

from __future__ import annotations

import html
import io
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from tabby._types import DecodedImage, Html

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from tabby.config import TabbyConfig
    from tabby.export.pages import PageRenderer

# Pygments style used for inline-styled code blocks
_HIGHLIGHT_STYLE = "monokai"

_JPEG_QUALITY = 90

_CODE_BLOCK_RE = re.compile(
    r'<pre><code class="language-(?P<lang>[^"\s]+)"[^>]*>(?P<body>.*?)</code></pre>',
    re.DOTALL,
)


@dataclass(frozen=True, slots=True)
class Converters:
    """The external conversion functions used by the build dispatcher.

    Attributes:
        markdown: Markdown text -> HTML fragment.
        highlight: HTML fragment -> fragment with highlighted code blocks.
        pages: Renderer for article, listing and static pages.
        minify: Full page HTML -> minified bytes.
        compile_style: Sass source path -> compressed CSS bytes.
        decode_image: Raw image bytes -> decoded image.
        resize_image: (decoded image, width, height) -> JPEG bytes.

    """

    markdown: Callable[[str], Html]
    highlight: Callable[[Html], Html]
    pages: PageRenderer
    minify: Callable[[Html], bytes]
    compile_style: Callable[[Path], bytes]
    decode_image: Callable[[bytes], DecodedImage]
    resize_image: Callable[[DecodedImage, int, int], bytes]


def default_converters(config: TabbyConfig) -> Converters:
    """Converters backed by Patitas, Pygments, Kida, minify-html, libsass and Pillow."""
    from tabby.export.pages import PageRenderer

    return Converters(
        markdown=markdown_to_html,
        highlight=highlight_code_blocks,
        pages=PageRenderer(config),
        minify=minify_page,
        compile_style=compile_sass,
        decode_image=decode_image,
        resize_image=resize_image,
    )


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def _markdown_renderer():  # noqa: ANN202
    from patitas import Markdown

    return Markdown(plugins=["table"])


def markdown_to_html(text: str) -> Html:
    """Render markdown to an HTML fragment (tables enabled)."""
    return _markdown_renderer()(text)


def highlight_code_blocks(fragment: Html) -> Html:
    """Syntax-highlight fenced code blocks that declare a language.

    Rewrites ``<pre><code class="language-x">`` blocks with inline-styled
    Pygments spans.  Blocks in unknown languages are left untouched.
    """
    from pygments import highlight
    from pygments.formatters import HtmlFormatter
    from pygments.lexers import get_lexer_by_name
    from pygments.util import ClassNotFound

    formatter = HtmlFormatter(nowrap=True, noclasses=True, style=_HIGHLIGHT_STYLE)

    def _replace(match: re.Match[str]) -> str:
        lang = match.group("lang")
        try:
            lexer = get_lexer_by_name(lang)
        except ClassNotFound:
            return match.group(0)
        code = html.unescape(match.group("body"))
        highlighted = highlight(code, lexer, formatter)
        return f'<pre><code class="language-{lang}">{highlighted}</code></pre>'

    return _CODE_BLOCK_RE.sub(_replace, fragment)


# ---------------------------------------------------------------------------
# HTML / CSS
# ---------------------------------------------------------------------------


def minify_page(page: Html) -> bytes:
    """Minify a full HTML page (inline CSS and JS included)."""
    import minify_html

    return minify_html.minify(page, minify_css=True, minify_js=True).encode("utf-8")


def compile_sass(path: Path) -> bytes:
    """Compile a ``.sass`` file to compressed CSS."""
    import sass

    css = sass.compile(filename=str(path), output_style="compressed")
    return css.encode("utf-8")


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


def decode_image(data: bytes) -> DecodedImage:
    """Decode image bytes fully (raises on corrupt data)."""
    from PIL import Image

    image = Image.open(io.BytesIO(data))
    image.load()
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def resize_image(image: DecodedImage, width: int, height: int) -> bytes:
    """Fit *image* inside ``width x height`` (aspect kept) and encode as JPEG."""
    from PIL import Image, ImageOps

    resized = ImageOps.contain(image, (width, height), method=Image.Resampling.BILINEAR)
    buf = io.BytesIO()
    resized.save(buf, format="JPEG", quality=_JPEG_QUALITY)
    return buf.getvalue()
