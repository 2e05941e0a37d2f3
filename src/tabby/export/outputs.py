"""Output layout — where each resource is published.

Relative to the output root::

    index.html  about.html  404.html  gallery.html
    blog/<name>.html
    <name>.css  <name>.js  <name>.ico
    image/<name>.jpg  thumbnail/<name>.jpg

A resource whose outputs are missing is rebuilt even when unchanged, so
deleting build output (or a half-finished photo) heals on the next build.
"""

from __future__ import annotations

import re
from pathlib import Path

from tabby.content.classifier import Article, Icon, Photo, Resource, Script, Style

BLOG_DIR = "blog"
IMAGE_DIR = "image"
THUMBNAIL_DIR = "thumbnail"

# (width, height) boxes the photo is fitted into
THUMBNAIL_SIZE = (640, 360)
FULL_SIZE = (1280, 720)

INDEX_PAGE = "index.html"
GALLERY_PAGE = "gallery.html"

# Output file -> template name, written on every build
STATIC_PAGES: tuple[tuple[str, str], ...] = (
    ("404.html", "404.html"),
    ("about.html", "about.html"),
)

_WORD_SEPARATORS = re.compile(r"[-_\s]+")


def output_paths(resource: Resource, root: Path) -> tuple[Path, ...]:
    """Every file the resource's build unit writes."""
    match resource:
        case Article(name=name):
            return (root / BLOG_DIR / f"{name}.html",)
        case Photo(name=name):
            return (
                root / THUMBNAIL_DIR / f"{name}.jpg",
                root / IMAGE_DIR / f"{name}.jpg",
            )
        case Style(name=name):
            return (root / f"{name}.css",)
        case Script(name=name):
            return (root / f"{name}.js",)
        case Icon(name=name):
            return (root / f"{name}.ico",)
    msg = f"Unknown resource: {resource!r}"
    raise TypeError(msg)


def outputs_exist(resource: Resource, root: Path) -> bool:
    """True only when ALL of the resource's outputs exist."""
    return all(path.exists() for path in output_paths(resource, root))


def ensure_output_dirs(root: Path) -> None:
    """Create the output root and its fixed subdirectories (idempotent)."""
    for directory in (root, root / BLOG_DIR, root / IMAGE_DIR, root / THUMBNAIL_DIR):
        directory.mkdir(parents=True, exist_ok=True)


def article_link(name: str) -> str:
    """Site-relative link of an article page."""
    return f"{BLOG_DIR}/{name}.html"


def thumbnail_link(name: str) -> str:
    return f"{THUMBNAIL_DIR}/{name}.jpg"


def image_link(name: str) -> str:
    return f"{IMAGE_DIR}/{name}.jpg"


def title_from_name(name: str) -> str:
    """``"my-first_post"`` -> ``"My First Post"``."""
    return " ".join(word.capitalize() for word in _WORD_SEPARATORS.split(name) if word)
