"""Page renderer — Kida templates for article, listing and static pages.

Templates resolve through the theme fallback chain: the user's
``templates/`` directory first, then the bundled default theme.  Every page
extends ``base.html`` which receives the shared head data (title block,
stylesheet/icon links, Open Graph meta tags).

The renderer holds only the compiled template environment; every render
call is a pure function of its arguments, so worker threads share one
instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from tabby._types import Html

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tabby.config import TabbyConfig

# Browser titles are only suffixed with the site name below this length
_MAX_BROWSER_TITLE = 70


@dataclass(frozen=True, slots=True)
class Link:
    """A ``<link>`` / ``<script>`` reference in the page head."""

    href: str
    kind: Literal["style", "icon", "script"]


@dataclass(frozen=True, slots=True)
class Meta:
    """An Open Graph ``<meta property=... content=...>`` tag."""

    name: str
    content: str


@dataclass(frozen=True, slots=True)
class ArticleEntry:
    """An article as listed on the index and shown in its own page.

    Attributes:
        link: Site-relative link (``blog/<name>.html``).
        title: Human title derived from the name.
        created: RFC 3339 creation timestamp.

    """

    link: str
    title: str
    created: str


@dataclass(frozen=True, slots=True)
class GalleryEntry:
    """A photo in the gallery: thumbnail linking to the full-size image."""

    preview_link: str
    image_link: str
    label: str


@dataclass(frozen=True, slots=True)
class _Head:
    title: str
    subtitle: str
    browser_title: str
    description: str
    links: tuple[Link, ...]
    metas: tuple[Meta, ...]


class PageRenderer:
    """Renders full HTML pages from Kida templates.

    Args:
        config: Site configuration (titles, base URL, template dirs).

    """

    def __init__(self, config: TabbyConfig) -> None:
        from kida import Environment, FileSystemLoader

        from tabby.theme import get_template_dirs

        self._config = config
        self._env = Environment(
            loader=FileSystemLoader(get_template_dirs(config)),
            autoescape=True,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_article(self, fragment: Html, entry: ArticleEntry) -> Html:
        """Wrap an article's HTML fragment in the article page."""
        suffix = f" | {self._config.site_title}"
        browser_title = entry.title
        if len(browser_title) <= _MAX_BROWSER_TITLE - len(suffix):
            browser_title += suffix
        byline = f"By {self._config.author}" if self._config.author else ""
        head = self._head(
            title=entry.title.upper(),
            subtitle=byline,
            browser_title=browser_title,
            description=entry.title,
            metas=(
                Meta("og:type", "article"),
                self._og_url(f"/{entry.link}"),
                Meta("og:title", entry.title),
            ),
        )
        return self._render("article.html", head, article=entry, content=fragment)

    def render_index(self, entries: Sequence[ArticleEntry]) -> Html:
        """The index page listing every article, in the given order."""
        head = self._head(
            title=self._config.site_title.upper(),
            subtitle=self._config.site_description,
            browser_title=self._config.site_title,
            description=self._config.site_description,
            metas=(
                Meta("og:type", "website"),
                self._og_url("/"),
                Meta("og:title", self._config.site_title),
            ),
        )
        return self._render("index.html", head, articles=list(entries))

    def render_gallery(self, entries: Sequence[GalleryEntry]) -> Html:
        """The gallery page listing every photo, in the given order."""
        head = self._head(
            title=self._config.site_title.upper(),
            subtitle="Gallery",
            browser_title=f"Gallery | {self._config.site_title}",
            description=f"Photos from {self._config.site_title}",
        )
        return self._render("gallery.html", head, photos=list(entries))

    def render_static(self, template_name: str) -> Html:
        """A page without listing data (``about.html``, ``404.html``)."""
        label = "404" if template_name.startswith("404") else template_name.removesuffix(".html")
        head = self._head(
            title=label.upper(),
            subtitle="Page Not Found" if label == "404" else "",
            browser_title=f"{label.title()} | {self._config.site_title}",
            description=self._config.site_description,
        )
        return self._render(template_name, head)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _head(
        self,
        *,
        title: str,
        subtitle: str,
        browser_title: str,
        description: str,
        metas: tuple[Meta, ...] = (),
    ) -> _Head:
        links = (Link("/styles.css", "style"), Link("/favicon.ico", "icon"))
        common = (Meta("og:site_name", self._config.site_title),)
        return _Head(
            title=title,
            subtitle=subtitle,
            browser_title=browser_title,
            description=description,
            links=links,
            metas=metas + common,
        )

    def _og_url(self, path: str) -> Meta:
        return Meta("og:url", f"{self._config.base_url.rstrip('/')}{path}")

    def _render(self, template_name: str, head: _Head, **context: Any) -> Html:
        template = self._env.get_template(template_name)
        return template.render(head=head, site_title=self._config.site_title, **context)
