"""Tabby configuration.

TabbyConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class TabbyConfig:
    """Configuration for a Tabby build.

    Attributes:
        root: Path to the project root directory.
              Always resolved to an absolute path on construction.
        static_dir: Directory holding the flat set of source files.
        output: Output directory for the published site tree.
        metadata: Location of the timing manifest.  ``None`` places it
            inside the static directory as ``.meta.json``.
        templates_dir: Directory with user templates that override the
            bundled theme.
        debounce_ms: Window in which filesystem events are coalesced
            into a single rebuild in watch mode.
        workers: Size of the conversion thread pool (0 = auto-detect).
        site_title: Site name used in page titles and ``og:site_name``.
        site_description: Description used on the index page.
        author: Byline for articles.
        base_url: Absolute site URL for ``og:url`` meta tags.

    """

    root: Path = field(default_factory=Path.cwd)
    static_dir: str = "static"
    output: Path = field(default_factory=lambda: Path("build"))
    metadata: Path | None = None
    templates_dir: str = "templates"
    debounce_ms: int = 1000
    workers: int = 0
    site_title: str = "Tabby"
    site_description: str = "A small personal site."
    author: str = ""
    base_url: str = ""

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared against the static directory.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def static_path(self) -> Path:
        """Absolute path to the source directory."""
        return self.root / self.static_dir

    @property
    def templates_path(self) -> Path:
        """Absolute path to the user templates directory."""
        return self.root / self.templates_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    @property
    def metadata_path(self) -> Path:
        """Absolute path to the timing manifest."""
        if self.metadata is None:
            return self.static_path / ".meta.json"
        if self.metadata.is_absolute():
            return self.metadata
        return self.root / self.metadata
