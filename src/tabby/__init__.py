"""Tabby — an incremental builder for a small static site.

Scans a flat directory of articles, photos, stylesheets, scripts and icons,
rebuilds only what changed since the last run (by filesystem timestamps),
and writes a complete site tree.  ``serve`` keeps watching the directory
and rebuilds on every change.

Quick start::

    import tabby

    tabby.build("my-site/")        # One build cycle
    tabby.serve("my-site/")        # Build, then rebuild on change

Layout of a project::

    my-site/
        static/         articles (.md), photos (.jpg), styles (.sass),
                        scripts (.js), icons (.ico)
        templates/      optional overrides of the bundled theme
        build/          generated output

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "TabbyConfig",
    "__version__",
    "build",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import tabby`` fast; converters and the watcher pull in heavy
    libraries only when a build actually runs.
    """
    if name == "TabbyConfig":
        from tabby.config import TabbyConfig

        return TabbyConfig

    if name == "build":
        from tabby.app import build

        return build

    if name == "serve":
        from tabby.app import serve

        return serve

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
