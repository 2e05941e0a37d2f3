"""Tabby CLI — tabby build / tabby serve.

Entry point for the ``tabby`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by every subcommand."""
    parser.add_argument(
        "output", nargs="?", default=None, help="Output directory (default: build)",
    )
    parser.add_argument("--root", default=".", help="Project root directory")
    parser.add_argument(
        "--static", dest="static_dir", default=None,
        help="The static source directory (default: static)",
    )
    parser.add_argument(
        "--metadata", default=None,
        help="Location of the timing manifest (default: <static>/.meta.json)",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tabby CLI."""
    parser = argparse.ArgumentParser(
        prog="tabby",
        description="Incremental builder for a small static site.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tabby build
    build_parser = subparsers.add_parser(
        "build",
        help="Build published site files",
    )
    _add_common_arguments(build_parser)
    build_parser.add_argument(
        "--clean", action="store_true", help="Remove the output directory first",
    )
    build_parser.add_argument(
        "--no-cache", dest="no_cache", action="store_true",
        help="Rebuild all files regardless of timing",
    )

    # tabby serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Build, then rebuild whenever a source file changes",
    )
    _add_common_arguments(serve_parser)
    serve_parser.add_argument(
        "--debounce", dest="debounce_ms", type=int, default=None,
        help="Milliseconds to coalesce filesystem events (default: 1000)",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from tabby import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from tabby._errors import TabbyError
    from tabby.app import build, serve

    overrides = {
        "output": args.output,
        "static_dir": args.static_dir,
        "metadata": args.metadata,
    }
    try:
        if args.command == "build":
            build(root=args.root, force=args.no_cache, clean=args.clean, **overrides)
        elif args.command == "serve":
            serve(root=args.root, debounce_ms=args.debounce_ms, **overrides)
    except TabbyError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        for failure in getattr(exc, "failures", ()):
            print(f"    - {failure.name}: {failure.error}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
