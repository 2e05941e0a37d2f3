"""Tests for tabby.export.outputs — output layout."""

from __future__ import annotations

from pathlib import Path

import pytest

from tabby.content.classifier import Article, Icon, Photo, Script, Style
from tabby.content.timing import Timing, from_ns
from tabby.export.outputs import (
    article_link,
    ensure_output_dirs,
    output_paths,
    outputs_exist,
    title_from_name,
)

_TIMING = Timing(created=from_ns(0), modified=from_ns(0))


def _resource(cls: type, name: str, extension: str):  # noqa: ANN202
    return cls(name=name, path=Path(f"/static/{name}.{extension}"), timing=_TIMING, changed=False)


class TestOutputPaths:
    """Where each kind is published."""

    @pytest.mark.parametrize(
        ("cls", "extension", "expected"),
        [
            (Article, "md", ("blog/post.html",)),
            (Photo, "jpg", ("thumbnail/post.jpg", "image/post.jpg")),
            (Style, "sass", ("post.css",)),
            (Script, "js", ("post.js",)),
            (Icon, "ico", ("post.ico",)),
        ],
    )
    def test_layout(self, tmp_path: Path, cls: type, extension: str, expected: tuple) -> None:
        paths = output_paths(_resource(cls, "post", extension), tmp_path)
        assert paths == tuple(tmp_path / p for p in expected)


class TestOutputsExist:
    """A resource's outputs count as present only when all exist."""

    def test_photo_needs_both_sizes(self, tmp_path: Path) -> None:
        photo = _resource(Photo, "beach", "jpg")
        ensure_output_dirs(tmp_path)
        (tmp_path / "image" / "beach.jpg").write_bytes(b"x")
        assert not outputs_exist(photo, tmp_path)
        (tmp_path / "thumbnail" / "beach.jpg").write_bytes(b"x")
        assert outputs_exist(photo, tmp_path)

    def test_missing_article(self, tmp_path: Path) -> None:
        assert not outputs_exist(_resource(Article, "post", "md"), tmp_path)


class TestEnsureOutputDirs:
    """Idempotent directory creation."""

    def test_creates_fixed_dirs(self, tmp_path: Path) -> None:
        root = tmp_path / "build"
        ensure_output_dirs(root)
        ensure_output_dirs(root)
        assert sorted(p.name for p in root.iterdir()) == ["blog", "image", "thumbnail"]


class TestNames:
    """Links and titles derived from resource names."""

    def test_article_link(self) -> None:
        assert article_link("hello-world") == "blog/hello-world.html"

    @pytest.mark.parametrize(
        ("name", "title"),
        [
            ("hello-world", "Hello World"),
            ("my_first_post", "My First Post"),
            ("single", "Single"),
            ("--dashes--", "Dashes"),
        ],
    )
    def test_title_from_name(self, name: str, title: str) -> None:
        assert title_from_name(name) == title
