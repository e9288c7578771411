"""Shared fixtures for pagong tests."""

from __future__ import annotations

import datetime as dt
import typing as typ
from pathlib import Path

import pytest

from pagong.generator.renderer import HtmlContentRenderer
from pagong.post import Post


class PostFactory(typ.Protocol):
    def __call__(self, name: str, **overrides: typ.Any) -> Post: ...  # noqa: ANN401


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Return an empty source root inside the test's temporary directory."""
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def make_post(site_root: Path) -> PostFactory:
    """Return a factory building in-memory posts below ``site_root``."""

    def _make(name: str, **overrides: typ.Any) -> Post:  # noqa: ANN401
        path = site_root / name
        values: dict[str, typ.Any] = {
            "path": path,
            "markdown": f"# {path.stem}\n",
            "meta": {},
            "title": path.stem,
            "date": dt.date(2021, 1, 1),
            "updated": dt.date(2021, 1, 1),
            "uri": "/" + Path(name).with_suffix(".html").as_posix(),
        }
        values.update(overrides)
        return Post(**values)

    return _make


@pytest.fixture
def renderer() -> HtmlContentRenderer:
    """Return a markdown renderer without syntax highlighting."""
    return HtmlContentRenderer()
