"""Tests for listing order, table of contents and relative links."""

from __future__ import annotations

import datetime as dt
import typing as typ

import pytest

from pagong.template.helpers import SortKey, build_toc, relative_uri, sort_posts

if typ.TYPE_CHECKING:
    from .conftest import PostFactory


def test_sort_by_title_descending(make_post: PostFactory) -> None:
    posts = [make_post("b.md", title="B"), make_post("a.md", title="A"), make_post("c.md", title="C")]
    ordered = sort_posts(posts, "title", ascending=False)
    assert [post.title for post in ordered] == ["C", "B", "A"], "expected reverse title order"
    assert [post.title for post in posts] == ["B", "A", "C"], "the input must not be reordered"


def test_sort_by_date(make_post: PostFactory) -> None:
    posts = [
        make_post("new.md", date=dt.date(2022, 5, 1)),
        make_post("old.md", date=dt.date(2020, 5, 1)),
    ]
    assert [post.title for post in sort_posts(posts, "date")] == ["old", "new"], (
        "expected the older post first"
    )


@pytest.mark.parametrize("ascending", [True, False])
def test_sort_is_stable(make_post: PostFactory, *, ascending: bool) -> None:
    posts = [make_post(f"{name}.md", title="same") for name in ["one", "two", "three"]]
    ordered = sort_posts(posts, "title", ascending=ascending)
    assert [post.path.stem for post in ordered] == ["one", "two", "three"], (
        "equal keys should keep their original relative order"
    )


def test_missing_meta_key_sorts_first(make_post: PostFactory) -> None:
    posts = [
        make_post("z.md", meta={"author": "Zed"}),
        make_post("none.md"),
        make_post("a.md", meta={"author": "Ann"}),
    ]
    ordered = sort_posts(posts, SortKey.parse("author"))
    assert [post.path.stem for post in ordered] == ["none", "a", "z"], (
        "posts without the key should come before posts with it"
    )


def test_sort_key_reads_fields_and_meta(make_post: PostFactory) -> None:
    post = make_post("p.md", category="news", meta={"category": "ignored", "mood": "calm"})
    assert SortKey.parse("category").value(post) == "news", "expected the post field"
    assert SortKey.parse("mood").value(post) == "calm", "expected the metadata value"
    assert SortKey.parse("missing").value(post) is None, "expected None for absent keys"


@pytest.mark.parametrize(
    ("entries", "max_depth", "expected"),
    [
        ([], 3, ""),
        ([("A", 1), ("B", 2), ("C", 1)], 255, "<ul><li>A</li><ul><li>B</li></ul><li>C</li></ul>"),
        ([("A", 1), ("B", 2), ("C", 3)], 2, "<ul><li>A</li><ul><li>B</li></ul></ul>"),
        ([("Deep", 3)], 255, "<ul><ul><ul><li>Deep</li></ul></ul></ul>"),
        ([("A", 1)], 0, ""),
        ([("a < b", 1)], 1, "<ul><li>a &lt; b</li></ul>"),
    ],
)
def test_build_toc(entries: list[tuple[str, int]], max_depth: int, expected: str) -> None:
    assert build_toc(entries, max_depth) == expected, (
        f"unexpected table of contents for {entries!r} at depth {max_depth}"
    )


def test_build_toc_tags_are_balanced() -> None:
    html = build_toc([("a", 2), ("b", 4), ("c", 1), ("d", 3)], 255)
    assert html.count("<ul>") == html.count("</ul>"), "every opened list should be closed"


@pytest.mark.parametrize(
    ("from_uri", "to_uri", "expected"),
    [
        ("/index.html", "/blog/post.html", "blog/post.html"),
        ("/blog/index.html", "/blog/post.html", "post.html"),
        ("/blog/2021/post.html", "/about.html", "../../about.html"),
        ("/a/b.html", "/c/d.html", "../c/d.html"),
    ],
)
def test_relative_uri(from_uri: str, to_uri: str, expected: str) -> None:
    assert relative_uri(from_uri, to_uri) == expected, (
        f"expected a link from {from_uri} to {to_uri} to be {expected}"
    )
