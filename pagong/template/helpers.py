"""Pure helpers behind the ``LIST`` and ``TOC`` directives."""

from __future__ import annotations

import dataclasses as dc
import posixpath
import typing as typ
from html import escape

from pagong._constants import (
    META_KEY_CATEGORY,
    META_KEY_CREATION_DATE,
    META_KEY_MODIFIED_DATE,
    META_KEY_TAGS,
    META_KEY_TEMPLATE,
    META_KEY_TITLE,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pagong.post import Post

_POST_FIELDS: dict[str, str] = {
    META_KEY_TITLE: "title",
    META_KEY_CREATION_DATE: "date",
    META_KEY_MODIFIED_DATE: "updated",
    META_KEY_CATEGORY: "category",
    META_KEY_TAGS: "tags",
    META_KEY_TEMPLATE: "template",
}


@dc.dataclass(frozen=True, slots=True)
class SortKey:
    """Select which value of a post a listing is ordered by.

    Names of built-in post fields (``title``, ``date``, ``updated``,
    ``category``, ``tags``, ``template``) read that field; any other name
    reads the post's metadata map.

    Examples
    --------
    >>> SortKey.parse("date")
    SortKey(name='date', field='date')
    >>> SortKey.parse("author")
    SortKey(name='author', field=None)
    """

    name: str
    field: str | None = None

    @classmethod
    def parse(cls, name: str) -> SortKey:
        return cls(name, _POST_FIELDS.get(name))

    def value(self, post: Post) -> typ.Any:  # noqa: ANN401 - field types vary
        """Return the value compared for ``post``; ``None`` when absent."""
        if self.field is None:
            return post.meta.get(self.name)
        return getattr(post, self.field)

    def sort_key(self, post: Post) -> tuple[bool, typ.Any]:
        """Return a key that orders absent values before present ones."""
        value = self.value(post)
        if value is None:
            return (False, 0)
        return (True, value)


def sort_posts(
    posts: cabc.Iterable[Post], key: SortKey | str, *, ascending: bool = True
) -> list[Post]:
    """Return a new list of ``posts`` in stable order by ``key``.

    Parameters
    ----------
    posts : Iterable[Post]
        Posts to order. The input is never modified.
    key : SortKey or str
        Field or metadata key to compare.
    ascending : bool, optional
        ``False`` reverses the comparison while keeping equal posts in their
        original relative order.

    Returns
    -------
    list[Post]
        A sorted copy.
    """
    sort_key = key if isinstance(key, SortKey) else SortKey.parse(key)
    return sorted(posts, key=sort_key.sort_key, reverse=not ascending)


def build_toc(entries: cabc.Iterable[tuple[str, int]], max_depth: int) -> str:
    """Render ``(heading, depth)`` pairs as nested ``<ul>`` lists.

    A list is opened for every level the walk descends and closed for every
    level it climbs. Entries deeper than ``max_depth`` are skipped and do not
    change the current depth. All open lists are closed at the end.

    Examples
    --------
    >>> build_toc([("A", 1), ("B", 2), ("C", 1)], 2)
    '<ul><li>A</li><ul><li>B</li></ul><li>C</li></ul>'
    >>> build_toc([("A", 1), ("B", 2)], 1)
    '<ul><li>A</li></ul>'
    """
    parts: list[str] = []
    current = 0
    for heading, depth in entries:
        if depth > max_depth:
            continue
        while current < depth:
            parts.append("<ul>")
            current += 1
        while current > depth:
            parts.append("</ul>")
            current -= 1
        parts.append(f"<li>{escape(heading, quote=False)}</li>")
    parts.extend("</ul>" for _ in range(current))
    return "".join(parts)


def relative_uri(from_uri: str, to_uri: str) -> str:
    """Return ``to_uri`` as a link relative to the page at ``from_uri``.

    >>> relative_uri("/blog/index.html", "/blog/2021/post.html")
    '2021/post.html'
    >>> relative_uri("/blog/2021/post.html", "/about.html")
    '../../about.html'
    """
    base = posixpath.dirname(from_uri) or "/"
    return posixpath.relpath(to_uri, start=base)


__all__ = ["SortKey", "build_toc", "relative_uri", "sort_posts"]
