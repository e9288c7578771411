"""Fill Atom feed files with the posts that live next to them.

An ``.atom`` file in the source tree acts as a feed description: its title,
site link, language and generator are read back and every post in the same
directory tree becomes an entry of the generated feed.

Example
-------
>>> from pathlib import Path
>>> from pagong.feed import load_atom_feed, fill_atom_feed
>>> feed = load_atom_feed(Path("content/blog/feed.atom"))  # doctest: +SKIP
>>> xml = fill_atom_feed(feed, posts, renderer)  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import typing as typ
import xml.etree.ElementTree as ET  # noqa: N817 - conventional alias
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from pagong._constants import FEED_CONTENT_TYPE, FEED_REL, FEED_TEMPLATE_NAME, FEED_TYPE

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pagong.generator.renderer import HtmlContentRenderer
    from pagong.post import Post

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


class FeedError(ValueError):
    """Raised when an existing feed file cannot be used as a feed description."""


@dc.dataclass(frozen=True, slots=True)
class FeedMeta:
    """Feed-level values read from an existing Atom document."""

    path: Path
    title: str
    link: str
    lang: str | None = None
    generator: str | None = None
    generator_uri: str | None = None


@dc.dataclass(frozen=True, slots=True)
class FeedEntry:
    """Template context for one ``<entry>``."""

    id: str
    title: str
    updated: str
    published: str
    category: str
    content: str


def _local_name(tag: str) -> str:
    return tag.rpartition("}")[2]


def load_atom_feed(path: Path) -> FeedMeta:
    """Read the feed description stored at ``path``.

    Parameters
    ----------
    path : Path
        An Atom document with at least a ``<title>`` and a ``<link href>``.

    Returns
    -------
    FeedMeta
        The values the generated feed reuses.

    Raises
    ------
    FeedError
        If the file cannot be read or parsed, is not a ``<feed>`` document, or
        lacks a title or link.
    """
    try:
        root = ET.parse(path).getroot()  # noqa: S314 - local source files
    except (OSError, ET.ParseError) as exc:
        msg = f"Failed to parse atom feed '{path}': {exc}"
        raise FeedError(msg) from exc

    if _local_name(root.tag) != "feed":
        msg = f"Atom feed '{path}' does not have a <feed> root element."
        raise FeedError(msg)

    title: str | None = None
    link: str | None = None
    generator: str | None = None
    generator_uri: str | None = None
    for child in root:
        match _local_name(child.tag):
            case "title" if title is None:
                title = (child.text or "").strip()
            case "link" if link is None and child.get("href"):
                link = child.get("href")
            case "generator" if generator is None:
                generator = (child.text or "").strip() or None
                generator_uri = child.get("uri")
            case _:
                continue

    if not title:
        msg = f"Atom feed '{path}' lacks a title tag."
        raise FeedError(msg)
    if not link:
        msg = f"Atom feed '{path}' lacks a link tag."
        raise FeedError(msg)

    return FeedMeta(
        path=path,
        title=title,
        link=link,
        lang=root.get(XML_LANG),
        generator=generator,
        generator_uri=generator_uri,
    )


def _timestamp(day: dt.date) -> str:
    return dt.datetime.combine(day, dt.time(), tzinfo=dt.UTC).isoformat()


def _build_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def fill_atom_feed(
    feed: FeedMeta,
    posts: cabc.Iterable[Post],
    renderer: HtmlContentRenderer,
    *,
    now: dt.datetime | None = None,
) -> str:
    """Render the Atom document for ``feed``.

    Parameters
    ----------
    feed : FeedMeta
        Description loaded by :func:`load_atom_feed`.
    posts : Iterable[Post]
        Every post of the site; only those below the feed's directory become
        entries.
    renderer : HtmlContentRenderer
        Renders each entry's content.
    now : datetime, optional
        Feed ``<updated>`` value when no post qualifies. Defaults to the
        current time.

    Returns
    -------
    str
        The Atom XML text.
    """
    directory = feed.path.parent
    entries: list[FeedEntry] = []
    last_updated: dt.date | None = None
    for post in posts:
        if not post.path.is_relative_to(directory):
            continue
        last_updated = post.updated if last_updated is None else max(last_updated, post.updated)
        entries.append(
            FeedEntry(
                id=feed.link + post.uri,
                title=post.title,
                updated=_timestamp(post.updated),
                published=_timestamp(post.date),
                category=post.category,
                content=renderer.markdown(post.markdown),
            )
        )

    if last_updated is not None:
        updated = _timestamp(last_updated)
    else:
        updated = (now or dt.datetime.now(dt.UTC)).isoformat()

    template = _build_environment().get_template(FEED_TEMPLATE_NAME)
    return template.render(
        feed=feed,
        entries=entries,
        updated=updated,
        self_link=f"{feed.link.rstrip('/')}/{feed.path.name}",
        rel=FEED_REL,
        mime_type=FEED_TYPE,
        content_type=FEED_CONTENT_TYPE,
    )


__all__ = ["FeedEntry", "FeedError", "FeedMeta", "fill_atom_feed", "load_atom_feed"]
