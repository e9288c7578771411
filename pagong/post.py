"""Load markdown source files into :class:`Post` records.

A post may start with a metadata block fenced as ``meta``::

    ```meta
    title = Hello there
    date = 2021-03-14
    tags = python, web
    ```

Everything after the block is the post's markdown. Metadata values feed the
title, dates, category, tags and template of the post; every key is also kept
verbatim in :attr:`Post.meta` for ``META`` template directives.
"""

from __future__ import annotations

import dataclasses as dc
import datetime as dt
import logging
import typing as typ
from pathlib import Path

from pagong._constants import (
    DATE_FMT,
    DIST_FILE_EXT,
    META_KEY_CATEGORY,
    META_KEY_CREATION_DATE,
    META_KEY_MODIFIED_DATE,
    META_KEY_TAGS,
    META_KEY_TEMPLATE,
    META_KEY_TITLE,
    META_TAG_SEPARATOR,
    META_VALUE_SEPARATORS,
    SOURCE_META_KEY,
)
from pagong.markdown_parser import heading_outline, parse_events

if typ.TYPE_CHECKING:
    import collections.abc as cabc

logger = logging.getLogger(__name__)

META_OPEN_FENCE = f"```{SOURCE_META_KEY}"
META_CLOSE_FENCE = "```"


class PostError(ValueError):
    """Raised when a markdown source file cannot be turned into a post."""


@dc.dataclass(frozen=True, slots=True)
class Post:
    """A markdown document ready for templating.

    Attributes
    ----------
    path : Path
        Source file path, under the site source root.
    markdown : str
        Markdown body with the metadata block removed.
    meta : dict[str, str]
        Raw metadata key/value pairs.
    title : str
        Never empty; falls back to the file name.
    date, updated : datetime.date
        Creation and last modification dates.
    category : str
        Category name, ``""`` when unset.
    tags : tuple[str, ...]
        Unique tags in declaration order.
    template : Path or None
        Template overriding the site default.
    uri : str
        Site-absolute URI of the generated page, for example ``/blog/a.html``.
    toc : tuple[tuple[str, int], ...]
        ``(heading text, depth)`` pairs in document order.
    """

    path: Path
    markdown: str
    meta: dict[str, str]
    title: str
    date: dt.date
    updated: dt.date
    category: str = ""
    tags: tuple[str, ...] = ()
    template: Path | None = None
    uri: str = "/"
    toc: tuple[tuple[str, int], ...] = ()


def split_meta(text: str, *, source: object = None) -> tuple[dict[str, str], str]:
    """Separate a leading ``meta`` block from the markdown that follows it.

    Parameters
    ----------
    text : str
        Full file contents.
    source : object, optional
        Where the text came from; used in messages.

    Returns
    -------
    tuple[dict[str, str], str]
        The metadata mapping and the remaining markdown.

    Raises
    ------
    PostError
        If the block is opened but never closed.

    Examples
    --------
    >>> split_meta("```meta\\ntitle: Hi\\n```\\n# Body")
    ({'title': 'Hi'}, '# Body')
    >>> split_meta("# No metadata")
    ({}, '# No metadata')
    """
    lines = text.split("\n")
    if lines[0].rstrip("\r") != META_OPEN_FENCE:
        return {}, text

    meta: dict[str, str] = {}
    for index, raw_line in enumerate(lines[1:], start=1):
        line = raw_line.rstrip("\r")
        if line == META_CLOSE_FENCE:
            return meta, "\n".join(lines[index + 1 :])
        parsed = _parse_meta_line(line)
        if parsed is None:
            if line.strip():
                logger.warning("meta line without separator ignored: %r (%s)", line, source)
            continue
        key, value = parsed
        meta[key] = value

    msg = f"Unexpected end of file while parsing meta block in '{source}'."
    raise PostError(msg)


def _parse_meta_line(line: str) -> tuple[str, str] | None:
    positions = [
        (index, separator)
        for separator in META_VALUE_SEPARATORS
        if (index := line.find(separator)) != -1
    ]
    if not positions:
        return None
    index, separator = min(positions)
    key = line[:index].strip()
    value = line[index + len(separator) :].strip()
    return key, value


def parse_tags(value: str | None) -> tuple[str, ...]:
    """Split a comma separated tag list, dropping blanks and duplicates.

    >>> parse_tags("web, python, web,")
    ('web', 'python')
    """
    if not value:
        return ()
    tags = (tag.strip() for tag in value.split(META_TAG_SEPARATOR))
    return tuple(dict.fromkeys(tag for tag in tags if tag))


def _file_date(path: Path, *, created: bool) -> dt.date:
    stat = path.stat()
    if created:
        timestamp = getattr(stat, "st_birthtime", stat.st_ctime)
    else:
        timestamp = stat.st_mtime
    return dt.date.fromtimestamp(timestamp)  # noqa: DTZ012 - local calendar date


def _parse_date(value: str | None, path: Path, *, created: bool) -> dt.date:
    if value:
        try:
            return dt.datetime.strptime(value, DATE_FMT).date()  # noqa: DTZ007
        except ValueError:
            logger.warning("invalid date value %r in %s", value, path)
    return _file_date(path, created=created)


def _resolve_template(root: Path, path: Path, value: str | None) -> Path | None:
    if not value:
        return None
    if value.startswith("/"):
        return root / value[1:]
    return path.parent / value


def _first_title(outline: cabc.Iterable[tuple[str, int]]) -> str | None:
    for text, depth in outline:
        if depth == 1 and text:
            return text
    return None


def post_uri(root: Path, path: Path, dist_ext: str = DIST_FILE_EXT) -> str:
    """Return the site-absolute URI for the page generated from ``path``.

    >>> post_uri(Path("content"), Path("content/blog/first.md"))
    '/blog/first.html'
    """
    relative = path.relative_to(root).with_suffix(f".{dist_ext}")
    return "/" + relative.as_posix()


def load_post(root: Path, path: Path, dist_ext: str = DIST_FILE_EXT) -> Post:
    """Read the markdown file at ``path`` into a :class:`Post`.

    Parameters
    ----------
    root : Path
        Site source root; ``path`` must live below it.
    path : Path
        Markdown source file.
    dist_ext : str, optional
        Extension of the generated page, used for :attr:`Post.uri`.

    Returns
    -------
    Post
        The loaded post.

    Raises
    ------
    PostError
        If the file cannot be read or its metadata block is unterminated.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Failed to read post '{path}': {exc}"
        raise PostError(msg) from exc

    meta, markdown = split_meta(text, source=path)
    outline = tuple(heading_outline(parse_events(markdown)))
    title = meta.get(META_KEY_TITLE) or _first_title(outline) or path.stem or path.name

    return Post(
        path=path,
        markdown=markdown,
        meta=meta,
        title=title,
        date=_parse_date(meta.get(META_KEY_CREATION_DATE), path, created=True),
        updated=_parse_date(meta.get(META_KEY_MODIFIED_DATE), path, created=False),
        category=meta.get(META_KEY_CATEGORY, ""),
        tags=parse_tags(meta.get(META_KEY_TAGS)),
        template=_resolve_template(root, path, meta.get(META_KEY_TEMPLATE)),
        uri=post_uri(root, path, dist_ext),
        toc=outline,
    )


__all__ = ["Post", "PostError", "load_post", "parse_tags", "post_uri", "split_meta"]
