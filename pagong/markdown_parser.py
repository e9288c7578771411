r"""Parse Markdown into a flat stream of structural events.

This module is the event source for pagong's HTML renderer. It drives
markdown-it-py (CommonMark with tables, strikethrough, raw HTML and the
footnote plugin) and reshapes its token list into ordered :class:`Event`
records: the start and end of block and inline constructs, literal text, raw
HTML, breaks, footnote references and task-list markers.

Example
-------
>>> from pagong.markdown_parser import EventKind, parse_events
>>> [event.kind for event in parse_events("Hi")]
[<EventKind.START: 'start'>, <EventKind.TEXT: 'text'>, <EventKind.END: 'end'>]
"""

from __future__ import annotations

import dataclasses as dc
import enum
import re
import typing as typ

from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from markdown_it.token import Token

TASK_MARKER_PATTERN = re.compile(r"^\[([ xX])\](?:\s+|$)")
MAILTO_PREFIX = "mailto:"


class EventKind(enum.Enum):
    """Kinds of events produced by :func:`parse_events`."""

    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"
    FOOTNOTE_REFERENCE = "footnote_reference"
    TASK_LIST_MARKER = "task_list_marker"


class TagKind(enum.Enum):
    """Block and inline constructs delimited by start/end events."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCK_QUOTE = "block_quote"
    CODE_BLOCK = "code_block"
    LIST = "list"
    ITEM = "item"
    FOOTNOTE_DEFINITION = "footnote_definition"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    LINK = "link"
    IMAGE = "image"


class Alignment(enum.Enum):
    """Column alignment declared by a table's delimiter row."""

    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class LinkType(enum.Enum):
    """How a link or image destination was written in the source."""

    INLINE = "inline"
    AUTOLINK = "autolink"
    EMAIL = "email"


@dc.dataclass(frozen=True, slots=True)
class Tag:
    """A construct opened by a START event and closed by the matching END.

    Attributes
    ----------
    kind : TagKind
        Which construct the tag delimits.
    level : int
        Heading level (1-6); ``0`` for other tags.
    start : int or None
        First number of an ordered list; ``None`` for bullet lists.
    info : str or None
        Info string of a fenced code block; ``None`` for indented blocks.
    label : str
        Footnote definition label.
    alignments : tuple[Alignment, ...]
        Per-column alignment of a table.
    dest, title : str
        Destination and title of links and images.
    link_type : LinkType
        Source form of a link or image.
    """

    kind: TagKind
    level: int = 0
    start: int | None = None
    info: str | None = None
    label: str = ""
    alignments: tuple[Alignment, ...] = ()
    dest: str = ""
    title: str = ""
    link_type: LinkType = LinkType.INLINE


@dc.dataclass(frozen=True, slots=True)
class Event:
    """One structural token of a parsed Markdown document."""

    kind: EventKind
    tag: Tag | None = None
    text: str = ""
    checked: bool = False


def _build_parser() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": True})
    md.enable(["table", "strikethrough"])
    md.use(footnote_plugin)
    return md


_PARSER = _build_parser()


def parse_events(markdown_text: str) -> cabc.Iterator[Event]:
    """Yield the events of ``markdown_text`` in document order.

    Parameters
    ----------
    markdown_text : str
        Markdown source with any metadata block already removed.

    Returns
    -------
    Iterator[Event]
        Lazily produced events. Footnote definitions follow the document body,
        so every footnote reference precedes its definition.
    """
    return _block_events(_PARSER.parse(markdown_text))


def heading_outline(events: cabc.Iterable[Event]) -> list[tuple[str, int]]:
    """Return ``(heading text, depth)`` pairs for every heading in ``events``."""
    outline: list[tuple[str, int]] = []
    depth: int | None = None
    parts: list[str] = []
    for event in events:
        if event.kind is EventKind.START and event.tag and event.tag.kind is TagKind.HEADING:
            depth = event.tag.level
            parts = []
        elif depth is not None:
            if event.kind is EventKind.END:
                if event.tag and event.tag.kind is TagKind.HEADING:
                    outline.append(("".join(parts), depth))
                    depth = None
            elif event.kind in (EventKind.TEXT, EventKind.CODE):
                parts.append(event.text)
    return outline


def _block_events(tokens: list[Token]) -> cabc.Iterator[Event]:
    """Convert block-level tokens, delegating inline tokens to their children."""
    stack: list[Tag] = []
    in_table_head = False
    task_candidate = False
    for index, token in enumerate(tokens):
        if token.type == "inline":
            yield from _inline_events(token.children or [], task_candidate=task_candidate)
            task_candidate = False
            continue
        task_candidate = token.type == "list_item_open" or (
            task_candidate and token.type == "paragraph_open"
        )

        tag: Tag | None = None
        match token.type:
            case "paragraph_open" | "paragraph_close" if token.hidden:
                continue
            case "tbody_open" | "tbody_close":
                continue
            case "tr_open" | "tr_close" if in_table_head:
                continue
            case "footnote_block_open" | "footnote_block_close" | "footnote_anchor":
                continue
            case "paragraph_open":
                tag = Tag(TagKind.PARAGRAPH)
            case "heading_open":
                tag = Tag(TagKind.HEADING, level=int(token.tag[1:]))
            case "blockquote_open":
                tag = Tag(TagKind.BLOCK_QUOTE)
            case "bullet_list_open":
                tag = Tag(TagKind.LIST)
            case "ordered_list_open":
                tag = Tag(TagKind.LIST, start=_list_start(token))
            case "list_item_open":
                tag = Tag(TagKind.ITEM)
            case "table_open":
                tag = Tag(TagKind.TABLE, alignments=_table_alignments(tokens, index))
            case "thead_open":
                in_table_head = True
                tag = Tag(TagKind.TABLE_HEAD)
            case "tr_open":
                tag = Tag(TagKind.TABLE_ROW)
            case "th_open" | "td_open":
                tag = Tag(TagKind.TABLE_CELL)
            case "footnote_open":
                tag = Tag(TagKind.FOOTNOTE_DEFINITION, label=_footnote_label(token.meta))
            case "fence" | "code_block":
                info = token.info.strip() if token.type == "fence" else None
                code = Tag(TagKind.CODE_BLOCK, info=info)
                yield Event(EventKind.START, tag=code)
                if token.content:
                    yield Event(EventKind.TEXT, text=token.content)
                yield Event(EventKind.END, tag=code)
            case "hr":
                yield Event(EventKind.RULE)
            case "html_block":
                yield Event(EventKind.HTML, text=token.content)
            case _ if token.nesting == -1 and stack:
                if token.type == "thead_close":
                    in_table_head = False
                yield Event(EventKind.END, tag=stack.pop())

        if tag is not None:
            stack.append(tag)
            yield Event(EventKind.START, tag=tag)


def _inline_events(
    children: cabc.Sequence[Token], *, task_candidate: bool = False
) -> cabc.Iterator[Event]:
    """Convert the children of an ``inline`` token (or an image's alt text)."""
    stack: list[Tag] = []
    for position, child in enumerate(children):
        tag: Tag | None = None
        match child.type:
            case "text" | "text_special":
                text = child.content
                if task_candidate and position == 0:
                    marker = TASK_MARKER_PATTERN.match(text)
                    if marker:
                        yield Event(
                            EventKind.TASK_LIST_MARKER, checked=marker.group(1) != " "
                        )
                        text = text[marker.end() :]
                if text:
                    yield Event(EventKind.TEXT, text=text)
            case "softbreak":
                yield Event(EventKind.SOFT_BREAK)
            case "hardbreak":
                yield Event(EventKind.HARD_BREAK)
            case "code_inline":
                yield Event(EventKind.CODE, text=child.content)
            case "html_inline":
                yield Event(EventKind.HTML, text=child.content)
            case "footnote_ref":
                yield Event(EventKind.FOOTNOTE_REFERENCE, text=_footnote_label(child.meta))
            case "em_open":
                tag = Tag(TagKind.EMPHASIS)
            case "strong_open":
                tag = Tag(TagKind.STRONG)
            case "s_open":
                tag = Tag(TagKind.STRIKETHROUGH)
            case "link_open":
                tag = _link_tag(child)
            case "image":
                image = Tag(
                    TagKind.IMAGE,
                    dest=str(child.attrGet("src") or ""),
                    title=str(child.attrGet("title") or ""),
                )
                yield Event(EventKind.START, tag=image)
                yield from _inline_events(child.children or [])
                yield Event(EventKind.END, tag=image)
            case _ if child.nesting == -1 and stack:
                yield Event(EventKind.END, tag=stack.pop())

        if tag is not None:
            stack.append(tag)
            yield Event(EventKind.START, tag=tag)


def _link_tag(token: Token) -> Tag:
    """Build a link tag, splitting ``mailto:`` off e-mail autolinks."""
    dest = str(token.attrGet("href") or "")
    title = str(token.attrGet("title") or "")
    link_type = LinkType.INLINE
    if token.markup == "autolink":
        link_type = LinkType.AUTOLINK
        if dest.startswith(MAILTO_PREFIX):
            link_type = LinkType.EMAIL
            dest = dest[len(MAILTO_PREFIX) :]
    return Tag(TagKind.LINK, dest=dest, title=title, link_type=link_type)


def _table_alignments(tokens: list[Token], table_index: int) -> tuple[Alignment, ...]:
    """Read column alignments from the header cells following ``table_open``."""
    alignments: list[Alignment] = []
    for token in tokens[table_index + 1 :]:
        if token.type == "thead_close":
            break
        if token.type == "th_open":
            style = str(token.attrGet("style") or "")
            _, _, value = style.partition("text-align:")
            try:
                alignments.append(Alignment(value.strip()))
            except ValueError:
                alignments.append(Alignment.NONE)
    return tuple(alignments)


def _list_start(token: Token) -> int:
    """Return an ordered list's first number; ``0`` is a valid start."""
    start = token.attrGet("start")
    return int(start) if start is not None else 1


def _footnote_label(meta: dict[str, typ.Any]) -> str:
    """Return a footnote's label; anonymous inline footnotes use their number."""
    label = meta.get("label")
    if label:
        return str(label)
    return str(int(meta.get("id", 0)) + 1)


__all__ = [
    "Alignment",
    "Event",
    "EventKind",
    "LinkType",
    "Tag",
    "TagKind",
    "heading_outline",
    "parse_events",
]
