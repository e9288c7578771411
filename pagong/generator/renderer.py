"""Render Markdown event streams into HTML.

The writer here is a single streaming pass over the events produced by
:func:`pagong.markdown_parser.parse_events`. On top of a plain
one-tag-per-event mapping it adds stable heading anchors, captioned
standalone images, bidirectional footnote links and optional Pygments
highlighting for fenced code blocks.

Example
-------
>>> from pagong.generator.renderer import render_html
>>> render_html("# Hello World")
'<h1 class="title" id="hello_world"><a class="anchor" href="#hello_world">¶</a>Hello World</h1>\\n'
"""

from __future__ import annotations

import collections
import enum
import io
import typing as typ
from html import escape
from urllib.parse import quote

from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from pagong.generator.anchors import FootnoteNumbers, HeadingAnchors
from pagong.markdown_parser import (
    Alignment,
    Event,
    EventKind,
    LinkType,
    Tag,
    TagKind,
    parse_events,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

# Characters left untouched in href attributes, besides alphanumerics.
HREF_SAFE = "!#$%()*+,-./:;=?@_~&'"
LOOKAHEAD = 5


class TextSink(typ.Protocol):
    """Anything with a ``write(str)`` method, such as ``io.StringIO``."""

    def write(self, text: str, /) -> typ.Any: ...


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` for use in text and attributes."""
    return escape(text, quote=False).replace('"', "&quot;")


def escape_href(url: str) -> str:
    """Percent-encode unsafe URL characters and entity-encode ``&`` and ``'``."""
    return quote(url, safe=HREF_SAFE).replace("&", "&amp;").replace("'", "&#x27;")


class ImageParagraphFilter:
    """Unwrap paragraphs that hold nothing but a single image.

    Iterating yields ``(event, is_standalone)`` pairs. The exact sequence
    start-paragraph, start-image, text, end-image, end-paragraph loses its
    paragraph events and the image start is flagged standalone. Events that
    only partially match stay queued and come out unchanged, in order.
    """

    def __init__(self, events: cabc.Iterable[Event]) -> None:
        self._events = iter(events)
        self._queue: collections.deque[Event] = collections.deque()

    def __iter__(self) -> ImageParagraphFilter:
        return self

    def _lookahead(self, count: int) -> None:
        """Fill the queue up to ``count`` events unless the source runs dry."""
        while len(self._queue) < count:
            try:
                self._queue.append(next(self._events))
            except StopIteration:
                break

    def __next__(self) -> tuple[Event, bool]:
        self._lookahead(LOOKAHEAD)
        if not self._queue:
            raise StopIteration
        if _is_image_paragraph(self._queue):
            self._queue.popleft()
            image_start = self._queue.popleft()
            del self._queue[2]
            return image_start, True
        return self._queue.popleft(), False


def _is_image_paragraph(window: cabc.Sequence[Event]) -> bool:
    if len(window) < LOOKAHEAD:
        return False
    expected = (
        (EventKind.START, TagKind.PARAGRAPH),
        (EventKind.START, TagKind.IMAGE),
        (EventKind.TEXT, None),
        (EventKind.END, TagKind.IMAGE),
        (EventKind.END, TagKind.PARAGRAPH),
    )
    for event, (kind, tag_kind) in zip(window, expected, strict=False):
        if event.kind is not kind:
            return False
        if tag_kind is not None and (event.tag is None or event.tag.kind is not tag_kind):
            return False
    return True


class TableState(enum.Enum):
    """Which section of a table the writer is in."""

    HEAD = "head"
    BODY = "body"


class CodeHighlighter:
    """Highlight fenced code with Pygments, keeping the surrounding markup."""

    def __init__(self, pygments_style: str = "monokai") -> None:
        self.pygments_style = pygments_style
        self._formatter = HtmlFormatter(style=pygments_style, nowrap=True)

    @property
    def stylesheet(self) -> str:
        """Return the CSS for highlighted spans inside ``pre > code``."""
        return self._formatter.get_style_defs("pre > code")

    def highlight(self, code: str, language: str) -> str | None:
        """Return highlighted HTML for ``code`` or ``None`` for unknown languages."""
        try:
            lexer = get_lexer_by_name(language)
        except ClassNotFound:
            return None
        return highlight(code, lexer, self._formatter)


class HtmlWriter:
    """Stream HTML for a sequence of events into ``out``.

    One writer renders one document: heading identifiers, footnote numbers and
    the title flag live on the instance and are never shared.
    """

    def __init__(
        self,
        events: cabc.Iterable[Event],
        out: TextSink,
        *,
        highlighter: CodeHighlighter | None = None,
    ) -> None:
        self._events = ImageParagraphFilter(events)
        self._out = out
        self._highlighter = highlighter
        self._title_written = False
        self._expecting_heading_text = False
        self._anchors = HeadingAnchors()
        self._footnotes = FootnoteNumbers()
        self._inside_footnote_def = False
        self._end_newline = True
        self._table_state = TableState.HEAD
        self._table_alignments: tuple[Alignment, ...] = ()
        self._table_cell_index = 0
        self._code_language: str | None = None
        self._code_buffer: list[str] = []
        # Heading markup written before the id text is known.
        self._pending: list[str] | None = None

    @property
    def anchors(self) -> HeadingAnchors:
        """Identifiers issued so far in this render."""
        return self._anchors

    def _emit(self, text: str) -> None:
        if self._pending is not None:
            self._pending.append(text)
        else:
            self._out.write(text)

    def _write_raw(self, text: str) -> None:
        """Write without touching the trailing-newline flag."""
        self._emit(text)

    def _write(self, text: str) -> None:
        """Write and remember whether the output now ends in a newline."""
        self._emit(text)
        if text:
            self._end_newline = text.endswith("\n")

    def _write_newline(self) -> None:
        self._end_newline = True
        self._emit("\n")

    def _block_prefix(self) -> str:
        return "" if self._end_newline else "\n"

    def run(self) -> None:
        """Consume every event, writing HTML as it goes."""
        for event, is_standalone in self._events:
            if self._expecting_heading_text:
                if event.kind is EventKind.CODE:
                    self._open_heading_anchor(event.text)
                elif event.kind is not EventKind.TEXT and self._pending is None:
                    # Hold inline markup until the heading's text names the id.
                    self._pending = []
            match event.kind:
                case EventKind.START:
                    self._start_tag(typ.cast("Tag", event.tag), is_standalone=is_standalone)
                case EventKind.END:
                    self._end_tag(typ.cast("Tag", event.tag))
                case EventKind.TEXT:
                    self._text(event.text)
                case EventKind.CODE:
                    self._write("<code>")
                    self._write_raw(escape_html(event.text))
                    self._write("</code>")
                case EventKind.HTML:
                    self._write(event.text)
                case EventKind.SOFT_BREAK:
                    self._write_newline()
                case EventKind.HARD_BREAK:
                    self._write("<br />\n")
                case EventKind.RULE:
                    self._write(f"{self._block_prefix()}<hr />\n")
                case EventKind.FOOTNOTE_REFERENCE:
                    self._footnote_reference(event.text)
                case EventKind.TASK_LIST_MARKER:
                    if event.checked:
                        self._write('<input disabled="" type="checkbox" checked=""/>\n')
                    else:
                        self._write('<input disabled="" type="checkbox"/>\n')

    def _text(self, text: str) -> None:
        if self._expecting_heading_text:
            self._open_heading_anchor(text)
        if self._code_language is not None:
            self._code_buffer.append(text)
            return
        self._write_raw(escape_html(text))
        self._end_newline = text.endswith("\n")

    def _open_heading_anchor(self, text: str) -> None:
        """Finish the pending ``id`` attribute and write the anchor glyph."""
        self._expecting_heading_text = False
        pending, self._pending = self._pending or [], None
        identifier = self._anchors.allocate(text)
        self._write_raw(f'{identifier}">')
        self._write_raw(f'<a class="anchor" href="#{identifier}">¶</a>')
        for chunk in pending:
            self._write_raw(chunk)

    def _footnote_reference(self, label: str) -> None:
        number = self._footnotes.number(label)
        safe_label = escape_html(label)
        self._write_raw(
            f'<sup class="footnote-reference" id="r.{safe_label}"><a href="#f.{safe_label}'
        )
        self._write('">')
        self._write_raw(str(number))
        self._write("</a></sup>")

    def _start_tag(self, tag: Tag, *, is_standalone: bool) -> None:
        match tag.kind:
            case TagKind.PARAGRAPH:
                if not self._inside_footnote_def:
                    self._write(f"{self._block_prefix()}<p>")
            case TagKind.HEADING:
                if self._end_newline:
                    self._end_newline = False
                else:
                    self._write_raw("\n")
                self._write_raw(f"<h{tag.level}")
                if not self._title_written:
                    self._title_written = True
                    self._write_raw(' class="title"')
                self._expecting_heading_text = True
                self._write_raw(' id="')
            case TagKind.TABLE:
                self._table_alignments = tag.alignments
                self._write("<table>")
            case TagKind.TABLE_HEAD:
                self._table_state = TableState.HEAD
                self._table_cell_index = 0
                self._write("<thead><tr>")
            case TagKind.TABLE_ROW:
                self._table_cell_index = 0
                self._write("<tr>")
            case TagKind.TABLE_CELL:
                self._write("<th" if self._table_state is TableState.HEAD else "<td")
                self._write(self._cell_alignment())
            case TagKind.BLOCK_QUOTE:
                self._write(f"{self._block_prefix()}<blockquote>\n")
            case TagKind.CODE_BLOCK:
                self._start_code_block(tag)
            case TagKind.LIST if tag.start is None:
                self._write(f"{self._block_prefix()}<ul>\n")
            case TagKind.LIST if tag.start == 1:
                self._write(f"{self._block_prefix()}<ol>\n")
            case TagKind.LIST:
                self._write(f'{self._block_prefix()}<ol start="')
                self._write_raw(str(tag.start))
                self._write('">\n')
            case TagKind.ITEM:
                self._write(f"{self._block_prefix()}<li>")
            case TagKind.EMPHASIS:
                self._write("<em>")
            case TagKind.STRONG:
                self._write("<strong>")
            case TagKind.STRIKETHROUGH:
                self._write("<del>")
            case TagKind.LINK:
                prefix = "mailto:" if tag.link_type is LinkType.EMAIL else ""
                self._write(f'<a href="{prefix}')
                self._write_raw(escape_href(tag.dest))
                if tag.title:
                    self._write('" title="')
                    self._write_raw(escape_html(tag.title))
                self._write('">')
            case TagKind.IMAGE:
                self._image(tag, is_standalone=is_standalone)
            case TagKind.FOOTNOTE_DEFINITION:
                self._inside_footnote_def = True
                self._write(f'{self._block_prefix()}<p class="footnote" id="f.')
                self._write_raw(escape_html(tag.label))
                self._write('"><sup>')
                self._write_raw(str(self._footnotes.number(tag.label)))
                self._write("</sup> ")

    def _cell_alignment(self) -> str:
        index = self._table_cell_index
        alignment = (
            self._table_alignments[index]
            if index < len(self._table_alignments)
            else Alignment.NONE
        )
        if alignment is Alignment.NONE:
            return ">"
        return f' align="{alignment.value}">'

    def _start_code_block(self, tag: Tag) -> None:
        if not self._end_newline:
            self._write_newline()
        language = (tag.info or "").split(" ")[0]
        if not language:
            self._write("<pre><code>")
            return
        self._write('<pre><code class="language-')
        self._write_raw(escape_html(language))
        self._write('">')
        if self._highlighter is not None:
            self._code_language = language
            self._code_buffer = []

    def _image(self, tag: Tag, *, is_standalone: bool) -> None:
        if is_standalone:
            self._write('<div class="image-container">\n')
        self._write('<img src="')
        self._write_raw(escape_href(tag.dest))
        self._write('" alt="')
        self._raw_text()
        if tag.title:
            self._write('" title="')
            self._write_raw(escape_html(tag.title))
        self._write('" />')
        if is_standalone:
            self._write('\n<div class="image-caption">')
            self._write_raw(escape_html(tag.title))
            self._write("</div>\n")
            self._write("</div>\n")
            self._write("<p>\n")

    def _end_tag(self, tag: Tag) -> None:
        match tag.kind:
            case TagKind.PARAGRAPH:
                if not self._inside_footnote_def:
                    self._write("</p>\n")
            case TagKind.HEADING:
                if self._expecting_heading_text:
                    self._open_heading_anchor("")
                self._write(f"</h{tag.level}>\n")
            case TagKind.TABLE:
                self._write("</tbody></table>\n")
            case TagKind.TABLE_HEAD:
                self._write("</tr></thead><tbody>\n")
                self._table_state = TableState.BODY
            case TagKind.TABLE_ROW:
                self._write("</tr>\n")
            case TagKind.TABLE_CELL:
                self._write("</th>" if self._table_state is TableState.HEAD else "</td>")
                self._table_cell_index += 1
            case TagKind.BLOCK_QUOTE:
                self._write("</blockquote>\n")
            case TagKind.CODE_BLOCK:
                self._flush_highlighted_code()
                self._write("</code></pre>\n")
            case TagKind.LIST:
                self._write("</ul>\n" if tag.start is None else "</ol>\n")
            case TagKind.ITEM:
                self._write("</li>\n")
            case TagKind.EMPHASIS:
                self._write("</em>")
            case TagKind.STRONG:
                self._write("</strong>")
            case TagKind.STRIKETHROUGH:
                self._write("</del>")
            case TagKind.LINK:
                self._write("</a>")
            case TagKind.IMAGE:
                pass  # consumed by _raw_text
            case TagKind.FOOTNOTE_DEFINITION:
                self._inside_footnote_def = False
                label = escape_html(tag.label)
                self._write_raw(f' <a href="#r.{label}">↩</a></p>\n')

    def _flush_highlighted_code(self) -> None:
        if self._code_language is None or self._highlighter is None:
            return
        code = "".join(self._code_buffer)
        language = self._code_language
        self._code_language = None
        self._code_buffer = []
        highlighted = self._highlighter.highlight(code, language)
        self._write_raw(escape_html(code) if highlighted is None else highlighted)
        self._end_newline = code.endswith("\n")

    def _raw_text(self) -> None:
        """Write an image's alt text as plain text, consuming its end event."""
        nest = 0
        for event, _ in self._events:
            match event.kind:
                case EventKind.START:
                    nest += 1
                case EventKind.END:
                    if nest == 0:
                        break
                    nest -= 1
                case EventKind.HTML | EventKind.CODE | EventKind.TEXT:
                    self._write_raw(escape_html(event.text))
                    self._end_newline = event.text.endswith("\n")
                case EventKind.SOFT_BREAK | EventKind.HARD_BREAK | EventKind.RULE:
                    self._write(" ")
                case EventKind.FOOTNOTE_REFERENCE:
                    self._write(f"[{self._footnotes.number(event.text)}]")
                case EventKind.TASK_LIST_MARKER:
                    self._write("[x]" if event.checked else "[ ]")


def push_html(
    events: cabc.Iterable[Event],
    out: TextSink,
    *,
    highlighter: CodeHighlighter | None = None,
) -> None:
    """Render ``events`` into ``out``; errors raised by ``out`` propagate."""
    HtmlWriter(events, out, highlighter=highlighter).run()


def render_html(markdown_text: str, *, highlighter: CodeHighlighter | None = None) -> str:
    """Parse and render ``markdown_text`` with fresh per-document state."""
    buffer = io.StringIO()
    push_html(parse_events(markdown_text), buffer, highlighter=highlighter)
    return buffer.getvalue()


class HtmlContentRenderer:
    """Render post markdown with consistent styling."""

    def __init__(self, pygments_style: str = "monokai", *, highlight: bool = False) -> None:
        """Initialize a renderer with optional syntax highlighting.

        Parameters
        ----------
        pygments_style : str, optional
            Name of the Pygments style used when highlighting. Defaults to
            ``"monokai"``.
        highlight : bool, optional
            Highlight fenced code blocks that name a known language. Off by
            default, in which case code is emitted escaped inside
            ``<pre><code class="language-…">``.
        """
        self.pygments_style = pygments_style
        self._highlighter = CodeHighlighter(pygments_style) if highlight else None

    @property
    def highlights(self) -> bool:
        return self._highlighter is not None

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks, or ``""``."""
        if self._highlighter is None:
            return ""
        return self._highlighter.stylesheet

    def markdown(self, text: str) -> str:
        """Render markdown into HTML."""
        return render_html(text, highlighter=self._highlighter)


__all__ = [
    "CodeHighlighter",
    "HtmlContentRenderer",
    "HtmlWriter",
    "ImageParagraphFilter",
    "escape_href",
    "escape_html",
    "push_html",
    "render_html",
]
