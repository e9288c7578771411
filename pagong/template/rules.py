"""Parse ``<!--P/ RULE args /P-->`` directives out of HTML templates.

Each directive is tokenized into whitespace separated values (bare words or
double-quoted strings with backslash escapes). The first value names the
rule; the rest are its arguments. Problems never raise: an unknown rule or an
unterminated quote is logged and the scan carries on.

Examples
--------
>>> from pagong.template.rules import parse_rule, parse_template
>>> parse_rule('LIST "/blog posts" sort date desc')
Listing(path='/blog posts', sort=SortOrder(key='date', ascending=False))
>>> [(r.start, r.end) for r in parse_template("<p><!--P/ CSS /P--></p>")]
[(3, 19)]
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from pagong._constants import TEMPLATE_CLOSE_MARKER, TEMPLATE_OPEN_MARKER

logger = logging.getLogger(__name__)

MAX_TOC_DEPTH = 255
SORT_ARGUMENT = "sort"
SORT_ASCENDING = "asc"
SORT_DESCENDING = "desc"


@dc.dataclass(frozen=True, slots=True)
class SortOrder:
    """Listing sort key (a post field or metadata key) and direction."""

    key: str
    ascending: bool = True


@dc.dataclass(frozen=True, slots=True)
class Contents:
    """Insert the post's rendered markdown."""


@dc.dataclass(frozen=True, slots=True)
class Css:
    """Insert ``<link>`` tags for stylesheets that apply to the post."""


@dc.dataclass(frozen=True, slots=True)
class Toc:
    """Insert the post's heading outline as nested lists."""

    max_depth: int = MAX_TOC_DEPTH


@dc.dataclass(frozen=True, slots=True)
class Listing:
    """Insert links to every post found under ``path``."""

    path: str
    sort: SortOrder | None = None


@dc.dataclass(frozen=True, slots=True)
class Meta:
    """Insert one value from the post's metadata block."""

    key: str


@dc.dataclass(frozen=True, slots=True)
class Include:
    """Insert the contents of another file."""

    path: str


Rule: typ.TypeAlias = Contents | Css | Toc | Listing | Meta | Include


@dc.dataclass(frozen=True, slots=True)
class Replacement:
    """A directive's span in the template text and the rule it evaluates to.

    ``start`` and ``end`` always index into the unmodified template text: the
    span runs from the first character of the open marker to just past the
    close marker.
    """

    start: int
    end: int
    rule: Rule


class ValueReader:
    """Pull whitespace separated, optionally quoted values out of a string.

    >>> reader = ValueReader('INCLUDE "a \\\\"b\\\\".txt"')
    >>> reader.next_value(), reader.next_value(), reader.next_value()
    ('INCLUDE', 'a "b".txt', None)
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._offset = 0

    def next_value(self) -> str | None:
        """Return the next value, or ``None`` once only whitespace remains."""
        text = self._text
        offset = self._offset
        while offset < len(text) and text[offset].isspace():
            offset += 1
        if offset == len(text):
            self._offset = offset
            return None
        if text[offset] == '"':
            value, self._offset = self._read_quoted(offset + 1)
            return value
        end = offset
        while end < len(text) and not text[end].isspace():
            end += 1
        self._offset = end
        return text[offset:end]

    def _read_quoted(self, index: int) -> tuple[str, int]:
        text = self._text
        chars: list[str] = []
        escaped = False
        closed = False
        while index < len(text):
            char = text[index]
            index += 1
            if escaped:
                chars.append(char)
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                closed = True
                break
            else:
                chars.append(char)
        if escaped:
            logger.warning("reached end of string with escape sequence open: %r", text)
        if not closed:
            logger.warning("reached end of string without closing it: %r", text)
        return "".join(chars), index


def _parse_depth(value: str | None, text: str) -> int:
    if value is None:
        return MAX_TOC_DEPTH
    try:
        depth = int(value)
    except ValueError:
        depth = -1
    if not 0 <= depth <= MAX_TOC_DEPTH:
        logger.warning("could not parse depth as a number: %r", text)
        return MAX_TOC_DEPTH
    return depth


def _parse_listing(reader: ValueReader) -> Listing | None:
    path = reader.next_value()
    if path is None:
        return None
    sort: SortOrder | None = None
    while (argument := reader.next_value()) is not None:
        if argument != SORT_ARGUMENT:
            logger.warning("unrecognized list argument: %s", argument)
            continue
        key = reader.next_value()
        order = reader.next_value()
        if key is not None and order in (SORT_ASCENDING, SORT_DESCENDING):
            sort = SortOrder(key, ascending=order == SORT_ASCENDING)
        else:
            logger.warning(
                "sort requires key and asc/desc order, but got: %r, %r", key, order
            )
    return Listing(path, sort)


def parse_rule(text: str) -> Rule | None:
    """Interpret the text between a pair of markers.

    Parameters
    ----------
    text : str
        Directive body, for example ``" TOC 2 "``.

    Returns
    -------
    Rule or None
        The parsed rule, or ``None`` when the name is unknown or a required
        argument is missing.
    """
    reader = ValueReader(text)
    match reader.next_value():
        case "CONTENTS":
            return Contents()
        case "CSS":
            return Css()
        case "TOC":
            return Toc(_parse_depth(reader.next_value(), text))
        case "LIST":
            return _parse_listing(reader)
        case "META":
            key = reader.next_value()
            return Meta(key) if key is not None else None
        case "INCLUDE":
            path = reader.next_value()
            return Include(path) if path is not None else None
        case _:
            return None


def parse_template(html: str, *, source: object = None) -> list[Replacement]:
    """Find every directive in ``html``, scanning left to right.

    Parameters
    ----------
    html : str
        Template text.
    source : object, optional
        Where the text came from; only used in log messages.

    Returns
    -------
    list[Replacement]
        Non-overlapping replacements ordered by ``start``.
    """
    replacements: list[Replacement] = []
    offset = 0
    while (index := html.find(TEMPLATE_OPEN_MARKER, offset)) != -1:
        rule_start = index + len(TEMPLATE_OPEN_MARKER)
        rule_end = html.find(TEMPLATE_CLOSE_MARKER, rule_start)
        if rule_end == -1:
            logger.warning(
                "html template without close marker after offset %d: %s",
                rule_start,
                source,
            )
            break
        end = rule_end + len(TEMPLATE_CLOSE_MARKER)
        body = html[rule_start:rule_end]
        rule = parse_rule(body)
        if rule is None:
            logger.warning("could not understand template rule %r: %s", body, source)
        else:
            replacements.append(Replacement(index, end, rule))
        offset = end
    return replacements


__all__ = [
    "MAX_TOC_DEPTH",
    "Contents",
    "Css",
    "Include",
    "Listing",
    "Meta",
    "Replacement",
    "Rule",
    "SortOrder",
    "Toc",
    "ValueReader",
    "parse_rule",
    "parse_template",
]
