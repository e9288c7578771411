"""Apply parsed template directives to a post.

Example
-------
>>> from pathlib import Path
>>> from pagong.template.engine import Template
>>> template = Template.from_string("<title><!--P/ META title /P--></title>", Path("."))
>>> len(template.replacements)
1
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from html import escape
from pathlib import Path

from pagong._constants import INCLUDE_RAW_EXTENSIONS

from .helpers import SortKey, build_toc, relative_uri, sort_posts
from .rules import (
    Contents,
    Css,
    Include,
    Listing,
    Meta,
    Replacement,
    Rule,
    SortOrder,
    Toc,
    parse_template,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from pagong.generator.renderer import HtmlContentRenderer
    from pagong.post import Post

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class Template:
    """An HTML template and the directives found in it.

    Attributes
    ----------
    html : str
        Original template text.
    replacements : tuple[Replacement, ...]
        Directive spans indexing into ``html``.
    root : Path
        Site source root; directive paths starting with ``/`` resolve here.
    path : Path or None
        Template file, when loaded from disk. Relative directive paths resolve
        against its directory, or against ``root`` when there is no file.
    raw_include_extensions : tuple[str, ...]
        Lowercase extensions whose ``INCLUDE`` contents are inserted verbatim.
    """

    html: str
    replacements: tuple[Replacement, ...]
    root: Path
    path: Path | None = None
    raw_include_extensions: tuple[str, ...] = INCLUDE_RAW_EXTENSIONS

    @classmethod
    def from_string(
        cls,
        html: str,
        root: Path,
        *,
        path: Path | None = None,
        raw_include_extensions: cabc.Iterable[str] = INCLUDE_RAW_EXTENSIONS,
    ) -> Template:
        """Parse ``html`` into a template rooted at ``root``."""
        replacements = tuple(parse_template(html, source=path or "<string>"))
        return cls(
            html=html,
            replacements=replacements,
            root=root,
            path=path,
            raw_include_extensions=tuple(ext.lower() for ext in raw_include_extensions),
        )

    @classmethod
    def load(
        cls,
        root: Path,
        path: Path,
        *,
        raw_include_extensions: cabc.Iterable[str] = INCLUDE_RAW_EXTENSIONS,
    ) -> Template:
        """Read and parse the template file at ``path``.

        Raises
        ------
        OSError
            If the file cannot be read.
        """
        html = path.read_text(encoding="utf-8")
        return cls.from_string(
            html, root, path=path, raw_include_extensions=raw_include_extensions
        )

    def resolve(self, value: str) -> Path:
        """Resolve a directive path argument to a filesystem path."""
        if value.startswith("/"):
            return self.root / value[1:]
        base = self.path.parent if self.path is not None else self.root
        return base / value

    def apply(
        self,
        post: Post,
        posts: cabc.Sequence[Post],
        css_uris: cabc.Sequence[str],
        renderer: HtmlContentRenderer,
    ) -> str:
        """Return the template with every directive evaluated for ``post``.

        Parameters
        ----------
        post : Post
            The page being generated.
        posts : Sequence[Post]
            Every post of the site, used by ``LIST``.
        css_uris : Sequence[str]
            Site-absolute URIs of the known stylesheets, used by ``CSS``.
        renderer : HtmlContentRenderer
            Markdown renderer for ``CONTENTS``, shared across a build.

        Returns
        -------
        str
            The filled-in HTML document. Applying the same template to the
            same inputs always yields the same text. A failed ``INCLUDE``
            leaves its directive text in place.
        """
        html = self.html
        for replacement in sorted(self.replacements, key=lambda r: r.start, reverse=True):
            value = self._evaluate(replacement.rule, post, posts, css_uris, renderer)
            if value is None:
                continue
            html = html[: replacement.start] + value + html[replacement.end :]
        return html

    def _evaluate(
        self,
        rule: Rule,
        post: Post,
        posts: cabc.Sequence[Post],
        css_uris: cabc.Sequence[str],
        renderer: HtmlContentRenderer,
    ) -> str | None:
        match rule:
            case Contents():
                return renderer.markdown(post.markdown)
            case Css():
                return _stylesheet_links(post, css_uris)
            case Toc(max_depth=max_depth):
                return build_toc(post.toc, max_depth)
            case Listing(path=path, sort=sort):
                return self._listing(post, posts, path, sort)
            case Meta(key=key):
                return post.meta.get(key, "")
            case Include(path=path):
                return self._include(path)
        msg = f"unsupported template rule: {rule!r}"
        raise TypeError(msg)

    def _listing(
        self,
        post: Post,
        posts: cabc.Sequence[Post],
        path: str,
        sort: SortOrder | None,
    ) -> str:
        directory = self.resolve(path)
        listed = list(posts)
        if sort is not None:
            listed = sort_posts(listed, SortKey.parse(sort.key), ascending=sort.ascending)
        items = [
            f'<li><a href="{relative_uri(post.uri, other.uri)}">'
            f"{escape(other.title, quote=False)}</a></li>"
            for other in listed
            if other.path.is_relative_to(directory)
        ]
        return "<ul>" + "".join(items) + "</ul>"

    def _include(self, value: str) -> str | None:
        path = self.resolve(value)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("failed to include %s, leaving the directive in place: %s", path, exc)
            return None
        if path.suffix.lstrip(".").lower() in self.raw_include_extensions:
            return text
        return escape(text, quote=False)


def _stylesheet_links(post: Post, css_uris: cabc.Iterable[str]) -> str:
    links: list[str] = []
    for css in css_uris:
        parent = css.rpartition("/")[0]
        if post.uri.startswith(parent):
            links.append(f'<link rel="stylesheet" type="text/css" href="{css}">')
    return "".join(links)


__all__ = ["Template"]
