"""Shared dataclasses used by the site generation pipeline."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from pagong.feed import FeedMeta
    from pagong.post import Post
    from pagong.template import Template


@dc.dataclass(slots=True)
class Scan:
    """Everything found in a site's source directory.

    Attributes
    ----------
    root : Path
        Source directory that was scanned.
    dirs_to_create : list[Path]
        Source subdirectories, parents before children.
    files_to_copy : list[Path]
        Files copied verbatim (assets, stylesheets, invalid feeds).
    css_uris : list[str]
        Site-absolute URIs of every stylesheet, such as ``/blog/style.css``.
    posts : list[Post]
        Loaded markdown posts in walk order.
    feeds : list[FeedMeta]
        Feed descriptions to fill.
    templates : dict[Path, Template]
        Parsed per-post templates keyed by file path.
    default_template : Template
        Template for posts without a usable template of their own.
    """

    root: Path
    dirs_to_create: list[Path]
    files_to_copy: list[Path]
    css_uris: list[str]
    posts: list[Post]
    feeds: list[FeedMeta]
    templates: dict[Path, Template]
    default_template: Template

    def template_for(self, post: Post) -> Template:
        """Return the template ``post`` asks for, or the default one."""
        if post.template is None:
            return self.default_template
        return self.templates.get(post.template, self.default_template)


__all__ = ["Scan"]
