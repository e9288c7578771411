"""High-level orchestration for site generation.

This module walks a site's source directory, turns every markdown file into an
HTML page through its template, fills Atom feeds and mirrors all other files
into the target directory. Work is split in three steps so each can be tested
alone: :func:`scan_dir` reads the source tree, :func:`plan_actions` decides what
to write, and :func:`pagong.fs_action.execute_fs_actions` writes it.
:class:`SiteGenerator` runs the three in order.

Example
-------
>>> from pathlib import Path
>>> from pagong.config import load_site_config
>>> from pagong.generator import SiteGenerator
>>> config = load_site_config(Path("my-site"))  # doctest: +SKIP
>>> SiteGenerator(config).run()  # doctest: +SKIP
[PosixPath('my-site/dist/index.html'), ...]
"""

from __future__ import annotations

import logging
import typing as typ

from pagong._constants import HIGHLIGHT_STYLESHEET, SOURCE_FILE_EXT, STYLE_FILE_EXT
from pagong.config import SiteConfig, SiteConfigError
from pagong.config.models import PACKAGED_TEMPLATE
from pagong.feed import FeedError, FeedMeta, fill_atom_feed, load_atom_feed
from pagong.fs_action import (
    Copy,
    CreateDir,
    DeleteDir,
    FsAction,
    WriteFile,
    execute_fs_actions,
)
from pagong.generator.models import Scan
from pagong.generator.renderer import HtmlContentRenderer
from pagong.post import Post, load_post
from pagong.template import Template

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = logging.getLogger(__name__)


def _extension(path: Path) -> str:
    return path.suffix.lstrip(".").lower()


def _site_uri(root: Path, path: Path) -> str:
    return "/" + path.relative_to(root).as_posix()


def _load_default_template(config: SiteConfig, root: Path) -> Template:
    extensions = config.raw_include_extensions
    if config.template is None:
        html = PACKAGED_TEMPLATE.read_text(encoding="utf-8")
        return Template.from_string(html, root, raw_include_extensions=extensions)
    try:
        return Template.load(root, config.template_path, raw_include_extensions=extensions)
    except OSError as exc:
        msg = f"Failed to read default template '{config.template_path}': {exc}"
        raise SiteConfigError(msg) from exc


def _load_templates(
    config: SiteConfig, root: Path, paths: cabc.Iterable[Path]
) -> dict[Path, Template]:
    templates: dict[Path, Template] = {}
    for path in sorted(paths):
        try:
            templates[path] = Template.load(
                root, path, raw_include_extensions=config.raw_include_extensions
            )
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("failed to load html template %s: %s", path, exc)
    return templates


def scan_dir(config: SiteConfig) -> Scan:
    """Walk the configured source directory.

    Parameters
    ----------
    config : SiteConfig
        Site settings; ``config.source_root`` is walked depth first in sorted
        order so repeated builds see files in the same order.

    Returns
    -------
    Scan
        Directories, files, stylesheets, posts, feeds and templates found.

    Raises
    ------
    FileNotFoundError
        If the source directory does not exist.
    PostError
        If a markdown file cannot be loaded.
    SiteConfigError
        If the configured default template cannot be read.
    """
    root = config.source_root
    if not root.is_dir():
        msg = f"Source directory '{root}' not found."
        raise FileNotFoundError(msg)

    dirs_to_create: list[Path] = []
    files_to_copy: list[Path] = []
    css_uris: list[str] = []
    posts: list[Post] = []
    feeds: list[FeedMeta] = []
    template_paths: set[Path] = set()

    pending = [root]
    while pending:
        directory = pending.pop()
        entries = sorted(directory.iterdir())
        subdirs = [entry for entry in entries if entry.is_dir()]
        dirs_to_create.extend(subdirs)
        pending.extend(reversed(subdirs))
        for entry in entries:
            if entry.is_dir():
                continue
            extension = _extension(entry)
            if extension == STYLE_FILE_EXT:
                css_uris.append(_site_uri(root, entry))
            if extension == config.feed_ext:
                try:
                    feeds.append(load_atom_feed(entry))
                except FeedError as exc:
                    logger.warning("failed to load atom feed, copying it instead: %s", exc)
                    files_to_copy.append(entry)
            elif extension != SOURCE_FILE_EXT:
                files_to_copy.append(entry)
            else:
                post = load_post(root, entry, config.dist_ext)
                if post.template is not None:
                    template_paths.add(post.template)
                posts.append(post)

    files_to_copy = [path for path in files_to_copy if path not in template_paths]
    logger.info(
        "scanned %s: %d posts, %d feeds, %d files to copy",
        root,
        len(posts),
        len(feeds),
        len(files_to_copy),
    )

    return Scan(
        root=root,
        dirs_to_create=dirs_to_create,
        files_to_copy=files_to_copy,
        css_uris=css_uris,
        posts=posts,
        feeds=feeds,
        templates=_load_templates(config, root, template_paths),
        default_template=_load_default_template(config, root),
    )


def plan_actions(
    config: SiteConfig, scan: Scan, renderer: HtmlContentRenderer
) -> list[FsAction]:
    """Decide every filesystem change needed to build the site.

    Parameters
    ----------
    config : SiteConfig
        Site settings (target directory, output extension, clean flag).
    scan : Scan
        Result of :func:`scan_dir`.
    renderer : HtmlContentRenderer
        Renders post and feed content. When it highlights code, its stylesheet
        is written to the target root and linked from every page.

    Returns
    -------
    list[FsAction]
        Actions in execution order: clean, directories, copies, stylesheet,
        feeds, pages.
    """
    target = config.target_root
    actions: list[FsAction] = []
    if config.clean:
        actions.append(DeleteDir(target, not_exists_ok=True, recursive=True))
    actions.append(CreateDir(target))
    actions.extend(
        CreateDir(target / directory.relative_to(scan.root))
        for directory in scan.dirs_to_create
    )
    actions.extend(
        Copy(path, target / path.relative_to(scan.root)) for path in scan.files_to_copy
    )

    css_uris = list(scan.css_uris)
    if renderer.highlights:
        actions.append(WriteFile(target / HIGHLIGHT_STYLESHEET, renderer.stylesheet))
        css_uris.append(f"/{HIGHLIGHT_STYLESHEET}")

    for feed in scan.feeds:
        actions.append(
            WriteFile(
                target / feed.path.relative_to(scan.root),
                fill_atom_feed(feed, scan.posts, renderer),
            )
        )

    for post in scan.posts:
        destination = target / post.path.relative_to(scan.root).with_suffix(
            f".{config.dist_ext}"
        )
        html = scan.template_for(post).apply(post, scan.posts, css_uris, renderer)
        actions.append(WriteFile(destination, html))
    return actions


class SiteGenerator:
    """Build a whole site from its configuration."""

    def __init__(
        self, config: SiteConfig, *, renderer: HtmlContentRenderer | None = None
    ) -> None:
        """Initialize the generator.

        Parameters
        ----------
        config : SiteConfig
            Site settings.
        renderer : HtmlContentRenderer, optional
            Markdown renderer; built from ``config.highlight`` and
            ``config.pygments_style`` when omitted.
        """
        self.config = config
        self.renderer = renderer or HtmlContentRenderer(
            config.pygments_style, highlight=config.highlight
        )

    def run(self) -> list[Path]:
        """Scan, plan and write the site.

        Returns
        -------
        list[Path]
            Files written (pages, feeds and the highlight stylesheet), in
            write order. Copied assets are not listed.
        """
        scan = scan_dir(self.config)
        actions = plan_actions(self.config, scan, self.renderer)
        execute_fs_actions(actions)
        return [action.path for action in actions if isinstance(action, WriteFile)]


__all__ = ["SiteGenerator", "plan_actions", "scan_dir"]
