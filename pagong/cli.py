"""Cyclopts CLI entrypoint for generating pagong sites.

The ``pagong`` console script defined here turns a project's ``content``
directory into a static site under ``dist``. Every option can also be supplied
through a ``PAGONG_*`` environment variable (for example ``PAGONG_ROOT``), and
persistent settings can live in ``pagong.yaml`` next to the content.

Examples
--------
Generate the site rooted at the current directory:

>>> from pagong.cli import main
>>> main()  # doctest: +SKIP

Generate another site with highlighted code, starting from a clean target:

>>> from pagong.cli import app
>>> app(["generate", "--root", "blog", "--clean", "--highlight"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from .config import load_site_config
from .generator import SiteGenerator

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

app = App(
    name="pagong",
    help="A static site generator for slow connections.",
    config=cyclopts.config.Env("PAGONG_", command=False),  # type: ignore[unknown-argument]
)


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the path as given."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


def configure_logging(*, verbose: bool = False) -> None:
    """Send log records to stderr, at ``INFO`` when ``verbose`` else ``WARNING``."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=LOG_FORMAT,
        force=True,
    )


@app.command(help="Generate the site's HTML pages, feeds and assets.")
def generate(
    *,
    root: typ.Annotated[
        Path, Parameter(help="Project directory holding the content folder")
    ] = Path(),
    config: typ.Annotated[
        Path | None, Parameter(help="Path to a pagong.yaml configuration file")
    ] = None,
    template: typ.Annotated[
        Path | None, Parameter(help="Default HTML template for markdown files")
    ] = None,
    dist_ext: typ.Annotated[
        str | None, Parameter(help="File extension of the generated pages")
    ] = None,
    feed_ext: typ.Annotated[
        str | None, Parameter(help="File extension of Atom feed files")
    ] = None,
    clean: typ.Annotated[
        bool | None, Parameter(help="Delete the target directory before writing")
    ] = None,
    highlight: typ.Annotated[
        bool | None, Parameter(help="Highlight fenced code blocks with Pygments")
    ] = None,
    pygments_style: typ.Annotated[
        str | None, Parameter(help="Pygments style used when highlighting")
    ] = None,
    verbose: typ.Annotated[bool, Parameter(help="Log progress messages")] = False,
) -> None:
    """Generate the site rooted at ``root``.

    Parameters
    ----------
    root : Path, optional
        Project directory; ``content`` is read from and ``dist`` written to
        it. Defaults to the current directory.
    config : Path or None, optional
        Explicit configuration file instead of ``<root>/pagong.yaml``.
    template : Path or None, optional
        Default template, relative to ``root``.
    dist_ext, feed_ext : str or None, optional
        Page and feed extensions overriding the configuration.
    clean, highlight : bool or None, optional
        Flags overriding the configuration when given.
    pygments_style : str or None, optional
        Highlight style overriding the configuration.
    verbose : bool, optional
        Log at ``INFO`` instead of ``WARNING``.

    Raises
    ------
    SiteConfigError
        If the configuration is invalid.
    PostError
        If a markdown file cannot be loaded.
    FsActionError
        If writing the site fails.
    """
    configure_logging(verbose=verbose)
    site_config = load_site_config(
        root,
        {
            "template": template,
            "dist_ext": dist_ext,
            "feed_ext": feed_ext,
            "clean": clean,
            "highlight": highlight,
            "pygments_style": pygments_style,
        },
        config_path=config,
    )
    for path in SiteGenerator(site_config).run():
        print(f"wrote {_format_path(path)}")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``pagong`` console command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
