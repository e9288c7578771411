"""Typed dataclasses describing pagong site configuration."""

from __future__ import annotations

import dataclasses as dc
from pathlib import Path

from pagong._constants import (
    DEFAULT_TEMPLATE_NAME,
    DIST_FILE_EXT,
    FEED_FILE_EXT,
    INCLUDE_RAW_EXTENSIONS,
    SOURCE_PATH,
    TARGET_PATH,
)

DEFAULT_PYGMENTS_STYLE = "monokai"
PACKAGED_TEMPLATE = Path(__file__).resolve().parents[1] / "templates" / DEFAULT_TEMPLATE_NAME


class SiteConfigError(ValueError):
    """Raised when the site configuration is invalid or incomplete."""


@dc.dataclass(slots=True)
class SiteConfig:
    """Settings for one site build.

    Attributes
    ----------
    root : Path
        Project directory holding the source and target directories.
    source_dir, target_dir : Path
        Source and output directories, relative to ``root`` unless absolute.
    template : Path or None
        Default page template; the packaged ``default.html`` when ``None``.
    dist_ext, feed_ext : str
        Extensions (without dot) of generated pages and of feed files.
    clean : bool
        Delete the target directory before writing.
    highlight : bool
        Highlight fenced code with Pygments and publish its stylesheet.
    pygments_style : str
        Pygments style used when highlighting.
    raw_include_extensions : tuple[str, ...]
        ``INCLUDE`` file extensions inserted without escaping.
    """

    root: Path
    source_dir: Path = Path(SOURCE_PATH)
    target_dir: Path = Path(TARGET_PATH)
    template: Path | None = None
    dist_ext: str = DIST_FILE_EXT
    feed_ext: str = FEED_FILE_EXT
    clean: bool = False
    highlight: bool = False
    pygments_style: str = DEFAULT_PYGMENTS_STYLE
    raw_include_extensions: tuple[str, ...] = INCLUDE_RAW_EXTENSIONS

    @property
    def source_root(self) -> Path:
        return self.root / self.source_dir

    @property
    def target_root(self) -> Path:
        return self.root / self.target_dir

    @property
    def template_path(self) -> Path:
        """Return the default template file to parse for posts."""
        if self.template is None:
            return PACKAGED_TEMPLATE
        return self.root / self.template


__all__ = ["DEFAULT_PYGMENTS_STYLE", "PACKAGED_TEMPLATE", "SiteConfig", "SiteConfigError"]
