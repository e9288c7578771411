"""Load and validate pagong site configuration.

Settings come from three layers: built-in defaults, an optional
``pagong.yaml`` in the project root, and overrides passed by the CLI. The
primary entry point is :func:`load_site_config`, which merges them and returns
a :class:`SiteConfig` ready for :class:`pagong.generator.SiteGenerator`.

Examples
--------
>>> from pathlib import Path
>>> from pagong.config import load_site_config
>>> site = load_site_config(Path("my-site"))  # doctest: +SKIP
>>> site.source_root  # doctest: +SKIP
PosixPath('my-site/content')
"""

from .loader import load_site_config
from .models import SiteConfig, SiteConfigError

__all__ = ["SiteConfig", "SiteConfigError", "load_site_config"]
