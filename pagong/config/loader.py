"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from pagong._constants import CONFIG_FILENAME

from .helpers import (
    _as_bool,
    _as_path,
    _as_str,
    _drop_unset,
    _normalize_extension,
    _normalize_extensions,
)
from .models import SiteConfig, SiteConfigError

_PATH_KEYS = ("source_dir", "target_dir", "template")
_EXTENSION_KEYS = ("dist_ext", "feed_ext")
_BOOL_KEYS = ("clean", "highlight")
_KNOWN_KEYS = frozenset(
    (*_PATH_KEYS, *_EXTENSION_KEYS, *_BOOL_KEYS, "pygments_style", "raw_include_extensions")
)


def _read_yaml(path: Path) -> dict[str, typ.Any]:
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    try:
        with path.open("r", encoding="utf-8") as handle:
            loaded = loader.load(handle) or {}
    except YAMLError as exc:
        msg = f"Configuration file '{path}' is not valid YAML: {exc}"
        raise SiteConfigError(msg) from exc
    if not isinstance(loaded, dict):
        msg = f"Top-level YAML structure of '{path}' must be a mapping."
        raise SiteConfigError(msg)
    return dict(loaded)


def load_site_config(
    root: Path,
    overrides: typ.Mapping[str, typ.Any] | None = None,
    config_path: Path | None = None,
) -> SiteConfig:
    """Build the configuration for the site rooted at ``root``.

    Parameters
    ----------
    root : Path
        Project directory. ``pagong.yaml`` is read from here when present.
    overrides : Mapping[str, Any], optional
        Values taking precedence over the file, typically CLI options.
        ``None`` values are ignored.
    config_path : Path, optional
        Explicit configuration file; it must exist.

    Returns
    -------
    SiteConfig
        Settings with defaults filled in.

    Raises
    ------
    FileNotFoundError
        If ``config_path`` is given but does not exist.
    SiteConfigError
        If the file is not a YAML mapping or a value is invalid.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_site_config(Path("site"), {"dist_ext": ".htm"})  # doctest: +SKIP
    >>> config.dist_ext  # doctest: +SKIP
    'htm'
    """
    if config_path is not None and not config_path.exists():
        msg = f"Configuration file '{config_path}' not found."
        raise FileNotFoundError(msg)

    path = config_path or root / CONFIG_FILENAME
    raw: dict[str, typ.Any] = _read_yaml(path) if path.exists() else {}
    unknown = sorted(set(raw) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown configuration keys in '{path}': {', '.join(unknown)}"
        raise SiteConfigError(msg)
    raw.update(_drop_unset(overrides))

    values: dict[str, typ.Any] = {}
    for key in _PATH_KEYS:
        if key in raw and raw[key] is not None:
            values[key] = _as_path(raw[key], key=key)
    for key in _EXTENSION_KEYS:
        if key in raw:
            values[key] = _normalize_extension(raw[key], key=key)
    for key in _BOOL_KEYS:
        if key in raw:
            values[key] = _as_bool(raw[key], key=key)
    if "pygments_style" in raw:
        values["pygments_style"] = _as_str(raw["pygments_style"], key="pygments_style")
    if "raw_include_extensions" in raw:
        values["raw_include_extensions"] = _normalize_extensions(
            raw["raw_include_extensions"], key="raw_include_extensions"
        )

    return SiteConfig(root=root, **values)


__all__ = ["load_site_config"]
