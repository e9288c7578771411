"""Utility helpers shared by the pagong configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from .models import SiteConfigError


def _normalize_extension(value: object, *, key: str) -> str:
    """Return an extension without its leading dot, lowercased."""
    if not isinstance(value, str):
        msg = f"'{key}' must be a string, got {type(value).__name__}."
        raise SiteConfigError(msg)
    extension = value.strip().lstrip(".").lower()
    if not extension or "/" in extension:
        msg = f"'{key}' must be a non-empty file extension, got '{value}'."
        raise SiteConfigError(msg)
    return extension


def _normalize_extensions(value: object, *, key: str) -> tuple[str, ...]:
    """Accept a list of extensions or a comma separated string."""
    match value:
        case str():
            items: list[object] = [part for part in value.split(",") if part.strip()]
        case list() | tuple():
            items = list(value)
        case _:
            msg = f"'{key}' must be a list of extensions."
            raise SiteConfigError(msg)
    return tuple(_normalize_extension(item, key=key) for item in items)


def _as_bool(value: object, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    msg = f"'{key}' must be true or false, got '{value}'."
    raise SiteConfigError(msg)


def _as_path(value: object, *, key: str) -> Path:
    match value:
        case Path():
            return value
        case str() as text if text.strip():
            return Path(text.strip())
        case _:
            msg = f"'{key}' must be a non-empty path."
            raise SiteConfigError(msg)


def _as_str(value: object, *, key: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    msg = f"'{key}' must be a non-empty string."
    raise SiteConfigError(msg)


def _drop_unset(values: typ.Mapping[str, typ.Any] | None) -> dict[str, typ.Any]:
    """Return ``values`` without the keys whose value is ``None``."""
    if not values:
        return {}
    return {key: value for key, value in values.items() if value is not None}
