"""Filesystem changes planned by the generator and executed in order.

Planning and executing are kept apart so a whole site build can be inspected
(or tested) as a list of plain records before anything touches the disk.

Example
-------
>>> from pathlib import Path
>>> from pagong.fs_action import CreateDir, WriteFile, execute_fs_actions
>>> execute_fs_actions([
...     CreateDir(Path("dist")),
...     WriteFile(Path("dist/index.html"), "<p>hi</p>"),
... ])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import shutil
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

logger = logging.getLogger(__name__)


class FsActionError(OSError):
    """Raised when a planned filesystem action cannot be carried out.

    Attributes
    ----------
    path : Path
        The path the action was working on (the destination for copies).
    reason : str
        Short description of what went wrong.
    source_path : Path or None
        Copy source, for failed copies.
    """

    def __init__(self, path: Path, reason: str, *, source_path: Path | None = None) -> None:
        self.path = path
        self.reason = reason
        self.source_path = source_path
        if source_path is None:
            message = f"{path}: {reason}"
        else:
            message = f"{source_path} -> {path}: {reason}"
        super().__init__(message)


@dc.dataclass(frozen=True, slots=True)
class Copy:
    """Copy ``source`` to ``dest``, overwriting an existing file."""

    source: Path
    dest: Path


@dc.dataclass(frozen=True, slots=True)
class DeleteDir:
    """Remove a directory, optionally with its contents."""

    path: Path
    not_exists_ok: bool = True
    recursive: bool = True


@dc.dataclass(frozen=True, slots=True)
class CreateDir:
    """Create a directory whose parent already exists."""

    path: Path
    exists_ok: bool = True


@dc.dataclass(frozen=True, slots=True)
class WriteFile:
    """Create or overwrite a UTF-8 text file."""

    path: Path
    content: str


FsAction: typ.TypeAlias = Copy | DeleteDir | CreateDir | WriteFile


def _copy(action: Copy) -> None:
    try:
        shutil.copyfile(action.source, action.dest)
    except OSError as exc:
        raise FsActionError(
            action.dest, f"failed to copy file: {exc.strerror or exc}", source_path=action.source
        ) from exc


def _delete_dir(action: DeleteDir) -> None:
    path = action.path
    if not path.exists():
        if action.not_exists_ok:
            return
        raise FsActionError(path, "there is nothing to delete")
    try:
        if action.recursive:
            shutil.rmtree(path)
        else:
            path.rmdir()
    except OSError as exc:
        raise FsActionError(path, f"failed to delete directory: {exc.strerror or exc}") from exc


def _create_dir(action: CreateDir) -> None:
    path = action.path
    if action.exists_ok and path.exists():
        if not path.is_dir():
            raise FsActionError(path, "a file already exists")
        return
    try:
        path.mkdir()
    except OSError as exc:
        raise FsActionError(path, f"failed to create directory: {exc.strerror or exc}") from exc


def _write_file(action: WriteFile) -> None:
    path = action.path
    if path.exists() and not path.is_file():
        raise FsActionError(path, "a directory already exists")
    try:
        path.write_text(action.content, encoding="utf-8")
    except OSError as exc:
        raise FsActionError(path, f"failed to write file: {exc.strerror or exc}") from exc


def execute_fs_actions(actions: cabc.Iterable[FsAction]) -> None:
    """Carry out ``actions`` in order, stopping at the first failure.

    Parameters
    ----------
    actions : Iterable[FsAction]
        Planned actions.

    Raises
    ------
    FsActionError
        If any action fails; earlier actions are not rolled back.
    """
    for action in actions:
        logger.debug("executing %s", action)
        match action:
            case Copy():
                _copy(action)
            case DeleteDir():
                _delete_dir(action)
            case CreateDir():
                _create_dir(action)
            case WriteFile():
                _write_file(action)


__all__ = [
    "Copy",
    "CreateDir",
    "DeleteDir",
    "FsAction",
    "FsActionError",
    "WriteFile",
    "execute_fs_actions",
]
