from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from ..errors import ErrorKind, FsError
from .resolver import canonical_root

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEntry:
    path: str
    relative_path: str
    size: int


def _relative_to_root(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        logger.warning('Walked path %s is not under root %s', path, root)
        return str(path)


def _entry_size(entry: os.DirEntry) -> int:
    try:
        return entry.stat(follow_symlinks=False).st_size
    except OSError:
        return 0


def list_files(root: str | os.PathLike) -> list[FileEntry]:
    """Every regular file under root, sorted by root-relative path.

    Directory symlinks are never descended into and file symlinks are not
    listed, so nothing outside the canonical root is reported. Unreadable
    subdirectories are skipped; an unreadable root is an error.
    """
    root_canon = canonical_root(root)
    result: list[FileEntry] = []
    stack: list[Path] = [root_canon]

    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as entries:
                children = list(entries)
        except OSError as exc:
            if directory == root_canon:
                raise FsError(ErrorKind.INVALID_ROOT, f'Failed to read root: {exc.strerror or exc}') from exc
            logger.warning('Skipping unreadable directory %s: %s', directory, exc)
            continue

        for entry in children:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = entry.is_file(follow_symlinks=False)
            except OSError:
                continue
            if is_dir:
                stack.append(path)
            elif is_file:
                result.append(
                    FileEntry(
                        path=str(path),
                        relative_path=_relative_to_root(path, root_canon),
                        size=_entry_size(entry),
                    )
                )

    result.sort(key=lambda e: e.relative_path)
    return result
