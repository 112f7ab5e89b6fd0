from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path, PurePath

from ..errors import ErrorKind, FsError

logger = logging.getLogger(__name__)

_SEPARATORS = '/' + os.sep + (os.altsep or '')


@dataclass(frozen=True)
class NewPath:
    """A not-yet-existing path whose nearest existing ancestor is inside root.

    ``missing`` lists the directories that have to be created, outermost first.
    """

    target: Path
    anchor: Path
    missing: tuple[Path, ...]


def _os_reason(exc: Exception) -> str:
    # strerror keeps absolute paths out of messages shown to the caller
    return getattr(exc, 'strerror', None) or exc.__class__.__name__


def is_within(base: Path, candidate: Path) -> bool:
    return candidate == base or base in candidate.parents


def canonical_root(root: str | os.PathLike) -> Path:
    raw = os.fspath(root)
    if not raw or '\x00' in raw:
        raise FsError(ErrorKind.INVALID_ROOT, 'Invalid root: empty or malformed path')
    try:
        resolved = Path(raw).resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise FsError(ErrorKind.INVALID_ROOT, f'Invalid root: {_os_reason(exc)}') from exc
    if not resolved.is_dir():
        raise FsError(ErrorKind.INVALID_ROOT, 'Invalid root: not a directory')
    return resolved


def relative_parts(relative: str) -> tuple[str, ...]:
    """Split a root-relative path; a leading separator means "from root", not "from /".

    A path whose ``..`` segments climb above root is rejected here, before any
    filesystem lookup, so the answer never depends on what exists outside root.
    """
    if '\x00' in relative:
        raise FsError(ErrorKind.INVALID_PATH, 'Invalid path: contains NUL byte')
    parts = PurePath(relative.lstrip(_SEPARATORS)).parts

    depth = 0
    for part in parts:
        depth = depth - 1 if part == '..' else depth + 1
        if depth < 0:
            logger.warning('Rejected relative path climbing above root')
            raise FsError(ErrorKind.ESCAPE, 'Path escapes selected root')
    return parts


def join_relative(root: Path, relative: str) -> Path:
    return root.joinpath(*relative_parts(relative))


def resolve_within(root: str | os.PathLike, candidate: str | os.PathLike) -> Path:
    root_canon = canonical_root(root)
    try:
        resolved = Path(candidate).resolve(strict=True)
    except (OSError, RuntimeError, ValueError) as exc:
        raise FsError(ErrorKind.INVALID_PATH, f'Failed to canonicalize path: {_os_reason(exc)}') from exc
    if not is_within(root_canon, resolved):
        logger.warning('Rejected path outside root %s', root_canon)
        raise FsError(ErrorKind.ESCAPE, 'Path escapes selected root')
    return resolved


def resolve_relative(root: str | os.PathLike, relative: str) -> Path:
    root_canon = canonical_root(root)
    return resolve_within(root_canon, join_relative(root_canon, relative))


def resolve_new_within(root: str | os.PathLike, relative: str) -> NewPath:
    """Resolve a path that may not exist yet.

    The longest existing prefix is canonicalized and checked against root. The
    remaining segments are joined onto it verbatim and may not contain ``..``.
    """
    root_canon = canonical_root(root)
    parts = relative_parts(relative)

    probe = root_canon
    index = 0
    while index < len(parts) and os.path.lexists(probe / parts[index]):
        probe = probe / parts[index]
        index += 1

    anchor = resolve_within(root_canon, probe)
    tail = parts[index:]
    if '..' in tail:
        logger.warning('Rejected traversal in new path segments under %s', root_canon)
        raise FsError(ErrorKind.ESCAPE, 'Path escapes selected root')

    missing: list[Path] = []
    current = anchor
    for part in tail:
        current = current / part
        missing.append(current)
    return NewPath(target=current, anchor=anchor, missing=tuple(missing))
