from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from ..errors import ErrorKind, FsError, Outcome
from .resolver import NewPath, canonical_root, join_relative, resolve_new_within, resolve_relative, resolve_within

logger = logging.getLogger(__name__)

_ROOT_ALIASES = {'', '/', '.'}


@dataclass(frozen=True)
class OperationResult:
    outcome: Outcome = Outcome.APPLIED
    created: tuple[str, ...] = ()


def _reason(exc: OSError) -> str:
    return exc.strerror or exc.__class__.__name__


def _failure(
    kind: ErrorKind,
    message: str,
    created: tuple[str, ...] = (),
    http_status: int | None = None,
) -> FsError:
    outcome = Outcome.PARTIAL if created else Outcome.UNCHANGED
    return FsError(kind, message, outcome=outcome, residual=created, http_status=http_status)


def _differs_only_by_case(a: Path, b: Path) -> bool:
    # a hard link is the same file too, but rename(2) over it is a silent no-op
    if a == b or str(a).casefold() != str(b).casefold():
        return False
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def _require_regular_file(candidate: Path, resolved: Path, message: str) -> None:
    if candidate.is_symlink() or not resolved.is_file():
        raise FsError(ErrorKind.NOT_A_FILE, message)


def _validate_name(name: str) -> None:
    separators = {'/', os.sep} | ({os.altsep} if os.altsep else set())
    if not name or name in {'.', '..'} or '\x00' in name or any(sep in name for sep in separators):
        raise FsError(ErrorKind.INVALID_PATH, 'New name must be a single file name')


def _resolve_source(root: Path, relative: str, message: str) -> Path:
    resolved = resolve_relative(root, relative)
    _require_regular_file(join_relative(root, relative), resolved, message)
    return resolved


def _create_chain(root: Path, new: NewPath) -> tuple[str, ...]:
    try:
        new.target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        made = tuple(p.relative_to(root).as_posix() for p in new.missing if p.is_dir())
        raise _failure(ErrorKind.CREATE_FAILED, f'Failed to create dir: {_reason(exc)}', made) from exc
    created = tuple(p.relative_to(root).as_posix() for p in new.missing)
    for rel in created:
        logger.info('Created directory %s under %s', rel, root)
    return created


def _revalidate_created(root: Path, new: NewPath, created: tuple[str, ...]) -> Path:
    try:
        return resolve_within(root, new.target)
    except FsError as exc:
        raise _failure(exc.kind, f'Failed to validate created dir: {exc.message}', created) from exc


def rename(root: str | os.PathLike, relative_path: str, new_name: str) -> OperationResult:
    """Rename a file inside its own directory.

    Existing destinations are never overwritten. The existence check and the
    rename are separate syscalls, so a concurrent writer can still race them.
    """
    root_canon = canonical_root(root)
    target = _resolve_source(root_canon, relative_path, 'Target is not a file')
    _validate_name(new_name)

    parent = resolve_within(root_canon, target.parent)
    destination = parent / new_name
    if destination == target:
        return OperationResult()
    if os.path.lexists(destination) and not _differs_only_by_case(target, destination):
        raise FsError(ErrorKind.RENAME_FAILED, 'Rename failed: destination already exists', http_status=409)

    try:
        os.rename(target, destination)
    except OSError as exc:
        raise FsError(ErrorKind.RENAME_FAILED, f'Rename failed: {_reason(exc)}') from exc
    logger.info('Renamed %s to %s', target, destination)
    return OperationResult()


def delete(root: str | os.PathLike, relative_path: str) -> OperationResult:
    root_canon = canonical_root(root)
    target = _resolve_source(root_canon, relative_path, 'Only files can be deleted with this action')
    try:
        target.unlink()
    except OSError as exc:
        raise FsError(ErrorKind.DELETE_FAILED, f'Delete failed: {_reason(exc)}') from exc
    logger.info('Deleted %s', target)
    return OperationResult()


def move(
    root: str | os.PathLike,
    from_relative: str,
    to_relative_dir: str,
    create_dir: bool = False,
) -> OperationResult:
    """Move a file into another directory under root, keeping its name.

    Not transactional: when ``create_dir`` made directories and the move then
    fails, they stay on disk and the error is tagged ``partial`` with the
    created paths as residual. Cross-device moves are not supported.
    """
    root_canon = canonical_root(root)
    source = _resolve_source(root_canon, from_relative, 'Source is not a file')

    dest_relative = to_relative_dir
    if to_relative_dir.strip() in _ROOT_ALIASES:
        dest_relative = ''

    created: tuple[str, ...] = ()
    dest_candidate = join_relative(root_canon, dest_relative)
    if os.path.lexists(dest_candidate):
        dest_dir = resolve_relative(root_canon, dest_relative)
        if not dest_dir.is_dir():
            raise FsError(ErrorKind.DESTINATION_MISSING, 'Destination is not a directory')
    elif not create_dir:
        raise FsError(ErrorKind.DESTINATION_MISSING, 'Destination directory does not exist')
    else:
        new = resolve_new_within(root_canon, dest_relative)
        created = _create_chain(root_canon, new)
        dest_dir = _revalidate_created(root_canon, new, created)

    destination = dest_dir / source.name
    if destination == source:
        return OperationResult(created=created)
    if os.path.lexists(destination) and not _differs_only_by_case(source, destination):
        raise _failure(ErrorKind.MOVE_FAILED, 'Move failed: destination already exists', created, http_status=409)

    try:
        os.rename(source, destination)
    except OSError as exc:
        if exc.errno == errno.EXDEV:
            message = 'Move failed: cross-device moves are not supported'
        else:
            message = f'Move failed: {_reason(exc)}'
        raise _failure(ErrorKind.MOVE_FAILED, message, created) from exc
    logger.info('Moved %s to %s', source, destination)
    return OperationResult(created=created)


def create_folder(root: str | os.PathLike, relative_dir: str) -> OperationResult:
    """Create a directory chain under root; succeeds if it already exists."""
    root_canon = canonical_root(root)
    new = resolve_new_within(root_canon, relative_dir)
    created = _create_chain(root_canon, new)
    _revalidate_created(root_canon, new, created)
    return OperationResult(created=created)
