from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_ROOT = 'invalid_root'
    INVALID_PATH = 'invalid_path'
    ESCAPE = 'escape'
    NOT_A_FILE = 'not_a_file'
    DESTINATION_MISSING = 'destination_missing'
    CREATE_FAILED = 'create_failed'
    RENAME_FAILED = 'rename_failed'
    DELETE_FAILED = 'delete_failed'
    MOVE_FAILED = 'move_failed'


class Outcome(str, Enum):
    APPLIED = 'applied'
    PARTIAL = 'partial'
    UNCHANGED = 'unchanged'


_STATUS_BY_KIND = {
    ErrorKind.INVALID_ROOT: 404,
    ErrorKind.INVALID_PATH: 404,
    ErrorKind.ESCAPE: 403,
    ErrorKind.NOT_A_FILE: 400,
    ErrorKind.DESTINATION_MISSING: 404,
}


class FsError(Exception):
    """A rejected or failed filesystem operation.

    ``outcome`` tells the caller whether anything was left behind: ``unchanged``
    means the filesystem was not touched, ``partial`` means ``residual`` lists
    root-relative paths that were created before the failure.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        outcome: Outcome = Outcome.UNCHANGED,
        residual: tuple[str, ...] = (),
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.outcome = outcome
        self.residual = residual
        self.http_status = http_status or _STATUS_BY_KIND.get(kind, 400)

    def as_detail(self) -> dict:
        return {
            'kind': self.kind.value,
            'message': self.message,
            'outcome': self.outcome.value,
            'residual': list(self.residual),
        }
