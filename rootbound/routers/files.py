from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from ..deps import require_token
from ..errors import FsError
from ..schemas import ApiResponse, CreateFolderRequest, DeleteRequest, FileEntryOut, MoveRequest, OperationOut, RenameRequest
from ..services import file_ops, walker

router = APIRouter(prefix='/api/files', tags=['files'], dependencies=[Depends(require_token)])


def _http_error(exc: FsError) -> HTTPException:
    return HTTPException(status_code=exc.http_status, detail=exc.as_detail())


def _done(message: str, result: file_ops.OperationResult) -> ApiResponse:
    return ApiResponse(ok=True, message=message, data=OperationOut.model_validate(result).model_dump(mode='json'))


@router.get('/list')
def list_files(root: str = Query(..., min_length=1)):
    try:
        entries = walker.list_files(root)
    except FsError as exc:
        raise _http_error(exc) from exc
    return {'ok': True, 'data': [FileEntryOut.model_validate(e).model_dump() for e in entries]}


@router.post('/rename')
def rename(payload: RenameRequest):
    try:
        result = file_ops.rename(payload.root, payload.relative_path, payload.new_name)
    except FsError as exc:
        raise _http_error(exc) from exc
    return _done('Renamed', result)


@router.post('/delete')
def delete(payload: DeleteRequest):
    try:
        result = file_ops.delete(payload.root, payload.relative_path)
    except FsError as exc:
        raise _http_error(exc) from exc
    return _done('Deleted', result)


@router.post('/move')
def move(payload: MoveRequest):
    try:
        result = file_ops.move(payload.root, payload.from_relative, payload.to_relative_dir, payload.create_dir)
    except FsError as exc:
        raise _http_error(exc) from exc
    return _done('Moved', result)


@router.post('/mkdir')
def mkdir(payload: CreateFolderRequest):
    try:
        result = file_ops.create_folder(payload.root, payload.relative_dir)
    except FsError as exc:
        raise _http_error(exc) from exc
    return _done('Folder created', result)
