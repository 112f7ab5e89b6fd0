from __future__ import annotations

from fastapi import APIRouter, Depends

from ..deps import require_token
from ..schemas import MountPointOut
from ..services.mounts import list_mounts

router = APIRouter(prefix='/api/mounts', tags=['mounts'], dependencies=[Depends(require_token)])


@router.get('')
def mounts():
    data = [MountPointOut.model_validate(m).model_dump() for m in list_mounts()]
    return {'ok': True, 'data': data}
