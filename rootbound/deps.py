from __future__ import annotations

from secrets import compare_digest

from fastapi import HTTPException, Request, status

from .config import settings


def _extract_token(request: Request) -> str:
    auth = request.headers.get('Authorization', '')
    if auth.startswith('Bearer '):
        return auth.split(' ', 1)[1].strip()
    return request.headers.get('X-Api-Token', '').strip()


def require_token(request: Request):
    if not settings.api_token:
        return
    token = _extract_token(request)
    if not token or not compare_digest(token, settings.api_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Missing or invalid API token')
