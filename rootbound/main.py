from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .routers import files, mounts

logger = logging.getLogger(__name__)

_SECURITY_HEADERS = {
    'Content-Security-Policy': "default-src 'none'",
    'X-Frame-Options': 'DENY',
    'X-Content-Type-Options': 'nosniff',
    'Referrer-Policy': 'no-referrer',
}
_LOOPBACK_HOSTS = {'127.0.0.1', '::1', 'localhost'}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    if settings.app_host not in _LOOPBACK_HOSTS and not settings.api_token:
        raise RuntimeError('Refusing to listen on a non-loopback address without API_TOKEN. Set API_TOKEN in .env')

    configure_logging(settings.log_level)
    logger.info('%s listening on %s:%s', settings.app_name, settings.app_host, settings.app_port)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)


def _parse_cors_origins(value: str) -> list[str]:
    return [origin.strip() for origin in value.split(',') if origin.strip()]


cors_origins = _parse_cors_origins(settings.cors_origins)
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=False,
        allow_methods=['GET', 'POST', 'OPTIONS'],
        allow_headers=['Authorization', 'Content-Type', 'X-Api-Token'],
    )


def _apply_security_headers(response):
    for key, value in _SECURITY_HEADERS.items():
        response.headers[key] = value
    return response


@app.middleware('http')
async def security_middleware(request: Request, call_next):
    response = await call_next(request)
    return _apply_security_headers(response)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception('Unhandled error on %s %s', request.method, request.url.path, exc_info=exc)
    response = JSONResponse({'detail': 'Internal server error. Please try again.'}, status_code=500)
    return _apply_security_headers(response)


app.add_exception_handler(Exception, unhandled_exception_handler)


@app.get('/healthz')
def healthz():
    return {'ok': True}


app.include_router(files.router)
app.include_router(mounts.router)
