"""Request-scoped plumbing: logging context, tenant headers and error bodies."""

from __future__ import annotations

import hashlib
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from context_adapter.core.logging import bind_log_context, reset_log_context
from context_adapter.ngsi.models import (
    CORRELATOR_HEADER,
    SERVICE_HEADER,
    SERVICE_PATH_HEADER,
    Tenant,
)


def request_correlator(request: Request) -> str:
    """Correlator sent by the client, or one derived from the request origin."""
    supplied = request.headers.get(CORRELATOR_HEADER)
    if supplied:
        return supplied
    client = request.client
    origin = f"{client.host}:{client.port}" if client else "unknown"
    seed = f"from: {origin}, method: {request.method.upper()}, url: {request.url.path}"
    return hashlib.sha1(seed.encode()).hexdigest()[:16]


class LogContextMiddleware(BaseHTTPMiddleware):
    """Binds the logging context (correlator, transaction, operation type)."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        token = bind_log_context(corr=request_correlator(request), method=request.method)
        try:
            return await call_next(request)
        finally:
            reset_log_context(token)


class MissingHeaderError(Exception):
    def __init__(self, header: str) -> None:
        super().__init__(f'child "{header}" fails because [{header} is required]')
        self.header = header


def require_tenant(request: Request) -> Tenant:
    """FastAPI dependency: both tenant headers are mandatory.

    Every request reaching this check counts as attended.
    """
    counter = getattr(request.app.state, "request_counter", None)
    if counter is not None:
        counter.increment()

    for header in (SERVICE_HEADER, SERVICE_PATH_HEADER):
        if not request.headers.get(header):
            raise MissingHeaderError(header)

    return Tenant(
        service=request.headers[SERVICE_HEADER],
        service_path=request.headers[SERVICE_PATH_HEADER],
        correlator=request.headers.get(CORRELATOR_HEADER),
    )


def _error_body(status_code: int, message: str) -> dict[str, object]:
    return {
        "statusCode": status_code,
        "error": HTTPStatus(status_code).phrase,
        "message": message,
    }


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MissingHeaderError)
    async def missing_header(request: Request, exc: MissingHeaderError) -> JSONResponse:
        body = _error_body(400, str(exc))
        body["validation"] = {"source": "headers", "keys": [exc.header]}
        return JSONResponse(status_code=400, content=body)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )
