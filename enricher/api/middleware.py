"""API middleware: CORS, request logging, and error envelopes.

Starlette middleware is a stack (last added, first executed).  In
``enricher.main`` the error handler is added before the request logger, so
the logger wraps it and records the final status code even when an
``EnricherError`` was turned into a JSON error.

HTTP errors and request-validation errors raised by FastAPI itself go
through exception handlers rather than middleware, so that every non-2xx
response carries the same ``{"success": false, "message": ...}`` envelope.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from enricher.api.schemas import ErrorResponse
from enricher.utils.errors import EnricherError
from enricher.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow the article front end (any origin by default) to call the API."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``EnricherError`` subclasses into a sanitized 500 envelope.

    Details go to the server log; the client only sees the message.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except EnricherError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
            )
            body = ErrorResponse(message=exc.message)
            return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, exclude_none=True))


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = ErrorResponse(message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(by_alias=True, exclude_none=True))


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg', '')}"
        for err in exc.errors()
    ]
    body = ErrorResponse(message="Validation failed", errors=errors)
    return JSONResponse(status_code=422, content=body.model_dump(by_alias=True, exclude_none=True))


def configure_exception_handlers(app: FastAPI) -> None:
    """Register envelope-producing handlers for HTTP and validation errors."""
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
