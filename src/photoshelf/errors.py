"""
Exception handlers producing the ``{error, details?, request_id}`` error body.

Internal error detail is logged server-side and never reaches the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from photoshelf.request_context import REQUEST_ID_HEADER, get_request_id

logger = logging.getLogger(__name__)


def error_response(request: Request, status_code: int, error: str, details=None, headers: dict[str, str] | None = None) -> JSONResponse:
    request_id = get_request_id(request)
    content = {"error": error}
    if details is not None:
        content["details"] = details
    content["request_id"] = request_id
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        headers={**(headers or {}), REQUEST_ID_HEADER: request_id},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(request, exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(request, 422, "Invalid request", details=exc.errors())


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = get_request_id(request)
    logger.exception(f"Unhandled error on {request.method} {request.url.path} (request_id={request_id})", exc_info=exc)
    return error_response(request, 500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
