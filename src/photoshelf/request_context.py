import logging
import secrets
import time

from fastapi import FastAPI, Request

from photoshelf.logger import logger as event_logger

REQUEST_ID_HEADER = "X-Request-ID"


def generate_request_id() -> str:
    """12 hex characters identifying one request in logs and error bodies."""
    return secrets.token_hex(6)


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = generate_request_id()
        request.state.request_id = request_id
    return request_id


def add_request_context(app: FastAPI) -> None:
    """Tag every request with a request id and log one event per completed request."""

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        request_id = get_request_id(request)
        start_time = time.time()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        event_logger.log_event(
            "request",
            level=logging.WARNING if response.status_code >= 500 else logging.INFO,
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration=round(time.time() - start_time, 3),
        )
        return response
