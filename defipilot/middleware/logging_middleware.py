"""
HTTP request logging middleware.

Logs every request with method, path, status code, and duration.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")


def new_request_id() -> str:
    return str(uuid.uuid4())[:8]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log HTTP requests with timing and status info.

    The request id is also exposed on ``request.state.request_id`` so handlers
    can return it in error bodies and key per-request state with it.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or new_request_id()
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)

            log = logger.info if status_code < 400 else logger.warning
            if status_code >= 500:
                log = logger.error

            log(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status_code,
                duration_ms=duration_ms,
                client=request.client.host if request.client else None,
            )
