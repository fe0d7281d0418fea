from .logging_middleware import RequestLoggingMiddleware, new_request_id

__all__ = [
    "RequestLoggingMiddleware",
    "new_request_id",
]
