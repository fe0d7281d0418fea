from fastapi import Request

from ..middleware import new_request_id
from ..services import AppServices


def get_services(request: Request) -> AppServices:
    """The AppServices container attached to the running app."""
    return request.app.state.services


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = new_request_id()
        request.state.request_id = request_id
    return request_id
