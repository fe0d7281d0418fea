from .app_services import AppServices
from .session_store import SessionStore

__all__ = ["AppServices", "SessionStore"]
