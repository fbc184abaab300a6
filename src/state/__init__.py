from .runtime import RuntimeDeps
from .session import Session, SessionStats
from .settings import AppSettings
from .session_state import SessionState

__all__ = ["AppSettings", "RuntimeDeps", "Session", "SessionState", "SessionStats"]
