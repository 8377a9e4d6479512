"""SQL backend for the document store."""

from .session import Base, get_engine, get_session, session_scope

__all__ = ["Base", "get_engine", "get_session", "session_scope"]
