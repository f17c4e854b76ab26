"""
Module 'sessions': sessions de checkout à usage unique.
"""
from fastapi import Request

from .store import (
    SessionStore,
    InMemorySessionStore,
    RedisSessionStore,
    SessionNotFound,
    SessionExpired,
    build_session_store,
)


def get_session_store(request: Request) -> SessionStore:
    """Dépendance FastAPI: store construit au démarrage (app.state.session_store)."""
    return request.app.state.session_store


__all__ = [
    "SessionStore",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionNotFound",
    "SessionExpired",
    "build_session_store",
    "get_session_store",
]
