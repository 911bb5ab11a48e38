"""Набор middleware для RugFork API."""

from .db import get_db_session, get_session_maker, init_db
from .errors import register_error_handlers
from .throttling import ThrottlingMiddleware

__all__ = [
    "ThrottlingMiddleware",
    "get_db_session",
    "get_session_maker",
    "init_db",
    "register_error_handlers",
]
