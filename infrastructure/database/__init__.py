"""Database access"""
from .connection import (
    STORE_ERRORS,
    dispose_engine,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
)

__all__ = [
    "STORE_ERRORS",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    "init_db",
]
