"""API v1 routers"""
from . import (
    auth,
    custom_fields,
    dashboard,
    public,
    search_page,
    users,
    visitors,
)

__all__ = [
    "auth",
    "custom_fields",
    "dashboard",
    "public",
    "search_page",
    "users",
    "visitors",
]
