"""Routers module."""

from .auth import router as auth_router
from .names import router as names_router
from .reports import router as reports_router
from .trackings import router as trackings_router
from .users import router as users_router

__all__ = ["auth_router", "names_router", "reports_router", "trackings_router", "users_router"]
