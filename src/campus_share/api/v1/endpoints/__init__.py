# src/campus_share/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .auth import router as auth_router
from .resources import router as resources_router
from .stats import router as stats_router
from .uploads import router as uploads_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "resources_router",
    "stats_router",
    "uploads_router",
    "users_router",
]
