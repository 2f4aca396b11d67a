"""
API route modules.

Public read routes and authenticated admin routes are kept apart so the
admin router can carry its auth dependency once.
"""

from .announcements import router as announcements_router
from .admin import router as admin_router

__all__ = [
    "announcements_router",
    "admin_router",
]
