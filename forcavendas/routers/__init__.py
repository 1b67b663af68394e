"""Routers module."""

from .admin_sync_logs import router as admin_sync_logs_router
from .mobile_auth import router as mobile_auth_router
from .mobile_sync import router as mobile_sync_router

__all__ = ["admin_sync_logs_router", "mobile_auth_router", "mobile_sync_router"]
