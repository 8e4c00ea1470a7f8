"""API routers."""

from portal_auth.routers.auth import router as auth_router

__all__ = ["auth_router"]
