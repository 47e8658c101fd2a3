"""Identity service routers."""

from services.identity_service.routers.audit import router as audit_router
from services.identity_service.routers.auth import router as auth_router
from services.identity_service.routers.mfa import router as mfa_router
from services.identity_service.routers.users import router as users_router

__all__ = [
    "audit_router",
    "auth_router",
    "mfa_router",
    "users_router",
]
