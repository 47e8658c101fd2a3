"""Onboarding service routers."""

from services.onboarding_service.routers.background_checks import (
    router as background_checks_router,
)
from services.onboarding_service.routers.i9 import router as i9_router
from services.onboarding_service.routers.profile import router as profile_router

__all__ = [
    "background_checks_router",
    "i9_router",
    "profile_router",
]
