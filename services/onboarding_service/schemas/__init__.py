"""Onboarding Service schemas package."""

from services.onboarding_service.schemas.main import (  # noqa: F401
    BackgroundCheckRow,
    BackgroundCheckUpdate,
    I9DocumentsResponse,
    OnboardingStatusUpdate,
)

__all__ = [
    "BackgroundCheckRow",
    "BackgroundCheckUpdate",
    "I9DocumentsResponse",
    "OnboardingStatusUpdate",
]
