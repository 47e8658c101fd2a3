"""Onboarding Service models package."""

from services.onboarding_service.models.core import BackgroundCheck, I9Document
from services.onboarding_service.models.enums import (
    BackgroundCheckStatus,
    I9DocumentKey,
)

__all__ = [
    "BackgroundCheck",
    "BackgroundCheckStatus",
    "I9Document",
    "I9DocumentKey",
]
