"""Identity Service models package."""

from services.identity_service.models.core import AuditLog, Profile, User
from services.identity_service.models.enums import (
    EXEC_ROLES,
    HR_ROLES,
    Division,
    OnboardingStatus,
    UserRole,
)

__all__ = [
    "AuditLog",
    "Division",
    "EXEC_ROLES",
    "HR_ROLES",
    "OnboardingStatus",
    "Profile",
    "User",
    "UserRole",
]
