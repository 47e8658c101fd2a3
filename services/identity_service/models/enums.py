"""Enum definitions for identity service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class UserRole(str, enum.Enum):
    VENDOR = "vendor"
    WORKER = "worker"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    SUPERVISOR2 = "supervisor2"
    HR = "hr"
    EXEC = "exec"
    ADMIN = "admin"
    FINANCE = "finance"
    BACKGROUND_CHECKER = "backgroundchecker"


class Division(str, enum.Enum):
    VENDOR = "vendor"
    TRAILERS = "trailers"
    BOTH = "both"


class OnboardingStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Role groups used by access checks across services
HR_ROLES = ("hr", "exec", "admin")
EXEC_ROLES = ("exec", "admin")
