"""Enum definitions for onboarding service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class BackgroundCheckStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class I9DocumentKey(str, enum.Enum):
    DRIVERS_LICENSE = "drivers_license"
    SSN_DOCUMENT = "ssn_document"
    ADDITIONAL_DOC = "additional_doc"
