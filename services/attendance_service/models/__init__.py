"""Attendance Service models package."""

from services.attendance_service.models.core import (
    NEVER_EXPIRES,
    CheckinCode,
    CheckinLog,
    GeofenceZone,
    LoginLocation,
    TimeEntry,
)
from services.attendance_service.models.enums import CLOCK_ACTIONS, TimeEntryAction, ZoneType

__all__ = [
    "CLOCK_ACTIONS",
    "NEVER_EXPIRES",
    "CheckinCode",
    "CheckinLog",
    "GeofenceZone",
    "LoginLocation",
    "TimeEntry",
    "TimeEntryAction",
    "ZoneType",
]
