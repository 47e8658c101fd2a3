"""Attendance Service schemas package."""

from services.attendance_service.schemas.main import (  # noqa: F401
    CheckinCodeGenerate,
    CheckinCodeResponse,
    CheckinCodeSubmit,
    CheckinLogResponse,
    ClockInRequest,
    ClockOutRequest,
    LocationCheck,
    MealRequest,
    PersonalCodeGenerate,
)

__all__ = [
    "CheckinCodeGenerate",
    "CheckinCodeResponse",
    "CheckinCodeSubmit",
    "CheckinLogResponse",
    "ClockInRequest",
    "ClockOutRequest",
    "LocationCheck",
    "MealRequest",
    "PersonalCodeGenerate",
]
