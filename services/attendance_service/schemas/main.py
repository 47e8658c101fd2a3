"""Pydantic schemas for Attendance Service."""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CheckinCodeGenerate(BaseModel):
    label: Optional[str] = None


class PersonalCodeGenerate(BaseModel):
    audience: Literal["all", "one"] = "all"
    recipient_user_id: Optional[str] = Field(None, alias="recipientUserId")
    label: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class CheckinCodeSubmit(BaseModel):
    code: Optional[str] = None


class CheckinLogResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    checked_in_at: datetime
    profile: Optional[dict] = None

    model_config = ConfigDict(from_attributes=True)


class CheckinCodeResponse(BaseModel):
    id: uuid.UUID
    code: str
    label: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    target_user_id: Optional[uuid.UUID] = None
    is_active: bool
    expires_at: datetime
    created_at: datetime
    checkins: list[CheckinLogResponse] = []

    model_config = ConfigDict(from_attributes=True)


class ClockInRequest(BaseModel):
    notes: Optional[str] = None
    event_id: Optional[uuid.UUID] = None


class ClockOutRequest(BaseModel):
    notes: Optional[str] = None


class MealRequest(BaseModel):
    notes: Optional[str] = None


class LocationCheck(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    email: Optional[str] = None
