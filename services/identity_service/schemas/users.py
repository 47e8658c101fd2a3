"""User administration schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.identity_service.models.enums import Division, UserRole


class ResetPasswordRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    send_email: bool = Field(default=False, alias="sendEmail")

    model_config = ConfigDict(populate_by_name=True)


class RoleUpdateRequest(BaseModel):
    role: UserRole


class BackgroundCheckFlagRequest(BaseModel):
    completed: bool


class UserSummary(BaseModel):
    id: uuid.UUID
    email: str
    role: UserRole
    division: Optional[Division] = None
    is_active: bool
    first_name: str = ""
    last_name: str = ""
    background_check_completed: bool = False
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(BaseModel):
    users: list[UserSummary]
    count: int


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    action: str
    resource_type: str
    success: bool
    metadata: dict = Field(default_factory=dict, validation_alias="details")
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
