"""Authentication and MFA request schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PreLoginCheckRequest(BaseModel):
    email: Optional[str] = None


class UpdateLoginAttemptsRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    reset: bool = False
    increment: bool = False
    should_lock: bool = Field(default=False, alias="shouldLock")

    model_config = ConfigDict(populate_by_name=True)


class MfaVerifySetupRequest(BaseModel):
    code: Optional[str] = None
    secret: Optional[str] = None


class MfaVerifyLoginRequest(BaseModel):
    code: Optional[str] = None
    is_backup_code: bool = Field(default=False, alias="isBackupCode")

    model_config = ConfigDict(populate_by_name=True)


class MfaEmailCodeRequest(BaseModel):
    code: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None
