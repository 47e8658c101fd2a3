"""Identity Service schemas package."""

from services.identity_service.schemas.auth import (  # noqa: F401
    ChangePasswordRequest,
    ForgotPasswordRequest,
    MfaEmailCodeRequest,
    MfaVerifyLoginRequest,
    MfaVerifySetupRequest,
    PreLoginCheckRequest,
    UpdateLoginAttemptsRequest,
)
from services.identity_service.schemas.users import (  # noqa: F401
    AuditLogResponse,
    BackgroundCheckFlagRequest,
    ResetPasswordRequest,
    RoleUpdateRequest,
    UserListResponse,
    UserSummary,
)

__all__ = [
    "AuditLogResponse",
    "BackgroundCheckFlagRequest",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "MfaEmailCodeRequest",
    "MfaVerifyLoginRequest",
    "MfaVerifySetupRequest",
    "PreLoginCheckRequest",
    "ResetPasswordRequest",
    "RoleUpdateRequest",
    "UpdateLoginAttemptsRequest",
    "UserListResponse",
    "UserSummary",
]
