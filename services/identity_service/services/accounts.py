"""
Account protection and credential management.

Covers the pre-login lockout check, failed-attempt bookkeeping, admin-issued
temporary passwords, the forced password change that follows them and
self-service recovery by emailed link.
"""

import math
import uuid
from datetime import timedelta
from typing import Any, Optional

from fastapi import HTTPException, Request, status
from libs.common.config import get_settings
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.emails.accounts import send_temporary_password_email
from libs.common.logging import get_logger
from libs.common.passwords import (
    generate_temporary_password,
    password_strength_error,
    temporary_password_expiry,
)
from libs.common.supabase import (
    SupabaseError,
    get_auth_user,
    send_password_reset_email,
    update_auth_password,
    verify_auth_password,
)
from services.identity_service.models import Profile, User
from services.identity_service.services.audit import log_audit_event
from services.identity_service.services.profiles import profile_names
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def get_or_create_profile(db: AsyncSession, user: User) -> Profile:
    result = await db.execute(select(Profile).where(Profile.user_id == user.id))
    profile = result.scalar_one_or_none()
    if profile is None:
        profile = Profile(user_id=user.id, backup_codes=[])
        db.add(profile)
        await db.flush()
    return profile


# ---------------------------------------------------------------------------
# Login protection
# ---------------------------------------------------------------------------


def pre_login_status(user: Optional[User]) -> dict[str, Any]:
    """Decide whether a sign-in attempt for ``user`` may proceed."""
    if user is None:
        return {"userExists": False, "canProceed": True}

    if not user.is_active:
        return {
            "userExists": True,
            "canProceed": False,
            "reason": "inactive",
            "message": "Your account has been deactivated. Please contact support.",
        }

    locked_until = as_utc(user.account_locked_until)
    now = utc_now()
    if locked_until and locked_until > now:
        minutes = math.ceil((locked_until - now).total_seconds() / 60)
        return {
            "userExists": True,
            "canProceed": False,
            "reason": "locked",
            "minutesRemaining": minutes,
            "message": (
                "Account is locked due to too many failed attempts. "
                f"Try again in {minutes} minute{'s' if minutes != 1 else ''}."
            ),
        }

    return {
        "userExists": True,
        "canProceed": True,
        "userId": str(user.id),
        "failedAttempts": user.failed_login_attempts or 0,
        "isTemporaryPassword": bool(user.is_temporary_password),
    }


def reset_login_attempts(user: User) -> None:
    user.failed_login_attempts = 0
    user.account_locked_until = None
    user.last_login = utc_now()


def record_failed_attempt(user: User, *, lock: bool) -> None:
    user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
    if lock:
        minutes = get_settings().ACCOUNT_LOCK_MINUTES
        user.account_locked_until = utc_now() + timedelta(minutes=minutes)
        logger.warning(
            "Account locked after failed attempts",
            extra={"extra_fields": {"user_id": str(user.id), "attempts": user.failed_login_attempts}},
        )


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


async def reset_password_by_admin(
    db: AsyncSession,
    *,
    actor: User,
    user_id: uuid.UUID,
    send_email: bool,
    request: Optional[Request] = None,
) -> dict[str, Any]:
    """
    Issue a temporary password for ``user_id``.

    Clears the user's MFA enrolment so they re-enrol after choosing a new
    password, and unlocks the account.
    """
    user = await get_user_or_404(db, user_id)
    auth_user = await get_auth_user(str(user.id))
    if auth_user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    temporary_password = generate_temporary_password()
    expires_at = temporary_password_expiry()

    try:
        await update_auth_password(str(user.id), temporary_password)
    except SupabaseError as exc:
        logger.error("Password reset failed for %s: %s", user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to reset password",
        )

    user.is_temporary_password = True
    user.must_change_password = True
    user.password_expires_at = expires_at
    user.failed_login_attempts = 0
    user.account_locked_until = None

    profile = await get_or_create_profile(db, user)
    profile.mfa_enabled = False
    profile.mfa_secret = None
    profile.backup_codes = []

    log_audit_event(
        db,
        user_id=actor.id,
        action="password_reset_by_admin",
        resource_type="user",
        metadata={"target_user_id": str(user.id), "email_requested": send_email},
        request=request,
    )
    await db.commit()

    first_name, last_name = profile_names(profile)
    email_sent = False
    if send_email:
        email_sent = await send_temporary_password_email(
            user.email, first_name, temporary_password, expires_at
        )

    logger.info("Temporary password issued for %s by %s", user.id, actor.id)
    return {
        "success": True,
        "temporaryPassword": temporary_password,
        "email": user.email,
        "firstName": first_name,
        "lastName": last_name,
        "expiresAt": expires_at.isoformat(),
        "emailSent": email_sent,
    }


def _clear_temporary_password(user: User) -> None:
    user.is_temporary_password = False
    user.must_change_password = False
    user.password_expires_at = None


async def change_password(
    db: AsyncSession,
    user: User,
    current_password: Optional[str],
    new_password: Optional[str],
    request: Optional[Request] = None,
) -> None:
    """Change a signed-in user's password after re-checking the current one."""
    if not current_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is required"
        )
    if not new_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="New password is required"
        )
    if current_password == new_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="New password must be different from current password",
        )
    error = password_strength_error(new_password)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    if not await verify_auth_password(user.email, current_password):
        log_audit_event(
            db,
            user_id=user.id,
            action="password_change_failed",
            resource_type="auth",
            success=False,
            metadata={"reason": "invalid_current_password"},
            request=request,
        )
        await db.commit()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect"
        )

    try:
        await update_auth_password(str(user.id), new_password)
    except SupabaseError as exc:
        logger.error("Password change failed for %s: %s", user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update password",
        )

    _clear_temporary_password(user)
    log_audit_event(db, user_id=user.id, action="password_changed", request=request)
    await db.commit()


# ---------------------------------------------------------------------------
# Self-service recovery
# ---------------------------------------------------------------------------

FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with this email, a password reset link has been sent."
)


async def request_password_reset(db: AsyncSession, email: Optional[str]) -> dict[str, Any]:
    """
    Send a reset link unless the account is on an admin-issued temporary
    password. Unknown addresses get the same answer as known ones.
    """
    if not email or not email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    user = await get_user_by_email(db, email)
    if user is None:
        return {"success": True, "message": FORGOT_PASSWORD_MESSAGE}

    if user.is_temporary_password or user.must_change_password:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=(
                "Password reset not available for your account. Please contact your "
                "administrator or use the temporary password provided to you."
            ),
        )

    redirect_to = f"{get_settings().FRONTEND_URL}/reset-password"
    try:
        await send_password_reset_email(user.email, redirect_to)
    except SupabaseError as exc:
        logger.error("Password reset email failed for %s: %s", user.id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send password reset email. Please try again.",
        )
    return {"success": True, "message": FORGOT_PASSWORD_MESSAGE}


async def complete_password_recovery(
    db: AsyncSession, user: User, request: Optional[Request] = None
) -> None:
    """Record a password set through the emailed recovery link."""
    _clear_temporary_password(user)
    user.failed_login_attempts = 0
    user.account_locked_until = None
    log_audit_event(
        db,
        user_id=user.id,
        action="password_recovered",
        resource_type="auth",
        metadata={"method": "recovery_link"},
        request=request,
    )
    await db.commit()
