"""
Multi-factor authentication flows.

Three methods are supported at login:
- totp: authenticator app code checked against the enrolled secret
- backup: one of the single-use codes issued at enrolment
- email: a six digit code mailed to the account address

Background checkers enrol with email codes; every other role uses TOTP.
"""

from datetime import timedelta
from typing import Any, Optional

from fastapi import HTTPException, Request, status
from libs.common.config import get_settings
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.emails.accounts import send_mfa_login_code_email
from libs.common.encryption import encrypt, safe_decrypt
from libs.common.logging import get_logger
from libs.common.redirects import role_landing_path
from libs.common.totp import (
    BACKUP_CODE_PATTERN,
    TOTP_CODE_PATTERN,
    codes_match,
    generate_backup_codes,
    generate_numeric_code,
    generate_totp_secret,
    hash_code,
    provisioning_uri,
    qr_data_url,
    verify_totp,
)
from services.identity_service.models import User
from services.identity_service.services.accounts import (
    get_or_create_profile,
    reset_login_attempts,
)
from services.identity_service.services.audit import log_audit_event
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


# ---------------------------------------------------------------------------
# TOTP enrolment
# ---------------------------------------------------------------------------


async def begin_totp_setup(
    db: AsyncSession, user: User, request: Optional[Request] = None
) -> dict[str, str]:
    secret = generate_totp_secret()
    qr_code = qr_data_url(provisioning_uri(secret, user.email))

    log_audit_event(db, user_id=user.id, action="mfa_setup_initiated", request=request)
    await db.commit()
    return {"secret": secret, "qrCode": qr_code, "manualEntryKey": secret}


async def confirm_totp_setup(
    db: AsyncSession,
    user: User,
    code: Optional[str],
    secret: Optional[str],
    request: Optional[Request] = None,
) -> dict[str, Any]:
    if not code or not secret:
        raise _bad_request("Code and secret are required")

    if not verify_totp(secret, code.strip()):
        log_audit_event(
            db, user_id=user.id, action="mfa_verification_failed", success=False, request=request
        )
        await db.commit()
        raise _bad_request("Invalid verification code. Please try again.")

    backup_codes = generate_backup_codes()
    profile = await get_or_create_profile(db, user)
    profile.mfa_secret = encrypt(secret)
    profile.mfa_enabled = True
    profile.backup_codes = [hash_code(c) for c in backup_codes]

    log_audit_event(db, user_id=user.id, action="mfa_enabled", request=request)
    await db.commit()
    logger.info("MFA enabled for user %s", user.id)
    return {"success": True, "backupCodes": backup_codes}


# ---------------------------------------------------------------------------
# Login verification (authenticator or backup code)
# ---------------------------------------------------------------------------


async def verify_login_code(
    db: AsyncSession,
    user: User,
    code: Optional[str],
    is_backup_code: bool,
    request: Optional[Request] = None,
) -> dict[str, Any]:
    code = (code or "").strip()
    if is_backup_code:
        code = code.upper()
        if not BACKUP_CODE_PATTERN.match(code):
            raise _bad_request("Invalid code format")
    elif not TOTP_CODE_PATTERN.match(code):
        raise _bad_request("Invalid code format")

    profile = await get_or_create_profile(db, user)
    if not profile.mfa_enabled:
        raise _bad_request("MFA is not enabled for your account")

    verified = False
    if is_backup_code:
        remaining = list(profile.backup_codes or [])
        if not remaining:
            raise _bad_request("No backup codes available")
        for index, hashed in enumerate(remaining):
            if codes_match(code, hashed):
                del remaining[index]
                profile.backup_codes = remaining
                verified = True
                break
    else:
        verified = verify_totp(safe_decrypt(profile.mfa_secret), code)

    method = "backup_code" if is_backup_code else "totp"
    if not verified:
        log_audit_event(
            db,
            user_id=user.id,
            action="mfa_login_failed",
            success=False,
            metadata={"method": method},
            request=request,
        )
        await db.commit()
        raise _bad_request("Invalid code. Please try again.")

    reset_login_attempts(user)
    log_audit_event(
        db,
        user_id=user.id,
        action="mfa_login_success",
        metadata={"method": method},
        request=request,
    )
    await db.commit()
    return {"success": True, "redirectPath": role_landing_path(user.role.value)}


# ---------------------------------------------------------------------------
# Emailed login codes
# ---------------------------------------------------------------------------


async def send_email_login_code(
    db: AsyncSession, user: User, request: Optional[Request] = None
) -> dict[str, Any]:
    ttl_minutes = get_settings().MFA_LOGIN_CODE_TTL_MINUTES
    code = generate_numeric_code(6)
    expires_at = utc_now() + timedelta(minutes=ttl_minutes)

    user.mfa_login_code = hash_code(code)
    user.mfa_login_code_expires_at = expires_at
    log_audit_event(db, user_id=user.id, action="mfa_email_code_sent", request=request)
    await db.commit()

    sent = await send_mfa_login_code_email(user.email, code, ttl_minutes)
    if not sent:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification code",
        )
    return {
        "success": True,
        "message": "Verification code sent to your email",
        "expiresAt": expires_at.isoformat(),
    }


async def verify_email_login_code(
    db: AsyncSession,
    user: User,
    code: Optional[str],
    request: Optional[Request] = None,
) -> dict[str, Any]:
    code = (code or "").strip()
    if not TOTP_CODE_PATTERN.match(code):
        raise _bad_request("Invalid code format")

    if not user.mfa_login_code or not user.mfa_login_code_expires_at:
        raise _bad_request("No verification code found. Please request a new code.")

    if as_utc(user.mfa_login_code_expires_at) < utc_now():
        user.mfa_login_code = None
        user.mfa_login_code_expires_at = None
        await db.commit()
        raise _bad_request("Verification code has expired. Please request a new code.")

    if not codes_match(code, user.mfa_login_code):
        log_audit_event(
            db,
            user_id=user.id,
            action="mfa_login_failed",
            success=False,
            metadata={"method": "email"},
            request=request,
        )
        await db.commit()
        raise _bad_request("Invalid verification code. Please try again.")

    user.mfa_login_code = None
    user.mfa_login_code_expires_at = None
    profile = await get_or_create_profile(db, user)
    if not profile.mfa_enabled:
        profile.mfa_enabled = True
    reset_login_attempts(user)
    log_audit_event(
        db,
        user_id=user.id,
        action="mfa_login_success",
        metadata={"method": "email"},
        request=request,
    )
    await db.commit()
    return {"success": True, "redirectPath": role_landing_path(user.role.value)}
