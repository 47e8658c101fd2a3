"""Sign-in support endpoints: lockout checks, redirects and password changes."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from libs.auth.dependencies import get_optional_user
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.common.redirects import mfa_method_for_role, post_login_redirect
from libs.db.session import get_async_db
from services.identity_service.dependencies import get_current_account
from services.identity_service.models import Profile, User
from services.identity_service.schemas import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    PreLoginCheckRequest,
    UpdateLoginAttemptsRequest,
)
from services.identity_service.services.accounts import (
    change_password,
    complete_password_recovery,
    get_user_by_email,
    get_user_or_404,
    pre_login_status,
    record_failed_attempt,
    request_password_reset,
    reset_login_attempts,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/pre-login-check")
async def pre_login_check(
    payload: PreLoginCheckRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Tell the login form whether the account may attempt a sign-in."""
    if not payload.email or not payload.email.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    user = await get_user_by_email(db, payload.email)
    return pre_login_status(user)


@router.post("/update-login-attempts")
async def update_login_attempts(
    payload: UpdateLoginAttemptsRequest,
    caller: Optional[AuthUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Record a failed password attempt, or reset the counter after success.

    Resetting requires the signed-in user's own token.
    """
    try:
        user_id = uuid.UUID(payload.user_id or "")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Valid user ID is required"
        )
    if not payload.reset and not payload.increment:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Must specify either reset or increment",
        )

    user = await get_user_or_404(db, user_id)
    if payload.reset:
        if caller is None or caller.user_id != str(user.id):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
        reset_login_attempts(user)
    else:
        record_failed_attempt(user, lock=payload.should_lock)

    await db.commit()
    return {
        "success": True,
        "failedAttempts": user.failed_login_attempts,
        "accountLockedUntil": (
            user.account_locked_until.isoformat() if user.account_locked_until else None
        ),
    }


@router.get("/session-redirect")
async def session_redirect(
    mfa_verified: bool = Query(False),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Where the signed-in user should land next."""
    result = await db.execute(select(Profile).where(Profile.user_id == account.id))
    profile = result.scalar_one_or_none()
    role = account.role.value
    return {
        "redirectPath": post_login_redirect(
            role,
            has_temporary_password=bool(account.is_temporary_password),
            mfa_enabled=bool(profile and profile.mfa_enabled),
            mfa_verified=mfa_verified,
        ),
        "mfaMethod": mfa_method_for_role(role),
        "role": role,
    }


@router.post("/change-password")
async def change_my_password(
    payload: ChangePasswordRequest,
    request: Request,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    await change_password(db, account, payload.current_password, payload.new_password, request)
    return {"success": True, "message": "Password updated successfully"}


@router.post("/forgot-password")
async def forgot_password(
    payload: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_async_db),
):
    return await request_password_reset(db, payload.email)


@router.post("/recover-password")
async def recover_password(
    request: Request,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Finish a recovery: the new password was already set with the token from
    the emailed link, so only the temporary-password flags are cleared here.
    """
    await complete_password_recovery(db, account, request)
    return {"success": True}
