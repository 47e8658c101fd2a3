"""MFA enrolment and login verification endpoints."""

from fastapi import APIRouter, Depends, Request
from libs.db.session import get_async_db
from services.identity_service.dependencies import get_current_account
from services.identity_service.models import User
from services.identity_service.schemas import (
    MfaEmailCodeRequest,
    MfaVerifyLoginRequest,
    MfaVerifySetupRequest,
)
from services.identity_service.services import mfa
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/auth/mfa", tags=["mfa"])


@router.post("/setup")
async def setup_mfa(
    request: Request,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Start authenticator-app enrolment: returns the secret and a QR code."""
    return await mfa.begin_totp_setup(db, account, request)


@router.post("/verify")
async def verify_mfa_setup(
    payload: MfaVerifySetupRequest,
    request: Request,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Finish enrolment with a first valid code; returns backup codes once."""
    return await mfa.confirm_totp_setup(db, account, payload.code, payload.secret, request)


@router.post("/verify-login")
async def verify_mfa_login(
    payload: MfaVerifyLoginRequest,
    request: Request,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    return await mfa.verify_login_code(
        db, account, payload.code, payload.is_backup_code, request
    )


@router.post("/send-login-code")
async def send_login_code(
    request: Request,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    return await mfa.send_email_login_code(db, account, request)


@router.post("/verify-login-code")
async def verify_emailed_login_code(
    payload: MfaEmailCodeRequest,
    request: Request,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    return await mfa.verify_email_login_code(db, account, payload.code, request)
