"""Onboarding profile endpoints: photo upload and profile details."""

import json
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import Response
from libs.common.datetime_utils import utc_now
from libs.common.encryption import decrypt_data, encrypt, encrypt_data, safe_decrypt
from libs.common.logging import get_logger
from libs.common.redirects import payroll_packet_path
from libs.common.validators import sanitize_input, validate_profile_fields
from libs.db.session import get_async_db
from services.identity_service.dependencies import get_current_account, require_roles
from services.identity_service.models import HR_ROLES, OnboardingStatus, Profile, User
from services.identity_service.services.accounts import get_or_create_profile
from services.onboarding_service.schemas import OnboardingStatusUpdate
from services.onboarding_service.services.photos import validate_photo
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/profile", tags=["profile"])


def _profile_payload(user: User, profile: Optional[Profile]) -> dict:
    if profile is None:
        return {
            "userId": str(user.id),
            "email": user.email,
            "onboardingStatus": OnboardingStatus.PENDING.value,
            "hasPhoto": False,
            "redirectPath": payroll_packet_path(None),
        }
    return {
        "userId": str(user.id),
        "email": user.email,
        "firstName": safe_decrypt(profile.first_name),
        "lastName": safe_decrypt(profile.last_name),
        "phone": safe_decrypt(profile.phone),
        "address": safe_decrypt(profile.address),
        "city": profile.city,
        "state": profile.state,
        "zipCode": profile.zip_code,
        "onboardingStatus": profile.onboarding_status.value,
        "hasPhoto": bool(profile.profile_photo_data),
        "redirectPath": payroll_packet_path(profile.state),
    }


@router.post("/upload-photo")
async def upload_photo(
    photo: Optional[UploadFile] = File(None),
    profile_data: Optional[str] = Form(None, alias="profileData"),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Save the onboarding profile with its photo.

    Returns the state payroll packet the user continues to.
    """
    try:
        data = json.loads(profile_data) if profile_data else {}
    except json.JSONDecodeError:
        data = None
    if not isinstance(data, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid profile data format"
        )

    if photo is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No photo provided")

    content = await photo.read()
    validate_photo(content, photo.content_type or "")

    error = validate_profile_fields(data)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    state = sanitize_input(data.get("state")).upper()
    profile = await get_or_create_profile(db, account)
    profile.first_name = encrypt(sanitize_input(data.get("firstName")))
    profile.last_name = encrypt(sanitize_input(data.get("lastName")))
    profile.address = encrypt(sanitize_input(data.get("address")))
    phone = sanitize_input(data.get("phone"))
    if phone:
        profile.phone = encrypt(phone)
    profile.city = sanitize_input(data.get("city"))
    profile.state = state
    profile.zip_code = sanitize_input(data.get("zipCode"))
    profile.profile_photo_data = encrypt_data(content)
    profile.profile_photo_type = (photo.content_type or "").lower()
    profile.onboarding_status = OnboardingStatus.PENDING
    await db.commit()

    logger.info(
        "Profile photo uploaded",
        extra={"extra_fields": {"user_id": str(account.id), "bytes": len(content)}},
    )
    return {
        "success": True,
        "message": "Profile saved successfully",
        "redirectPath": payroll_packet_path(state),
    }


@router.get("/me")
async def get_my_profile(
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(Profile).where(Profile.user_id == account.id))
    return _profile_payload(account, result.scalar_one_or_none())


async def _photo_response(db: AsyncSession, user_id: uuid.UUID) -> Response:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None or not profile.profile_photo_data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Photo not found")
    return Response(
        content=decrypt_data(profile.profile_photo_data),
        media_type=profile.profile_photo_type or "image/jpeg",
        headers={"Cache-Control": "private, max-age=300"},
    )


@router.get("/photo")
async def get_my_photo(
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    return await _photo_response(db, account.id)


@router.get("/photo/{user_id}")
async def get_user_photo(
    user_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    if user_id != account.id and account.role.value not in HR_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    return await _photo_response(db, user_id)


@router.patch("/onboarding-status/{user_id}")
async def update_onboarding_status(
    user_id: uuid.UUID,
    payload: OnboardingStatusUpdate,
    _: User = Depends(require_roles(*HR_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    profile.onboarding_status = payload.status
    profile.onboarding_completed_at = (
        utc_now() if payload.status == OnboardingStatus.COMPLETED else None
    )
    await db.commit()
    return {"success": True, "userId": str(user_id), "onboardingStatus": payload.status.value}
