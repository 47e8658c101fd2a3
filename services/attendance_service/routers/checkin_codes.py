"""Shift check-in codes: issuing, listing and redemption."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.validators import is_valid_uuid
from libs.db.session import get_async_db
from services.attendance_service.models import CheckinCode, CheckinLog
from services.attendance_service.schemas import (
    CheckinCodeGenerate,
    CheckinCodeResponse,
    CheckinCodeSubmit,
    PersonalCodeGenerate,
)
from services.attendance_service.services.checkin import (
    checked_in_today,
    create_personal_codes,
    create_shared_code,
    redeem_code,
    resolve_code_for_user,
)
from services.identity_service.dependencies import get_current_account, require_roles
from services.identity_service.models import Profile, User
from services.identity_service.services.profiles import full_name, profile_names
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/checkin-codes", tags=["checkin-codes"])

CODE_VIEWER_ROLES = ("manager", "supervisor", "hr", "exec")
PERSONAL_CODE_ROLES = ("manager", "hr", "exec", "admin")
CODE_LIST_LIMIT = 500


@router.get("")
async def list_codes(
    _: User = Depends(require_roles(*CODE_VIEWER_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    codes = (
        await db.execute(
            select(CheckinCode).order_by(CheckinCode.created_at.desc()).limit(CODE_LIST_LIMIT)
        )
    ).scalars().all()

    logs_by_code: dict[uuid.UUID, list[CheckinLog]] = {}
    profiles: dict[uuid.UUID, Profile] = {}
    if codes:
        logs = (
            await db.execute(
                select(CheckinLog)
                .where(CheckinLog.code_id.in_([c.id for c in codes]))
                .order_by(CheckinLog.checked_in_at.desc())
            )
        ).scalars().all()
        for log in logs:
            logs_by_code.setdefault(log.code_id, []).append(log)
        user_ids = {log.user_id for log in logs}
        if user_ids:
            result = await db.execute(select(Profile).where(Profile.user_id.in_(user_ids)))
            profiles = {p.user_id: p for p in result.scalars().all()}

    payload = []
    for code in codes:
        item = CheckinCodeResponse.model_validate(code).model_dump(mode="json")
        checkins = []
        for log in logs_by_code.get(code.id, []):
            first_name, last_name = profile_names(profiles.get(log.user_id))
            checkins.append(
                {
                    "id": str(log.id),
                    "user_id": str(log.user_id),
                    "checked_in_at": log.checked_in_at.isoformat(),
                    "profile": {"first_name": first_name, "last_name": last_name},
                }
            )
        item["checkins"] = checkins
        payload.append(item)
    return {"codes": payload}


@router.post("/generate", status_code=status.HTTP_201_CREATED)
async def generate_code(
    payload: CheckinCodeGenerate,
    account: User = Depends(require_roles(*CODE_VIEWER_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    row = await create_shared_code(db, creator=account, label=payload.label)
    return {"code": CheckinCodeResponse.model_validate(row).model_dump(mode="json")}


@router.post("/generate-personal", status_code=status.HTTP_201_CREATED)
async def generate_personal_codes(
    payload: PersonalCodeGenerate,
    account: User = Depends(require_roles(*PERSONAL_CODE_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    if payload.audience == "one":
        if not payload.recipient_user_id or not is_valid_uuid(payload.recipient_user_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="recipientUserId is required for audience=one",
            )
        result = await db.execute(
            select(User).where(User.id == uuid.UUID(payload.recipient_user_id))
        )
        recipient = result.scalar_one_or_none()
        if recipient is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Recipient not found"
            )
        recipients = [recipient]
    else:
        result = await db.execute(select(User).where(User.is_active.is_(True)))
        recipients = list(result.scalars().all())

    return await create_personal_codes(
        db, creator=account, recipients=recipients, label=payload.label
    )


@router.post("/validate")
async def validate_code(
    payload: CheckinCodeSubmit,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    row = await resolve_code_for_user(db, payload.code, account)
    return {
        "valid": True,
        "name": full_name(account.profile, account.email),
        "codeId": str(row.id),
        "alreadyCheckedIn": await checked_in_today(db, row.id, account.id),
    }


@router.post("/verify")
async def verify_code(
    payload: CheckinCodeSubmit,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    log = await redeem_code(db, payload.code, account)
    return {"success": True, "checkedInAt": log.checked_in_at.isoformat()}
