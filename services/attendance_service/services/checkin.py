"""
Check-in code issuing and redemption.

Shared codes are generated by managers for a shift; personal codes are tied to
one employee (``target_user_id``) and replace that employee's previous code.
A user may redeem a given code once per UTC day.
"""

import uuid
from datetime import timedelta
from typing import Any, Optional

from fastapi import HTTPException, status
from libs.common.checkin_code import (
    derive_checkin_initials,
    generate_checkin_code,
    is_valid_checkin_code,
    normalize_checkin_code,
)
from libs.common.datetime_utils import start_of_utc_day
from libs.common.logging import get_logger
from services.attendance_service.models import NEVER_EXPIRES, CheckinCode, CheckinLog
from services.identity_service.models import User
from services.identity_service.services.profiles import profile_names
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

MAX_SHARED_CODE_ATTEMPTS = 200
MAX_PERSONAL_CODE_ATTEMPTS = 10000


async def active_codes(db: AsyncSession) -> set[str]:
    result = await db.execute(select(CheckinCode.code).where(CheckinCode.is_active.is_(True)))
    return set(result.scalars().all())


async def create_shared_code(
    db: AsyncSession, *, creator: User, label: Optional[str]
) -> CheckinCode:
    taken = await active_codes(db)
    for _ in range(MAX_SHARED_CODE_ATTEMPTS):
        code = generate_checkin_code()
        if code not in taken:
            break
    else:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate unique code",
        )

    row = CheckinCode(
        code=code,
        label=label,
        created_by=creator.id,
        is_active=True,
        expires_at=NEVER_EXPIRES,
    )
    db.add(row)
    await db.commit()
    logger.info("Check-in code %s generated by %s", row.id, creator.id)
    return row


async def create_personal_codes(
    db: AsyncSession,
    *,
    creator: User,
    recipients: list[User],
    label: Optional[str],
) -> dict[str, Any]:
    """Issue one fresh code per recipient with an email address."""
    valid = [user for user in recipients if user.email]
    skipped = len(recipients) - len(valid)
    if not valid:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No recipients found")

    await db.execute(
        update(CheckinCode)
        .where(
            CheckinCode.target_user_id.in_([u.id for u in valid]),
            CheckinCode.is_active.is_(True),
        )
        .values(is_active=False)
    )

    taken = await active_codes(db)
    for user in valid:
        first_name, last_name = profile_names(user.profile)
        initials = derive_checkin_initials(first_name, last_name, user.email, str(user.id))
        for _ in range(MAX_PERSONAL_CODE_ATTEMPTS):
            code = generate_checkin_code(initials)
            if code not in taken:
                break
        else:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to generate unique codes",
            )
        taken.add(code)
        db.add(
            CheckinCode(
                code=code,
                label=label,
                created_by=creator.id,
                target_user_id=user.id,
                is_active=True,
                expires_at=NEVER_EXPIRES,
            )
        )

    await db.commit()
    logger.info("Generated %d personal check-in codes", len(valid))
    return {"success": True, "generatedCount": len(valid), "skippedCount": skipped}


async def resolve_code_for_user(db: AsyncSession, raw_code: Any, user: User) -> CheckinCode:
    code = normalize_checkin_code(raw_code)
    if not is_valid_checkin_code(code):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid code format")

    result = await db.execute(
        select(CheckinCode)
        .where(CheckinCode.code == code, CheckinCode.is_active.is_(True))
        .order_by(CheckinCode.created_at.desc())
        .limit(1)
    )
    row = result.scalar_one_or_none()
    if row is None or (row.target_user_id is not None and row.target_user_id != user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Invalid or expired code"
        )
    return row


async def checked_in_today(db: AsyncSession, code_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    start = start_of_utc_day()
    result = await db.execute(
        select(CheckinLog.id)
        .where(
            CheckinLog.code_id == code_id,
            CheckinLog.user_id == user_id,
            CheckinLog.checked_in_at >= start,
            CheckinLog.checked_in_at < start + timedelta(days=1),
        )
        .limit(1)
    )
    return result.first() is not None


async def redeem_code(db: AsyncSession, raw_code: Any, user: User) -> CheckinLog:
    row = await resolve_code_for_user(db, raw_code, user)
    if await checked_in_today(db, row.id, user.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="You have already checked in today"
        )

    log = CheckinLog(code_id=row.id, user_id=user.id)
    db.add(log)
    await db.commit()
    return log
