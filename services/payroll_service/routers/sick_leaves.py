"""Sick leave requests and the HR sick leave dashboard."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from libs.common.config import get_settings
from libs.common.datetime_utils import parse_iso_date, utc_now
from libs.common.emails.hr import send_sick_leave_request_email
from libs.common.logging import get_logger
from libs.common.validators import is_valid_uuid
from libs.db.session import get_async_db
from services.identity_service.dependencies import get_current_account, require_roles
from services.identity_service.models import HR_ROLES, User
from services.identity_service.services.accounts import get_user_or_404
from services.payroll_service.models import SickLeave, SickLeaveStatus
from services.payroll_service.schemas import (
    SickLeaveHrAction,
    SickLeaveRequestCreate,
    SickLeaveResponse,
    SickLeaveStatusUpdate,
)
from services.payroll_service.services.sick_leave import (
    OVERRIDE_MARKERS,
    accrual_for_users,
    accrual_report,
    add_used_hours,
    employee_summary,
    is_override,
    record_stats,
    remove_used_hours,
    set_accrual_override,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(tags=["sick-leaves"])

MAX_REQUEST_HOURS = 24


def _record(row: SickLeave, user: Optional[User]) -> dict:
    return {
        **SickLeaveResponse.model_validate(row).model_dump(mode="json"),
        **employee_summary(user),
    }


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


# ---------------------------------------------------------------------------
# HR dashboard
# ---------------------------------------------------------------------------


@router.get("/hr/sick-leaves")
async def list_sick_leaves(
    status_filter: Optional[str] = Query(None, alias="status"),
    _: User = Depends(require_roles(*HR_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    query = select(SickLeave).order_by(SickLeave.start_date.desc(), SickLeave.created_at.desc())
    requested = (status_filter or "").lower()
    if requested in {s.value for s in SickLeaveStatus}:
        query = query.where(SickLeave.status == SickLeaveStatus(requested))
    rows = [row for row in (await db.execute(query)).scalars().all() if not is_override(row.reason)]

    users = {}
    user_ids = {row.user_id for row in rows}
    if user_ids:
        result = await db.execute(select(User).where(User.id.in_(user_ids)))
        users = {user.id: user for user in result.scalars().all()}

    records = [_record(row, users.get(row.user_id)) for row in rows]
    accruals, accrual_stats = await accrual_report(db)
    return {
        "records": records,
        "stats": record_stats(records),
        "accruals": accruals,
        "accrual_stats": accrual_stats,
    }


@router.patch("/hr/sick-leaves")
async def update_sick_leave_status(
    payload: SickLeaveStatusUpdate,
    account: User = Depends(require_roles(*HR_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    leave_id = (payload.id or "").strip()
    if not leave_id:
        raise _bad_request("Sick leave id is required")
    new_status = (payload.status or "").lower()
    if new_status not in {s.value for s in SickLeaveStatus}:
        raise _bad_request("Invalid status. Allowed: pending, approved, denied")
    if not is_valid_uuid(leave_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sick leave not found")

    row = (
        await db.execute(select(SickLeave).where(SickLeave.id == uuid.UUID(leave_id)))
    ).scalar_one_or_none()
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sick leave not found")

    row.status = SickLeaveStatus(new_status)
    if row.status == SickLeaveStatus.APPROVED:
        row.approved_by = account.id
        row.approved_at = utc_now()
    else:
        row.approved_by = None
        row.approved_at = None
    await db.commit()

    return {
        "message": "Sick leave status updated",
        "record": SickLeaveResponse.model_validate(row).model_dump(mode="json"),
    }


@router.post("/hr/sick-leaves")
async def adjust_sick_leave(
    payload: SickLeaveHrAction,
    account: User = Depends(require_roles(*HR_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Edit an employee's sick leave ledger.

    ``operation`` is ``add`` (default) or ``remove`` for manually entered used
    hours, or ``set_adjustment`` to override carry-over or year-to-date hours.
    """
    raw_user_id = (payload.user_id or "").strip()
    if not raw_user_id:
        raise _bad_request("user_id is required")
    if not is_valid_uuid(raw_user_id):
        raise _bad_request("user_id must be a valid UUID")
    user = await get_user_or_404(db, uuid.UUID(raw_user_id))
    operation = (payload.operation or "add").lower()

    if operation == "set_adjustment":
        field = (payload.adjustment_field or "").lower()
        if field not in OVERRIDE_MARKERS:
            raise _bad_request("adjustment_field must be one of: carry_over, year_to_date")
        target = payload.target_hours
        if target is None:
            target = payload.hours if payload.hours is not None else payload.duration_hours
        target = round(target or 0, 2)
        if target < 0:
            raise _bad_request("target_hours must be a number greater than or equal to 0")
        await set_accrual_override(
            db, actor=account, user_id=user.id, field=field, target_hours=target
        )
        return {
            "message": "Sick leave accrual override saved",
            "user_id": str(user.id),
            "adjustment_field": field,
            "target_hours": target,
        }

    hours = payload.duration_hours if payload.duration_hours is not None else payload.hours
    hours = round(hours or 0, 2)
    if hours <= 0:
        raise _bad_request("duration_hours must be a positive number")

    if operation == "remove":
        removed = await remove_used_hours(db, user_id=user.id, hours=hours)
        return {"message": "Used sick leave hours removed", "removed_hours": removed}

    row = await add_used_hours(
        db, actor=account, user_id=user.id, hours=hours, reason=payload.reason
    )
    return {
        "message": "Used sick leave hours added",
        "record": SickLeaveResponse.model_validate(row).model_dump(mode="json"),
    }


# ---------------------------------------------------------------------------
# Employee requests
# ---------------------------------------------------------------------------


@router.post("/sick-leaves/request", status_code=status.HTTP_201_CREATED)
async def request_sick_leave(
    payload: SickLeaveRequestCreate,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    leave_date = parse_iso_date(payload.leave_date)
    if leave_date is None:
        raise _bad_request("A valid sick leave date is required")

    try:
        hours = float(payload.hours)
    except (TypeError, ValueError):
        hours = 0.0
    if not 0 < hours <= MAX_REQUEST_HOURS:
        raise _bad_request("Hours must be a number greater than 0 and at most 24")

    row = SickLeave(
        user_id=account.id,
        start_date=leave_date,
        end_date=leave_date,
        duration_hours=round(hours, 2),
        status=SickLeaveStatus.PENDING,
        reason="Employee sick leave request",
    )
    db.add(row)
    await db.commit()

    employee = employee_summary(account)
    email_sent = False
    for recipient in get_settings().sick_leave_recipients:
        sent = await send_sick_leave_request_email(
            recipient,
            employee["employee_name"],
            employee["employee_email"],
            leave_date.isoformat(),
            hours,
        )
        email_sent = email_sent or sent
    if not email_sent:
        logger.warning("Sick leave request %s saved but HR was not notified", row.id)

    return {
        "message": "Sick leave request submitted",
        "record": SickLeaveResponse.model_validate(row).model_dump(mode="json"),
        "emailSent": email_sent,
    }


@router.get("/sick-leaves/me")
async def my_sick_leaves(
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(SickLeave)
        .where(SickLeave.user_id == account.id)
        .order_by(SickLeave.start_date.desc(), SickLeave.created_at.desc())
    )
    records = [
        SickLeaveResponse.model_validate(row).model_dump(mode="json")
        for row in result.scalars().all()
        if not is_override(row.reason)
    ]
    accrual = (await accrual_for_users(db, [account]))[0]
    return {"records": records, "accrual": accrual}
