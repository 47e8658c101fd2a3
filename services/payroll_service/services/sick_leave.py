"""
Sick leave accrual and the HR ledger.

Employees earn one hour of sick leave per 30 hours worked on their team
events. Hours earned before the current UTC year carry over, less leave used
before the year started.

HR edits are stored as ``sick_leaves`` rows tagged by a marker in ``reason``:
- ``HR_MANUAL_USED_HOURS``: approved used hours entered by HR
- ``HR_CARRY_OVER_OVERRIDE`` / ``HR_YEAR_TO_DATE_OVERRIDE``: replace the
  computed carry-over or year-to-date figure with ``duration_hours``

Override rows are bookkeeping only and never appear as leave records.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import as_utc, full_months_between, start_of_utc_year, utc_now
from libs.common.logging import get_logger
from services.attendance_service.models import TimeEntry, TimeEntryAction
from services.attendance_service.services.intervals import hours_by_user_event
from services.events_service.models import EventTeamMember
from services.identity_service.models import User
from services.identity_service.services.profiles import full_name
from services.payroll_service.models import SickLeave, SickLeaveStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ACCRUAL_HOURS_WORKED = 30
HOURS_PER_WORKDAY = 8

MANUAL_USED_HOURS_MARKER = "HR_MANUAL_USED_HOURS"
CARRY_OVER_OVERRIDE_MARKER = "HR_CARRY_OVER_OVERRIDE"
YEAR_TO_DATE_OVERRIDE_MARKER = "HR_YEAR_TO_DATE_OVERRIDE"
DEFAULT_MANUAL_REASON = "Manual used-hours entry from HR dashboard"
OVERRIDE_REASON = "Manual accrual override from HR dashboard"

OVERRIDE_MARKERS = {
    "carry_over": CARRY_OVER_OVERRIDE_MARKER,
    "year_to_date": YEAR_TO_DATE_OVERRIDE_MARKER,
}


def has_marker(reason: Optional[str], marker: str) -> bool:
    return marker.upper() in (reason or "").upper()


def override_field(reason: Optional[str]) -> Optional[str]:
    for name, marker in OVERRIDE_MARKERS.items():
        if has_marker(reason, marker):
            return name
    return None


def is_override(reason: Optional[str]) -> bool:
    return override_field(reason) is not None


def is_manual_used(reason: Optional[str]) -> bool:
    return has_marker(reason, MANUAL_USED_HOURS_MARKER) or has_marker(
        reason, DEFAULT_MANUAL_REASON
    )


def _used_on(row: SickLeave) -> Optional[date]:
    if row.start_date:
        return row.start_date
    stamp = row.approved_at or row.created_at
    return as_utc(stamp).date() if stamp else None


def _row_timestamp(row: SickLeave) -> datetime:
    stamp = row.updated_at or row.created_at or row.approved_at
    if stamp:
        return as_utc(stamp)
    return datetime.combine(row.start_date, time.min, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Accrual arithmetic
# ---------------------------------------------------------------------------


@dataclass
class LeaveLedger:
    used_hours: float = 0.0
    used_hours_before_year: float = 0.0
    request_count: int = 0
    carry_over_override: Optional[float] = None
    year_to_date_override: Optional[float] = None


def summarize_leaves(rows: Iterable[SickLeave], year_start: datetime) -> LeaveLedger:
    """Fold one employee's sick leave rows into used hours and overrides."""
    ledger = LeaveLedger()
    latest: dict[str, datetime] = {}
    for row in rows:
        field = override_field(row.reason)
        if field:
            stamp = _row_timestamp(row)
            if field not in latest or stamp >= latest[field]:
                latest[field] = stamp
                setattr(ledger, f"{field}_override", round(float(row.duration_hours or 0), 2))
            continue

        ledger.request_count += 1
        if row.status != SickLeaveStatus.APPROVED:
            continue
        hours = float(row.duration_hours or 0)
        ledger.used_hours += hours
        used_on = _used_on(row)
        if used_on is None or used_on < year_start.date():
            ledger.used_hours_before_year += hours
    return ledger


def accrual_summary(
    worked_hours: float,
    worked_hours_ytd: float,
    ledger: LeaveLedger,
    hire_date: Optional[datetime],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    now = now or utc_now()
    worked = round(worked_hours, 3)
    worked_ytd = round(worked_hours_ytd, 3)
    worked_before_year = round(max(0.0, worked - worked_ytd), 3)

    base_year_to_date = round(worked_ytd / ACCRUAL_HOURS_WORKED, 2)
    accrued_before_year = round(worked_before_year / ACCRUAL_HOURS_WORKED, 2)
    used = round(ledger.used_hours, 2)
    used_before_year = round(ledger.used_hours_before_year, 2)
    base_carry_over = round(max(0.0, accrued_before_year - used_before_year), 2)

    carry_over = round(
        max(
            0.0,
            ledger.carry_over_override
            if ledger.carry_over_override is not None
            else base_carry_over,
        ),
        2,
    )
    year_to_date = round(
        max(
            0.0,
            ledger.year_to_date_override
            if ledger.year_to_date_override is not None
            else base_year_to_date,
        ),
        2,
    )
    accrued = round(carry_over + year_to_date, 2)
    balance = round(max(0.0, accrued - used), 2)

    def days(hours: float) -> float:
        return round(hours / HOURS_PER_WORKDAY, 2)

    return {
        "worked_hours": worked,
        "accrued_months": full_months_between(hire_date, now) if hire_date else 0,
        "accrued_hours": accrued,
        "accrued_days": days(accrued),
        "carry_over_hours": carry_over,
        "carry_over_days": days(carry_over),
        "year_to_date_hours": year_to_date,
        "year_to_date_days": days(year_to_date),
        "used_hours": used,
        "used_days": days(used),
        "balance_hours": balance,
        "balance_days": days(balance),
        "request_count": ledger.request_count,
    }


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def employee_summary(user: Optional[User]) -> dict[str, Any]:
    if user is None:
        return {
            "employee_name": "Unknown",
            "employee_email": "",
            "employee_state": None,
            "employee_city": None,
        }
    profile = user.profile
    return {
        "employee_name": full_name(profile, user.email or "Unknown"),
        "employee_email": user.email or "",
        "employee_state": profile.state if profile else None,
        "employee_city": profile.city if profile else None,
    }


async def worked_hours_by_user(
    db: AsyncSession, user_ids: list[uuid.UUID], year_start: datetime
) -> tuple[dict[uuid.UUID, float], dict[uuid.UUID, float]]:
    """Total and year-to-date hours per user, counting only their team events."""
    if not user_ids:
        return {}, {}

    teams = (
        await db.execute(
            select(EventTeamMember.vendor_id, EventTeamMember.event_id).where(
                EventTeamMember.vendor_id.in_(user_ids)
            )
        )
    ).all()
    team_events = {(vendor_id, event_id) for vendor_id, event_id in teams}
    if not team_events:
        return {}, {}

    entries = (
        await db.execute(
            select(TimeEntry).where(
                TimeEntry.user_id.in_({vendor_id for vendor_id, _ in team_events}),
                TimeEntry.event_id.is_not(None),
                TimeEntry.action.in_([TimeEntryAction.CLOCK_IN, TimeEntryAction.CLOCK_OUT]),
            )
        )
    ).scalars().all()
    entries = [e for e in entries if (e.user_id, e.event_id) in team_events]

    total: dict[uuid.UUID, float] = {}
    ytd: dict[uuid.UUID, float] = {}
    for (user_id, _), hours in hours_by_user_event(entries).items():
        total[user_id] = total.get(user_id, 0.0) + hours
    for (user_id, _), hours in hours_by_user_event(entries, since=year_start).items():
        ytd[user_id] = ytd.get(user_id, 0.0) + hours
    return total, ytd


async def _leaves_by_user(
    db: AsyncSession, user_ids: list[uuid.UUID]
) -> dict[uuid.UUID, list[SickLeave]]:
    grouped: dict[uuid.UUID, list[SickLeave]] = {user_id: [] for user_id in user_ids}
    if not user_ids:
        return grouped
    result = await db.execute(select(SickLeave).where(SickLeave.user_id.in_(user_ids)))
    for row in result.scalars().all():
        grouped.setdefault(row.user_id, []).append(row)
    return grouped


async def accrual_for_users(
    db: AsyncSession, users: list[User], now: Optional[datetime] = None
) -> list[dict[str, Any]]:
    now = now or utc_now()
    year_start = start_of_utc_year(now)
    user_ids = [user.id for user in users]
    worked, worked_ytd = await worked_hours_by_user(db, user_ids, year_start)
    leaves = await _leaves_by_user(db, user_ids)

    rows = []
    for user in users:
        ledger = summarize_leaves(leaves.get(user.id, []), year_start)
        rows.append(
            {
                "user_id": str(user.id),
                **employee_summary(user),
                **accrual_summary(
                    worked.get(user.id, 0.0),
                    worked_ytd.get(user.id, 0.0),
                    ledger,
                    user.created_at,
                    now,
                ),
            }
        )
    return rows


async def accrual_report(db: AsyncSession) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    users = (await db.execute(select(User).where(User.is_active.is_(True)))).scalars().all()
    accruals = [row for row in await accrual_for_users(db, list(users)) if row["accrued_hours"] > 0]
    accruals.sort(key=lambda row: row["employee_name"].casefold())

    stats = {
        "employees_with_earned_hours": len(accruals),
        "total_accrued_hours": round(sum(r["accrued_hours"] for r in accruals), 2),
        "total_balance_hours": round(sum(r["balance_hours"] for r in accruals), 2),
    }
    return accruals, stats


def record_stats(records: list[dict[str, Any]]) -> dict[str, Any]:
    stats = {"total": 0, "pending": 0, "approved": 0, "denied": 0, "total_hours": 0.0}
    for record in records:
        stats["total"] += 1
        stats["total_hours"] += float(record.get("duration_hours") or 0)
        stats[record["status"]] += 1
    stats["total_hours"] = round(stats["total_hours"], 2)
    return stats


# ---------------------------------------------------------------------------
# HR ledger edits
# ---------------------------------------------------------------------------


async def add_used_hours(
    db: AsyncSession,
    *,
    actor: User,
    user_id: uuid.UUID,
    hours: float,
    reason: Optional[str],
) -> SickLeave:
    today = utc_now().date()
    row = SickLeave(
        user_id=user_id,
        start_date=today,
        end_date=today,
        duration_hours=hours,
        status=SickLeaveStatus.APPROVED,
        reason=f"{MANUAL_USED_HOURS_MARKER}: {(reason or '').strip() or DEFAULT_MANUAL_REASON}",
        approved_by=actor.id,
        approved_at=utc_now(),
    )
    db.add(row)
    await db.commit()
    logger.info("HR %s added %.2f used sick hours for %s", actor.id, hours, user_id)
    return row


async def remove_used_hours(db: AsyncSession, *, user_id: uuid.UUID, hours: float) -> float:
    """Consume manually added used hours, newest first."""
    result = await db.execute(
        select(SickLeave)
        .where(SickLeave.user_id == user_id, SickLeave.status == SickLeaveStatus.APPROVED)
        .order_by(SickLeave.created_at.desc())
    )
    manual_rows = [row for row in result.scalars().all() if is_manual_used(row.reason)]
    available = round(sum(float(row.duration_hours or 0) for row in manual_rows), 2)
    if available + 1e-9 < hours:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Cannot remove {hours:.2f} hours. Only {available:.2f} manually added "
                "used hours are available to remove."
            ),
        )

    remaining = hours
    for row in manual_rows:
        if remaining <= 0:
            break
        row_hours = float(row.duration_hours or 0)
        if row_hours <= 0:
            continue
        if row_hours <= remaining + 1e-9:
            await db.delete(row)
            remaining = round(max(0.0, remaining - row_hours), 2)
        else:
            row.duration_hours = round(row_hours - remaining, 2)
            remaining = 0.0
    await db.commit()
    return hours


async def set_accrual_override(
    db: AsyncSession,
    *,
    actor: User,
    user_id: uuid.UUID,
    field: str,
    target_hours: float,
) -> None:
    """Replace any previous override; zero clears it."""
    marker = OVERRIDE_MARKERS[field]
    existing = (
        await db.execute(select(SickLeave).where(SickLeave.user_id == user_id))
    ).scalars().all()
    for row in existing:
        if has_marker(row.reason, marker):
            await db.delete(row)

    if target_hours > 0:
        today = utc_now().date()
        db.add(
            SickLeave(
                user_id=user_id,
                start_date=today,
                end_date=today,
                duration_hours=target_hours,
                status=SickLeaveStatus.APPROVED,
                reason=f"{marker}: {OVERRIDE_REASON}",
                approved_by=actor.id,
                approved_at=utc_now(),
            )
        )
    await db.commit()
    logger.info("HR %s set %s override for %s to %.2f", actor.id, field, user_id, target_hours)
