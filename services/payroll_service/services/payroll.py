"""
Gathering of payroll inputs for events.

For each event this loads the saved payment summary and vendor rows, the
team, adjustments and clock-in/clock-out hours, then runs the calculator.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from typing import Any, Iterable, Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import week_start
from libs.common.encryption import safe_decrypt
from libs.common.logging import get_logger
from services.attendance_service.models import TimeEntry
from services.attendance_service.services.intervals import hours_by_user
from services.attendance_service.services.time_entries import entries_for_event
from services.events_service.models import Event, EventTeamMember
from services.identity_service.models import User
from services.identity_service.services.profiles import profile_names
from services.payroll_service.models import (
    EventPayment,
    EventVendorPayment,
    PaymentAdjustment,
    StateRate,
)
from services.payroll_service.schemas import VendorPaymentResponse
from services.payroll_service.services.calculator import (
    AZ_NY_STATES,
    EventPayrollInput,
    MemberPay,
    PayrollMember,
    commission_pool_dollars,
    compute_event_payroll,
    effective_hours,
    normalize_state,
    resolve_base_rate,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_EVENT_STATE = "CA"


@dataclass
class EventPayroll:
    event: Event
    summary: Optional[EventPayment]
    base_rate: float
    member_ids: list[uuid.UUID]
    persisted: dict[uuid.UUID, EventVendorPayment] = field(default_factory=dict)
    adjustments: dict[uuid.UUID, PaymentAdjustment] = field(default_factory=dict)
    users: dict[uuid.UUID, User] = field(default_factory=dict)
    worked_hours: dict[uuid.UUID, float] = field(default_factory=dict)
    payments: dict[uuid.UUID, MemberPay] = field(default_factory=dict)
    commission_pool: float = 0.0
    total_tips: float = 0.0

    @property
    def state(self) -> str:
        return normalize_state(self.event.state) or DEFAULT_EVENT_STATE


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


async def configured_rates(db: AsyncSession) -> dict[str, float]:
    result = await db.execute(select(StateRate.state_code, StateRate.base_rate))
    return {
        code.strip().upper(): float(rate)
        for code, rate in result.all()
        if code and rate and rate > 0
    }


async def prior_weekly_hours(
    db: AsyncSession, event: Event, user_ids: list[uuid.UUID]
) -> dict[uuid.UUID, float]:
    """Hours worked from Monday up to the day before the event."""
    monday = week_start(event.event_date)
    if monday == event.event_date or not user_ids:
        return {}
    start = datetime.combine(monday, time.min, tzinfo=timezone.utc)
    end = datetime.combine(event.event_date, time.min, tzinfo=timezone.utc)
    result = await db.execute(
        select(TimeEntry).where(
            TimeEntry.user_id.in_(user_ids),
            TimeEntry.timestamp >= start,
            TimeEntry.timestamp < end,
        )
    )
    return hours_by_user(result.scalars().all())


async def load_event_payroll(
    db: AsyncSession, event: Event, rates: Optional[dict[str, float]] = None
) -> EventPayroll:
    if rates is None:
        rates = await configured_rates(db)

    summary = (
        await db.execute(select(EventPayment).where(EventPayment.event_id == event.id))
    ).scalar_one_or_none()
    persisted = {
        row.user_id: row
        for row in (
            await db.execute(
                select(EventVendorPayment).where(EventVendorPayment.event_id == event.id)
            )
        ).scalars().all()
    }
    adjustments = {
        row.user_id: row
        for row in (
            await db.execute(
                select(PaymentAdjustment).where(PaymentAdjustment.event_id == event.id)
            )
        ).scalars().all()
    }
    team_ids = (
        await db.execute(
            select(EventTeamMember.vendor_id).where(EventTeamMember.event_id == event.id)
        )
    ).scalars().all()

    member_ids = list(dict.fromkeys([*team_ids, *persisted.keys()]))
    if member_ids:
        entries = await entries_for_event(db, event, member_ids)
    else:
        entries = await entries_for_event(db, event)
        member_ids = list(dict.fromkeys(entry.user_id for entry in entries))
        if member_ids:
            logger.info(
                "Payroll members for event %s inferred from %d time entries",
                event.id,
                len(entries),
            )

    users = {}
    if member_ids:
        result = await db.execute(select(User).where(User.id.in_(member_ids)))
        users = {user.id: user for user in result.scalars().all()}

    state = normalize_state(event.state) or DEFAULT_EVENT_STATE
    payroll = EventPayroll(
        event=event,
        summary=summary,
        base_rate=resolve_base_rate(
            rates.get(state),
            summary.base_rate if summary else None,
            get_settings().DEFAULT_BASE_RATE,
        ),
        member_ids=member_ids,
        persisted=persisted,
        adjustments=adjustments,
        users=users,
        worked_hours=hours_by_user(entries),
    )

    priors: dict[uuid.UUID, float] = {}
    if state in AZ_NY_STATES:
        priors = await prior_weekly_hours(db, event, member_ids)
    payroll_input = _payroll_input(payroll, priors)
    payroll.commission_pool = payroll_input.commission_pool
    payroll.total_tips = payroll_input.total_tips
    payroll.payments = {pay.user_id: pay for pay in compute_event_payroll(payroll_input)}
    return payroll


async def load_event_payrolls(
    db: AsyncSession, events: Iterable[Event]
) -> dict[uuid.UUID, EventPayroll]:
    rates = await configured_rates(db)
    return {event.id: await load_event_payroll(db, event, rates) for event in events}


def _payroll_input(payroll: EventPayroll, priors: dict[uuid.UUID, float]) -> EventPayrollInput:
    event = payroll.event
    summary = payroll.summary
    summary_values = (
        {
            "net_sales": summary.net_sales,
            "commission_pool_percent": summary.commission_pool_percent,
            "commission_pool_dollars": summary.commission_pool_dollars,
            "total_commissions": summary.total_commissions,
        }
        if summary
        else None
    )
    event_values = {
        "commission_pool": event.commission_pool,
        "ticket_sales": event.ticket_sales,
        "tips": event.tips,
        "tax_rate_percent": event.tax_rate_percent,
    }

    members = []
    for user_id in payroll.member_ids:
        row = payroll.persisted.get(user_id)
        user = payroll.users.get(user_id)
        adjustment = payroll.adjustments.get(user_id)
        members.append(
            PayrollMember(
                user_id=user_id,
                division=user.division.value if user and user.division else None,
                actual_hours=row.actual_hours if row else 0.0,
                worked_hours=payroll.worked_hours.get(user_id, 0.0),
                regular_hours=row.regular_hours if row else 0.0,
                overtime_hours=row.overtime_hours if row else 0.0,
                doubletime_hours=row.doubletime_hours if row else 0.0,
                prior_weekly_hours=priors.get(user_id, 0.0),
                adjustment=adjustment.adjustment_amount if adjustment else 0.0,
            )
        )

    return EventPayrollInput(
        state=payroll.state,
        base_rate=payroll.base_rate,
        commission_pool=commission_pool_dollars(summary_values, event_values),
        total_tips=float((summary.total_tips if summary else 0) or event.tips or 0),
        members=members,
    )


# ---------------------------------------------------------------------------
# Response shaping
# ---------------------------------------------------------------------------


def user_payload(user: Optional[User]) -> Optional[dict[str, Any]]:
    if user is None:
        return None
    first_name, last_name = profile_names(user.profile)
    return {
        "id": str(user.id),
        "email": user.email,
        "division": user.division.value if user.division else None,
        "profiles": {
            "first_name": first_name,
            "last_name": last_name,
            "phone": safe_decrypt(user.profile.phone) if user.profile else "",
        },
    }


def vendor_payment_rows(payroll: EventPayroll) -> list[dict[str, Any]]:
    """
    Saved vendor rows with computed rows filling the gaps.

    A saved row without hours takes the hours worked from time entries, and
    team members with no saved row get a fully computed row.
    """
    rows = []
    for user_id in payroll.member_ids:
        computed = payroll.payments[user_id]
        saved = payroll.persisted.get(user_id)
        if saved is not None:
            row = VendorPaymentResponse.model_validate(saved).model_dump(mode="json")
            saved_hours = effective_hours(
                saved.actual_hours, 0, saved.regular_hours, saved.overtime_hours, saved.doubletime_hours
            )
            if saved_hours > 0:
                row["actual_hours"] = saved_hours
            elif computed.actual_hours > 0:
                row.update(
                    actual_hours=computed.actual_hours,
                    regular_hours=computed.actual_hours,
                    overtime_hours=0.0,
                    doubletime_hours=0.0,
                )
        else:
            row = {
                "event_id": str(payroll.event.id),
                "user_id": str(user_id),
                "actual_hours": round(computed.actual_hours, 2),
                "regular_hours": round(computed.actual_hours, 2),
                "overtime_hours": 0.0,
                "doubletime_hours": 0.0,
                "regular_pay": round(computed.ext_amt_on_reg_rate, 2),
                "overtime_pay": 0.0,
                "doubletime_pay": 0.0,
                "commissions": round(computed.commission_amt, 2),
                "tips": round(computed.tips, 2),
                "total_pay": round(computed.total_pay, 2),
            }

        adjustment = payroll.adjustments.get(user_id)
        row["users"] = user_payload(payroll.users.get(user_id))
        row["adjustment_amount"] = adjustment.adjustment_amount if adjustment else 0
        row["adjustment_note"] = (adjustment.adjustment_note or "") if adjustment else ""
        rows.append(row)
    return rows


def event_info(event: Event) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "event_name": event.event_name,
        "event_date": event.event_date.isoformat(),
        "venue": event.venue,
        "city": event.city,
        "state": event.state,
    }


def member_payments(payroll: EventPayroll) -> list[dict[str, Any]]:
    """Calculator output for each member, with names for display."""
    payments = []
    for user_id in payroll.member_ids:
        user = payroll.users.get(user_id)
        first_name, last_name = profile_names(user.profile if user else None)
        item = payroll.payments[user_id].to_dict()
        item.update(
            firstName=first_name,
            lastName=last_name,
            email=user.email if user else "",
        )
        payments.append(item)
    payments.sort(key=lambda p: f"{p['firstName']} {p['lastName']}".strip().lower())
    return payments
