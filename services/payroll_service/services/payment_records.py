"""
Saving event payroll.

The event summary is upserted and the vendor rows are replaced, either with
rows supplied by the caller or with the calculator's output for the event.
"""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.events_service.models import Event
from services.identity_service.models import User
from services.payroll_service.models import EventPayment, EventVendorPayment
from services.payroll_service.schemas import SavePaymentRequest, VendorPaymentInput
from services.payroll_service.services.payroll import EventPayroll, load_event_payroll
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SUMMARY_INPUT_FIELDS = (
    "commission_pool_percent",
    "commission_pool_dollars",
    "total_tips",
    "base_rate",
    "net_sales",
)

ROW_FIELDS = (
    "actual_hours",
    "regular_hours",
    "overtime_hours",
    "doubletime_hours",
    "regular_pay",
    "overtime_pay",
    "doubletime_pay",
    "commissions",
    "tips",
    "total_pay",
)


def computed_vendor_rows(payroll: EventPayroll) -> list[VendorPaymentInput]:
    """Calculator output as savable rows; all hours are booked as regular."""
    rows = []
    for user_id in payroll.member_ids:
        pay = payroll.payments[user_id]
        hours = round(pay.actual_hours, 2)
        rows.append(
            VendorPaymentInput(
                user_id=user_id,
                actual_hours=hours,
                regular_hours=hours,
                regular_pay=round(pay.ext_amt_on_reg_rate, 2),
                commissions=round(pay.commission_amt, 2),
                tips=round(pay.tips, 2),
                total_pay=round(pay.total_pay, 2),
            )
        )
    return rows


async def _get_summary(db: AsyncSession, event_id: uuid.UUID) -> Optional[EventPayment]:
    result = await db.execute(select(EventPayment).where(EventPayment.event_id == event_id))
    return result.scalar_one_or_none()


async def _replace_vendor_rows(
    db: AsyncSession, summary: EventPayment, rows: list[VendorPaymentInput]
) -> list[EventVendorPayment]:
    existing = {
        row.user_id: row
        for row in (
            await db.execute(
                select(EventVendorPayment).where(EventVendorPayment.event_id == summary.event_id)
            )
        ).scalars().all()
    }

    saved = []
    for item in rows:
        row = existing.pop(item.user_id, None)
        if row is None:
            row = EventVendorPayment(event_id=summary.event_id, user_id=item.user_id)
            db.add(row)
        row.event_payment_id = summary.id
        for name in ROW_FIELDS:
            setattr(row, name, getattr(item, name) or 0)
        saved.append(row)

    # Members dropped from the team lose their saved row
    for row in existing.values():
        await db.delete(row)
    return saved


def _apply_totals(summary: EventPayment, rows: list[EventVendorPayment]) -> None:
    def total(name: str) -> float:
        return round(sum(float(getattr(row, name) or 0) for row in rows), 2)

    summary.total_regular_hours = total("regular_hours")
    summary.total_overtime_hours = total("overtime_hours")
    summary.total_doubletime_hours = total("doubletime_hours")
    summary.total_regular_pay = total("regular_pay")
    summary.total_overtime_pay = total("overtime_pay")
    summary.total_doubletime_pay = total("doubletime_pay")
    summary.total_commissions = total("commissions")
    summary.total_tips_distributed = total("tips")
    summary.total_payment = total("total_pay")


async def save_event_payment(
    db: AsyncSession,
    event: Event,
    payload: SavePaymentRequest,
    vendor_rows: Optional[list[VendorPaymentInput]],
    account: User,
) -> tuple[EventPayment, list[EventVendorPayment]]:
    """
    Upsert the event's payment summary and replace its vendor rows.

    When ``vendor_rows`` is None the payroll is recomputed with the new
    summary values and the calculator's rows are saved, along with the
    commission pool, tips and base rate it used.
    """
    summary = await _get_summary(db, event.id)
    if summary is None:
        summary = EventPayment(event_id=event.id)
        db.add(summary)
    for name in SUMMARY_INPUT_FIELDS:
        value = getattr(payload, name)
        if value is not None:
            setattr(summary, name, value)
    summary.created_by = account.id
    await db.flush()

    if vendor_rows is None:
        payroll = await load_event_payroll(db, event)
        vendor_rows = computed_vendor_rows(payroll)
        if not summary.commission_pool_dollars:
            summary.commission_pool_dollars = round(payroll.commission_pool, 2)
        if not summary.total_tips:
            summary.total_tips = round(payroll.total_tips, 2)
        if summary.base_rate is None:
            summary.base_rate = payroll.base_rate

    rows = await _replace_vendor_rows(db, summary, vendor_rows)
    _apply_totals(summary, rows)
    await db.commit()

    logger.info(
        "Saved payment data for event %s with %d vendor rows",
        event.id,
        len(rows),
        extra={"extra_fields": {"user_id": str(account.id)}},
    )
    return summary, rows
