"""Per-event paystub PDFs and the caller's paystub list."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from libs.common.config import get_settings
from libs.common.datetime_utils import parse_iso_date
from libs.common.pdf import generate_paystub_pdf
from libs.db.session import get_async_db
from services.events_service.models import Event
from services.events_service.services.access import get_event_or_404
from services.identity_service.dependencies import get_current_account
from services.identity_service.models import User
from services.identity_service.services.profiles import full_name
from services.payroll_service.models import (
    EventPayment,
    EventVendorPayment,
    PaymentAdjustment,
)
from services.payroll_service.services.payroll import load_event_payroll
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/paystubs", tags=["paystubs"])
my_paystubs_router = APIRouter(prefix="/my-paystubs", tags=["paystubs"])

PAYSTUB_VIEWER_ROLES = ("hr", "exec", "admin", "finance")


@router.get("/{event_id}/{user_id}")
async def download_paystub(
    event_id: uuid.UUID,
    user_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    if user_id != account.id and account.role.value not in PAYSTUB_VIEWER_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")

    event = await get_event_or_404(db, event_id)
    payroll = await load_event_payroll(db, event)
    pay = payroll.payments.get(user_id)
    if pay is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="No payment found for this employee"
        )

    employee = payroll.users.get(user_id)
    pdf = generate_paystub_pdf(
        employee_name=full_name(employee.profile if employee else None, "Employee"),
        employee_email=employee.email if employee else "",
        event_name=event.event_name,
        event_date=event.event_date.isoformat(),
        venue=event.venue,
        state=payroll.state,
        payment=pay.to_dict(),
    )
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="paystub-{event.event_date.isoformat()}.pdf"'
        },
    )


@my_paystubs_router.get("")
async def list_my_paystubs(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Saved payment rows for the caller, newest event first."""
    query = (
        select(EventVendorPayment, Event)
        .join(Event, Event.id == EventVendorPayment.event_id)
        .where(EventVendorPayment.user_id == account.id)
    )
    for raw, is_start in ((start_date, True), (end_date, False)):
        if not raw:
            continue
        day = parse_iso_date(raw)
        if day is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid date format. Use YYYY-MM-DD",
            )
        query = query.where(Event.event_date >= day if is_start else Event.event_date <= day)

    rows = (await db.execute(query.order_by(Event.event_date.desc()))).all()
    event_ids = [event.id for _, event in rows]

    adjustments = {}
    base_rates = {}
    if event_ids:
        result = await db.execute(
            select(PaymentAdjustment).where(
                PaymentAdjustment.event_id.in_(event_ids),
                PaymentAdjustment.user_id == account.id,
            )
        )
        adjustments = {row.event_id: row.adjustment_amount for row in result.scalars().all()}
        result = await db.execute(
            select(EventPayment.event_id, EventPayment.base_rate).where(
                EventPayment.event_id.in_(event_ids)
            )
        )
        base_rates = {event_id: rate for event_id, rate in result.all()}

    default_rate = get_settings().DEFAULT_BASE_RATE
    paystubs = []
    for payment, event in rows:
        adjustment = float(adjustments.get(event.id) or 0)
        total_pay = float(payment.total_pay or 0)
        paystubs.append(
            {
                "id": str(payment.id),
                "event_id": str(event.id),
                "event_name": event.event_name,
                "event_date": event.event_date.isoformat(),
                "venue": event.venue,
                "regular_hours": payment.regular_hours or 0,
                "regular_pay": payment.regular_pay or 0,
                "overtime_hours": payment.overtime_hours or 0,
                "overtime_pay": payment.overtime_pay or 0,
                "doubletime_hours": payment.doubletime_hours or 0,
                "doubletime_pay": payment.doubletime_pay or 0,
                "commissions": payment.commissions or 0,
                "tips": payment.tips or 0,
                "adjustment_amount": adjustment,
                "total_pay": total_pay,
                "final_pay": round(total_pay + adjustment, 2),
                "base_rate": base_rates.get(event.id) or default_rate,
                "created_at": payment.created_at.isoformat() if payment.created_at else None,
            }
        )
    return {"paystubs": paystubs}
