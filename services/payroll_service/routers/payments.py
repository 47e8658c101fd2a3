"""Vendor payment rows, venue payment reports and manual adjustments."""

import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from libs.common.datetime_utils import parse_iso_date
from libs.common.logging import get_logger
from libs.common.pdf import generate_payments_report_pdf
from libs.db.session import get_async_db
from pydantic import ValidationError
from services.events_service.models import Event
from services.identity_service.dependencies import require_roles
from services.identity_service.models import User
from services.payroll_service.models import (
    EventPayment,
    EventVendorPayment,
    PaymentAdjustment,
)
from services.payroll_service.schemas import (
    EventPaymentResponse,
    PaymentAdjustmentItem,
    PaymentAdjustmentResponse,
    PaymentAdjustmentsSave,
)
from services.payroll_service.services.payroll import (
    event_info,
    load_event_payrolls,
    member_payments,
    vendor_payment_rows,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(tags=["payments"])

PAYROLL_ROLES = ("manager", "supervisor", "supervisor2", "hr", "exec", "admin", "finance")
FINANCE_ROLES = ("hr", "exec", "admin", "finance")


def _parse_event_ids(raw: Optional[str]) -> list[uuid.UUID]:
    ids = []
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(uuid.UUID(part))
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid event id: {part}"
            )
    return list(dict.fromkeys(ids))


# ---------------------------------------------------------------------------
# Vendor payments
# ---------------------------------------------------------------------------


@router.get("/vendor-payments")
async def get_vendor_payments(
    event_ids: Optional[str] = Query(None),
    _: User = Depends(require_roles(*PAYROLL_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Payment rows grouped by event.

    Without ``event_ids`` every event with saved payment rows, a payment
    summary or adjustments is included.
    """
    requested = _parse_event_ids(event_ids)

    def scoped(query, column):
        return query.where(column.in_(requested)) if requested else query

    vendor_rows = (
        await db.execute(scoped(select(EventVendorPayment), EventVendorPayment.event_id))
    ).scalars().all()
    summaries = (
        await db.execute(scoped(select(EventPayment), EventPayment.event_id))
    ).scalars().all()
    adjustments = (
        await db.execute(scoped(select(PaymentAdjustment), PaymentAdjustment.event_id))
    ).scalars().all()

    if requested:
        ids = requested
    else:
        ids = list(
            dict.fromkeys(
                [r.event_id for r in vendor_rows]
                + [s.event_id for s in summaries]
                + [a.event_id for a in adjustments]
            )
        )

    events = []
    if ids:
        events = (await db.execute(select(Event).where(Event.id.in_(ids)))).scalars().all()
    payrolls = await load_event_payrolls(db, events)

    payments_by_event: dict[str, Any] = {}
    for event_id in ids:
        payroll = payrolls.get(event_id)
        if payroll is None:
            continue
        payments_by_event[str(event_id)] = {
            "vendorPayments": vendor_payment_rows(payroll),
            "eventPayment": (
                EventPaymentResponse.model_validate(payroll.summary).model_dump(mode="json")
                if payroll.summary
                else None
            ),
            "eventInfo": event_info(payroll.event),
        }

    return {
        "success": True,
        "paymentsByEvent": payments_by_event,
        "totalVendorPayments": len(vendor_rows),
        "totalEventPayments": len(summaries),
        "totalAdjustments": len(adjustments),
    }


# ---------------------------------------------------------------------------
# Payments by venue
# ---------------------------------------------------------------------------


async def _payments_by_venue(
    db: AsyncSession,
    start_date: Optional[str],
    end_date: Optional[str],
    state: Optional[str],
) -> list[dict[str, Any]]:
    query = select(Event)
    for raw, op in ((start_date, "start"), (end_date, "end")):
        if not raw:
            continue
        day = parse_iso_date(raw)
        if day is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid date format. Use YYYY-MM-DD",
            )
        query = query.where(Event.event_date >= day if op == "start" else Event.event_date <= day)
    if state:
        query = query.where(Event.state == state.strip().upper())

    events = (
        await db.execute(query.order_by(Event.event_date, Event.event_name))
    ).scalars().all()
    payrolls = await load_event_payrolls(db, events)

    venues: dict[tuple, dict[str, Any]] = {}
    for event in events:
        key = (event.venue, event.city or "", event.state or "")
        venue = venues.setdefault(
            key,
            {
                "venue": event.venue,
                "city": event.city,
                "state": event.state,
                "totalPayment": 0.0,
                "totalHours": 0.0,
                "events": [],
            },
        )
        payroll = payrolls[event.id]
        payments = member_payments(payroll)
        event_total = round(sum(p["finalPay"] for p in payments), 2)
        event_hours = round(sum(p["actualHours"] for p in payments), 2)
        venue["events"].append(
            {
                "id": str(event.id),
                "name": event.event_name,
                "date": event.event_date.isoformat(),
                "state": event.state,
                "baseRate": round(payroll.base_rate, 2),
                "eventTotal": event_total,
                "eventHours": event_hours,
                "payments": payments,
            }
        )
        venue["totalPayment"] = round(venue["totalPayment"] + event_total, 2)
        venue["totalHours"] = round(venue["totalHours"] + event_hours, 2)

    return sorted(venues.values(), key=lambda v: (v["venue"] or "").lower())


@router.get("/payments/by-venue")
async def get_payments_by_venue(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    _: User = Depends(require_roles(*FINANCE_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    venues = await _payments_by_venue(db, start_date, end_date, state)
    return {"venues": venues}


@router.get("/payments/by-venue/pdf")
async def export_payments_by_venue_pdf(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    _: User = Depends(require_roles(*FINANCE_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    venues = await _payments_by_venue(db, start_date, end_date, state)
    return Response(
        content=generate_payments_report_pdf(venues),
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="payments-by-venue.pdf"'},
    )


# ---------------------------------------------------------------------------
# Adjustments
# ---------------------------------------------------------------------------


@router.get("/payment-adjustments")
async def get_payment_adjustments(
    event_ids: Optional[str] = Query(None),
    _: User = Depends(require_roles(*PAYROLL_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    ids = _parse_event_ids(event_ids)
    if not ids:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="event_ids parameter required"
        )

    rows = (
        await db.execute(select(PaymentAdjustment).where(PaymentAdjustment.event_id.in_(ids)))
    ).scalars().all()
    grouped: dict[str, dict[str, Any]] = {}
    for row in rows:
        grouped.setdefault(str(row.event_id), {})[str(row.user_id)] = (
            PaymentAdjustmentResponse.model_validate(row).model_dump(mode="json")
        )
    return {"success": True, "adjustments": grouped}


@router.post("/payment-adjustments")
async def save_payment_adjustments(
    payload: PaymentAdjustmentsSave,
    account: User = Depends(require_roles(*PAYROLL_ROLES)),
    db: AsyncSession = Depends(get_async_db),
):
    if not isinstance(payload.adjustments, list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="adjustments array is required"
        )
    try:
        items = [PaymentAdjustmentItem.model_validate(item) for item in payload.adjustments]
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each adjustment needs a valid event_id and user_id",
        )

    saved = []
    for item in items:
        result = await db.execute(
            select(PaymentAdjustment).where(
                PaymentAdjustment.event_id == item.event_id,
                PaymentAdjustment.user_id == item.user_id,
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = PaymentAdjustment(event_id=item.event_id, user_id=item.user_id)
            db.add(row)
        row.adjustment_amount = item.adjustment_amount or 0
        row.adjustment_note = item.adjustment_note or None
        row.created_by = account.id
        saved.append(row)
    await db.commit()

    logger.info(
        "Saved %d payment adjustments",
        len(saved),
        extra={"extra_fields": {"user_id": str(account.id)}},
    )
    return {
        "success": True,
        "adjustments": [
            PaymentAdjustmentResponse.model_validate(row).model_dump(mode="json") for row in saved
        ],
        "message": "Adjustments saved successfully",
    }
