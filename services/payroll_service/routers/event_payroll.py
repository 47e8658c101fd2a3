"""Saving an event's payroll and emailing pay details to its team."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.emails.payroll import send_payment_details_email
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from pydantic import ValidationError
from services.events_service.services.access import ensure_event_access, get_event_or_404
from services.identity_service.dependencies import get_current_account
from services.identity_service.models import User
from services.payroll_service.schemas import (
    EventPaymentResponse,
    SavePaymentRequest,
    VendorPaymentInput,
    VendorPaymentResponse,
)
from services.payroll_service.services.payment_records import save_event_payment
from services.payroll_service.services.payroll import load_event_payroll, member_payments
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/payroll/events", tags=["payroll"])

PAYROLL_RUN_ROLES = ("exec", "admin", "hr", "finance")


@router.post("/{event_id}/save-payment")
async def save_payment(
    event_id: uuid.UUID,
    payload: SavePaymentRequest,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    event = await get_event_or_404(db, event_id)
    ensure_event_access(
        event,
        account,
        PAYROLL_RUN_ROLES,
        detail="Not authorized to save payment data for this event",
    )

    vendor_rows = None
    if payload.vendor_payments is not None:
        if not isinstance(payload.vendor_payments, list):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="vendorPayments array is required",
            )
        try:
            vendor_rows = [
                VendorPaymentInput.model_validate(item) for item in payload.vendor_payments
            ]
        except ValidationError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Each vendor payment needs a valid userId",
            )

    summary, rows = await save_event_payment(db, event, payload, vendor_rows, account)
    return {
        "success": True,
        "eventPayment": EventPaymentResponse.model_validate(summary).model_dump(mode="json"),
        "vendorPayments": [
            VendorPaymentResponse.model_validate(row).model_dump(mode="json") for row in rows
        ],
        "message": "Payment data saved successfully",
    }


@router.post("/{event_id}/process-payroll")
async def process_payroll(
    event_id: uuid.UUID,
    account: User = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_db),
):
    """Email every team member their pay breakdown for the event."""
    event = await get_event_or_404(db, event_id)
    ensure_event_access(
        event,
        account,
        PAYROLL_RUN_ROLES,
        detail="Not authorized to process payroll for this event",
    )

    payroll = await load_event_payroll(db, event)
    payments = member_payments(payroll)
    location = ", ".join(part for part in (event.city, event.state) if part)

    sent = 0
    errors = []
    for payment in payments:
        name = f"{payment['firstName']} {payment['lastName']}".strip() or payment["userId"]
        if not payment["email"]:
            errors.append(f"{name}: no email address")
            continue
        delivered = await send_payment_details_email(
            to_email=payment["email"],
            first_name=payment["firstName"],
            event_name=event.event_name,
            event_date=event.event_date.isoformat(),
            venue=event.venue,
            location=location,
            payment=payment,
        )
        if delivered:
            sent += 1
        else:
            errors.append(f"{name}: email could not be sent")

    logger.info(
        "Payroll emails for event %s: %d sent, %d failed",
        event.id,
        sent,
        len(errors),
        extra={"extra_fields": {"user_id": str(account.id)}},
    )
    response = {
        "success": True,
        "sentCount": sent,
        "failedCount": len(errors),
        "totalMembers": len(payments),
    }
    if errors:
        response["errors"] = errors
    return response
