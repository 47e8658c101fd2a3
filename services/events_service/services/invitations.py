"""
Vendor availability invitations.

A bulk invitation asks a vendor which days they can work over the next few
weeks. The vendor answers through the emailed token link; the saved
availability feeds the available-vendor search.
"""

import uuid
from datetime import timedelta
from typing import Any, Optional

from fastapi import HTTPException, status
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.emails.events import send_vendor_bulk_invitation_email
from libs.common.logging import get_logger
from libs.common.validators import is_valid_email
from services.events_service.models import (
    Event,
    InvitationStatus,
    InvitationType,
    VendorInvitation,
)
from services.identity_service.models import User
from services.identity_service.services.profiles import full_name, profile_names
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def normalize_availability(days: Any) -> list[dict[str, Any]]:
    """Keep entries with a date; ``available`` must be literally true."""
    if not isinstance(days, list):
        return []
    normalized = []
    for day in days:
        if not isinstance(day, dict) or not isinstance(day.get("date"), str):
            continue
        notes = day.get("notes")
        normalized.append(
            {
                "date": day["date"][:10],
                "available": day.get("available") is True,
                "notes": notes.strip() if isinstance(notes, str) and notes.strip() else None,
            }
        )
    return normalized


async def get_invitation_or_404(db: AsyncSession, token: str) -> VendorInvitation:
    result = await db.execute(select(VendorInvitation).where(VendorInvitation.token == token))
    invitation = result.scalar_one_or_none()
    if invitation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found")
    return invitation


async def ensure_not_expired(db: AsyncSession, invitation: VendorInvitation) -> None:
    if as_utc(invitation.expires_at) >= utc_now():
        return
    if invitation.status != InvitationStatus.EXPIRED:
        invitation.status = InvitationStatus.EXPIRED
        await db.commit()
    raise HTTPException(status_code=status.HTTP_410_GONE, detail="Invitation has expired")


def _iso(value) -> Optional[str]:
    return as_utc(value).isoformat() if value else None


async def invitation_details(db: AsyncSession, invitation: VendorInvitation) -> dict[str, Any]:
    event = None
    if invitation.event_id is not None:
        event = (
            await db.execute(select(Event).where(Event.id == invitation.event_id))
        ).scalar_one_or_none()
    return {
        "invitation": {
            "id": str(invitation.id),
            "eventName": event.event_name if event else None,
            "eventDate": (
                event.event_date.isoformat() if event else _iso(invitation.start_date)
            ),
            "venue": event.venue if event else None,
            "status": invitation.status.value,
            "expiresAt": _iso(invitation.expires_at),
            "invitationType": invitation.invitation_type.value,
            "startDate": _iso(invitation.start_date),
            "endDate": _iso(invitation.end_date),
        },
        "availability": invitation.availability or None,
        "notes": invitation.notes or "",
    }


async def save_availability(
    db: AsyncSession,
    invitation: VendorInvitation,
    availability: Any,
    notes: Optional[str] = None,
) -> dict[str, Any]:
    if not isinstance(availability, list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Availability data is required"
        )
    days = normalize_availability(availability)
    if not days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Availability data is invalid"
        )
    await ensure_not_expired(db, invitation)

    invitation.availability = days
    invitation.status = (
        InvitationStatus.ACCEPTED
        if any(day["available"] for day in days)
        else InvitationStatus.DECLINED
    )
    if notes is not None:
        invitation.notes = notes.strip() or None
    invitation.responded_at = utc_now()
    await db.commit()

    logger.info(
        "Invitation %s answered: %s",
        invitation.id,
        invitation.status.value,
        extra={"extra_fields": {"vendor_id": str(invitation.vendor_id), "days": len(days)}},
    )
    return {
        "success": True,
        "status": invitation.status.value,
        "message": "Availability saved successfully",
    }


async def send_bulk_invitations(
    db: AsyncSession,
    *,
    actor: User,
    vendor_ids: list[uuid.UUID],
    duration_weeks: int,
) -> dict[str, Any]:
    """Create one pending bulk invitation per vendor and email its link."""
    result = await db.execute(select(User).where(User.id.in_(vendor_ids)))
    vendors = list(result.scalars().all())
    if not vendors:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No vendors found")

    event_count = len(
        (
            await db.execute(
                select(Event.id).where(Event.created_by == actor.id, Event.is_active.is_(True))
            )
        ).scalars().all()
    )
    manager_name = full_name(actor.profile, "Event Manager")
    start = utc_now()
    end = start + timedelta(weeks=duration_weeks)

    pending: list[tuple[User, str, VendorInvitation]] = []
    failures: list[str] = []
    for vendor in vendors:
        email = (vendor.email or "").strip().lower()
        if not is_valid_email(email):
            failures.append(f"Skipped {vendor.id}: invalid email \"{vendor.email or 'missing'}\"")
            continue
        invitation = VendorInvitation(
            vendor_id=vendor.id,
            invited_by=actor.id,
            invitation_type=InvitationType.BULK,
            status=InvitationStatus.PENDING,
            start_date=start,
            end_date=end,
            duration_weeks=duration_weeks,
            availability=[],
        )
        db.add(invitation)
        pending.append((vendor, email, invitation))
    await db.commit()

    sent = 0
    for vendor, email, invitation in pending:
        first_name, _ = profile_names(vendor.profile)
        delivered = await send_vendor_bulk_invitation_email(
            to_email=email,
            first_name=first_name,
            manager_name=manager_name,
            duration_weeks=duration_weeks,
            event_count=event_count,
            start_date=start.date().isoformat(),
            end_date=end.date().isoformat(),
            invitation_token=invitation.token,
        )
        if delivered:
            sent += 1
        else:
            failures.append(f"Failed to send email to {email}")

    logger.info(
        "Bulk availability invitations sent",
        extra={"extra_fields": {"sent": sent, "failed": len(failures)}},
    )
    response: dict[str, Any] = {
        "success": True,
        "message": f"Sent {sent} invitation(s) successfully",
        "stats": {"total": len(vendor_ids), "sent": sent, "failed": len(failures)},
    }
    if failures:
        response["failures"] = failures
    return response
