"""Public endpoints answering an emailed team invitation."""

from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.events_service.models import TeamMemberStatus
from services.events_service.schemas import TeamConfirmationAction
from services.events_service.services.access import get_event_or_404
from services.events_service.services.team import (
    event_summary,
    get_invitation_by_token,
    respond_to_invitation,
)
from services.identity_service.models import User
from services.identity_service.services.profiles import profile_names
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/team-confirmation", tags=["team-confirmation"])


@router.get("/{token}")
async def get_invitation(token: str, db: AsyncSession = Depends(get_async_db)):
    """The token is the credential; no session is required."""
    row = await get_invitation_by_token(db, token)
    event = await get_event_or_404(db, row.event_id)

    if row.status != TeamMemberStatus.PENDING_CONFIRMATION:
        return {
            "alreadyResponded": True,
            "status": row.status.value,
            "event": event_summary(event),
        }

    vendor = (
        await db.execute(select(User).where(User.id == row.vendor_id))
    ).scalar_one_or_none()
    first_name, last_name = profile_names(vendor.profile if vendor else None)
    return {
        "invitation": {
            "id": str(row.id),
            "eventId": str(row.event_id),
            "vendorId": str(row.vendor_id),
            "status": row.status.value,
            "createdAt": row.created_at.isoformat() if row.created_at else None,
            "event": event_summary(event),
            "vendor": {"firstName": first_name, "lastName": last_name},
        }
    }


@router.post("/{token}")
async def answer_invitation(
    token: str,
    payload: TeamConfirmationAction,
    db: AsyncSession = Depends(get_async_db),
):
    row = await get_invitation_by_token(db, token)
    return await respond_to_invitation(db, row, payload.action)
